from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import ClientDisconnect

from tasklist.domain.errors import StoreError, TaskNotFoundError, TaskValidationError
from tasklist.domain.task import Task
from tasklist.services.task_service import TaskService, parse_task_id

logger = logging.getLogger(__name__)

MAX_MESSAGE_BYTES = 256


### COMMENTS
# ==========================================================
# HTTP (FastAPI) — jedna ścieżka "/", rozróżnienie po metodzie.
# ==========================================================
#   GET    → lista zadań (JSON)
#   POST   → nowe zadanie, ciało = opis (pierwsze 256 bajtów)
#   DELETE → oznacz jako zrobione, ciało = ID (pierwsze 256 bajtów)
#   inne   → 405 (routing Starlette, serwis nie jest wywoływany)
#
# Zasady:
# - Zero logiki biznesowej — deleguj do TaskService (z `app.state.service`).
# - Błędy: log po stronie serwera, klient dostaje krótki tekst (text/plain).


class TaskOut(BaseModel):
    """Kształt zadania w JSON-ie odpowiedzi (klucze Desc/Created/Done/Id)."""

    model_config = ConfigDict(populate_by_name=True)

    description: str = Field(alias="Desc")
    created: datetime = Field(alias="Created")
    done: bool = Field(alias="Done")
    task_id: int = Field(alias="Id")

    @classmethod
    def from_task(cls, task: Task) -> "TaskOut":
        return cls(description=task.description, created=task.created, done=task.done, task_id=task.task_id)


class CatchAllExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                f"{type(exc).__name__} on {request.url.path} (500): {exc}",
                exc_info=True,
                extra={"http_method": request.method, "path": request.url.path, "status_code": 500},
            )
            return PlainTextResponse("internal server error", status_code=500)


def get_service(request: Request) -> TaskService:
    return request.app.state.service


async def read_message(request: Request, limit: int = MAX_MESSAGE_BYTES) -> str:
    """Czyta co najwyżej `limit` bajtów ciała; resztę ignoruje."""
    buf = bytearray()
    async for chunk in request.stream():
        buf.extend(chunk)
        if len(buf) >= limit:
            break
    return bytes(buf[:limit]).decode("utf-8", errors="replace")


router = APIRouter()


@router.get("/", response_model=list[TaskOut])
def list_tasks(service: TaskService = Depends(get_service)) -> list[TaskOut]:
    return [TaskOut.from_task(t) for t in service.list_tasks()]


@router.post("/", response_class=PlainTextResponse)
async def create_task(request: Request, service: TaskService = Depends(get_service)) -> str:
    description = await read_message(request)
    task = await run_in_threadpool(service.create_task, description)
    logger.info("created task %s", task.task_id, extra={"task_id": task.task_id})
    return f"created new task with ID {task.task_id}\n"


@router.delete("/", response_class=PlainTextResponse)
async def mark_done(request: Request, service: TaskService = Depends(get_service)) -> str:
    task_id = parse_task_id(await read_message(request))
    await run_in_threadpool(service.mark_done, task_id)
    logger.info("marked task %s done", task_id, extra={"task_id": task_id})
    return f"task {task_id} marked done\n"


def _log_failure(request: Request, status_code: int, exc: Exception) -> None:
    extra = {"http_method": request.method, "path": request.url.path, "status_code": status_code}
    if isinstance(exc, TaskNotFoundError):
        extra["task_id"] = exc.task_id
    logger.error(
        "%s %s failed (%d): %s",
        request.method,
        request.url.path,
        status_code,
        exc,
        extra=extra,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskValidationError)
    async def _validation(request: Request, exc: TaskValidationError):
        _log_failure(request, 400, exc)
        return PlainTextResponse("failed to parse ID (must be int64)", status_code=400)

    @app.exception_handler(TaskNotFoundError)
    async def _not_found(request: Request, exc: TaskNotFoundError):
        _log_failure(request, 404, exc)
        return PlainTextResponse("failed to mark task done: task not found", status_code=404)

    @app.exception_handler(StoreError)
    async def _store(request: Request, exc: StoreError):
        _log_failure(request, 500, exc)
        return PlainTextResponse(f"failed to {exc.operation}", status_code=500)

    @app.exception_handler(ClientDisconnect)
    async def _disconnect(request: Request, exc: ClientDisconnect):
        _log_failure(request, 500, exc)
        return PlainTextResponse("failed to read message", status_code=500)

    @app.exception_handler(StarletteHTTPException)
    async def _http(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


def create_app(service: TaskService) -> FastAPI:
    """
    Buduje aplikację HTTP wokół jednego, jawnie przekazanego serwisu.

    :param service: Serwis z jedynym uchwytem do magazynu.
    :return: Aplikacja FastAPI gotowa dla uvicorn lub TestClient.
    """
    app = FastAPI(title="tasklist", docs_url=None, redoc_url=None)
    app.state.service = service
    app.add_middleware(CatchAllExceptionMiddleware)
    register_error_handlers(app)
    app.include_router(router)
    return app
