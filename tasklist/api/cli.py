from typing import Optional
import logging

import typer
from pydantic import ValidationError
from typer import Argument, Context, Option, Typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from tasklist.domain.errors import (
    CredentialsError,
    DomainError,
    StoreError,
    TaskNotFoundError,
    TaskValidationError,
)
from tasklist.domain.task import Task
from tasklist.services.task_service import TaskService, parse_task_id
from tasklist.app.bootstrap import build_service
from tasklist.app.logging import setup_logging
from tasklist.app.settings import AppSettings, get_settings
from tasklist.api.colors import TaskColor

logger = logging.getLogger(__name__)


### COMMENTS
# ==========================================================
# CLI (Typer + Rich) — punkt wejścia procesu.
# ==========================================================
# Rola:
# - `serve` uruchamia serwer HTTP (uvicorn) z jednym serwisem.
# - `new/list/done/delete` wołają TaskService bezpośrednio (te same adaptery).
# - Łapie DomainError i drukuje czytelne panele; kod wyjścia 1.
#
# Zasady:
# - Zero logiki biznesowej — deleguj do TaskService.
# - Ustawienia czyta callback (`ctx.obj`); serwis powstaje leniwie w `_service`.
# - Błąd poświadczeń albo klienta magazynu na starcie jest krytyczny: log + exit 1.


app = Typer(help="Task list backed by Cloud Datastore")
console = Console()


def fail(message: str, title: str) -> None:
    console.print(Panel.fit(f"❌ {message}", title=title, border_style="red"))
    raise typer.Exit(code=1)


def color_done(done: bool) -> str:
    """Zwraca flagę `done` w Rich-markup z kolorem."""
    if done:
        return f"{TaskColor.GREEN}done{TaskColor.RESET}"
    return f"{TaskColor.RED}open{TaskColor.RESET}"


def render_list(items: list[Task]) -> None:
    """Renderuje tabelę Rich z kolumnami: ID, Description, Created, Done."""

    table = Table(show_lines=True, header_style="bold")
    table.add_column("ID", no_wrap=True, style="cyan")
    table.add_column("Description")
    table.add_column("Created", no_wrap=True, style="dim")
    table.add_column("Done", no_wrap=True)

    for t in items:
        table.add_row(
            str(t.task_id),
            t.description,
            t.created.strftime("%Y-%m-%d %H:%M:%S"),
            color_done(t.done),
        )

    console.print(table)
    console.print(f"[dim]Razem: {len(items)}[/dim]")


@app.callback()
def main(
    ctx: Context,
    backend: Optional[str] = Option(
        None,
        "--backend",
        "-b",
        help="datastore | sql | memory (domyślnie TASKLIST_BACKEND albo datastore)",
    ),
) -> None:
    """Bootstrap zależności na starcie procesu CLI."""
    try:
        settings = get_settings(backend=backend)
    except ValidationError as e:
        fail(str(e), "Błąd konfiguracji")
    setup_logging(settings.log_level, settings.log_format)
    ctx.obj = settings


def _service(ctx: Context) -> TaskService:
    """Buduje serwis (i jedyny klient magazynu) dla bieżącej komendy."""
    try:
        return build_service(ctx.obj)
    except CredentialsError as e:
        logger.critical("failed to parse creds: %s", e)
        fail(str(e), "Błąd poświadczeń")
    except StoreError as e:
        logger.critical("Could not create datastore client: %s", e)
        fail(str(e), "Błąd magazynu")


@app.command("serve")
def serve(
    ctx: Context,
    host: Optional[str] = Option(None, "--host", help="Adres nasłuchu (domyślnie HOST)"),
    port: Optional[int] = Option(None, "--port", "-p", help="Port (domyślnie PORT albo 8080)"),
) -> None:
    """Uruchamia serwer HTTP z listą zadań."""
    import uvicorn
    from tasklist.api.http import create_app

    settings: AppSettings = ctx.obj
    service = _service(ctx)
    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("Starting datastore task list on port %s", bind_port)
    uvicorn.run(create_app(service), host=bind_host, port=bind_port, log_config=None)


@app.command("new")
def new(ctx: Context, description: str = Argument(..., help="Opis zadania")) -> None:
    """Dodaje nowe zadanie."""
    try:
        task = _service(ctx).create_task(description)
    except DomainError as e:
        fail(str(e), "Błąd domenowy")
    console.print(Panel.fit(
        f"✅ created new task with ID {task.task_id}\n[dim]Description:[/dim] {task.description}",
        title="Sukces",
        border_style="green",
    ))


@app.command("list")
def list_cmd(ctx: Context) -> None:
    """Listuje wszystkie zadania rosnąco po czasie utworzenia."""
    try:
        items = _service(ctx).list_tasks()
    except DomainError as e:
        fail(str(e), "Błąd domenowy")
    render_list(items)


@app.command("done")
def done(ctx: Context, task_id: str = Argument(..., help="ID zadania (int64)")) -> None:
    """
    Oznacza zadanie jako zrobione.

    - Błąd parsowania ID: TaskValidationError → czerwony Panel.
    - Brak zadania: TaskNotFoundError → „Użyj 'tasklist list'”.
    """
    try:
        task = _service(ctx).mark_done(parse_task_id(task_id))
    except TaskValidationError as e:
        fail(f"{e}\n[dim]ID musi być liczbą całkowitą (int64)[/]", "Błąd walidacji")
    except TaskNotFoundError as e:
        fail(f"{e}\n[dim]Użyj 'tasklist list', żeby znaleźć poprawne ID[/]", "Nie znaleziono")
    except DomainError as e:
        fail(str(e), "Błąd domenowy")
    console.print(Panel.fit(
        f"✅ task {task.task_id} marked done\n[dim]Description:[/dim] {task.description}\nStatus: {color_done(task.done)}",
        title="Sukces",
        border_style="green",
    ))


@app.command("delete")
def delete(ctx: Context, task_id: str = Argument(..., help="ID zadania (int64)")) -> None:
    """Usuwa zadanie (bezwarunkowo)."""
    try:
        parsed = parse_task_id(task_id)
        _service(ctx).remove_task(parsed)
    except TaskValidationError as e:
        fail(f"{e}\n[dim]ID musi być liczbą całkowitą (int64)[/]", "Błąd walidacji")
    except DomainError as e:
        fail(str(e), "Błąd domenowy")
    console.print(Panel.fit(f"🟡 task {parsed} deleted", title="Usunięto", border_style="yellow"))


if __name__ == "__main__":
    app()
