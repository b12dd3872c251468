from __future__ import annotations
from typing import Callable
from dataclasses import replace
import sqlalchemy as db
from sqlalchemy.exc import SQLAlchemyError
from pathlib import Path
from tasklist.domain.task import Task, TaskId
from datetime import datetime, timezone
from tasklist.domain.errors import StoreError, TaskNotFoundError

### COMMENTS
# ==========================================================
# Adapter SQL (SQLAlchemy Core) — lokalny magazyn bez chmury.
# ==========================================================
# - Tabela `tasks`: id (autoincrement, nadawany przez bazę), description, created, done.
# - `modify` robi SELECT + UPDATE w jednym `engine.begin()` (jedna transakcja).
# - SQLAlchemyError → StoreError.


class SqlTaskRepository:
    def __init__(self, url: str | Path) -> None:
        """
        url: np. 'sqlite:///data/tasks.db' lub Path do pliku (zostanie zrobiony URL)
        """
        if isinstance(url, Path):
            url.parent.mkdir(parents=True, exist_ok=True)
            db_url = f"sqlite:///{url}"
        else:
            db_url = url
            if db_url.startswith("sqlite:///") and db_url != "sqlite:///:memory:":
                Path(db_url.removeprefix("sqlite:///")).parent.mkdir(parents=True, exist_ok=True)

        self.engine = db.create_engine(db_url, future=True)
        self.meta = db.MetaData()

        self.tasks = db.Table(
            "tasks",
            self.meta,
            db.Column("id", db.Integer, primary_key=True, autoincrement=True),
            db.Column("description", db.Text, nullable=False),
            db.Column("created", db.String, nullable=False),  # ISO8601 '...Z'
            db.Column("done", db.Boolean, nullable=False, default=False),
        )

        # utwórz tabelę jeśli nie istnieje
        self.meta.create_all(self.engine)

    def _encode_dt(self, dt: datetime) -> str:
        # ISO 8601 w UTC z sufiksem 'Z'; stała szerokość, więc sortowanie tekstowe = chronologiczne
        return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")

    def _decode_dt(self, s: str) -> datetime:
        # '...Z' -> aware UTC
        return datetime.fromisoformat(s.replace("Z", "+00:00")).astimezone(timezone.utc)

    def _to_row(self, task: Task) -> dict:
        return {
            "description": task.description,
            "created": self._encode_dt(task.created),
            "done": task.done,
        }

    def _from_row(self, row) -> Task:
        return Task(
            description=row["description"],
            created=self._decode_dt(row["created"]),
            done=bool(row["done"]),
            task_id=TaskId(row["id"]),
        )

    def add(self, task: Task) -> Task:
        stmt = db.insert(self.tasks).values(**self._to_row(task))
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
                new_id = result.inserted_primary_key[0]
        except SQLAlchemyError as e:
            raise StoreError("create task", str(e)) from e
        return replace(task, task_id=TaskId(new_id))

    def get(self, task_id: TaskId) -> Task | None:
        stmt = db.select(self.tasks).where(self.tasks.c.id == task_id)
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as e:
            raise StoreError("read task", str(e)) from e
        return None if row is None else self._from_row(row)

    def modify(self, task_id: TaskId, change: Callable[[Task], Task]) -> Task:
        select_stmt = db.select(self.tasks).where(self.tasks.c.id == task_id)
        try:
            with self.engine.begin() as conn:
                row = conn.execute(select_stmt).mappings().first()
                if row is None:
                    raise TaskNotFoundError(task_id)
                updated = replace(change(self._from_row(row)), task_id=task_id)
                conn.execute(
                    db.update(self.tasks)
                    .where(self.tasks.c.id == task_id)
                    .values(**self._to_row(updated))
                )
        except SQLAlchemyError as e:
            raise StoreError("update task", str(e)) from e
        return updated

    def remove(self, task_id: TaskId) -> None:
        stmt = db.delete(self.tasks).where(self.tasks.c.id == task_id)
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError("delete task", str(e)) from e

    def list_all(self) -> list[Task]:
        # sortowanie stabilne: ASC + tie-breaker po id
        stmt = db.select(self.tasks).order_by(self.tasks.c.created.asc(), self.tasks.c.id.asc())
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            raise StoreError("read from database", str(e)) from e
        return [self._from_row(r) for r in rows]
