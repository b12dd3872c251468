from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import datastore

from tasklist.domain.task import Task, TaskId
from tasklist.domain.errors import StoreError, TaskNotFoundError

logger = logging.getLogger(__name__)

KIND = "Task"


### COMMENTS
# ==========================================================
# Adapter Cloud Datastore (adapters/datastore/task_repo.py).
# ==========================================================
# - Encja rodzaju `Task` z polami: description, created, done.
# - ID nie jest polem encji: Datastore nadaje `key.id` przy `put`, a `_from_entity`
#   przepisuje go do `task_id` po odczycie.
# - `description` jest wyłączony z indeksów (długi tekst, nie filtrujemy po nim).
# - `modify` działa w `client.transaction()`: get i put wewnątrz bloku idą przez
#   bieżącą transakcję; wyjątek w bloku = rollback.
# - GoogleAPICallError → StoreError (z oryginałem w `__cause__`).


class DatastoreTaskRepository:
    """Implementacja `TaskRepository` nad `google.cloud.datastore.Client`.

    :param client: Jeden, długożyjący klient Datastore (bezpieczny wielowątkowo).
    """

    def __init__(self, client: datastore.Client) -> None:
        self.client = client

    def _to_entity(self, key: datastore.Key, task: Task) -> datastore.Entity:
        entity = datastore.Entity(key=key, exclude_from_indexes=("description",))
        entity.update(
            {
                "description": task.description,
                "created": task.created,
                "done": task.done,
            }
        )
        return entity

    def _from_entity(self, entity: datastore.Entity) -> Task:
        return Task(
            description=entity.get("description", ""),
            created=entity["created"],
            done=bool(entity.get("done", False)),
            task_id=TaskId(entity.key.id),
        )

    def add(self, task: Task) -> Task:
        entity = self._to_entity(self.client.key(KIND), task)
        try:
            self.client.put(entity)
        except GoogleAPICallError as e:
            raise StoreError("create task", str(e)) from e
        return self._from_entity(entity)

    def get(self, task_id: TaskId) -> Task | None:
        try:
            entity = self.client.get(self.client.key(KIND, task_id))
        except GoogleAPICallError as e:
            raise StoreError("read task", str(e)) from e
        if entity is None:
            return None
        return self._from_entity(entity)

    def modify(self, task_id: TaskId, change: Callable[[Task], Task]) -> Task:
        key = self.client.key(KIND, task_id)
        try:
            with self.client.transaction():
                entity = self.client.get(key)
                if entity is None:
                    raise TaskNotFoundError(task_id)
                updated = change(self._from_entity(entity))
                self.client.put(self._to_entity(key, updated))
        except GoogleAPICallError as e:
            raise StoreError("update task", str(e)) from e
        return replace(updated, task_id=task_id)

    def remove(self, task_id: TaskId) -> None:
        try:
            self.client.delete(self.client.key(KIND, task_id))
        except GoogleAPICallError as e:
            raise StoreError("delete task", str(e)) from e

    def list_all(self) -> list[Task]:
        query = self.client.query(kind=KIND, order=["created"])
        try:
            entities = list(query.fetch())
        except GoogleAPICallError as e:
            raise StoreError("read from datastore", str(e)) from e
        logger.debug("fetched %d tasks", len(entities))
        # Datastore sortuje po `created`; tiebreaker po ID dla remisów
        tasks = [self._from_entity(e) for e in entities]
        tasks.sort(key=lambda t: (t.created, t.task_id))
        return tasks
