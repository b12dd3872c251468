import itertools
import threading
from dataclasses import replace
from typing import Callable, Iterable

from tasklist.domain.task import Task, TaskId
from tasklist.domain.errors import TaskNotFoundError

### COMMENTS
# ==========================================================
# Adapter pamięciowy dla repozytorium zadań (adapters/memory/task_repo.py).
# ==========================================================
# Implementacja portu `TaskRepository` w pamięci.
#
# - Służy do testów i trybu demo (`--backend memory`), bez trwałego zapisu.
# - Dane przechowywane są w słowniku `_data: dict[TaskId, Task]`.
# - ID nadawane z licznika od 1 (jak klucze Datastore: nigdy 0).
# - Zasady zgodne z kontraktem portu:
#     * `modify` → pod blokadą, zgłasza `TaskNotFoundError`, jeśli ID nie istnieje,
#     * `remove` → usuwa bez błędu, także gdy ID nie istnieje,
#     * `list_all` → sortuje ASC po `created` + tiebreaker po `task_id`.


class InMemoryTaskRepository:
    """
        Repozytorium w pamięci z opcjonalną kolekcją startowych zadań.
        :param initial: Iterable z obiektami Task do wstępnego załadowania.
        Zadania bez `task_id` dostają kolejne ID z licznika.
    """
    def __init__(self, initial: Iterable[Task] | None = None) -> None:
        self._data: dict[TaskId, Task] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        for t in (initial or []):
            self.add(t)

    def add(self, task: Task) -> Task:
        with self._lock:
            task_id = task.task_id
            if task_id is None:
                task_id = self._next_id()
            saved = replace(task, task_id=task_id)
            self._data[task_id] = saved
            return saved

    def _next_id(self) -> TaskId:
        # pomija ID zajęte przez seed
        while True:
            candidate = TaskId(next(self._ids))
            if candidate not in self._data:
                return candidate

    def get(self, task_id: TaskId) -> Task | None:
        return self._data.get(task_id)

    def modify(self, task_id: TaskId, change: Callable[[Task], Task]) -> Task:
        """
            Odczyt-zmiana-zapis pod blokadą repozytorium.

            :param task_id: Identyfikator zmienianego zadania.
            :param change: Funkcja zwracająca nowy stan zadania.
            :raises TaskNotFoundError: Gdy rekord z `task_id` nie istnieje.
            :return: Zapisany obiekt `Task`.
        """
        with self._lock:
            current = self._data.get(task_id)
            if current is None:
                raise TaskNotFoundError(task_id)
            updated = replace(change(current), task_id=task_id)
            self._data[task_id] = updated
            return updated

    def remove(self, task_id: TaskId) -> None:
        with self._lock:
            self._data.pop(task_id, None)

    def list_all(self) -> list[Task]:
        tasks = list(self._data.values())
        # sortowanie z tiebreakerem
        tasks.sort(key=lambda t: (t.created, t.task_id))
        return tasks
