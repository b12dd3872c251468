import logging
import re
from dataclasses import replace

from tasklist.ports.task_repository import TaskRepository
from tasklist.ports.clock import Clock
from tasklist.domain.task import Task, TaskId
from tasklist.domain.errors import TaskValidationError

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


### COMMENTS
# ==========================================================
# Warstwa serwisowa (services/task_service.py) — przypadki użycia.
# ==========================================================
# Rola:
# - Orkiestracja logiki aplikacyjnej nad portem `TaskRepository`.
# - Parsowanie ID zadania (int64) z surowego tekstu.
# - Znacznik czasu `created` pochodzi z portu `Clock`, nie z magazynu.
#
# Zasady:
# - Serwis korzysta wyłącznie z portów; nie zna Datastore ani SQLAlchemy.
# - Opis zadania nie jest walidowany (pusty string jest poprawny).
# - `mark_done` nie sprawdza, czy zadanie było już zamknięte — ponowne
#   oznaczenie to nadpisanie tą samą wartością.


def parse_task_id(raw: str) -> TaskId:
    """
    Parsuje ID zadania jako 64-bitową liczbę całkowitą ze znakiem.

    - Białe znaki na brzegach są ignorowane.
    - Dopuszczalny opcjonalny znak (+/-) i wyłącznie cyfry dziesiętne.

    :param raw: Tekst z ciała żądania lub argumentu CLI.
    :raises TaskValidationError: Gdy tekst nie jest liczbą int64.
    :return: `TaskId`.
    """
    text = raw.strip()
    if not _ID_PATTERN.fullmatch(text):
        raise TaskValidationError("id", f"{text!r} is not an integer")
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        raise TaskValidationError("id", f"{text} is out of int64 range")
    return TaskId(value)


class TaskService:
    """
    Serwis przypadków użycia dla listy zadań.

    :param repo: Implementacja portu TaskRepository.
    :param clock: Źródło czasu UTC dla pola `created`.
    """
    def __init__(self, repo: TaskRepository, clock: Clock) -> None:
        self.repo = repo
        self.clock = clock

    def create_task(self, description: str) -> Task:
        """
            Tworzy nowe zadanie i zapisuje je w repozytorium.

            - `created = clock.now()`, `done = False`.
            - ID przydziela magazyn; zwracany Task ma ustawione `task_id`.

            :param description: Opis zadania (dowolny tekst, także pusty).
            :return: Zapisany obiekt `Task`.
            :raises StoreError: Gdy zapis się nie powiódł.
        """
        task = Task(description=description, created=self.clock.now())
        saved = self.repo.add(task)
        logger.debug("created task %s", saved.task_id, extra={"task_id": saved.task_id})
        return saved

    def list_tasks(self) -> list[Task]:
        """Zwraca wszystkie zadania rosnąco po czasie utworzenia."""
        return self.repo.list_all()

    def mark_done(self, task_id: TaskId) -> Task:
        """
            Oznacza istniejące zadanie jako zrobione (`done=True`).

            - Odczyt i zapis flagi idą w jednej transakcji magazynu (`repo.modify`),
            więc są atomowe dla danego klucza.
            - Ponowne oznaczenie zrobionego zadania nadpisuje je tą samą wartością.

            :param task_id: Identyfikator zadania do oznaczenia.
            :raises TaskNotFoundError: Gdy nie ma zadania o podanym ID.
            :return: Zaktualizowany obiekt `Task`.
        """
        task = self.repo.modify(task_id, lambda current: replace(current, done=True))
        logger.debug("marked task %s done", task_id, extra={"task_id": task_id})
        return task

    def remove_task(self, task_id: TaskId) -> None:
        """
            Usuwa zadanie z repozytorium (bezwarunkowo).

            :param task_id: Identyfikator zadania do usunięcia.
            :return: None
        """
        self.repo.remove(task_id)
        logger.debug("deleted task %s", task_id, extra={"task_id": task_id})
