from typing import Callable, Protocol
from tasklist.domain.task import Task, TaskId


### COMMENTS
# ==========================================================
# Kontrakt repozytorium zadań (ports/task_repository.py).
# ==========================================================
# Ten moduł definiuje interfejs (Protocol) dla warstwy trwałości Tasków.
# - Jest niezależny od technologii (pamięć, SQLite, Cloud Datastore).
# - ID nadaje magazyn przy `add`; repozytorium zwraca Task z uzupełnionym `task_id`.
# - Adaptery mapują błędy technologiczne na błędy domenowe
#  (brak rekordu → TaskNotFoundError, reszta → StoreError).
# - Listowanie: zawsze rosnąco po `created`, tiebreaker po `task_id` (ASC), bez paginacji.


class TaskRepository(Protocol):
    """Interfejs repozytorium do zapisu i odczytu obiektów `Task`."""

    def add(self, task: Task) -> Task:
        """Zapisuje nowe zadanie z kluczem przydzielonym przez magazyn.

        Zwraca:
            Task: Kopia wejściowego obiektu z uzupełnionym `task_id`.

        Wyjątki domenowe:
            StoreError: Gdy zapis się nie powiódł.
        """

    def get(self, task_id: TaskId) -> Task | None:
        """Zwraca zadanie o podanym `task_id` albo `None`, gdy go nie ma.

        Odczyt punktowy poza transakcją; serwis go nie używa (mark_done idzie przez
        `modify`). Zostaje jako część kontraktu dla testów adapterów i diagnostyki.
        """

    def modify(self, task_id: TaskId, change: Callable[[Task], Task]) -> Task:
        """Odczyt-zmiana-zapis w jednej transakcji.

        `change` dostaje aktualny stan zadania i zwraca nowy; repozytorium zapisuje
        wynik pod tym samym kluczem. Odczyt i zapis są atomowe względem innych
        transakcji na tym samym kluczu.

        Wyjątki domenowe:
            TaskNotFoundError: Gdy rekord z `task_id` nie istnieje (nic nie jest tworzone).
            StoreError: Gdy transakcja się nie powiodła.
        """

    def remove(self, task_id: TaskId) -> None:
        """Usuwa (hard delete) rekord o podanym `task_id`.

        Usunięcie nieistniejącego klucza nie jest błędem (kontrakt Datastore).
        """

    def list_all(self) -> list[Task]:
        """Zwraca wszystkie zadania rosnąco po `created` (tiebreaker `task_id`),
        każde z `task_id` odtworzonym z klucza.
        """
