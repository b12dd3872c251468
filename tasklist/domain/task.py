from typing import NewType
from datetime import datetime
from dataclasses import dataclass

TaskId = NewType("TaskId", int)

@dataclass(frozen=True)
class Task():
    """
    Model domenowy pojedynczego zadania; niemutowalny.
    `task_id` nadaje magazyn przy zapisie (None dla zadania jeszcze niezapisanego),
    czas `created` w UTC dostarcza serwis.
    """
    description: str
    created: datetime
    done: bool = False
    task_id: TaskId | None = None



### COMMENTS
# ======================================
# Identyfikator zadania
# ======================================
# ID nie jest polem encji w magazynie. Datastore przydziela liczbowy klucz przy `put`,
# a repozytorium przepisuje `key.id` do `task_id` po każdym odczycie.
# Dlatego `task_id` jest ostatnim polem z domyślnym None: serwis tworzy Task bez ID,
# repozytorium zwraca kopię z nadanym ID.
#
# Zmiana stanu = nowa instancja (`dataclasses.replace(task, done=True)`).
