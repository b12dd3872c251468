from __future__ import annotations

import logging

from tasklist.adapters.memory.task_repo import InMemoryTaskRepository
from tasklist.adapters.system.clock_system import SystemClock
from tasklist.app.settings import AppSettings
from tasklist.domain.errors import StoreError
from tasklist.ports.task_repository import TaskRepository
from tasklist.services.task_service import TaskService

logger = logging.getLogger(__name__)


def build_datastore_repository(settings: AppSettings) -> TaskRepository:
    """Dekoduje powiązane poświadczenia i otwiera jedynego klienta Datastore.

    :raises CredentialsError: Gdy SERVICE_NAME / VCAP_SERVICES są nieużyteczne.
    :raises StoreError: Gdy nie da się utworzyć klienta (np. brak project id).
    """
    from google.auth.exceptions import GoogleAuthError
    from google.cloud import datastore

    from tasklist.adapters.datastore.credentials import parse_credentials
    from tasklist.adapters.datastore.task_repo import DatastoreTaskRepository

    credentials, project_id = parse_credentials(settings.service_name, settings.vcap_services)
    try:
        client = datastore.Client(project=project_id, credentials=credentials)
    except (GoogleAuthError, OSError, ValueError) as e:
        raise StoreError("create datastore client", str(e)) from e
    logger.info("connected to datastore project %s", client.project)
    return DatastoreTaskRepository(client)


def build_repository(settings: AppSettings) -> TaskRepository:
    """Tworzy repozytorium na bazie wybranego backendu.
    - datastore -> Cloud Datastore (poświadczenia z VCAP_SERVICES)
    - sql -> SQLAlchemy (lokalny plik SQLite domyślnie)
    - memory -> InMemory (bez trwałości)
    """
    if settings.backend == "datastore":
        return build_datastore_repository(settings)
    if settings.backend == "sql":
        from tasklist.adapters.sql.task_repo import SqlTaskRepository

        logger.info("using SQL store at %s", settings.sql_url)
        return SqlTaskRepository(settings.sql_url)
    logger.warning("using in-memory store; tasks are lost on exit")
    return InMemoryTaskRepository()


def build_service(settings: AppSettings) -> TaskService:
    return TaskService(build_repository(settings), SystemClock())
