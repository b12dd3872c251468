from datetime import datetime, timedelta, timezone

import pytest

from tasklist.adapters.memory.task_repo import InMemoryTaskRepository
from tasklist.app.settings import get_settings
from tasklist.services.task_service import TaskService


class FakeClock:
    """Zegar testowy: każde `now()` przesuwa czas o `step` (domyślnie 1s)."""
    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.step = step
    def now(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repo():
    return InMemoryTaskRepository()


@pytest.fixture
def service(repo, clock):
    return TaskService(repo, clock)


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
