import pytest
from datetime import date

from todolist.adapters.memory.task_storage import InMemoryTaskStorage
from todolist.domain.task import TaskId
from todolist.services.task_service import TaskService
from todolist.services.task_store import TaskStore


TODAY = date(2025, 1, 15)


class FakeIdProvider:
    def __init__(self):
        self.counter = 0
    def new_id(self) -> TaskId:
        self.counter += 1
        return TaskId(f"id-{self.counter}")


class FakeClock:
    def __init__(self, fixed: date | None = None):
        # without `fixed` it always returns the same "today"
        self.fixed = fixed or TODAY
    def today(self) -> date:
        return self.fixed


class RecordingObserver:
    """Counts notifications and remembers what the store looked like at each one."""
    def __init__(self, store: TaskStore | None = None):
        self.store = store
        self.calls = 0
        self.seen: list[list[str]] = []
    def on_tasks_changed(self) -> None:
        self.calls += 1
        if self.store is not None:
            self.seen.append([t.title for t in self.store.all()])


@pytest.fixture
def storage():
    return InMemoryTaskStorage()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ids():
    return FakeIdProvider()


@pytest.fixture
def store(storage, clock, ids):
    return TaskStore(storage, clock=clock, ids=ids)


@pytest.fixture
def service(store, ids):
    return TaskService(store, ids)
