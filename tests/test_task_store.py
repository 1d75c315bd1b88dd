import json
import threading
import pytest
from datetime import date, timedelta

from todolist.adapters.memory.task_storage import InMemoryTaskStorage
from todolist.domain.enums import TaskFilter
from todolist.domain.errors import DuplicateTitleError, ReentrantMutationError
from todolist.domain.task import Task, TaskId
from todolist.services.task_store import TaskStore

from conftest import FakeClock, FakeIdProvider, RecordingObserver, TODAY


def make_task(task_id: str, title: str, due: date | None = None, completed: bool = False) -> Task:
    return Task(task_id=TaskId(task_id), title=title, due_date=due, completed=completed)


def test_add_stores_notifies_and_persists(store, storage):
    # Arrange
    observer = RecordingObserver(store)
    store.subscribe(observer)

    # Act
    added = store.add(make_task("1", "Buy milk"))

    # Assert
    assert store.all() == [added]
    assert observer.calls == 1
    assert observer.seen == [["Buy milk"]]
    assert json.loads(storage.text)[0]["title"] == "Buy milk"


@pytest.mark.parametrize("other", ["Buy milk", "buy milk", "  BUY MILK  ", "Buy Milk\t"])
def test_add_rejects_duplicate_normalized_title(store, storage, other):
    store.add(make_task("1", "Buy milk"))
    observer = RecordingObserver()
    store.subscribe(observer)
    writes = storage.writes

    with pytest.raises(DuplicateTitleError):
        store.add(make_task("2", other))

    assert [t.title for t in store.all()] == ["Buy milk"]
    assert observer.calls == 0
    assert storage.writes == writes


def test_all_keeps_insertion_order_and_is_a_copy(store):
    for i, title in enumerate(["C", "A", "B"]):
        store.add(make_task(str(i), title))

    snapshot = store.all()
    snapshot.clear()

    assert [t.title for t in store.all()] == ["C", "A", "B"]


def test_remove_existing(store):
    a = store.add(make_task("1", "A"))
    store.add(make_task("2", "B"))

    store.remove(a.task_id)

    assert [t.title for t in store.all()] == ["B"]


def test_remove_unknown_id_still_notifies_and_persists(store, storage):
    store.add(make_task("1", "A"))
    observer = RecordingObserver()
    store.subscribe(observer)
    writes = storage.writes

    store.remove(TaskId("nope"))

    assert store.count() == 1
    assert observer.calls == 1
    assert storage.writes == writes + 1


def test_toggle_twice_restores_original(store):
    t = store.add(make_task("1", "A"))

    first = store.toggle_completed(t.task_id)
    second = store.toggle_completed(t.task_id)

    assert first.completed is True
    assert second.completed is False
    assert store.get(t.task_id) == t


def test_toggle_unknown_id_is_noop(store, storage):
    store.add(make_task("1", "A"))
    observer = RecordingObserver()
    store.subscribe(observer)
    writes = storage.writes
    before = store.all()

    assert store.toggle_completed(TaskId("nope")) is None

    assert store.all() == before
    assert observer.calls == 0
    assert storage.writes == writes


def test_update_replaces_whole_task(store):
    t = store.add(Task(task_id=TaskId("1"), title="A", description="old", due_date=TODAY))
    replacement = Task(task_id=t.task_id, title="A renamed")

    store.update(replacement)

    got = store.get(t.task_id)
    assert got == replacement
    assert got.description == ""
    assert got.due_date is None


def test_update_may_keep_own_title_with_different_case(store):
    t = store.add(make_task("1", "Pay rent"))
    store.update(Task(task_id=t.task_id, title="PAY RENT", completed=True))
    assert store.get(t.task_id).title == "PAY RENT"


def test_update_rejects_title_of_another_task(store):
    store.add(make_task("1", "A"))
    b = store.add(make_task("2", "B"))
    observer = RecordingObserver()
    store.subscribe(observer)

    with pytest.raises(DuplicateTitleError):
        store.update(Task(task_id=b.task_id, title=" a "))

    assert store.get(b.task_id).title == "B"
    assert observer.calls == 0


def test_update_unknown_id_is_noop(store, storage):
    writes = storage.writes
    assert store.update(make_task("ghost", "Ghost")) is None
    assert store.count() == 0
    assert storage.writes == writes


def test_search_is_case_insensitive_and_blank_returns_all(store):
    store.add(make_task("1", "Buy milk"))
    store.add(make_task("2", "Pay rent"))

    assert [t.title for t in store.search("PAY")] == ["Pay rent"]
    assert [t.title for t in store.search("  ")] == ["Buy milk", "Pay rent"]
    assert [t.title for t in store.search(None)] == ["Buy milk", "Pay rent"]
    assert store.search("xyz") == []


def test_query_today_keeps_insertion_order(store):
    store.add(make_task("1", "Later", due=TODAY + timedelta(days=3)))
    store.add(make_task("2", "Due first", due=TODAY))
    store.add(make_task("3", "No date"))
    store.add(make_task("4", "Due second", due=TODAY, completed=True))

    result = store.query("", TaskFilter.TODAY)

    assert [t.title for t in result] == ["Due first", "Due second"]


def test_query_overdue_excludes_completed(store):
    yesterday = TODAY - timedelta(days=1)
    store.add(make_task("1", "Late", due=yesterday))
    store.add(make_task("2", "Late but done", due=yesterday, completed=True))
    store.add(make_task("3", "Today", due=TODAY))

    assert [t.title for t in store.query("", TaskFilter.OVERDUE)] == ["Late"]


def test_query_completed_and_all(store):
    store.add(make_task("1", "A", completed=True))
    store.add(make_task("2", "B"))

    assert [t.title for t in store.query("", TaskFilter.COMPLETED)] == ["A"]
    assert [t.title for t in store.query("", TaskFilter.ALL)] == ["A", "B"]
    assert [t.title for t in store.query("", None)] == ["A", "B"]


def test_queries_do_not_notify_or_persist(store, storage):
    store.add(make_task("1", "A"))
    observer = RecordingObserver()
    store.subscribe(observer)
    writes = storage.writes

    store.all()
    store.search("a")
    store.query("a", TaskFilter.COMPLETED)

    assert observer.calls == 0
    assert storage.writes == writes


def test_buy_milk_pay_rent_scenario(store):
    milk = store.add(make_task("1", "Buy milk"))
    store.add(make_task("2", "Pay rent", due=TODAY))

    assert [t.title for t in store.query("", TaskFilter.TODAY)] == ["Pay rent"]
    assert [t.title for t in store.query("pay", TaskFilter.ALL)] == ["Pay rent"]

    store.remove(milk.task_id)
    assert [t.title for t in store.all()] == ["Pay rent"]


def test_persistence_failure_keeps_memory_change_and_does_not_raise(store, storage):
    observer = RecordingObserver()
    store.subscribe(observer)
    storage.fail_writes = True

    added = store.add(make_task("1", "A"))

    assert store.all() == [added]
    assert observer.calls == 1
    assert storage.text is None
    assert store.save() is False

    storage.fail_writes = False
    assert store.save() is True
    assert json.loads(storage.text)[0]["id"] == "1"


def test_notification_happens_before_persist(store, storage):
    order = []

    class Spy:
        def on_tasks_changed(self):
            order.append(("notify", storage.writes))

    store.subscribe(Spy())
    store.add(make_task("1", "A"))

    assert order == [("notify", 0)]
    assert storage.writes == 1


def test_observer_can_query_but_not_mutate(store):
    seen = []
    errors = []

    class Reader:
        def on_tasks_changed(self):
            seen.append(len(store.query("", TaskFilter.ALL)))

    class Writer:
        def on_tasks_changed(self):
            try:
                store.add(make_task("w", "From observer"))
            except ReentrantMutationError as e:
                errors.append(e)

    store.subscribe(Reader())
    store.subscribe(Writer())
    store.add(make_task("1", "A"))

    assert seen == [1]
    assert len(errors) == 1
    assert [t.title for t in store.all()] == ["A"]


def test_unsubscribed_observer_is_not_notified(store):
    observer = RecordingObserver()
    store.subscribe(observer)
    store.unsubscribe(observer)

    store.add(make_task("1", "A"))

    assert observer.calls == 0


def test_load_replaces_collection_and_notifies_once_without_writing():
    storage = InMemoryTaskStorage(
        '[{"id":"a","title":"Loaded","description":"","dueDate":"2025-01-15","completed":true}]'
    )
    store = TaskStore(storage, clock=FakeClock(), ids=FakeIdProvider())
    observer = RecordingObserver()
    store.subscribe(observer)

    assert store.load() is True

    assert store.all() == [Task(task_id=TaskId("a"), title="Loaded", due_date=date(2025, 1, 15), completed=True)]
    assert observer.calls == 1
    assert storage.writes == 0


@pytest.mark.parametrize("document", [None, "", "   \n", "[]", " [ ] ", "[\n]", "\t[  \n ]\n"])
def test_load_of_empty_document_keeps_state(document):
    storage = InMemoryTaskStorage()
    store = TaskStore(storage, clock=FakeClock())
    store.add(make_task("1", "Existing"))
    storage.text = document
    observer = RecordingObserver()
    store.subscribe(observer)

    assert store.load() is True

    assert [t.title for t in store.all()] == ["Existing"]
    assert observer.calls == 0


@pytest.mark.parametrize("document", ["{not json", '{"id":"a","title":"x"}'])
def test_load_failure_keeps_state(document):
    storage = InMemoryTaskStorage()
    store = TaskStore(storage, clock=FakeClock())
    store.add(make_task("1", "Existing"))
    storage.text = document
    observer = RecordingObserver()
    store.subscribe(observer)

    assert store.load() is False

    assert [t.title for t in store.all()] == ["Existing"]
    assert observer.calls == 0


def test_load_read_failure_keeps_state(store, storage):
    store.add(make_task("1", "Existing"))
    storage.fail_reads = True

    assert store.load() is False
    assert store.count() == 1


def test_load_skips_malformed_record():
    storage = InMemoryTaskStorage(
        '[{"id":"a","title":"Good","description":"","dueDate":null,"completed":false},'
        '{"id":"b","description":"no title","dueDate":null,"completed":false}]'
    )
    store = TaskStore(storage, clock=FakeClock())

    assert store.load() is True
    assert [t.title for t in store.all()] == ["Good"]


def test_save_then_load_round_trip(store, storage):
    store.add(Task(task_id=TaskId("1"), title='Quote " and \\ slash', description="", due_date=None))
    store.add(Task(task_id=TaskId("2"), title="Żółw", description="multi\nline", due_date=TODAY, completed=True))
    original = store.all()

    fresh = TaskStore(InMemoryTaskStorage(storage.text), clock=FakeClock())
    assert fresh.load() is True

    assert fresh.all() == original


def test_concurrent_adds_and_saves_stay_consistent(store, storage):
    def worker(offset: int):
        for i in range(25):
            store.add(make_task(f"{offset}-{i}", f"task {offset}-{i}"))
            store.save()

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.count() == 100
    assert len(json.loads(storage.text)) == 100
