from __future__ import annotations

import datetime as dt
import json

import pytest

from taskdesk.models import DateRange, TaskDraft, TaskFilter, TaskPriority, TaskStatus
from taskdesk.observability import get_metrics
from taskdesk.storage import DEFAULT_STORAGE_KEY, InMemoryKeyValueStorage, LocalTaskStorage
from taskdesk.store import TaskStore
from taskdesk.tasks import FilterPolicy
from tests.helpers.fakes import FailingKeyValueStorage, FakeClock

_STAMPS = {"id", "created_at", "updated_at"}


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def backend() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture()
def store(backend: InMemoryKeyValueStorage, clock: FakeClock) -> TaskStore:
    return TaskStore(LocalTaskStorage(backend), clock=clock)


def test_add_then_read_returns_draft_plus_id_and_stamps(store: TaskStore, clock: FakeClock) -> None:
    draft = TaskDraft(
        title="  Write tests  ",
        description="cover the store",
        priority=TaskPriority.HIGH,
        tags=["qa"],
        due_date=clock.now + dt.timedelta(days=2),
        estimated_time=90,
    )
    task = store.add(draft)

    listed = store.get_filtered_tasks()
    assert len(listed) == 1
    got = listed[0]
    assert got.id == task.id and got.id
    assert got.title == "Write tests"
    assert got.model_dump(exclude=_STAMPS) == draft.model_dump()
    assert got.created_at == got.updated_at == clock.now


def test_load_replaces_collection(store: TaskStore) -> None:
    store.add(TaskDraft(title="a"))
    assert store.load([]) == []
    assert store.tasks == []


def test_update_applied_twice_only_moves_updated_at(store: TaskStore, clock: FakeClock) -> None:
    original = store.add(TaskDraft(title="Draft"))
    patch = {"title": "Final", "status": TaskStatus.IN_PROGRESS}

    once = store.update(original.model_copy(update=patch))
    twice = store.update(once.model_copy(update=patch)) if once else None

    assert once is not None and twice is not None
    assert once.model_dump(exclude={"updated_at"}) == twice.model_dump(exclude={"updated_at"})
    assert original.updated_at < once.updated_at < twice.updated_at
    assert twice.created_at == original.created_at


def test_update_uses_clock_when_it_moves_forward(store: TaskStore, clock: FakeClock) -> None:
    t = store.add(TaskDraft(title="x"))
    later = clock.advance(minutes=5)
    updated = store.update(t.model_copy(update={"title": "y"}))
    assert updated is not None
    assert updated.updated_at == later


def test_update_unknown_id_is_noop(store: TaskStore, backend: InMemoryKeyValueStorage) -> None:
    t = store.add(TaskDraft(title="kept"))
    before = backend.get(DEFAULT_STORAGE_KEY)
    ghost = t.model_copy(update={"id": "missing", "title": "ghost"})

    assert store.update(ghost) is None
    assert [x.title for x in store.tasks] == ["kept"]
    assert backend.get(DEFAULT_STORAGE_KEY) == before


def test_selection_follows_updates_and_clears_on_delete(store: TaskStore) -> None:
    a = store.add(TaskDraft(title="a"))
    b = store.add(TaskDraft(title="b"))
    store.set_selected_task(a)

    store.update(a.model_copy(update={"title": "a2"}))
    selected = store.selected_task
    assert selected is not None and selected.title == "a2"

    assert store.delete(b.id) is True
    assert store.selected_task is not None

    assert store.delete(a.id) is True
    assert store.selected_task is None
    assert all(t.id != a.id for t in store.tasks)


def test_delete_unknown_id_is_noop(store: TaskStore) -> None:
    store.add(TaskDraft(title="a"))
    assert store.delete("nope") is False
    assert len(store.tasks) == 1


def test_set_selected_task_accepts_none(store: TaskStore) -> None:
    a = store.add(TaskDraft(title="a"))
    store.set_selected_task(a)
    store.set_selected_task(None)
    assert store.selected_task is None


def test_filter_replaced_wholesale(store: TaskStore) -> None:
    store.add(TaskDraft(title="API work", tags=["backend"]))
    store.add(TaskDraft(title="UI work", tags=["frontend"], status=TaskStatus.COMPLETED))

    store.set_filter(TaskFilter(status=TaskStatus.COMPLETED))
    assert [t.title for t in store.get_filtered_tasks()] == ["UI work"]

    store.set_filter(TaskFilter(tags=["backend"]))
    assert store.filter.status is None
    assert [t.title for t in store.get_filtered_tasks()] == ["API work"]


def test_search_short_circuits_date_range(store: TaskStore, clock: FakeClock) -> None:
    store.add(TaskDraft(title="实现后端API"))
    store.add(TaskDraft(title="设计用户界面"))
    window = DateRange(start=clock.now, end=clock.now + dt.timedelta(days=1))
    store.set_filter(TaskFilter(search="api", date_range=window))
    assert [t.title for t in store.get_filtered_tasks()] == ["实现后端API"]


def test_all_policy_store(backend: InMemoryKeyValueStorage, clock: FakeClock) -> None:
    store = TaskStore(LocalTaskStorage(backend), filter_policy=FilterPolicy.ALL, clock=clock)
    store.add(TaskDraft(title="实现后端API"))
    window = DateRange(start=clock.now, end=clock.now + dt.timedelta(days=1))
    store.set_filter(TaskFilter(search="api", date_range=window))
    assert store.get_filtered_tasks() == []


def test_stats_from_store(store: TaskStore, clock: FakeClock) -> None:
    done = store.add(TaskDraft(title="done"))
    store.update(done.model_copy(update={"status": TaskStatus.COMPLETED}))
    store.add(TaskDraft(title="late", due_date=clock.now - dt.timedelta(days=1)))

    stats = store.get_task_stats()
    assert stats.total == 2
    assert stats.completed_today == 1
    assert stats.overdue_count == 1


def test_changes_persist_across_instances(
    store: TaskStore, backend: InMemoryKeyValueStorage, clock: FakeClock
) -> None:
    due = clock.now + dt.timedelta(days=3)
    a = store.add(TaskDraft(title="a", due_date=due, tags=["x"]))
    b = store.add(TaskDraft(title="b"))
    store.update(a.model_copy(update={"actual_time": 15}))
    store.delete(b.id)

    reloaded = TaskStore(LocalTaskStorage(backend))
    tasks = reloaded.load()
    assert [t.id for t in tasks] == [a.id]
    assert tasks[0].actual_time == 15
    assert tasks[0].due_date == due
    assert isinstance(json.loads(backend.get(DEFAULT_STORAGE_KEY) or "[]"), list)


def test_storage_failure_is_logged_and_state_still_updates(clock: FakeClock) -> None:
    store = TaskStore(LocalTaskStorage(FailingKeyValueStorage()), clock=clock)
    before = get_metrics().get("task_errors", {"op": "add", "store": "local"})

    t = store.add(TaskDraft(title="in memory only"))

    assert [x.id for x in store.tasks] == [t.id]
    after = get_metrics().get("task_errors", {"op": "add", "store": "local"})
    assert after == before + 1


def test_store_without_storage_works_in_memory(clock: FakeClock) -> None:
    store = TaskStore(clock=clock)
    assert store.load() == []
    t = store.add(TaskDraft(title="volatile"))
    assert store.delete(t.id) is True
