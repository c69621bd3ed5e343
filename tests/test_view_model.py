import asyncio
import threading

import pytest

from tasklist.preferences import SEEDED_KEY, PreferenceStore
from tasklist.repositories import InMemoryTaskStore, TaskRepository
from tasklist.seed import seed_sample_tasks
from tasklist.session import TaskListSession
from tasklist.view_model import TaskListViewModel
from tasklist.visible import Paginator, SortOption, StatusFilter

from .helpers import FakeMonotonic, RecordingFeedback, StepClock, make_tasks


def build(refresh_delay: float = 0.0):
    store = InMemoryTaskStore()
    repo = TaskRepository(store)
    feedback = RecordingFeedback()
    vm = TaskListViewModel(repo, feedback=feedback, clock=StepClock(), refresh_delay=refresh_delay)
    return vm, store, feedback


class TestViewModel:
    def test_add_task(self):
        vm, store, feedback = build()
        task = vm.add_task("  Write report ", notes="")
        assert task is not None
        assert store.get(task["id"])["title"] == "Write report"
        assert store.get(task["id"])["notes"] is None
        assert feedback.events == ["success"]

    def test_add_blank_title_is_noop(self):
        vm, store, feedback = build()
        assert vm.add_task("  ") is None
        assert vm.add_task("") is None
        assert store.count() == 0
        assert feedback.events == []

    def test_update_task(self):
        vm, store, _ = build()
        task = vm.add_task("Draft")
        assert vm.update_task(task, "Final", "notes", True) is True
        stored = store.get(task["id"])
        assert (stored["title"], stored["notes"], stored["is_done"]) == ("Final", "notes", True)
        assert stored["updated_at"] > stored["created_at"]

    def test_update_rejected_leaves_store_untouched(self):
        vm, store, _ = build()
        task = vm.add_task("Keep", notes="n")
        before = store.get(task["id"])
        assert vm.update_task(task, "", None, True) is False
        assert store.get(task["id"]) == before
        assert task == before

    def test_toggle_feedback(self):
        vm, store, feedback = build()
        task = vm.add_task("Flip")
        feedback.events.clear()
        assert vm.toggle_done(task) is True
        assert vm.toggle_done(task) is False
        assert feedback.events == ["success", "impact:light"]
        assert store.get(task["id"])["is_done"] is False

    def test_delete_task(self):
        vm, store, feedback = build()
        task = vm.add_task("Bye")
        feedback.events.clear()
        assert vm.delete_task(task) is True
        assert store.count() == 0
        assert feedback.events == ["impact:medium"]

    def test_delete_tasks_at_offsets(self):
        vm, store, _ = build()
        for i in range(5):
            vm.add_task(f"Task {i}")
        visible = store.all()
        assert vm.delete_tasks_at([0, 2, 2], visible) == 2
        remaining = {t["id"] for t in store.all()}
        assert visible[0]["id"] not in remaining
        assert visible[2]["id"] not in remaining
        assert len(remaining) == 3

    def test_delete_tasks_at_bad_offset(self):
        vm, store, _ = build()
        vm.add_task("Only")
        with pytest.raises(IndexError):
            vm.delete_tasks_at([0, 3], store.all())
        with pytest.raises(IndexError):
            vm.delete_tasks_at([-1], store.all())
        assert store.count() == 1

    def test_refresh_changes_nothing(self):
        vm, store, _ = build()
        vm.add_task("Stay")
        asyncio.run(vm.refresh())
        assert store.count() == 1


def build_session(tasks=(), prefs=None, delay=0.2):
    store = InMemoryTaskStore()
    for t in tasks:
        store.insert(t)
    clock = FakeMonotonic()
    session = TaskListSession(
        TaskRepository(store),
        preferences=prefs or PreferenceStore(),
        paginator=Paginator(settle_delay=delay, clock=clock),
    )
    return session, store, clock


class TestSession:
    def test_twenty_tasks_scenario(self):
        session, _, _ = build_session(make_tasks(20))
        view = session.view()
        assert [t["title"] for t in view.items] == [f"Task {i}" for i in range(20, 5, -1)]
        assert view.has_more is True
        assert session.load_more() is True
        view = session.view()
        assert len(view.items) == 20
        assert view.has_more is False
        assert view.is_loading is True

    def test_preference_change_resets_cursor(self):
        session, _, clock = build_session(make_tasks(40))
        session.load_more()
        clock.now += 1
        assert session.view().items_to_show == 30

        assert session.set_preferences(sort=SortOption.OLDEST) is True
        assert session.view().items_to_show == 15
        session.load_more()
        assert session.set_preferences(sort=SortOption.OLDEST) is False
        assert session.view().items_to_show == 30

        assert session.set_preferences(query="task") is True
        assert session.view().items_to_show == 15

    def test_view_reflects_store_changes(self):
        session, store, _ = build_session(make_tasks(3))
        assert session.view().total == 3
        store.delete(store.all()[0]["id"])
        view = session.view()
        assert view.total == 2
        assert view.items_to_show == 2

    def test_empty_view(self):
        session, _, _ = build_session()
        view = session.view()
        assert view.empty is True
        assert view.items == []
        assert view.has_more is False
        assert session.load_more() is False

    def test_item_appeared(self):
        session, _, _ = build_session(make_tasks(20))
        last = session.view().items[-1]
        assert session.item_appeared(last["id"]) is True
        assert session.view().items_to_show == 20

    def test_preferences_are_persisted(self, tmp_path):
        path = str(tmp_path / "prefs.json")
        session, _, _ = build_session(prefs=PreferenceStore(path))
        session.set_preferences(status=StatusFilter.COMPLETED, sort=SortOption.TITLE_ZA, query="milk")

        reloaded = build_session(prefs=PreferenceStore(path))[0]
        assert reloaded.preferences.status is StatusFilter.COMPLETED
        assert reloaded.preferences.sort is SortOption.TITLE_ZA
        assert reloaded.preferences.query == "milk"


class TestPreferenceStore:
    def test_unknown_stored_values_fall_back(self):
        prefs = PreferenceStore()
        prefs.set("todo.selectedFilter", "Semua")
        prefs.set("todo.sortOption", 42)
        view = prefs.load_view()
        assert view.status is StatusFilter.ALL
        assert view.sort is SortOption.NEWEST

    def test_non_object_file_is_an_error(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError):
            PreferenceStore(str(path))


class TestSeed:
    def test_seeds_once(self):
        store = InMemoryTaskStore()
        repo = TaskRepository(store)
        prefs = PreferenceStore()
        assert seed_sample_tasks(repo, prefs) == 100
        assert prefs.get(SEEDED_KEY) is True
        newest = store.all()[0]
        assert newest["title"] == "Task 1"
        assert seed_sample_tasks(repo, prefs) == 0
        assert store.count() == 100

    def test_skips_non_empty_store(self):
        store = InMemoryTaskStore()
        store.insert(make_tasks(1)[0])
        prefs = PreferenceStore()
        assert seed_sample_tasks(TaskRepository(store), prefs) == 0
        assert prefs.get(SEEDED_KEY) is None

    def test_rejected_sample_title_raises(self, monkeypatch):
        monkeypatch.setattr("tasklist.seed.create_task", lambda *args, **kwargs: None)
        store = InMemoryTaskStore()
        with pytest.raises(ValueError):
            seed_sample_tasks(TaskRepository(store), PreferenceStore())
        assert store.count() == 0


class TestSessionConcurrency:
    def test_simultaneous_load_more_advances_once(self):
        session, _, _ = build_session(make_tasks(60), delay=60)
        barrier = threading.Barrier(6)
        results = []

        def worker():
            barrier.wait()
            results.append(session.load_more())

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
        assert session.view().items_to_show == 30

    def test_simultaneous_preference_changes_reset_once_each(self):
        session, _, _ = build_session(make_tasks(5))
        barrier = threading.Barrier(4)
        results = []

        def worker():
            barrier.wait()
            results.append(session.set_preferences(sort=SortOption.OLDEST))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
        assert session.preferences.sort is SortOption.OLDEST
