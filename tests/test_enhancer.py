import threading

import pytest

from conftest import GEMINI_WITH_OPTIONS
from taskflow.exceptions import EnhancementFailed, NotFoundError, TaskBusyError, ValidationError
from taskflow.models.board import TaskPatch


def _task(store, task_id):
    return next(t for t in store.board.all_tasks() if t.id == task_id)


@pytest.fixture
def task_id(store, list_id):
    _, task_id = store.add_task(list_id)
    store.update_task(list_id, task_id, TaskPatch(title="fix login", details="users cant log in"))
    return task_id


class TestEnhance:
    def test_title_is_sanitized_and_original_kept(self, enhancer, store, task_id, mock_genai_client):
        enhancer.enhance(task_id, "general", "title")
        task = _task(store, task_id)
        assert task.title == "Fix the login bug"
        assert task.original_text == "fix login"
        assert task.details == "users cant log in"

    def test_details(self, enhancer, store, task_id, mock_genai_client):
        mock_genai_client.models.generate_content.return_value.text = GEMINI_WITH_OPTIONS
        enhancer.enhance(task_id, "spec", "details")
        task = _task(store, task_id)
        assert task.details == "Refactor the login form to validate email format before submit."
        assert task.original_text == "users cant log in"

    def test_original_text_captured_once(self, enhancer, store, task_id, mock_genai_client):
        enhancer.enhance(task_id)
        mock_genai_client.models.generate_content.return_value.text = '"Resolve the login failure"'
        enhancer.enhance(task_id)
        task = _task(store, task_id)
        assert task.title == "Resolve the login failure"
        assert task.original_text == "fix login"

    def test_unknown_task(self, enhancer, mock_genai_client):
        with pytest.raises(NotFoundError):
            enhancer.enhance("task-missing")
        mock_genai_client.models.generate_content.assert_not_called()

    def test_empty_field(self, enhancer, store, list_id, mock_genai_client):
        _, empty_id = store.add_task(list_id)
        with pytest.raises(ValidationError):
            enhancer.enhance(empty_id)

    def test_unsupported_field(self, enhancer, task_id):
        with pytest.raises(ValidationError):
            enhancer.enhance(task_id, field="color")

    def test_failure_leaves_task_untouched(self, enhancer, store, task_id, mock_genai_client):
        mock_genai_client.models.generate_content.side_effect = RuntimeError("down")
        before = store.board
        with pytest.raises(EnhancementFailed):
            enhancer.enhance(task_id)
        assert store.board == before
        assert not enhancer.is_busy(task_id)


class TestBusyGuard:
    def test_second_enhancement_rejected_while_in_flight(self, enhancer, store, task_id, mock_genai_client):
        started = threading.Event()
        release = threading.Event()

        def slow_generate(**kwargs):
            started.set()
            release.wait(5)
            return mock_genai_client.models.generate_content.return_value

        mock_genai_client.models.generate_content.side_effect = slow_generate
        worker = threading.Thread(target=enhancer.enhance, args=(task_id,))
        worker.start()
        try:
            assert started.wait(5)
            assert enhancer.is_busy(task_id)
            assert task_id in enhancer.busy_task_ids
            with pytest.raises(TaskBusyError):
                enhancer.enhance(task_id)
        finally:
            release.set()
            worker.join(5)
        assert not enhancer.is_busy(task_id)

    def test_store_stays_editable_and_late_result_dropped(self, enhancer, store, list_id, task_id, mock_genai_client):
        started = threading.Event()
        release = threading.Event()

        def slow_generate(**kwargs):
            started.set()
            release.wait(5)
            return mock_genai_client.models.generate_content.return_value

        mock_genai_client.models.generate_content.side_effect = slow_generate
        worker = threading.Thread(target=enhancer.enhance, args=(task_id,))
        worker.start()
        assert started.wait(5)
        store.delete_task(list_id, task_id)
        release.set()
        worker.join(5)
        assert store.board.all_tasks() == []

    def test_result_follows_task_moved_to_other_list(self, enhancer, store, list_id, task_id, mock_genai_client):
        from taskflow.services.drag import transfer_task

        other = store.add_list().lists[-1].id
        started = threading.Event()
        release = threading.Event()

        def slow_generate(**kwargs):
            started.set()
            release.wait(5)
            return mock_genai_client.models.generate_content.return_value

        mock_genai_client.models.generate_content.side_effect = slow_generate
        worker = threading.Thread(target=enhancer.enhance, args=(task_id,))
        worker.start()
        assert started.wait(5)
        store.apply(transfer_task, task_id, other)
        release.set()
        worker.join(5)
        assert store.board.find_list(other).tasks[0].title == "Fix the login bug"
