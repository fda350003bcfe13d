import json

from taskflow.models.board import Board, Task, TaskColor, TaskList
from taskflow.services.board import BoardStore
from taskflow.storage import BoardStorage


def _board() -> Board:
    return Board(lists=[
        TaskList(id="l1", title="To Do", is_urgent=True, tasks=[
            Task(id="t1", title="Ship", color=TaskColor.GREEN, time_spent=42, is_running=True),
        ]),
    ])


class TestLoad:
    def test_missing_file(self, tmp_path):
        assert BoardStorage(tmp_path / "board.json").load() is None

    def test_missing_key(self, tmp_path):
        path = tmp_path / "board.json"
        path.write_text(json.dumps({"something-else": {}}))
        assert BoardStorage(path).load() is None

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "board.json"
        path.write_text("{not json")
        assert BoardStorage(path).load() is None

    def test_schema_mismatch(self, tmp_path):
        path = tmp_path / "board.json"
        path.write_text(json.dumps({"taskflow-board": {"lists": [{"title": "no id"}]}}))
        assert BoardStorage(path).load() is None

    def test_malformed_state_falls_back_to_default_board(self, tmp_path):
        path = tmp_path / "board.json"
        path.write_text(json.dumps({"taskflow-board": {"lists": "nope"}}))
        store = BoardStore(BoardStorage(path))
        assert len(store.board.lists) == 1
        assert store.board.lists[0].title == "To Do"

    def test_undecodable_bytes_fall_back_to_default_board(self, tmp_path):
        path = tmp_path / "board.json"
        path.write_bytes(b'{"taskflow-board": "\xff\xfe"}')
        assert BoardStorage(path).load() is None
        store = BoardStore(BoardStorage(path))
        assert [lst.title for lst in store.board.lists] == ["To Do"]

    def test_finished_task_loads_stopped(self, tmp_path):
        path = tmp_path / "board.json"
        path.write_text(json.dumps({"taskflow-board": {"lists": [
            {"id": "l1", "title": "To Do", "tasks": [{"id": "t", "isRunning": True, "isFinished": True}]},
        ]}}))
        task = BoardStorage(path).load().lists[0].tasks[0]
        assert task.is_finished is True
        assert task.is_running is False


class TestSave:
    def test_round_trip(self, tmp_path):
        storage = BoardStorage(tmp_path / "board.json")
        storage.save(_board())
        assert storage.load() == _board()

    def test_camel_case_document_under_key(self, tmp_path):
        path = tmp_path / "board.json"
        BoardStorage(path, key="my-board").save(_board())
        data = json.loads(path.read_text())
        task = data["my-board"]["lists"][0]["tasks"][0]
        assert task["timeSpent"] == 42
        assert task["isRunning"] is True
        assert task["color"] == "green"
        assert data["my-board"]["lists"][0]["isUrgent"] is True

    def test_preserves_other_keys(self, tmp_path):
        path = tmp_path / "board.json"
        path.write_text(json.dumps({"theme": "dark"}))
        BoardStorage(path).save(_board())
        data = json.loads(path.read_text())
        assert data["theme"] == "dark"
        assert "taskflow-board" in data

    def test_overwrites_in_full(self, tmp_path):
        storage = BoardStorage(tmp_path / "board.json")
        storage.save(_board())
        storage.save(Board())
        assert storage.load() == Board()
        assert not list(tmp_path.glob("*.tmp"))

    def test_overwrites_undecodable_file(self, tmp_path):
        path = tmp_path / "board.json"
        path.write_bytes(b"\xff\xfe garbage")
        storage = BoardStorage(path)
        storage.save(_board())
        assert storage.load() == _board()
