from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_BOARD_LIST_TITLE = "To Do"
NEW_LIST_TITLE = "New List"


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire and on disk."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskColor(str, Enum):
    PURPLE = "purple"
    BLUE = "blue"
    GREEN = "green"
    ORANGE = "orange"
    RED = "red"
    PINK = "pink"


class Task(CamelModel):
    id: str
    title: str = ""
    details: str = ""
    original_text: str | None = None
    color: TaskColor | None = None
    time_spent: int = Field(default=0, ge=0)
    is_running: bool = False
    is_finished: bool = False

    @model_validator(mode="after")
    def _finished_tasks_do_not_run(self) -> "Task":
        if self.is_finished:
            self.is_running = False
        return self


class TaskList(CamelModel):
    id: str
    title: str = NEW_LIST_TITLE
    tasks: list[Task] = Field(default_factory=list)
    is_important: bool = False
    is_urgent: bool = False

    def find_task(self, task_id: str) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def index_of(self, task_id: str) -> int:
        """Position of the task in this list, or -1."""
        for i, task in enumerate(self.tasks):
            if task.id == task_id:
                return i
        return -1


class Board(CamelModel):
    lists: list[TaskList] = Field(default_factory=list)

    def find_list(self, list_id: str) -> TaskList | None:
        return next((lst for lst in self.lists if lst.id == list_id), None)

    def list_index(self, list_id: str) -> int:
        for i, task_list in enumerate(self.lists):
            if task_list.id == list_id:
                return i
        return -1

    def list_containing(self, task_id: str) -> TaskList | None:
        """The list whose task sequence holds task_id."""
        return next((lst for lst in self.lists if lst.find_task(task_id) is not None), None)

    def resolve_list(self, item_id: str) -> TaskList | None:
        """Resolve a list id, or a task id to the list containing it."""
        return self.find_list(item_id) or self.list_containing(item_id)

    def all_tasks(self) -> list[Task]:
        return [task for task_list in self.lists for task in task_list.tasks]


class TaskPatch(CamelModel):
    """Partial task update. Only fields explicitly set are applied."""

    title: str = ""
    details: str = ""
    original_text: str | None = None
    color: TaskColor | None = None
    time_spent: int = Field(default=0, ge=0)
    is_running: bool = False
    is_finished: bool = False


class ListPatch(CamelModel):
    title: str = NEW_LIST_TITLE
    is_important: bool = False
    is_urgent: bool = False


class CreatedTask(CamelModel):
    task_id: str | None
    board: Board
