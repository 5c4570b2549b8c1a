from pydantic import BaseModel, Field


class TaskListSummary(BaseModel):
    id: str | None = None
    title: str | None = None
    updated: str | None = None


class TaskListsResponse(BaseModel):
    task_lists: list[TaskListSummary] = Field(default_factory=list)


class GoogleTask(BaseModel):
    id: str | None = None
    title: str | None = None
    notes: str | None = None
    status: str = "needsAction"
    due: str | None = None
    completed: str | None = None
    updated: str | None = None
    position: str | None = None
    task_list_id: str


class TasksResponse(BaseModel):
    tasks: list[GoogleTask] = Field(default_factory=list)


class TaskResponse(BaseModel):
    task: GoogleTask


class TaskCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    notes: str | None = None
    due: str | None = None


class TaskUpdateRequest(BaseModel):
    title: str | None = None
    notes: str | None = None
    status: str | None = None
    due: str | None = None


class TaskDeleteResponse(BaseModel):
    success: bool = True
