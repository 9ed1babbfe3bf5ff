"""Task endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status

from src.domain.create_models import TaskCreate
from src.domain.task import Task
from src.domain.update_models import ReorderRequest, TaskMove, TaskUpdate
from src.interface.dependencies import get_current_user_id
from src.services import task_service
from src.services.task_service import SearchDateFilter


router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("")
async def list_tasks(task_date: date = Query(..., alias="date"), user_id: str = Depends(get_current_user_id)) -> list[Task]:
    """Tasks of one date in day view order."""
    return await task_service.list_tasks_for_date(user_id=user_id, task_date=task_date)


@router.get("/search")
async def search_tasks(
    q: str = Query(default=""),
    range_: SearchDateFilter = Query(default=SearchDateFilter.ALL, alias="range"),
    user_id: str = Depends(get_current_user_id),
) -> list[Task]:
    """Search tasks by title or memo."""
    return await task_service.search_tasks(user_id=user_id, query=q, date_filter=range_)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(task: TaskCreate, user_id: str = Depends(get_current_user_id)) -> Task:
    """Create a task."""
    return await task_service.create_task(user_id=user_id, task=task)


@router.post("/reorder")
async def reorder_tasks(body: ReorderRequest, user_id: str = Depends(get_current_user_id)) -> list[Task]:
    """Persist a dragged order."""
    return await task_service.reorder_tasks(user_id=user_id, task_ids=body.ids)


@router.get("/{task_id}")
async def get_task(task_id: str, user_id: str = Depends(get_current_user_id)) -> Task:
    """Fetch one task."""
    return await task_service.get_task(task_id=task_id, user_id=user_id)


@router.patch("/{task_id}")
async def update_task(task_id: str, update: TaskUpdate, user_id: str = Depends(get_current_user_id)) -> Task:
    """Apply a partial update."""
    return await task_service.update_task(task_id=task_id, user_id=user_id, update=update)


@router.post("/{task_id}/toggle")
async def toggle_task(task_id: str, user_id: str = Depends(get_current_user_id)) -> Task:
    """Flip completion."""
    return await task_service.toggle_complete(task_id=task_id, user_id=user_id)


@router.post("/{task_id}/move")
async def move_task(task_id: str, body: TaskMove, user_id: str = Depends(get_current_user_id)) -> Task:
    """Move a task to another date."""
    return await task_service.move_task(task_id=task_id, user_id=user_id, new_date=body.task_date)


@router.post("/{task_id}/move-to-tomorrow")
async def move_task_to_tomorrow(task_id: str, user_id: str = Depends(get_current_user_id)) -> Task:
    """Push a task one day later."""
    return await task_service.move_to_tomorrow(task_id=task_id, user_id=user_id)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, user_id: str = Depends(get_current_user_id)) -> Response:
    """Delete a task."""
    await task_service.delete_task(task_id=task_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
