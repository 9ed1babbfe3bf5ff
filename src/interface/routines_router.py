"""Routine endpoints."""

from fastapi import APIRouter, Depends, Response, status

from src.domain.create_models import RoutineCreate
from src.domain.routine import Routine
from src.domain.update_models import RoutineActivation, RoutineUpdate
from src.interface.dependencies import get_current_user_id
from src.services import routine_service


router = APIRouter(prefix="/routines", tags=["routines"])


@router.get("")
async def list_routines(user_id: str = Depends(get_current_user_id)) -> list[Routine]:
    """All routines, newest first."""
    return await routine_service.list_routines(user_id=user_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_routine(routine: RoutineCreate, user_id: str = Depends(get_current_user_id)) -> Routine:
    """Create an active routine."""
    return await routine_service.create_routine(user_id=user_id, routine=routine)


@router.get("/{routine_id}")
async def get_routine(routine_id: str, user_id: str = Depends(get_current_user_id)) -> Routine:
    return await routine_service.get_routine(routine_id=routine_id, user_id=user_id)


@router.patch("/{routine_id}")
async def update_routine(
    routine_id: str, update: RoutineUpdate, user_id: str = Depends(get_current_user_id)
) -> Routine:
    return await routine_service.update_routine(routine_id=routine_id, user_id=user_id, update=update)


@router.post("/{routine_id}/active")
async def set_routine_active(
    routine_id: str, body: RoutineActivation, user_id: str = Depends(get_current_user_id)
) -> Routine:
    """Pause or resume a routine."""
    return await routine_service.set_routine_active(routine_id=routine_id, user_id=user_id, is_active=body.is_active)


@router.delete("/{routine_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_routine(routine_id: str, user_id: str = Depends(get_current_user_id)) -> Response:
    """Delete a routine; its generated tasks stay."""
    await routine_service.delete_routine(routine_id=routine_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
