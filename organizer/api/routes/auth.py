from fastapi import APIRouter, Depends

from organizer.schemas.auth import CurrentUserResponse
from organizer.services.auth_service import require_current_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserResponse)
def get_me(
    current_user: CurrentUserResponse = Depends(require_current_user),
) -> CurrentUserResponse:
    return current_user
