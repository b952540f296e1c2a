from fastapi import APIRouter, Depends
import logging

from group_polls.models.user import User
from group_polls.schemas.user import UserRead
from group_polls.api.v1.endpoints.dependencies import get_current_user

# Setup logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserRead)
def read_users_me(current_user: User = Depends(get_current_user)):
    """Profile of the signed-in user, including current role and group."""
    logger.info(f"Profile retrieval for user ID: {current_user.id}")
    return current_user
