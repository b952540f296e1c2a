from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime, timezone
from typing import Optional
import logging

from group_polls.db.database import get_db
from group_polls.models.polls import Poll
from group_polls.schemas.poll import PollCreate, PollRead, VoteRequest, PollDeleteResponse
from group_polls.schemas.common import PaginatedResponse
from group_polls.services import polls as poll_service
from group_polls.core.exception import DomainError
from group_polls.api.v1.endpoints.dependencies import (
    get_current_username,
    require_admin,
    require_member,
    database_error,
)
from group_polls.api.v1.utils.pagination import (
    PaginationParams,
    get_pagination_params,
    create_paginated_response,
    paginate_query
)

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/polls", tags=["polls"])


@router.post(
    "",
    response_model=PollRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new poll",
    description="Create an open poll with 2-5 options in the group the caller administers.",
    dependencies=[Depends(require_admin)]
)
def create_poll(
    poll: PollCreate,
    db: Session = Depends(get_db),
    username: str = Depends(get_current_username)
):
    try:
        logger.info(f"'{username}' attempting to create poll in group {poll.group_id}: '{poll.question}'")
        created = poll_service.add_poll(db, username, poll.group_id, poll.question, poll.options)
        return PollRead.model_validate(created)
    except DomainError as e:
        logger.warning(f"Poll creation failed for '{username}': {e.message}")
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "poll creation", e)


@router.get(
    "",
    response_model=PaginatedResponse[PollRead],
    summary="Get paginated list of a group's polls",
    description="Polls of one group, newest first.",
    dependencies=[Depends(require_member)]
)
def get_polls(
    group_id: int = Query(..., gt=0, description="Group whose polls to list"),
    search: Optional[str] = Query(None, description="Search in poll questions"),
    pagination: PaginationParams = Depends(get_pagination_params),
    db: Session = Depends(get_db)
):
    """
    Get paginated list of polls for a group.

    - **group_id**: Group whose polls to list
    - **page**: Page number (starts from 1)
    - **size**: Number of polls per page (1-100)
    - **search**: Search text in poll questions (case-insensitive)
    """
    try:
        polls, total = paginate_query(
            poll_service.polls_by_group_query(db, group_id),
            pagination,
            search_term=search,
            search_fields=[Poll.question] if search else None
        )
        return create_paginated_response(
            [PollRead.model_validate(poll) for poll in polls],
            total,
            pagination
        )
    except DomainError as e:
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, f"poll listing for group {group_id}", e)


@router.get(
    "/{poll_id}",
    response_model=PollRead,
    summary="Get a poll",
    dependencies=[Depends(require_member)]
)
def get_poll(poll_id: int, db: Session = Depends(get_db)):
    try:
        return PollRead.model_validate(poll_service.get_poll(db, poll_id))
    except DomainError as e:
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, f"poll {poll_id} retrieval", e)


@router.patch(
    "/{poll_id}/vote",
    response_model=PollRead,
    summary="Vote on a poll",
    description="Cast the caller's single vote. The caller must belong to the poll's group and the poll must be open.",
    dependencies=[Depends(require_member)]
)
def vote_poll(
    poll_id: int,
    vote: VoteRequest,
    db: Session = Depends(get_db),
    username: str = Depends(get_current_username)
):
    """
    Vote for one option of a poll.

    Returns the poll with updated counts. A second vote on the same poll, for
    any option, is rejected with 409.
    """
    try:
        logger.info(f"Vote attempt: poll {poll_id}, option {vote.option_id}, user '{username}'")
        return PollRead.model_validate(poll_service.cast_vote(db, poll_id, vote.option_id, username))
    except DomainError as e:
        logger.warning(f"Vote rejected on poll {poll_id} for '{username}': {e.message}")
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "vote", e)


@router.patch(
    "/{poll_id}/close",
    response_model=PollRead,
    summary="Close a poll",
    dependencies=[Depends(require_admin)]
)
def close_poll(
    poll_id: int,
    db: Session = Depends(get_db),
    username: str = Depends(get_current_username)
):
    """Close a poll of the caller's group. Closing a closed poll is a no-op."""
    try:
        return PollRead.model_validate(poll_service.close_poll(db, poll_id, username))
    except DomainError as e:
        logger.warning(f"Poll {poll_id} close failed for '{username}': {e.message}")
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "poll close", e)


@router.delete(
    "/{poll_id}",
    response_model=PollDeleteResponse,
    summary="Delete a poll",
    description="Delete a poll of the caller's group. Polls that already have votes cannot be deleted.",
    dependencies=[Depends(require_admin)]
)
def delete_poll(
    poll_id: int,
    db: Session = Depends(get_db),
    username: str = Depends(get_current_username)
):
    try:
        logger.info(f"Poll deletion attempt: poll {poll_id} by '{username}'")
        poll_service.remove_poll(db, poll_id, username)
        return PollDeleteResponse(
            message="Poll deleted successfully",
            poll_id=poll_id,
            timestamp=datetime.now(timezone.utc).isoformat()
        )
    except DomainError as e:
        logger.warning(f"Poll {poll_id} deletion failed for '{username}': {e.message}")
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "poll deletion", e)
