from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from group_polls.db.database import get_db
from group_polls.schemas.group import (
    GroupCreate,
    GroupRead,
    MemberAdd,
    MemberRead,
    MembershipResponse,
    GroupMembersResponse,
)
from group_polls.services import groups as group_service
from group_polls.core.exception import DomainError
from group_polls.api.v1.endpoints.dependencies import (
    get_current_username,
    require_admin,
    require_member,
    database_error,
)

# Setup logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("", response_model=GroupRead, status_code=status.HTTP_201_CREATED)
def create_group(
    group: GroupCreate,
    db: Session = Depends(get_db),
    username: str = Depends(get_current_username)
):
    """
    Create a group administered by the caller.

    The caller is promoted to Admin and becomes the group's first member. A
    user can administer only one group, ever.
    """
    try:
        logger.info(f"Group creation attempt by '{username}': '{group.group_name}'")
        created = group_service.create_group(db, username, group.group_name)
        return GroupRead.from_group(created)
    except DomainError as e:
        logger.warning(f"Group creation failed for '{username}': {e.message}")
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "group creation", e)


@router.get("/{group_id}", response_model=GroupRead, dependencies=[Depends(require_member)])
def get_group(group_id: int, db: Session = Depends(get_db)):
    try:
        return GroupRead.from_group(group_service.get_group(db, group_id))
    except DomainError as e:
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, f"group {group_id} retrieval", e)


@router.get("/{group_id}/members", response_model=GroupMembersResponse, dependencies=[Depends(require_member)])
def get_group_members(group_id: int, db: Session = Depends(get_db)):
    """Members of a group, admin included."""
    try:
        group = group_service.get_group(db, group_id)
        members = group_service.get_members(db, group_id)
        return GroupMembersResponse(
            group_id=group.id,
            admin_username=group.admin.username,
            members=[MemberRead.model_validate(member) for member in members]
        )
    except DomainError as e:
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, f"group {group_id} member listing", e)


@router.post(
    "/{group_id}/members",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)]
)
def add_group_member(
    group_id: int,
    member: MemberAdd,
    db: Session = Depends(get_db),
    username: str = Depends(get_current_username)
):
    """
    Add a user to the caller's group.

    Fails with 403 if the caller does not administer this group and 409 if
    the user already belongs to a group.
    """
    try:
        logger.info(f"Member add attempt: '{member.username}' to group {group_id} by '{username}'")
        added = group_service.add_member(db, member.username, username, group_id)
        return MembershipResponse(message="Member added", group_id=group_id, username=added.username)
    except DomainError as e:
        logger.warning(f"Member add failed for '{member.username}' in group {group_id}: {e.message}")
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "member add", e)


@router.delete(
    "/{group_id}/members/{member_username}",
    response_model=MembershipResponse,
    dependencies=[Depends(require_admin)]
)
def remove_group_member(
    group_id: int,
    member_username: str,
    db: Session = Depends(get_db),
    username: str = Depends(get_current_username)
):
    """Remove a member from the caller's group. The admin cannot be removed."""
    try:
        logger.info(f"Member removal attempt: '{member_username}' from group {group_id} by '{username}'")
        removed = group_service.remove_member(db, member_username, username, group_id)
        return MembershipResponse(message="Member removed", group_id=group_id, username=removed.username)
    except DomainError as e:
        logger.warning(f"Member removal failed for '{member_username}' in group {group_id}: {e.message}")
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "member removal", e)
