"""
Group membership engine.

Invariants: a group has exactly one admin, fixed at creation; a user
administers at most one group; a user belongs to at most one group. Attach
and detach are conditional UPDATEs, so the row count decides who wins a race.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from group_polls.models.user import User, Role
from group_polls.models.group import Group
from group_polls.core.constants import ErrorMessages
from group_polls.core.exception import ConflictError, NotFoundError, ForbiddenError, BadRequestError
from group_polls.services import credentials

logger = logging.getLogger(__name__)


def get_group(db: Session, group_id: int) -> Group:
    group = db.query(Group).filter(Group.id == group_id).first()
    if group is None:
        raise NotFoundError(ErrorMessages.GROUP_NOT_FOUND, group_id=group_id)
    return group


def find_by_admin_username(db: Session, admin_username: str) -> Optional[Group]:
    return db.query(Group).join(Group.admin).filter(User.username == admin_username).first()


def require_administered_group(db: Session, admin_username: str, group_id: Optional[int] = None) -> Group:
    """
    The group the user administers, checked against group_id when given.

    Raises:
        NotFoundError: the user administers no group
        ForbiddenError: the administered group is not group_id
    """
    group = find_by_admin_username(db, admin_username)
    if group is None:
        raise NotFoundError(ErrorMessages.ADMIN_HAS_NO_GROUP, username=admin_username)
    if group_id is not None and group.id != group_id:
        logger.warning(f"'{admin_username}' (admin of group {group.id}) acted on group {group_id}")
        raise ForbiddenError(ErrorMessages.NOT_GROUP_ADMIN, group_id=group_id)
    return group


def create_group(db: Session, admin_username: str, group_name: str) -> Group:
    """
    Create a group administered by admin_username.

    The group row, the admin's group reference and the admin's role promotion
    commit together or not at all.
    """
    admin = credentials.require_user(db, admin_username)

    if find_by_admin_username(db, admin_username) is not None:
        raise ConflictError(ErrorMessages.ALREADY_ADMIN, username=admin_username)
    if admin.group_id is not None:
        raise ConflictError(ErrorMessages.ALREADY_IN_GROUP, username=admin_username, group_id=admin.group_id)

    group = Group(group_name=group_name, admin_id=admin.id)
    db.add(group)
    try:
        db.flush()
        attached = db.query(User).filter(
            User.id == admin.id,
            User.group_id.is_(None)
        ).update(
            {User.group_id: group.id, User.role: Role.ADMIN.value},
            synchronize_session=False
        )
        if attached != 1:
            db.rollback()
            raise ConflictError(ErrorMessages.ALREADY_IN_GROUP, username=admin_username)
        db.commit()
    except IntegrityError:
        # unique admin_id: a concurrent create_group for the same admin won
        db.rollback()
        raise ConflictError(ErrorMessages.ALREADY_ADMIN, username=admin_username)

    db.refresh(group)
    db.refresh(admin)
    logger.info(f"Group created: ID {group.id}, name '{group.group_name}', admin '{admin_username}'")
    return group


def add_member(db: Session, new_username: str, acting_admin_username: str, group_id: int) -> User:
    group = require_administered_group(db, acting_admin_username, group_id)
    target = credentials.require_user(db, new_username)

    if find_by_admin_username(db, new_username) is not None:
        raise ConflictError(ErrorMessages.TARGET_IS_ADMIN, username=new_username)
    if target.group_id is not None:
        raise ConflictError(ErrorMessages.ALREADY_IN_GROUP, username=new_username, group_id=target.group_id)

    attached = db.query(User).filter(
        User.id == target.id,
        User.group_id.is_(None)
    ).update({User.group_id: group.id}, synchronize_session=False)
    if attached != 1:
        db.rollback()
        raise ConflictError(ErrorMessages.ALREADY_IN_GROUP, username=new_username)
    db.commit()
    db.refresh(target)

    logger.info(f"User '{new_username}' added to group {group.id} by '{acting_admin_username}'")
    return target


def remove_member(db: Session, target_username: str, acting_admin_username: str, group_id: int) -> User:
    group = require_administered_group(db, acting_admin_username, group_id)
    target = credentials.require_user(db, target_username)

    if target.id == group.admin_id:
        raise BadRequestError(ErrorMessages.CANNOT_REMOVE_ADMIN, username=target_username)
    if target.group_id != group.id:
        raise BadRequestError(ErrorMessages.NOT_A_MEMBER, username=target_username, group_id=group.id)

    detached = db.query(User).filter(
        User.id == target.id,
        User.group_id == group.id
    ).update({User.group_id: None}, synchronize_session=False)
    if detached != 1:
        db.rollback()
        raise BadRequestError(ErrorMessages.NOT_A_MEMBER, username=target_username, group_id=group.id)
    db.commit()
    db.refresh(target)

    logger.info(f"User '{target_username}' removed from group {group.id} by '{acting_admin_username}'")
    return target


def get_members(db: Session, group_id: int) -> List[User]:
    """Members of the group, admin included."""
    get_group(db, group_id)
    return db.query(User).filter(User.group_id == group_id).order_by(User.id).all()
