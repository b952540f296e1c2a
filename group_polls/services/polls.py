"""
Poll/vote engine.

A poll goes open -> closed and never back. Votes are explicit rows with a
(user, poll) unique constraint; the option counter is bumped by a conditional
UPDATE in the same transaction, so sum(number_of_votes) always equals the
number of vote rows for the poll.
"""

from typing import List, Sequence
from sqlalchemy import select
from sqlalchemy.orm import Session, Query, selectinload
from sqlalchemy.exc import IntegrityError
import logging

from group_polls.models.polls import Poll, PollOption, Vote
from group_polls.core.constants import BusinessLimits, ErrorMessages
from group_polls.core.exception import ConflictError, NotFoundError, ForbiddenError, BadRequestError
from group_polls.services import credentials
from group_polls.services.groups import get_group, require_administered_group

logger = logging.getLogger(__name__)


def _normalize_options(options: Sequence[str]) -> List[str]:
    cleaned = [' '.join(option.split()) for option in options]
    cleaned = [option for option in cleaned if option]

    if not BusinessLimits.MIN_POLL_OPTIONS <= len(cleaned) <= BusinessLimits.MAX_POLL_OPTIONS:
        raise BadRequestError(ErrorMessages.INVALID_OPTION_COUNT, option_count=len(cleaned))
    if len({option.lower() for option in cleaned}) != len(cleaned):
        raise BadRequestError(ErrorMessages.INVALID_OPTION_COUNT, hint="Options must be distinct")
    return cleaned


def get_poll(db: Session, poll_id: int) -> Poll:
    poll = db.query(Poll).options(selectinload(Poll.options)).filter(Poll.id == poll_id).first()
    if poll is None:
        raise NotFoundError(ErrorMessages.POLL_NOT_FOUND, poll_id=poll_id)
    return poll


def _require_poll_admin(db: Session, poll_id: int, admin_username: str) -> Poll:
    poll = get_poll(db, poll_id)
    group = require_administered_group(db, admin_username)
    if poll.group_id != group.id:
        logger.warning(f"'{admin_username}' (admin of group {group.id}) acted on poll {poll_id} of group {poll.group_id}")
        raise ForbiddenError(ErrorMessages.NOT_GROUP_ADMIN, poll_id=poll_id)
    return poll


def add_poll(db: Session, admin_username: str, group_id: int, question: str, options: Sequence[str]) -> Poll:
    group = require_administered_group(db, admin_username, group_id)
    question = " ".join(question.split())
    if not question:
        raise BadRequestError("Question cannot be empty")
    option_texts = _normalize_options(options)

    poll = Poll(question=question, group_id=group.id, is_open=True)
    poll.options = [PollOption(option_text=text, number_of_votes=0) for text in option_texts]
    db.add(poll)
    db.commit()
    db.refresh(poll)

    logger.info(f"Poll created: ID {poll.id}, group {group.id}, {len(option_texts)} options")
    return poll


def cast_vote(db: Session, poll_id: int, option_id: int, username: str) -> Poll:
    poll = get_poll(db, poll_id)
    if not any(option.id == option_id for option in poll.options):
        raise NotFoundError(ErrorMessages.POLL_OPTION_NOT_FOUND, poll_id=poll_id, option_id=option_id)
    if not poll.is_open:
        raise BadRequestError(ErrorMessages.POLL_CLOSED, poll_id=poll_id)

    voter = credentials.require_user(db, username)
    if voter.group_id is None or voter.group_id != poll.group_id:
        logger.warning(f"User '{username}' outside group {poll.group_id} tried to vote on poll {poll_id}")
        raise BadRequestError(ErrorMessages.WRONG_GROUP, poll_id=poll_id)

    if db.query(Vote.id).filter(Vote.poll_id == poll_id, Vote.user_id == voter.id).first() is not None:
        raise ConflictError(ErrorMessages.ALREADY_VOTED, poll_id=poll_id)

    # The unique constraint is the real guard; the check above only gives a cleaner error
    db.add(Vote(poll_id=poll_id, poll_option_id=option_id, user_id=voter.id))
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Concurrent duplicate vote by '{username}' on poll {poll_id}")
        raise ConflictError(ErrorMessages.ALREADY_VOTED, poll_id=poll_id)

    poll_still_open = select(Poll.id).where(Poll.id == poll_id, Poll.is_open.is_(True)).exists()
    counted = db.query(PollOption).filter(
        PollOption.id == option_id,
        PollOption.poll_id == poll_id,
        poll_still_open
    ).update(
        {PollOption.number_of_votes: PollOption.number_of_votes + 1},
        synchronize_session=False
    )
    if counted != 1:
        # Closed or deleted between the checks and the increment
        db.rollback()
        raise BadRequestError(ErrorMessages.POLL_CLOSED, poll_id=poll_id)
    db.commit()

    logger.info(f"Vote recorded: poll {poll_id}, option {option_id}, user '{username}'")
    return get_poll(db, poll_id)


def close_poll(db: Session, poll_id: int, admin_username: str) -> Poll:
    poll = _require_poll_admin(db, poll_id, admin_username)
    if poll.is_open:
        db.query(Poll).filter(Poll.id == poll_id).update({Poll.is_open: False}, synchronize_session=False)
        db.commit()
        logger.info(f"Poll {poll_id} closed by '{admin_username}'")
    return get_poll(db, poll_id)


def remove_poll(db: Session, poll_id: int, admin_username: str) -> None:
    poll = _require_poll_admin(db, poll_id, admin_username)
    if any(option.number_of_votes > 0 for option in poll.options):
        raise BadRequestError(ErrorMessages.POLL_HAS_VOTES, poll_id=poll_id)

    has_no_votes = ~select(Vote.id).where(Vote.poll_id == poll_id).exists()
    db.query(PollOption).filter(
        PollOption.poll_id == poll_id,
        has_no_votes
    ).delete(synchronize_session=False)
    deleted = db.query(Poll).filter(Poll.id == poll_id, has_no_votes).delete(synchronize_session=False)
    if deleted != 1:
        # A vote landed after the check above
        db.rollback()
        raise BadRequestError(ErrorMessages.POLL_HAS_VOTES, poll_id=poll_id)
    db.commit()

    logger.info(f"Poll {poll_id} removed by '{admin_username}'")


def polls_by_group_query(db: Session, group_id: int) -> Query:
    """Newest-first poll query for a group, for callers that page or filter it. Raises NotFoundError for an unknown group."""
    get_group(db, group_id)
    return (
        db.query(Poll)
        .options(selectinload(Poll.options))
        .filter(Poll.group_id == group_id)
        .order_by(Poll.created_at.desc(), Poll.id.desc())
    )


def get_polls_by_group(db: Session, group_id: int) -> List[Poll]:
    """Every poll of the group, unpaged."""
    return polls_by_group_query(db, group_id).all()
