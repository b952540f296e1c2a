from group_polls.db.database import Base
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Boolean, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func


# Define Poll model
class Poll(Base):
    __tablename__ = "polls"

    id = Column(Integer, primary_key=True, index=True)
    question = Column(String, nullable=False)
    is_open = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)

    group = relationship("Group", back_populates="polls")
    options = relationship(
        "PollOption",
        back_populates="poll",
        cascade="all, delete-orphan",
        order_by="PollOption.id"
    )

    @property
    def total_votes(self) -> int:
        return sum(option.number_of_votes for option in self.options)


class PollOption(Base):
    __tablename__ = "poll_options"

    id = Column(Integer, primary_key=True, index=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)
    option_text = Column(String, nullable=False)
    number_of_votes = Column(Integer, default=0, nullable=False)

    poll = relationship("Poll", back_populates="options")
    votes = relationship("Vote", back_populates="poll_option")

    __table_args__ = (
        CheckConstraint('number_of_votes >= 0', name='non_negative_vote_count'),
    )


class Vote(Base):
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, index=True)
    poll_id = Column(Integer, ForeignKey("polls.id"), nullable=False, index=True)
    poll_option_id = Column(Integer, ForeignKey("poll_options.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    poll = relationship("Poll")
    poll_option = relationship("PollOption", back_populates="votes")
    user = relationship("User", back_populates="votes")

    # Exactly one vote per user per poll, enforced by the store
    __table_args__ = (
        UniqueConstraint('poll_id', 'user_id', name='unique_user_vote_per_poll'),
    )
