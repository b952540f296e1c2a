from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from group_polls.db.database import Base


class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    group_name = Column(String, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Exactly one admin per group, and a user administers at most one group
    admin_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    admin = relationship("User", back_populates="administered_group", foreign_keys=[admin_id])
    members = relationship(
        "User",
        back_populates="group",
        foreign_keys="User.group_id",
        order_by="User.id"
    )
    polls = relationship("Poll", back_populates="group", order_by="Poll.id")
