from enum import Enum
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from group_polls.db.database import Base


class Role(str, Enum):
    ADMIN = "Admin"
    USER = "User"


# Define the User model
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, default=Role.USER.value, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Owning group (admin or plain member); admin status lives on Group.admin_id
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="SET NULL"), nullable=True, index=True)

    group = relationship("Group", back_populates="members", foreign_keys=[group_id], post_update=True)
    administered_group = relationship(
        "Group",
        back_populates="admin",
        foreign_keys="Group.admin_id",
        uselist=False
    )
    votes = relationship("Vote", back_populates="user")
    revoked_tokens = relationship("RevokedToken", back_populates="user", cascade="all, delete-orphan")


class RevokedToken(Base):
    """One entry of a user's token blacklist."""
    __tablename__ = "revoked_tokens"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, ForeignKey("users.username"), nullable=False, index=True)
    token = Column(String, nullable=False)
    revoked_at = Column(DateTime, default=func.now(), nullable=False)

    user = relationship("User", back_populates="revoked_tokens")

    # Revoking the same token twice must not create a second row
    __table_args__ = (
        UniqueConstraint('username', 'token', name='unique_revoked_token_per_user'),
    )
