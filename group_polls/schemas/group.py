from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List

from group_polls.core.constants import BusinessLimits


class GroupCreate(BaseModel):
    group_name: str = Field(
        ...,
        min_length=BusinessLimits.MIN_GROUP_NAME_LENGTH,
        max_length=BusinessLimits.MAX_GROUP_NAME_LENGTH,
        json_schema_extra={"example": "G1"}
    )

    @field_validator('group_name')
    def validate_group_name(cls, v):
        v = ' '.join(v.split())
        if not v:
            raise ValueError('Group name cannot be empty or just whitespace')
        return v


class GroupRead(BaseModel):
    id: int
    group_name: str
    admin_username: str

    @classmethod
    def from_group(cls, group) -> "GroupRead":
        return cls(id=group.id, group_name=group.group_name, admin_username=group.admin.username)


class MemberAdd(BaseModel):
    username: str = Field(..., min_length=1)


class MemberRead(BaseModel):
    username: str
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class MembershipResponse(BaseModel):
    message: str
    group_id: int
    username: str


class GroupMembersResponse(BaseModel):
    group_id: int
    admin_username: str
    members: List[MemberRead]
