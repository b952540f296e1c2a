from pydantic import BaseModel, Field, field_validator, ConfigDict
from datetime import datetime
from typing import List

from group_polls.core.constants import BusinessLimits


# Schema for creating a new poll
class PollCreate(BaseModel):
    group_id: int = Field(..., gt=0, description="Group the poll belongs to")
    question: str = Field(
        ...,
        min_length=1,
        max_length=BusinessLimits.MAX_QUESTION_LENGTH,
        json_schema_extra={"example": "Color?"}
    )
    options: List[str] = Field(
        ...,
        min_length=BusinessLimits.MIN_POLL_OPTIONS,
        max_length=BusinessLimits.MAX_POLL_OPTIONS,
        description=f"{BusinessLimits.MIN_POLL_OPTIONS}-{BusinessLimits.MAX_POLL_OPTIONS} options",
        json_schema_extra={"example": ["Red", "Blue"]}
    )

    @field_validator('question')
    def validate_question(cls, v):
        v = ' '.join(v.split())
        if not v:
            raise ValueError('Question cannot be empty or just whitespace')
        return v

    @field_validator('options')
    def validate_options(cls, v):
        for option in v:
            if len(option.strip()) > BusinessLimits.MAX_POLL_OPTION_LENGTH:
                raise ValueError(
                    f'Each option must be at most {BusinessLimits.MAX_POLL_OPTION_LENGTH} characters long'
                )
        return v


class VoteRequest(BaseModel):
    option_id: int = Field(..., gt=0)


# Schema for reading poll data
class PollOptionRead(BaseModel):
    id: int
    option_text: str
    number_of_votes: int = Field(default=0, description="Number of votes for this option")

    model_config = ConfigDict(from_attributes=True)


class PollRead(BaseModel):
    id: int
    question: str
    is_open: bool
    group_id: int
    created_at: datetime
    options: List[PollOptionRead] = []

    model_config = ConfigDict(from_attributes=True)


class PollDeleteResponse(BaseModel):
    message: str
    poll_id: int
    timestamp: str
