"""Request bodies and small response envelopes of the HTTP API.

Bodies accept camelCase (``projectId``) as well as snake_case field names.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Body(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class RegisterRequest(_Body):
    # Plain str: a malformed address is a 400 from the service, not a 422.
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=1, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=200)


class LoginRequest(_Body):
    email: str
    password: str


class CreateProjectRequest(_Body):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""


class InviteMemberRequest(_Body):
    project_id: uuid.UUID
    email: str = Field(..., max_length=254)


class TransferLeadershipRequest(_Body):
    project_id: uuid.UUID
    new_leader_user_id: uuid.UUID


class CreateTaskRequest(_Body):
    project_id: uuid.UUID
    assigned_to_user_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    deadline: datetime


class CreateSubscriptionRequest(_Body):
    project_id: uuid.UUID
    package_name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    duration_months: int = Field(default=1, ge=1, le=120)


class MessageResponse(BaseModel):
    message: str


class DeadlineCheckResponse(BaseModel):
    message: str
    warned: int


__all__ = [
    "CreateProjectRequest",
    "CreateSubscriptionRequest",
    "CreateTaskRequest",
    "DeadlineCheckResponse",
    "InviteMemberRequest",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "TransferLeadershipRequest",
]
