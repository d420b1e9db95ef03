from typing import Annotated
from pydantic import BaseModel, Field, StringConstraints, field_validator

from liftlog.schemas.common import UtcDatetime

UsernameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]

class Credentials(BaseModel):
    username: UsernameStr
    password: Annotated[str, Field(min_length=1, max_length=128)]

class UserSignup(Credentials):
    password: Annotated[str, Field(min_length=8, max_length=128)]

    @field_validator("username")
    @classmethod
    def username_no_spaces(cls, v: str) -> str:
        if any(c.isspace() for c in v):
            raise ValueError("username cannot contain whitespace")
        return v

    @field_validator("password")
    @classmethod
    def password_policy(cls, v: str) -> str:
        if not any(c.isalpha() for c in v):
            raise ValueError("password must include a letter")
        if not any(c.isdigit() for c in v):
            raise ValueError("password must include a digit")
        return v

class UserRead(BaseModel):
    id: int
    username: str

    model_config = {"from_attributes": True}

class UserDetail(UserRead):
    created_at: UtcDatetime | None = None

class AuthResponse(BaseModel):
    user: UserRead
    sessionId: str

class MeResponse(BaseModel):
    user: UserDetail
