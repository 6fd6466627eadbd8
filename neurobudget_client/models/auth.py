"""
Authentication and session models.
"""
from typing import Optional, Union

from pydantic import ConfigDict, EmailStr, Field, validator

from ..utils.constants import (
    REFRESH_TOKEN_KEY,
    TOKEN_KEY,
    USER_EMAIL_KEY,
    USER_ID_KEY,
    USER_NAME_KEY,
)
from .base import ApiModel, RequestModel


def _join_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    return f"{first_name or ''} {last_name or ''}".strip()


class Session(ApiModel):
    """Persisted session: tokens plus the cached user identity."""

    access_token: Optional[str] = Field(None, alias=TOKEN_KEY)
    refresh_token: Optional[str] = Field(None, alias=REFRESH_TOKEN_KEY)
    user_id: Optional[str] = Field(None, alias=USER_ID_KEY)
    email: Optional[str] = Field(None, alias=USER_EMAIL_KEY)
    display_name: Optional[str] = Field(None, alias=USER_NAME_KEY)

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @validator("user_id", pre=True)
    def coerce_user_id(cls, v):
        """The backend sends numeric ids; storage keeps strings."""
        return None if v is None else str(v)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def to_storage(self) -> dict:
        """Storage document with only the fields that are present."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CurrentUser(ApiModel):
    """Identity of the signed-in user as shown by the UI."""

    user_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @validator("user_id", pre=True)
    def coerce_user_id(cls, v):
        return None if v is None else str(v)

    @classmethod
    def from_session(cls, session: Session) -> "CurrentUser":
        return cls(user_id=session.user_id, email=session.email, name=session.display_name)


class LoginRequest(RequestModel):
    """Login request with email/password."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(RequestModel):
    """User registration request."""
    email: EmailStr
    password: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class RefreshTokenRequest(RequestModel):
    """Token refresh request."""
    refresh_token: str = Field(..., min_length=1)


class AuthResponse(ApiModel):
    """Token pair and identity returned by login, register and refresh."""

    token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)
    user_id: Optional[Union[int, str]] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None

    @property
    def full_name(self) -> str:
        return _join_name(self.first_name, self.last_name)

    def to_session(
        self,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None
    ) -> Session:
        """Build the session to persist, preferring the caller's own values for identity fields."""
        name = _join_name(first_name or self.first_name, last_name or self.last_name)
        return Session(
            access_token=self.token,
            refresh_token=self.refresh_token,
            user_id=self.user_id,
            email=email or self.email,
            display_name=name or None,
        )
