"""Pydantic models for session state."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class AuthState(str, Enum):
    """Whether the page in the active session is logged in."""

    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class SessionStatus(BaseModel):
    """Current state of the browser session."""

    is_running: bool = False
    auth_state: AuthState = AuthState.UNKNOWN
    url: Optional[str] = None
