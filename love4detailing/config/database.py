"""
Draft persistence configuration.
"""

from typing import Optional

from pydantic import BaseModel

from .settings import Settings, get_settings


class DatabaseConfig(BaseModel):
    """Database configuration settings."""

    state_db_path: str = "booking_state.db"
    session_expiry_seconds: int = 30 * 60

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DatabaseConfig":
        settings = settings or get_settings()
        return cls(
            state_db_path=settings.state_db_path,
            session_expiry_seconds=settings.session_expiry_seconds,
        )
