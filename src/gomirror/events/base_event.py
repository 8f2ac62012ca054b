"""Common fields for every emitted event."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BaseEvent(BaseModel):
    """Immutable event payload."""

    model_config = ConfigDict(frozen=True)

    event_type: str = Field(default="base", description="Event type identifier")
    occurred_at: datetime = Field(default_factory=datetime.now)
