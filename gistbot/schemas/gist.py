from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


GIST_ID_MAX_LENGTH = 64


class Gist(BaseModel):
    """A stored snippet. Immutable once built; gists are only ever created or deleted."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, max_length=GIST_ID_MAX_LENGTH, pattern=r"^[A-Za-z0-9]+$")
    content: str
    sent_by: int
    sent_at_unix_time: int
    language: Optional[str] = None
    is_ephemeral: bool
