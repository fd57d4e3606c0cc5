"""Typed views of backend API payloads.

The backend sends ``null`` for unset list and score fields; those are read
as empty lists and a zero score so a single sparse record still renders.
"""

from __future__ import annotations

import math
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Profile(_Payload):
    wallet_address: str | None = None
    name: str | None = None
    title: str | None = None
    company: str | None = None
    bio: str | None = None
    interests: list[str] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)
    reputation: int | None = None
    events_attended: int | None = None
    connections_count: int | None = None

    @field_validator("interests", "goals", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return [] if value is None else value


class Match(_Payload):
    name: str = "Anonymous"
    score: float = 0.0  # 0..1
    title: str | None = None
    company: str | None = None
    common_interests: list[str] = Field(default_factory=list)
    conversation_starter: str | None = None

    @field_validator("common_interests", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return [] if value is None else value

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, value):
        return value or "Anonymous"

    @field_validator("score", mode="before")
    @classmethod
    def default_score(cls, value):
        return 0.0 if value is None else value

    @property
    def score_percent(self) -> int:
        # Halves round up: 0.125 -> 13.
        return math.floor(self.score * 100 + 0.5)


class Event(_Payload):
    id: str | None = None
    name: str = "Untitled event"
    location: str | None = None
    start_date: datetime | None = None
    attendee_count: int | None = None
    match_count: int | None = None

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, value):
        return value or "Untitled event"
