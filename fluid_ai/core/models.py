"""Core data models for FluidAI."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class LayerKey(str, Enum):
    """The four fixed analytical layers, in canonical order."""

    MEANING = "meaning"
    EMOTION = "emotion"
    LOGIC = "logic"
    CONTEXT = "context"

    @classmethod
    def parse(cls, value: object) -> LayerKey | None:
        """Return the layer named by ``value`` or None if it names no layer."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (TypeError, ValueError):
            return None


LAYER_KEYS: tuple[LayerKey, ...] = tuple(LayerKey)


class LayerResult(BaseModel):
    """The oracle's analysis of one layer."""

    model_config = ConfigDict(frozen=True)

    content: str
    fluidity: float = Field(ge=0.0, le=1.0)


LayerMap = dict[LayerKey, LayerResult]
AdjustmentSet = dict[LayerKey, float]
RankedEntry = tuple[LayerKey, LayerResult]
RankedList = tuple[RankedEntry, ...]


class AnalysisOutcome(BaseModel):
    """Result of one completed analysis request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    input: str
    layer_maps: LayerMap = Field(alias="layerMaps")
    ranked: RankedList

    @property
    def top_layer(self) -> LayerKey:
        """Layer with the highest adjusted fluidity."""
        return self.ranked[0][0]


class SessionStatus(str, Enum):
    """Request state of a chat session."""

    IDLE = "idle"
    SENDING = "sending"


class RequestOutcome(str, Enum):
    """Terminal outcome of a request."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class UserMessage(BaseModel):
    """Text the user sent."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["user"] = "user"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    text: str
    timestamp: datetime = Field(default_factory=utcnow)


class LoadingMarker(BaseModel):
    """Placeholder shown while a request is in flight."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["loading"] = "loading"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=utcnow)


class AiResult(BaseModel):
    """A completed analysis."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["ai"] = "ai"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    outcome: AnalysisOutcome
    timestamp: datetime = Field(default_factory=utcnow)


class ErrorMessage(BaseModel):
    """A human-readable description of a failed request."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["error"] = "error"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    text: str
    timestamp: datetime = Field(default_factory=utcnow)


ConversationEntry = Annotated[
    Union[UserMessage, LoadingMarker, AiResult, ErrorMessage],
    Field(discriminator="kind"),
]
