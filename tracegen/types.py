"""Core type definitions for tracegen: parameters, styles and errors."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CommunicationStyle(str, Enum):
    """Policies governing which class is called next during simulation."""

    TRUE_RANDOM = "true_random"
    COHESIVE = "cohesive"
    RANDOM_EXIT = "random_exit"


class _Parameters(BaseModel):
    """Accepts both snake_case and camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class AppGenerationParameters(_Parameters):
    """Size and shape parameters for landscape generation.

    Every application generated with one parameter object shares these
    values. The seed, when given, is applied once before all apps are built.
    """

    app_count: int = Field(default=1, ge=1)
    package_depth: int = Field(default=3, ge=0)
    min_class_count: int = Field(default=5, ge=1)
    max_class_count: int = Field(default=20, ge=1)
    min_method_count: int = Field(default=1, ge=1)
    max_method_count: int = Field(default=5, ge=1)
    balance: float = Field(default=0.5, ge=0.0, le=1.0)
    seed: int | None = None

    @model_validator(mode="after")
    def _ranges_are_ordered(self) -> AppGenerationParameters:
        if self.max_class_count < self.min_class_count:
            msg = "maxClassCount must be >= minClassCount"
            raise ValueError(msg)
        if self.max_method_count < self.min_method_count:
            msg = "maxMethodCount must be >= minMethodCount"
            raise ValueError(msg)
        return self


class TraceGenerationParameters(_Parameters):
    """Parameters for simulating one trace upon a generated landscape.

    The seed is separate from the landscape seed so that different traces
    can be produced over the same applications.
    """

    duration: int = Field(default=1000, ge=1)
    call_count: int = Field(default=10, ge=1)
    max_connection_depth: int = Field(default=5, ge=1)
    communication_style: CommunicationStyle = CommunicationStyle.TRUE_RANDOM
    allow_cyclic_calls: bool = False
    visit_all_methods: bool = False
    fixed_attributes: dict[str, str] = Field(default_factory=dict)
    seed: int | None = None

    @field_validator("communication_style", mode="before")
    @classmethod
    def _normalize_style(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower().replace("-", "_")
        return value


class ExhaustionError(Exception):
    """Raised by a strategy when no eligible next class exists."""

    def __init__(self, style: CommunicationStyle) -> None:
        self.style = style
        super().__init__(f"No eligible class left for {style.value} selection")


class EmptyLandscapeError(ValueError):
    """Raised when a trace is requested for an empty application list."""


class ReconstructionError(ValueError):
    """Raised when a cleaned application cannot be rebuilt into a tree."""
