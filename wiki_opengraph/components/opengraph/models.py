"""
OpenGraph component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")

# Normalized property name -> contents in discovery order.
MetadataMap = dict[str, list[str]]


# --- Annotation Records ---


@dataclass(frozen=True)
class PropertyRecord:
    """One explicit OpenGraph annotation of a document."""

    property: str | None
    content: str = ""


# --- Validation Error ---


@dataclass(frozen=True)
class OpenGraphValidationError:
    """Skipped record or aborted resolution."""

    code: str
    message: str
    field: str | None = None


# --- Merge Steps ---


class StepOutcome(str, Enum):
    OK = "ok"
    SKIP = "skip"  # drop this item, keep resolving
    ABORT = "abort"  # give up on the whole resolution


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """Tagged result of one merge sub-step."""

    outcome: StepOutcome
    value: T | None = None
    reason: str = ""
    cause: BaseException | None = None

    @classmethod
    def ok(cls, value: T) -> StepResult[T]:
        return cls(StepOutcome.OK, value=value)

    @classmethod
    def skip(cls, reason: str) -> StepResult[T]:
        return cls(StepOutcome.SKIP, reason=reason)

    @classmethod
    def abort(cls, reason: str, cause: BaseException | None = None) -> StepResult[T]:
        return cls(StepOutcome.ABORT, reason=reason, cause=cause)


@dataclass(frozen=True)
class ResolutionContext:
    """Collaborators loaded for a single resolution."""

    page: Any
    translated: Any
    wiki: Any


# --- Input Models ---


@dataclass(frozen=True)
class ResolveMetasInput:
    """Input for resolving the metadata of the document being rendered."""

    context: Any


# --- Output Models ---


class ResolveStatus(str, Enum):
    RESOLVED = "resolved"
    REENTRANT = "reentrant"
    DENIED = "denied"
    FAILED = "failed"


@dataclass(frozen=True)
class ResolveMetasOutput:
    """Resolved metadata. metas is empty unless status is RESOLVED."""

    metas: MetadataMap
    status: ResolveStatus = ResolveStatus.RESOLVED
    warnings: list[OpenGraphValidationError] = field(default_factory=list)
    errors: list[OpenGraphValidationError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status is ResolveStatus.RESOLVED


@dataclass(frozen=True)
class MetaTag:
    """One ``<meta property=... content=...>`` tag."""

    property: str
    content: str
