# namefinder/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Span:
    start: int
    end: int
    label: Optional[str] = None

    def __post_init__(self):
        if self.start < 0 or self.start >= self.end:
            raise ValueError(f"Invalid span [{self.start}, {self.end})")

    def _check_space(self, other: "Span") -> None:
        # character and token coordinates must never be mixed
        if type(self) is not type(other):
            raise TypeError(
                f"Cannot compare {type(self).__name__} with {type(other).__name__}"
            )

    def contains(self, other: "Span") -> bool:
        self._check_space(other)
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: "Span") -> bool:
        self._check_space(other)
        return not (self.end <= other.start or other.end <= self.start)

    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class CharSpan(Span):
    """Interval over character offsets of the document text."""

    def covered_text(self, text: str) -> str:
        return text[self.start:self.end]


@dataclass(frozen=True)
class TokenSpan(Span):
    """Interval over token indices of a single sentence."""


class TagKind(Enum):
    OUTSIDE = "OUTSIDE"
    START = "START"
    CONTINUE = "CONTINUE"


@dataclass(frozen=True)
class Tag:
    kind: TagKind
    type: Optional[str] = None

    def __post_init__(self):
        if (self.kind is TagKind.OUTSIDE) != (self.type is None):
            raise ValueError(f"Tag {self.kind.value} with type {self.type!r}")

    @classmethod
    def outside(cls) -> "Tag":
        return cls(TagKind.OUTSIDE)

    @classmethod
    def start(cls, ent_type: str) -> "Tag":
        return cls(TagKind.START, ent_type)

    @classmethod
    def cont(cls, ent_type: str) -> "Tag":
        return cls(TagKind.CONTINUE, ent_type)

    @classmethod
    def parse(cls, value: str) -> "Tag":
        if value == TagKind.OUTSIDE.value:
            return cls.outside()
        kind, sep, ent_type = value.partition("-")
        if not sep or not ent_type:
            raise ValueError(f"Unknown tag {value!r}")
        return cls(TagKind(kind), ent_type)

    @property
    def is_outside(self) -> bool:
        return self.kind is TagKind.OUTSIDE

    def __str__(self) -> str:
        if self.type is None:
            return self.kind.value
        return f"{self.kind.value}-{self.type}"


ConstraintMap = Dict[int, Tag]


@dataclass(frozen=True)
class DecodedEntity:
    start: int
    end: int
    text: str
    label: Optional[str]
    probability: float
    verified: bool = False


@dataclass(frozen=True)
class Issue:
    """Problem found while decoding; reported to the caller, never dropped."""

    kind: str
    message: str
    start: Optional[int] = None
    end: Optional[int] = None


RawSpan = Tuple  # (start, end) or (start, end, label)


@dataclass(frozen=True)
class DecodeRequest:
    """
    Snapshot of everything one decode operation needs.

    Sequences are copied into tuples so that the caller can keep mutating its
    own buffers while the operation is in flight.
    """

    text: str
    sentences: Sequence[RawSpan]
    tokens: Sequence[RawSpan]
    verified: Sequence[RawSpan] = ()
    model_path: Optional[str] = None

    def __post_init__(self):
        for name in ("sentences", "tokens", "verified"):
            values = getattr(self, name)
            object.__setattr__(self, name, tuple(_snapshot(v) for v in values))


def _snapshot(value):
    # entries that are not sequences are kept so validation can reject them
    if isinstance(value, (Span, str)):
        return value
    try:
        return tuple(value)
    except TypeError:
        return value


STATUS_OK = "ok"
STATUS_LOAD_FAILURE = "load_failure"
STATUS_CANCELLED = "cancelled"


@dataclass(frozen=True)
class DecodeResult:
    entities: Tuple[DecodedEntity, ...] = ()
    status: str = STATUS_OK
    issues: Tuple[Issue, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK
