from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

RGB = tuple[int, int, int]
LAB = tuple[float, float, float]


@dataclass(frozen=True)
class ReferenceColor:
    name: str
    r: int
    g: int
    b: int

    @property
    def rgb(self) -> RGB:
        return self.r, self.g, self.b

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "r": self.r, "g": self.g, "b": self.b, "hex": self.hex}


@dataclass(frozen=True)
class ExtractedSample:
    r: int
    g: int
    b: int

    @property
    def rgb(self) -> RGB:
        return self.r, self.g, self.b

    def to_dict(self) -> dict[str, Any]:
        return {"r": self.r, "g": self.g, "b": self.b}


@dataclass(frozen=True)
class MatchResult:
    matched_color: ReferenceColor
    distance: float
    sample: ExtractedSample

    def to_dict(self) -> dict[str, Any]:
        return {
            "matched_color": self.matched_color.to_dict(),
            "distance": float(self.distance),
            "sample": self.sample.to_dict(),
        }


@dataclass(frozen=True)
class NoMatch:
    """Returned instead of a match when matching is not possible."""

    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"reason": self.reason}


MatchOutcome = Union[MatchResult, NoMatch]


class PaletteStatus(str, Enum):
    NOT_LOADED = "not_loaded"
    OK = "ok"
    EMPTY = "empty"
    LOAD_ERROR = "load_error"


@dataclass(frozen=True)
class ValidRecord:
    index: int
    color: ReferenceColor


@dataclass(frozen=True)
class InvalidRecord:
    index: int
    reason: str


RecordOutcome = Union[ValidRecord, InvalidRecord]


class ViewportPhase(str, Enum):
    EMPTY = "empty"
    INITIALIZED = "initialized"
    CONFIRMED = "confirmed"


@dataclass
class ViewportState:
    scale: float
    offset_x: float
    offset_y: float
    source_width: int
    source_height: int
    viewport_size: float


@dataclass(frozen=True)
class SourceRect:
    sx: float
    sy: float
    sw: float
    sh: float

    def to_dict(self) -> dict[str, float]:
        return {"sx": self.sx, "sy": self.sy, "sw": self.sw, "sh": self.sh}


@dataclass(frozen=True)
class DrawTransform:
    offset_x: float
    offset_y: float
    draw_width: float
    draw_height: float
