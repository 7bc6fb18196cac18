from __future__ import annotations

import csv
import io
import json
import logging
import math
import numbers
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np
import requests

from .colorspace import rgb_to_lab
from .config import DEFAULT_METRIC
from .distance import get_metric
from .io import is_remote
from .models import (
    LAB,
    ExtractedSample,
    InvalidRecord,
    MatchOutcome,
    MatchResult,
    NoMatch,
    PaletteStatus,
    RecordOutcome,
    ReferenceColor,
    ValidRecord,
)

logger = logging.getLogger(__name__)

_HEX_PATTERN = re.compile(r"^#?[0-9A-Fa-f]{6}$")

STATUS_MESSAGES = {
    PaletteStatus.NOT_LOADED: "Color data is not loaded yet; matching is unavailable.",
    PaletteStatus.EMPTY: "Color data is empty. Check the palette file.",
    PaletteStatus.LOAD_ERROR: "Failed to load color data.",
}

_NO_MATCH_REASONS = {
    PaletteStatus.NOT_LOADED: "palette_not_loaded",
    PaletteStatus.EMPTY: "palette_empty",
    PaletteStatus.LOAD_ERROR: "palette_load_error",
}


class PaletteLoadError(ValueError):
    pass


def parse_records(payload: Any) -> list[RecordOutcome]:
    """Classify every record of a palette payload as valid or invalid.

    The payload must be a sequence of records (list, tuple, ...) or an object
    carrying a ``colors`` sequence; anything else raises ``PaletteLoadError``.
    Individual bad records never fail the payload.
    """
    if isinstance(payload, dict):
        records = payload.get("colors")
        if not _is_record_sequence(records):
            raise PaletteLoadError("palette object must include a 'colors' sequence")
    elif _is_record_sequence(payload):
        records = payload
    else:
        raise PaletteLoadError(
            f"palette payload must be a sequence of records, got {type(payload).__name__}"
        )

    return [classify_record(record, idx) for idx, record in enumerate(records)]


def _is_record_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def classify_record(raw_entry: Any, index: int) -> RecordOutcome:
    if not isinstance(raw_entry, dict):
        return InvalidRecord(index, "expected an object")

    normalized: dict[str, Any] = {
        str(key).strip().lower(): value
        for key, value in raw_entry.items()
        if key is not None
    }

    name = normalized.get("name")
    if not isinstance(name, str) or not name.strip():
        return InvalidRecord(index, "missing or empty 'name'")

    channels = [normalized.get(key) for key in ("r", "g", "b")]
    hex_value = normalized.get("hex")

    if all(value is None for value in channels) and hex_value is not None:
        if not isinstance(hex_value, str) or not _HEX_PATTERN.match(hex_value.strip()):
            return InvalidRecord(index, f"invalid hex color {hex_value!r}")
        r, g, b = _hex_to_rgb(hex_value.strip())
        return ValidRecord(index, ReferenceColor(name=name.strip(), r=r, g=g, b=b))

    rounded: list[int] = []
    for key, value in zip("rgb", channels):
        channel = _as_channel(value)
        if channel is None:
            return InvalidRecord(index, f"channel '{key}' is not a finite number")
        if not 0 <= channel <= 255:
            return InvalidRecord(index, f"channel '{key}' out of range: {channel}")
        rounded.append(channel)

    r, g, b = rounded
    return ValidRecord(index, ReferenceColor(name=name.strip(), r=r, g=g, b=b))


def _as_channel(value: Any) -> int | None:
    if isinstance(value, (bool, np.bool_)) or value is None:
        return None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    elif isinstance(value, numbers.Real):
        number = float(value)
    else:
        return None
    if not math.isfinite(number):
        return None
    # Round half up, like Math.round.
    return int(math.floor(number + 0.5))


def _hex_to_rgb(value: str) -> tuple[int, int, int]:
    normalized = value[1:] if value.startswith("#") else value
    return (
        int(normalized[0:2], 16),
        int(normalized[2:4], 16),
        int(normalized[4:6], 16),
    )


def read_palette_source(source: str | Path) -> Any:
    """Read a palette payload from a local .json/.csv file or an http(s) URL."""
    source_str = str(source)
    if is_remote(source_str):
        response = requests.get(source_str, timeout=10)
        response.raise_for_status()
        suffix = Path(source_str.split("?", 1)[0]).suffix.lower()
        text = response.text
    else:
        path = Path(source)
        if not path.exists():
            raise PaletteLoadError(f"palette file does not exist: {path}")
        suffix = path.suffix.lower()
        text = path.read_text(encoding="utf-8")

    if suffix == ".csv":
        return _parse_csv(text)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise PaletteLoadError(f"palette at {source_str} is not valid JSON: {exc}") from exc


def _parse_csv(text: str) -> list[dict[str, Any]]:
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise PaletteLoadError("palette csv has no header")
    return [dict(row) for row in reader]


class PaletteIndex:
    """Loaded reference palette with nearest-color lookup.

    Lab values of the reference colors are computed once at load time. Lookups
    scan the palette in load order and keep the first entry with the strictly
    smallest distance, so the earliest loaded entry wins ties.
    """

    def __init__(self, metric: str = DEFAULT_METRIC) -> None:
        self.metric_name = metric
        self._distance = get_metric(metric)
        self._entries: list[ReferenceColor] = []
        self._labs: list[LAB] = []
        self.status = PaletteStatus.NOT_LOADED
        self.status_message: str | None = STATUS_MESSAGES[PaletteStatus.NOT_LOADED]
        self.dropped: list[InvalidRecord] = []

    @property
    def loaded(self) -> bool:
        return self.status is PaletteStatus.OK

    @property
    def entries(self) -> list[ReferenceColor]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def load(self, raw_entries: Any) -> PaletteStatus:
        try:
            outcomes = parse_records(raw_entries)
        except PaletteLoadError as exc:
            return self.mark_load_failed(str(exc))

        entries: list[ReferenceColor] = []
        dropped: list[InvalidRecord] = []
        for outcome in outcomes:
            if isinstance(outcome, ValidRecord):
                entries.append(outcome.color)
            else:
                logger.debug(f"Dropping palette record {outcome.index}: {outcome.reason}")
                dropped.append(outcome)

        self._entries = entries
        self.dropped = dropped
        if entries:
            self._labs = [rgb_to_lab(*color.rgb) for color in entries]
            self.status = PaletteStatus.OK
            self.status_message = None
        else:
            self._labs = []
            self.status = PaletteStatus.EMPTY
            self.status_message = STATUS_MESSAGES[PaletteStatus.EMPTY]

        logger.info(
            f"Palette loaded: {len(entries)} colors kept, {len(dropped)} records dropped."
        )
        return self.status

    def load_from(self, source: str | Path) -> PaletteStatus:
        try:
            payload = read_palette_source(source)
        except (PaletteLoadError, requests.RequestException, OSError) as exc:
            return self.mark_load_failed(f"{source}: {exc}")
        return self.load(payload)

    def mark_load_failed(self, message: str) -> PaletteStatus:
        logger.warning(f"Palette load failed: {message}")
        self._entries = []
        self._labs = []
        self.dropped = []
        self.status = PaletteStatus.LOAD_ERROR
        self.status_message = f"{STATUS_MESSAGES[PaletteStatus.LOAD_ERROR]} ({message})"
        return self.status

    def find_closest(self, r: int, g: int, b: int) -> MatchOutcome:
        if not self.loaded:
            return NoMatch(_NO_MATCH_REASONS[self.status])

        query_lab = rgb_to_lab(r, g, b)
        best_idx = -1
        best_distance = math.inf
        for idx, lab in enumerate(self._labs):
            distance = self._distance(query_lab, lab)
            if distance < best_distance:
                best_distance = distance
                best_idx = idx

        return MatchResult(
            matched_color=self._entries[best_idx],
            distance=float(best_distance),
            sample=ExtractedSample(r=int(r), g=int(g), b=int(b)),
        )
