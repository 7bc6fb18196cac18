from __future__ import annotations

from dataclasses import dataclass

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, field_validator
from starlette.concurrency import run_in_threadpool

from colorcard.src.card_core.config import DEFAULT_METRIC, DEFAULT_PALETTE_PATH, VIEWPORT_SIZE
from colorcard.src.card_core.io import is_remote, read_image_rgb, sample_viewport_pixel
from colorcard.src.card_core.models import MatchOutcome, NoMatch, SourceRect
from colorcard.src.card_core.palette import PaletteIndex
from colorcard.src.card_core.session import CardSession


class PaletteOptions(BaseModel):
    palette_path: str | None = Field(
        default=None,
        description="Optional local path or URL of a palette (.json/.csv)",
    )
    metric: str = Field(default=DEFAULT_METRIC, description="'simplified' or 'ciede2000'")


class MatchRequest(PaletteOptions):
    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)


class CardRequest(PaletteOptions):
    image_url: str = Field(..., description="HTTP(S) image URL")
    viewport_size: float = Field(default=VIEWPORT_SIZE, gt=0)
    zoom: float = Field(default=1.0, gt=0, description="Zoom factor on top of the initial fit")
    pivot_x: float | None = None
    pivot_y: float | None = None
    pan_x: float = 0.0
    pan_y: float = 0.0
    sample_x: float | None = Field(default=None, description="Viewport x to sample, default center")
    sample_y: float | None = Field(default=None, description="Viewport y to sample, default center")

    @field_validator("image_url")
    @classmethod
    def _remote_only(cls, value: str) -> str:
        # Server-side paths are never read on behalf of a client.
        if not is_remote(value):
            raise ValueError("image_url must be an http(s) URL")
        return value


class ColorItem(BaseModel):
    name: str
    r: int
    g: int
    b: int
    hex: str


class SampleItem(BaseModel):
    r: int
    g: int
    b: int


class MatchResponse(BaseModel):
    matched_color: ColorItem
    distance: float
    sample: SampleItem


class SourceRectItem(BaseModel):
    sx: float
    sy: float
    sw: float
    sh: float


class CardResponse(MatchResponse):
    source_rect: SourceRectItem


class PaletteStatusResponse(BaseModel):
    status: str
    loaded: bool
    colors: int
    dropped: int
    message: str | None


app = FastAPI(
    title="Color Card API",
    version="1.0.0",
    description="Match sampled photo colors against a named reference palette.",
)


def _build_index(palette_path: str | None, metric: str) -> PaletteIndex:
    try:
        index = PaletteIndex(metric=metric)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    index.load_from(palette_path or DEFAULT_PALETTE_PATH)
    return index


def _match_response(outcome: MatchOutcome, index: PaletteIndex) -> MatchResponse:
    if isinstance(outcome, NoMatch):
        raise HTTPException(
            status_code=409,
            detail={"reason": outcome.reason, "message": index.status_message},
        )
    return MatchResponse(**outcome.to_dict())


@dataclass(frozen=True)
class _CardOutcome:
    outcome: MatchOutcome
    source_rect: SourceRect


def _crop_and_sample(index: PaletteIndex, payload: CardRequest) -> _CardOutcome:
    session = CardSession(palette=index, viewport_size=payload.viewport_size)
    image_rgb = read_image_rgb(payload.image_url)
    height, width = image_rgb.shape[:2]
    session.open_image(width, height)

    center = payload.viewport_size / 2.0
    pivot_x = center if payload.pivot_x is None else payload.pivot_x
    pivot_y = center if payload.pivot_y is None else payload.pivot_y
    session.zoom(payload.zoom, pivot_x, pivot_y)
    session.pan(payload.pan_x, payload.pan_y)
    session.confirm_crop()

    sample_x = center if payload.sample_x is None else payload.sample_x
    sample_y = center if payload.sample_y is None else payload.sample_y
    pixel = sample_viewport_pixel(image_rgb, session.viewport, sample_x, sample_y)
    outcome = session.sample(*pixel.rgb)
    return _CardOutcome(outcome=outcome, source_rect=session.viewport.to_source_rect())


@app.get("/palette", response_model=PaletteStatusResponse)
async def palette_status(palette_path: str | None = None) -> PaletteStatusResponse:
    index = await run_in_threadpool(_build_index, palette_path, DEFAULT_METRIC)
    return PaletteStatusResponse(
        status=index.status.value,
        loaded=index.loaded,
        colors=len(index),
        dropped=len(index.dropped),
        message=index.status_message,
    )


@app.post("/match", response_model=MatchResponse)
async def match_color(payload: MatchRequest) -> MatchResponse:
    index = await run_in_threadpool(_build_index, payload.palette_path, payload.metric)
    outcome = index.find_closest(payload.r, payload.g, payload.b)
    return _match_response(outcome, index)


@app.post("/card", response_model=CardResponse)
async def crop_and_match(payload: CardRequest) -> CardResponse:
    index = await run_in_threadpool(_build_index, payload.palette_path, payload.metric)
    try:
        result = await run_in_threadpool(_crop_and_sample, index, payload)
    except Exception as exc:
        raise HTTPException(
            status_code=400, detail=f"failed_to_sample_image: {exc}"
        ) from exc

    match = _match_response(result.outcome, index)
    return CardResponse(
        **match.model_dump(),
        source_rect=SourceRectItem(**result.source_rect.to_dict()),
    )
