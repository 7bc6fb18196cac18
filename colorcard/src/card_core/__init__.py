from .models import MatchResult, NoMatch, PaletteStatus, ReferenceColor
from .palette import PaletteIndex, PaletteLoadError
from .session import CardSession
from .viewport import ViewportTransform

__all__ = [
    "CardSession",
    "MatchResult",
    "NoMatch",
    "PaletteIndex",
    "PaletteLoadError",
    "PaletteStatus",
    "ReferenceColor",
    "ViewportTransform",
]
