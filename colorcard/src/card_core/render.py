from __future__ import annotations

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .config import CardLayout
from .models import MatchResult, SourceRect

DEFAULT_TITLE = "TITLE"
DEFAULT_COMMENT = "Comment"
NO_COLOR_PROMPT = "Pick a color from the photo"


def _font(layout: CardLayout, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    if layout.font_path:
        return ImageFont.truetype(layout.font_path, size)
    return ImageFont.load_default(size=size)


def compose_card(
    image_rgb: np.ndarray | None,
    source_rect: SourceRect | None,
    match: MatchResult | None,
    title: str = "",
    comment: str = "",
    layout: CardLayout | None = None,
) -> Image.Image:
    """Draw the printable card: tinted paper, cropped photo, texts and color block."""
    layout = layout or CardLayout()
    width, height = layout.width, layout.height
    side = layout.px(layout.margin_side_mm)
    top = layout.px(layout.margin_top_mm)
    bottom = layout.px(layout.margin_bottom_mm)
    content = layout.content_width
    center_x = width / 2

    if match is not None:
        paper = Image.new("RGB", (width, height), layout.paper_color)
        tint = Image.new("RGB", (width, height), match.matched_color.rgb)
        card = Image.blend(paper, tint, layout.tint_alpha)
    else:
        card = Image.new("RGB", (width, height), layout.blank_tint_color)

    if image_rgb is not None and source_rect is not None:
        crop = Image.fromarray(image_rgb).resize(
            (content, content),
            Image.Resampling.BILINEAR,
            box=(
                source_rect.sx,
                source_rect.sy,
                source_rect.sx + source_rect.sw,
                source_rect.sy + source_rect.sh,
            ),
        )
        card.paste(crop, (side, top))

    draw = ImageDraw.Draw(card)
    scale = layout.dpi_scale

    title_y = top + content + 30 * scale / 2
    title_text = title or DEFAULT_TITLE
    title_font = _font(layout, layout.title_font_size)
    title_width = draw.textlength(title_text, font=title_font)
    draw.line(
        [(center_x - title_width / 2, title_y + 5), (center_x + title_width / 2, title_y + 5)],
        fill=layout.text_color,
        width=1,
    )
    draw.text((center_x, title_y), title_text, fill=layout.text_color, font=title_font, anchor="ms")

    comment_y = title_y + layout.title_font_size * scale / 3 + layout.comment_font_size * scale / 3
    draw.text(
        (center_x, comment_y),
        comment or DEFAULT_COMMENT,
        fill=layout.text_color,
        font=_font(layout, layout.comment_font_size),
        anchor="ms",
    )

    rgb_y = comment_y + layout.comment_font_size * scale / 3 + layout.rgb_line_gap_mm * scale / 3
    if match is not None:
        sample = match.sample
        rgb_text = f"R:{sample.r} G:{sample.g} B:{sample.b}"
    else:
        rgb_text = "R:--- G:--- B:---"
    draw.text(
        (center_x, rgb_y),
        rgb_text,
        fill=layout.text_color,
        font=_font(layout, layout.rgb_font_size),
        anchor="ms",
    )

    block_h = layout.px(layout.color_block_height_mm)
    block_bottom = height - bottom
    block_box = (side, block_bottom - block_h, side + content, block_bottom)
    if match is not None:
        draw.rectangle(block_box, fill=match.matched_color.rgb)
        label = match.matched_color.name
    else:
        draw.rectangle(block_box, fill=layout.blank_block_color)
        label = NO_COLOR_PROMPT
    draw.text(
        (center_x, block_bottom - block_h / 2 + 5),
        label,
        fill=(255, 255, 255),
        font=_font(layout, layout.name_font_size),
        anchor="ms",
    )
    return card


def card_filename(match: MatchResult) -> str:
    safe_name = match.matched_color.name.replace("/", "_").replace("\\", "_")
    return f"ColorCard_{safe_name}.png"
