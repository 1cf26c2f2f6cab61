from __future__ import annotations

from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from patience.cards import NUMS, Card
from patience.field import PatienceField

CARD_W, CARD_H = 48, 66
GAP = 8
ROW_STEP = 20  # vertical offset between overlapping cards of a column
SUIT_LETTERS = ("S", "H", "C", "D")

TABLE = (27, 67, 50)
CARD_FRONT = (250, 245, 236)
CARD_BACK = (49, 93, 140)
CARD_BORDER = (70, 58, 50)
SLOT_OUTLINE = (120, 160, 140)
RED = (190, 40, 40)
BLACK = (35, 35, 45)


def get_font(size):
    for name in ("DejaVuSans-Bold.ttf", "Arial.ttf", "Helvetica.ttc"):
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    return ImageFont.load_default()


def _label(card: Card) -> str:
    return NUMS[card.rank - 1] + SUIT_LETTERS[card.suit]


def _draw_card(draw: ImageDraw.ImageDraw, x: int, y: int, card: Optional[Card], font) -> None:
    box = (x, y, x + CARD_W - 1, y + CARD_H - 1)
    if card is None:
        draw.rectangle(box, outline=SLOT_OUTLINE, width=1)
        return
    if not card.visible:
        draw.rectangle(box, fill=CARD_BACK, outline=CARD_BORDER, width=1)
        return
    draw.rectangle(box, fill=CARD_FRONT, outline=CARD_BORDER, width=1)
    color = RED if card.color == "red" else BLACK
    draw.text((x + 4, y + 3), _label(card), fill=color, font=font)


def render_field(field: PatienceField) -> Image.Image:
    """Draw the position: foundations and stock on top, tableau columns below."""
    header = field.finish_stacks + (field.stock,)
    columns = field.play_stacks
    slots = max(len(header), len(columns), 1)
    longest = max((len(c) for c in columns), default=0)

    width = GAP + slots * (CARD_W + GAP)
    tableau_y = GAP + CARD_H + 2 * GAP
    height = tableau_y + max(longest - 1, 0) * ROW_STEP + CARD_H + GAP

    img = Image.new("RGB", (width, height), TABLE)
    draw = ImageDraw.Draw(img)
    font = get_font(14)

    for i, pile in enumerate(header):
        _draw_card(draw, GAP + i * (CARD_W + GAP), GAP, pile.top, font)

    for i, column in enumerate(columns):
        x = GAP + i * (CARD_W + GAP)
        if column.is_empty:
            _draw_card(draw, x, tableau_y, None, font)
            continue
        for row, card in enumerate(column):
            _draw_card(draw, x, tableau_y + row * ROW_STEP, card, font)
    return img


def save_field(field: PatienceField, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    render_field(field).save(path)
    return path
