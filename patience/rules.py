from __future__ import annotations

import configparser
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

RULES_PATH = Path(__file__).with_name("rules.ini")
SECTION = "rules"

TABLEAU_BUILDING_ORDER = ("alternate_color", "same_suit", "any_suit")
EMPTY_COLUMN_ORDER = ("king", "any")
DRAW_COUNT_ORDER = (1, 3)


@dataclass(frozen=True, slots=True)
class Rules:
    """Variant knobs for the tableau and the stock."""

    # How a card must relate to the column top it is placed on (rank is always top - 1).
    tableau_building: str = "alternate_color"
    # Which cards an empty column takes during play.
    empty_column: str = "king"
    # Cards turned over per stock advance.
    draw_count: int = 1

    def __post_init__(self):
        if self.tableau_building not in TABLEAU_BUILDING_ORDER:
            raise ValueError(f"unknown tableau_building: {self.tableau_building!r}")
        if self.empty_column not in EMPTY_COLUMN_ORDER:
            raise ValueError(f"unknown empty_column: {self.empty_column!r}")
        if self.draw_count not in DRAW_COUNT_ORDER:
            raise ValueError(f"draw_count must be one of {DRAW_COUNT_ORDER}, got {self.draw_count!r}")


DEFAULT_RULES = Rules()


def _sanitize(raw: dict) -> Rules:
    data = {
        "tableau_building": DEFAULT_RULES.tableau_building,
        "empty_column": DEFAULT_RULES.empty_column,
        "draw_count": str(DEFAULT_RULES.draw_count),
    }
    data.update({k: v for k, v in raw.items() if v not in (None, "")})

    building = str(data["tableau_building"]).strip().lower()
    if building not in TABLEAU_BUILDING_ORDER:
        logger.warning("ignoring unknown tableau_building %r", building)
        building = DEFAULT_RULES.tableau_building

    empty = str(data["empty_column"]).strip().lower()
    if empty not in EMPTY_COLUMN_ORDER:
        logger.warning("ignoring unknown empty_column %r", empty)
        empty = DEFAULT_RULES.empty_column

    try:
        draw = int(data["draw_count"])
    except (TypeError, ValueError):
        logger.warning("ignoring non-numeric draw_count %r", data["draw_count"])
        draw = DEFAULT_RULES.draw_count
    if draw not in DRAW_COUNT_ORDER:
        logger.warning("ignoring unsupported draw_count %d", draw)
        draw = DEFAULT_RULES.draw_count

    return Rules(tableau_building=building, empty_column=empty, draw_count=draw)


def load_rules(path: Optional[Path] = None) -> Rules:
    path = Path(path) if path is not None else RULES_PATH
    if not path.exists():
        return DEFAULT_RULES
    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read(path, encoding="utf-8")
        if SECTION not in parser:
            return DEFAULT_RULES
        section = parser[SECTION]
        raw = {
            "tableau_building": section.get("tableau_building", ""),
            "empty_column": section.get("empty_column", ""),
            "draw_count": section.get("draw_count", ""),
        }
    except (configparser.Error, UnicodeDecodeError) as e:
        logger.warning("could not parse %s: %s", path, e)
        return DEFAULT_RULES
    return _sanitize(raw)


def save_rules(rules: Rules, path: Optional[Path] = None) -> None:
    path = Path(path) if path is not None else RULES_PATH
    parser = configparser.ConfigParser(interpolation=None)
    parser[SECTION] = {
        "tableau_building": rules.tableau_building,
        "empty_column": rules.empty_column,
        "draw_count": str(rules.draw_count),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        parser.write(f)
