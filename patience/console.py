from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO

from patience.field import PatienceField, fill_with_random_cards
from patience.rules import load_rules
from patience.stacks import CardStack

CELL_WIDTH = 6


def dump_rows(piles: Iterable[CardStack], out: TextIO) -> int:
    """Write piles side by side, one cell per pile per line. Returns lines written."""
    piles = list(piles)
    row = 0
    while True:
        cells = [pile.cell(row) for pile in piles]
        if all(c is None for c in cells):
            break
        out.write("".join((c or "").ljust(CELL_WIDTH) for c in cells).rstrip() + "\n")
        row += 1
    return row


def dump_field(field: PatienceField, out: Optional[TextIO] = None) -> None:
    """Foundations and stock as a header row, then the tableau."""
    if out is None:
        out = sys.stdout
    dump_rows(field.finish_stacks + (field.stock,), out)
    out.write("\n")
    dump_rows(field.play_stacks, out)


def summary(field: PatienceField) -> str:
    finished = " ".join(str(len(stack)) for stack in field.finish_stacks)
    return f"hash={field.state_hash:016x} done={field.is_done()} won={field.is_won()} foundations=[{finished}]"


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Deal a Klondike game and print the position.")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for the deal.")
    parser.add_argument("--rules", type=str, default="", help="Optional rules ini file.")
    parser.add_argument("--draw", type=int, default=0, help="Advance the stock this many times.")
    parser.add_argument("--trivial", action="store_true", help="Play forced moves to the foundations.")
    parser.add_argument("--png", type=str, default="", help="Also write a snapshot image to this path.")
    parser.add_argument("--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    rules = load_rules(Path(args.rules).expanduser() if args.rules else None)
    field = fill_with_random_cards(args.seed, rules=rules)
    for _ in range(args.draw):
        field = field.next_card()
    if args.trivial:
        field = field.do_trivial_moves()

    dump_field(field)
    print(summary(field))

    if args.png:
        from patience.snapshot import save_field

        save_field(field, Path(args.png).expanduser())
        print(f"snapshot written to {args.png}")


if __name__ == "__main__":
    main()
