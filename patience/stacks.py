from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from patience.cards import NUM_PER_SUIT, Card, Rank, Suit
from patience.rules import DEFAULT_RULES, Rules

MASK64 = 0xFFFFFFFFFFFFFFFF
_CARD_MIX = 131


class InvalidMoveError(Exception):
    """A pile was asked to take or give up a card its rules do not allow."""


def fold_cards(cards: tuple[Card, ...], seed: int = 0) -> int:
    """Order-sensitive 64-bit hash over card identity and visibility."""
    h = seed
    for card in cards:
        h = (h * _CARD_MIX + card.id * 2 + card.visible + 1) & MASK64
    return h


class CardStack:
    """
    Common behaviour of every pile on the field.

    Piles are immutable: accept/remove hand back a new pile and leave the
    receiver alone. Equality and hashing are structural, so two piles with the
    same cards compare equal even when they are different objects.
    """

    __slots__ = ()

    cards: tuple[Card, ...]
    _hash: int

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    @property
    def top(self) -> Optional[Card]:
        if not self.cards:
            return None
        return self.cards[-1]

    @property
    def is_empty(self) -> bool:
        return len(self.cards) == 0

    @property
    def stack_hash(self) -> int:
        return self._hash

    def _key(self) -> tuple:
        return (self.cards,)

    def __eq__(self, other) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return NotImplemented
        return self._hash == other._hash and self._key() == other._key()

    def __hash__(self) -> int:
        return self._hash

    def can_accept(self, card: Card, origin: Optional[CardStack] = None, rules: Rules = DEFAULT_RULES) -> bool:
        raise NotImplementedError

    def accept(self, card: Card, origin: Optional[CardStack] = None, rules: Rules = DEFAULT_RULES) -> CardStack:
        raise NotImplementedError

    def remove(self, card: Card) -> CardStack:
        raise NotImplementedError

    def cell(self, row: int) -> Optional[str]:
        """Text for display row `row`, or None once the pile has nothing more to show."""
        if row < len(self.cards):
            return str(self.cards[row])
        return None

    def _check_accept(self, card: Card, origin: Optional[CardStack], rules: Rules) -> None:
        if not self.can_accept(card, origin, rules):
            raise InvalidMoveError(f"{type(self).__name__} cannot accept {card.short_name} on {self.top}")

    def _check_top(self, card: Card) -> None:
        top = self.top
        if top is None or not top.same_card(card):
            raise InvalidMoveError(f"{card.short_name} is not the top of this {type(self).__name__}")


@dataclass(frozen=True, slots=True, eq=False)
class PlayStack(CardStack):
    """A tableau column."""

    cards: tuple[Card, ...] = ()
    _hash: int = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "cards", tuple(self.cards))
        object.__setattr__(self, "_hash", fold_cards(self.cards))

    def can_accept(self, card: Card, origin: Optional[CardStack] = None, rules: Rules = DEFAULT_RULES) -> bool:
        if origin is self:
            return False
        top = self.top
        if top is None:
            return rules.empty_column == "any" or card.rank == Rank.KING
        if card.rank != top.rank - 1:
            return False
        if rules.tableau_building == "alternate_color":
            return card.color != top.color
        if rules.tableau_building == "same_suit":
            return card.suit == top.suit
        return True

    def accept(self, card: Card, origin: Optional[CardStack] = None, rules: Rules = DEFAULT_RULES) -> PlayStack:
        self._check_accept(card, origin, rules)
        return PlayStack(self.cards + (card.revealed(),))

    def remove(self, card: Card) -> PlayStack:
        self._check_top(card)
        rest = self.cards[:-1]
        if rest and not rest[-1].visible:
            # the card underneath is turned face up
            rest = rest[:-1] + (rest[-1].revealed(),)
        return PlayStack(rest)

    def hidden_count(self) -> int:
        return sum(1 for card in self.cards if not card.visible)


@dataclass(frozen=True, slots=True, eq=False)
class FinishStack(CardStack):
    """A foundation: one suit, built up from the Ace."""

    cards: tuple[Card, ...] = ()
    _hash: int = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "cards", tuple(self.cards))
        object.__setattr__(self, "_hash", fold_cards(self.cards))

    @property
    def suit(self) -> Optional[Suit]:
        if not self.cards:
            return None
        return self.cards[0].suit

    @property
    def top_rank(self) -> int:
        top = self.top
        return 0 if top is None else int(top.rank)

    @property
    def is_complete(self) -> bool:
        return len(self.cards) == NUM_PER_SUIT

    def can_accept(self, card: Card, origin: Optional[CardStack] = None, rules: Rules = DEFAULT_RULES) -> bool:
        if origin is self:
            return False
        top = self.top
        if top is None:
            return card.rank == Rank.ACE
        return card.suit == top.suit and card.rank == top.rank + 1

    def accept(self, card: Card, origin: Optional[CardStack] = None, rules: Rules = DEFAULT_RULES) -> FinishStack:
        self._check_accept(card, origin, rules)
        return FinishStack(self.cards + (card.revealed(),))

    def remove(self, card: Card) -> FinishStack:
        raise InvalidMoveError("cards never leave a foundation")

    def cell(self, row: int) -> Optional[str]:
        if row != 0:
            return None
        top = self.top
        return "[ ]" if top is None else str(top)


@dataclass(frozen=True, slots=True, eq=False)
class Stock(CardStack):
    """
    The draw pile. `position` counts the cards turned over so far; the last
    of them (``cards[position - 1]``) is the one that can be played.
    Cards stay in the pile until they are actually moved off it.
    """

    cards: tuple[Card, ...] = ()
    position: int = 0
    _hash: int = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "cards", tuple(self.cards))
        if not 0 <= self.position <= len(self.cards):
            raise ValueError(f"stock position {self.position} out of range 0..{len(self.cards)}")
        h = fold_cards(self.cards)
        object.__setattr__(self, "_hash", (h * _CARD_MIX + self.position) & MASK64)

    def _key(self) -> tuple:
        return (self.cards, self.position)

    @property
    def top(self) -> Optional[Card]:
        if self.position == 0:
            return None
        return self.cards[self.position - 1]

    @property
    def playable(self) -> Optional[Card]:
        return self.top

    def revealed_cards(self) -> tuple[Card, ...]:
        return self.cards[:self.position]

    def remaining(self) -> int:
        """Cards not yet turned over in the current pass."""
        return len(self.cards) - self.position

    def next_card(self, draw_count: int = 1) -> Stock:
        if self.position >= len(self.cards):
            # every card is turned over: start the next pass
            return Stock(tuple(card.hidden() for card in self.cards), 0)
        end = min(self.position + draw_count, len(self.cards))
        turned = tuple(card.revealed() for card in self.cards[self.position:end])
        return Stock(self.cards[:self.position] + turned + self.cards[end:], end)

    def can_accept(self, card: Card, origin: Optional[CardStack] = None, rules: Rules = DEFAULT_RULES) -> bool:
        return False

    def accept(self, card: Card, origin: Optional[CardStack] = None, rules: Rules = DEFAULT_RULES) -> Stock:
        raise InvalidMoveError("the stock never accepts cards")

    def remove(self, card: Card) -> Stock:
        self._check_top(card)
        idx = self.position - 1
        return Stock(self.cards[:idx] + self.cards[idx + 1:], idx)

    def cell(self, row: int) -> Optional[str]:
        if row == 0:
            top = self.top
            return "[ ]" if top is None else str(top)
        if row == 1 and self.remaining() > 0:
            return f"#{self.remaining()}"
        return None
