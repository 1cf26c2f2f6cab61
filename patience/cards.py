from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import IntEnum

NUM_PER_SUIT = 13
SUIT_SYMBOLS = ("♠", "♥", "♣", "♦")
NUMS = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")


class Suit(IntEnum):
    SPADES = 0
    HEARTS = 1
    CLUBS = 2
    DIAMONDS = 3


class Rank(IntEnum):
    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13


@dataclass(frozen=True, slots=True)
class Card:
    """A single playing card. The visibility flag is part of the value."""

    suit: Suit
    rank: Rank
    visible: bool = False

    @property
    def id(self) -> int:
        """Identity of the physical card (0..51), independent of visibility."""
        return int(self.suit) * NUM_PER_SUIT + int(self.rank) - 1

    @property
    def color(self) -> str:
        if self.suit % 2 == 0:
            return "black"
        return "red"

    @property
    def short_name(self) -> str:
        return SUIT_SYMBOLS[self.suit] + NUMS[self.rank - 1]

    def same_card(self, other: Card) -> bool:
        return self.id == other.id

    def revealed(self) -> Card:
        if self.visible:
            return self
        return replace(self, visible=True)

    def hidden(self) -> Card:
        if not self.visible:
            return self
        return replace(self, visible=False)

    @staticmethod
    def from_id(card_id: int, visible: bool = False) -> Card:
        return Card(Suit(card_id // NUM_PER_SUIT), Rank(card_id % NUM_PER_SUIT + 1), visible)

    def __str__(self) -> str:
        if not self.visible:
            return "---"
        return self.short_name


def standard_deck() -> list[Card]:
    """All 52 cards, suit-major and rank-minor, face down."""
    return [Card(suit, rank) for suit in Suit for rank in Rank]


def shuffled_deck(rng: random.Random) -> list[Card]:
    deck = standard_deck()
    rng.shuffle(deck)
    return deck
