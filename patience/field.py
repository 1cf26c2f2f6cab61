from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Union

from patience.cards import NUM_PER_SUIT, Card, Rank, Suit, shuffled_deck
from patience.rules import DEFAULT_RULES, Rules
from patience.stacks import MASK64, CardStack, FinishStack, InvalidMoveError, PlayStack, Stock

logger = logging.getLogger(__name__)

PLAY_STACK_COUNT = 7
FINISH_STACK_COUNT = len(Suit)
DECK_SIZE = NUM_PER_SUIT * len(Suit)
_FIELD_MIX = 81

Slot = tuple[str, int]


def _canonical_order_key(stack: PlayStack) -> tuple:
    return stack.stack_hash, tuple((card.id, card.visible) for card in stack.cards)


@dataclass(frozen=True, slots=True, eq=False)
class PatienceField:
    """
    One immutable Klondike position.

    Two fields are equal when they hold the same stock and the same set of
    tableau columns, whatever slot each column sits in. Foundations are left
    out of the comparison: they hold exactly the cards that are in neither the
    stock nor the columns, and a foundation run is fixed by its suit and size.
    Fields played under different rules are never equal, since their
    successors differ; the hash ignores the rules.
    """

    stock: Stock
    play_stacks: tuple[PlayStack, ...]
    finish_stacks: tuple[FinishStack, ...]
    rules: Rules = DEFAULT_RULES
    # non-empty columns in position-independent order
    canonical_play_stacks: tuple[PlayStack, ...] = field(init=False, repr=False)
    _hash: int = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "play_stacks", tuple(self.play_stacks))
        object.__setattr__(self, "finish_stacks", tuple(self.finish_stacks))
        canonical = tuple(sorted((s for s in self.play_stacks if s.cards), key=_canonical_order_key))
        h = 0
        for stack in reversed(canonical):
            h = (h * _FIELD_MIX + stack.stack_hash) & MASK64
        object.__setattr__(self, "canonical_play_stacks", canonical)
        object.__setattr__(self, "_hash", h)

    def __eq__(self, other) -> bool:
        if self is other:
            return True
        if not isinstance(other, PatienceField):
            return NotImplemented
        if self._hash != other._hash:
            return False
        if self.stock != other.stock or self.rules != other.rules:
            return False
        return self.canonical_play_stacks == other.canonical_play_stacks

    def __hash__(self) -> int:
        return self._hash

    @property
    def state_hash(self) -> int:
        """The cached 64-bit position hash; `hash()` may fold it to the platform word size."""
        return self._hash

    # -- traversal -----------------------------------------------------------

    def origin_stacks(self) -> tuple[CardStack, ...]:
        """Piles a card can be taken from, least to most likely to lead to a solution."""
        return (self.stock,) + self.play_stacks

    def destination_stacks(self) -> tuple[CardStack, ...]:
        """Piles a card can be put on, least to most likely to lead to a solution."""
        return self.play_stacks + self.finish_stacks

    def all_cards(self) -> list[Card]:
        cards = list(self.stock.cards)
        for stack in self.play_stacks:
            cards.extend(stack.cards)
        for stack in self.finish_stacks:
            cards.extend(stack.cards)
        return cards

    def _slot_of(self, pile: CardStack) -> Slot:
        if pile is self.stock:
            return ("stock", 0)
        for i, stack in enumerate(self.play_stacks):
            if stack is pile:
                return ("play", i)
        for i, stack in enumerate(self.finish_stacks):
            if stack is pile:
                return ("finish", i)
        raise InvalidMoveError("pile does not belong to this field")

    # -- moves ---------------------------------------------------------------

    def can_move(self, card: Card, origin: CardStack, destination: CardStack) -> bool:
        top = origin.top
        if top is None or not top.same_card(card):
            return False
        return destination.can_accept(card, origin, self.rules)

    def move(self, card: Card, origin: CardStack, destination: CardStack) -> PatienceField:
        """
        Relocate `card` from `origin` to `destination` and return the new field.

        No legality check happens here beyond what the piles themselves enforce:
        callers are expected to have asked `can_move` first.
        """
        origin_slot = self._slot_of(origin)
        destination_slot = self._slot_of(destination)
        new_destination = destination.accept(card, origin, self.rules)
        new_origin = origin.remove(card)
        return self._replaced({origin_slot: new_origin}, {destination_slot: new_destination})

    def _replaced(self, *replacements: dict[Slot, CardStack]) -> PatienceField:
        """Swap piles by slot; later mappings win when they touch the same slot."""
        stock = self.stock
        play = list(self.play_stacks)
        finish = list(self.finish_stacks)
        for mapping in replacements:
            for (kind, i), pile in mapping.items():
                if kind == "stock":
                    stock = pile
                elif kind == "play":
                    play[i] = pile
                else:
                    finish[i] = pile
        return PatienceField(stock, tuple(play), tuple(finish), self.rules)

    def next_card(self) -> PatienceField:
        return PatienceField(self.stock.next_card(self.rules.draw_count), self.play_stacks, self.finish_stacks, self.rules)

    # -- forced moves --------------------------------------------------------

    def is_safe_to_play(self, card: Card) -> bool:
        """
        True when sending `card` to its foundation can never cost a solution:
        every foundation is within two ranks of it, so nothing that could be
        built on `card` in the tableau still needs it there.
        """
        if card.rank == Rank.ACE:
            return True
        return all(stack.top_rank >= card.rank - 2 for stack in self.finish_stacks)

    def _foundation_for(self, card: Card, origin: CardStack) -> Optional[FinishStack]:
        for stack in self.finish_stacks:
            if stack.can_accept(card, origin, self.rules):
                return stack
        return None

    def _next_trivial_move(self) -> Optional[tuple[Card, CardStack, FinishStack]]:
        for stack in self.play_stacks:
            top = stack.top
            if top is None or not top.visible or not self.is_safe_to_play(top):
                continue
            dest = self._foundation_for(top, stack)
            if dest is not None:
                return top, stack, dest
        top = self.stock.playable
        if top is not None and self.is_safe_to_play(top):
            dest = self._foundation_for(top, self.stock)
            if dest is not None:
                return top, self.stock, dest
        return None

    def do_trivial_moves(self) -> PatienceField:
        current = self
        applied = 0
        while True:
            step = current._next_trivial_move()
            if step is None:
                break
            card, origin, dest = step
            logger.debug("trivial move: %s to foundation", card.short_name)
            current = current.move(card, origin, dest)
            applied += 1
        if applied:
            logger.debug("applied %d trivial moves", applied)
        return current

    # -- status --------------------------------------------------------------

    def is_done(self) -> bool:
        """No face-down card is left in the tableau."""
        return all(card.visible for stack in self.play_stacks for card in stack)

    def is_won(self) -> bool:
        return len(self.finish_stacks) == FINISH_STACK_COUNT and all(s.is_complete for s in self.finish_stacks)


def fill_with_random_cards(
    seed: Union[int, random.Random, None] = None,
    rules: Rules = DEFAULT_RULES,
    deck: Optional[list[Card]] = None,
) -> PatienceField:
    """
    Deal a new game: columns of 1..7 cards with only the top card face up,
    four empty foundations, and the other 24 cards in the stock.
    """
    rng = seed if isinstance(seed, random.Random) else random.Random(seed)
    if deck is None:
        cards = shuffled_deck(rng)
    else:
        cards = list(deck)
        if len(cards) != DECK_SIZE or len({card.id for card in cards}) != DECK_SIZE:
            raise ValueError(f"Invalid deck: expected {DECK_SIZE} distinct cards, got {len(cards)}")
        rng.shuffle(cards)
    cards = [card.hidden() for card in cards]

    columns = []
    idx = 0
    for size in range(1, PLAY_STACK_COUNT + 1):
        column = cards[idx:idx + size]
        idx += size
        column[-1] = column[-1].revealed()
        columns.append(PlayStack(tuple(column)))
    finish = tuple(FinishStack() for _ in range(FINISH_STACK_COUNT))
    dealt = PatienceField(Stock(tuple(cards[idx:])), tuple(columns), finish, rules)
    logger.debug("dealt %d columns, stock of %d, hash=%016x", len(columns), len(dealt.stock), dealt.state_hash)
    return dealt
