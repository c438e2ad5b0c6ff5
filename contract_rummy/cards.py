"""Card abstractions and helpers for contract rummy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Iterable, Sequence


class Suit(str, Enum):
    """Enumeration of the four suits in a standard deck."""

    CLUBS = "C"
    DIAMONDS = "D"
    HEARTS = "H"
    SPADES = "S"


class Rank(str, Enum):
    """Enumeration of ranks ordered by their logical run value."""

    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"

    @property
    def logical_value(self) -> int:
        """Return the numeric value used in run inference (2..14, Ace high)."""

        return _LOGICAL_VALUES[self]


_LOGICAL_VALUES: Final[dict[Rank, int]] = {rank: idx + 2 for idx, rank in enumerate(Rank)}

SUIT_SYMBOLS: Final[dict[Suit, str]] = {
    Suit.CLUBS: "♣",
    Suit.DIAMONDS: "♦",
    Suit.HEARTS: "♥",
    Suit.SPADES: "♠",
}


@dataclass(frozen=True, slots=True)
class NaturalFace:
    """Face of a normal card: always carries both a suit and a rank."""

    suit: Suit
    rank: Rank


@dataclass(frozen=True, slots=True)
class JokerFace:
    """Face of a joker, which has neither suit nor rank."""


Face = NaturalFace | JokerFace


@dataclass(frozen=True, slots=True)
class Card:
    """Value object describing one physical card in play."""

    id: str
    face: Face
    deck: int = field(default=1, compare=False)

    @classmethod
    def natural(cls, rank: Rank, suit: Suit, deck: int = 1) -> "Card":
        return cls(id=f"{rank.value}{suit.value}#{deck}", face=NaturalFace(suit, rank), deck=deck)

    @classmethod
    def joker(cls, index: int, deck: int = 1) -> "Card":
        return cls(id=f"JOKER#{index}", face=JokerFace(), deck=deck)

    @classmethod
    def from_code(cls, code: str) -> "Card":
        """Parse a code such as ``QH#1`` or ``JOKER#2`` into a card."""

        parts = code.split("#")
        if len(parts) != 2 or not parts[1].isdigit():
            raise ValueError(f"invalid card code '{code}'")
        face, copy_str = parts
        copy_index = int(copy_str)
        if face.upper() == "JOKER":
            return cls.joker(copy_index)
        try:
            suit = Suit(face[-1].upper())
            rank = Rank(face[:-1].upper())
        except ValueError as exc:
            raise ValueError(f"invalid card code '{code}'") from exc
        return cls.natural(rank, suit, deck=copy_index)

    @property
    def is_joker(self) -> bool:
        return isinstance(self.face, JokerFace)

    @property
    def is_wild(self) -> bool:
        """Return ``True`` for jokers and natural 2s, the cards usable as substitutes."""

        return self.is_joker or self.rank is Rank.TWO

    @property
    def rank(self) -> Rank | None:
        return self.face.rank if isinstance(self.face, NaturalFace) else None

    @property
    def suit(self) -> Suit | None:
        return self.face.suit if isinstance(self.face, NaturalFace) else None

    @property
    def code(self) -> str:
        return self.id

    def label(self) -> str:
        """Create a display label suitable for CLI representations."""

        if isinstance(self.face, NaturalFace):
            return f"{self.face.rank.value}{SUIT_SYMBOLS[self.face.suit]}"
        return "🃏"


def iter_standard_deck(deck_count: int = 2, include_jokers: bool = True, joker_count: int = 4) -> Iterable[Card]:
    """Yield every physical card for ``deck_count`` decks in a fixed order.

    Jokers are spread across the decks so each keeps a unique identifier.
    """

    for deck in range(1, deck_count + 1):
        for suit in Suit:
            for rank in Rank:
                yield Card.natural(rank, suit, deck=deck)
    if include_jokers:
        for index in range(1, joker_count + 1):
            yield Card.joker(index, deck=(index - 1) % deck_count + 1)


def cards_from_codes(codes: Iterable[str]) -> list[Card]:
    return [Card.from_code(code) for code in codes]


def format_cards(cards: Sequence[Card]) -> str:
    return " ".join(card.code for card in cards)
