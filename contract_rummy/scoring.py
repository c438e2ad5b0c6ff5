"""Point values for cards left in hand when a round ends."""

from __future__ import annotations

from typing import Final, Iterable

from .cards import Card, Rank

__all__ = ["JOKER_POINTS", "RANK_POINTS", "card_points", "hand_points"]

JOKER_POINTS: Final[int] = 50
RANK_POINTS: Final[dict[Rank, int]] = {
    Rank.TWO: 25,
    Rank.THREE: 5,
    Rank.FOUR: 5,
    Rank.FIVE: 5,
    Rank.SIX: 5,
    Rank.SEVEN: 5,
    Rank.EIGHT: 5,
    Rank.NINE: 5,
    Rank.TEN: 10,
    Rank.JACK: 10,
    Rank.QUEEN: 10,
    Rank.KING: 10,
    Rank.ACE: 20,
}


def card_points(card: Card) -> int:
    """Return the penalty value of ``card``."""

    if card.rank is None:
        return JOKER_POINTS
    return RANK_POINTS[card.rank]


def hand_points(cards: Iterable[Card]) -> int:
    """Return the total penalty value of ``cards``."""

    return sum(card_points(card) for card in cards)
