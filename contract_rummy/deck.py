"""Deck construction and shuffling behind an explicit random generator."""

from __future__ import annotations

import logging
from typing import Any, MutableSequence, Protocol

import numpy as np

from .cards import Card, iter_standard_deck

__all__ = ["DeckProvider", "ShuffledDeckProvider"]

logger = logging.getLogger(__name__)


class DeckProvider(Protocol):
    """Source of freshly shuffled cards for table and round setup."""

    def produce(self, deck_count: int, include_jokers: bool, joker_count: int) -> list[Card]:  # pragma: no cover - protocol only
        ...

    def shuffle(self, cards: MutableSequence[Card]) -> None:  # pragma: no cover - protocol only
        ...


class ShuffledDeckProvider:
    """Deck provider backed by ``numpy.random.Generator``.

    Any object exposing an in-place ``shuffle`` (``random.Random`` included)
    can be supplied as ``rng`` to make deals reproducible.
    """

    def __init__(self, rng: Any | None = None, *, seed: int | None = None) -> None:
        if rng is not None and seed is not None:
            raise ValueError("pass either rng or seed, not both")
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def shuffle(self, cards: MutableSequence[Card]) -> None:
        if len(cards) < 2:
            return
        order = self._permutation(len(cards))
        shuffled = [cards[idx] for idx in order]
        cards[:] = shuffled

    def _permutation(self, length: int) -> list[int]:
        if isinstance(self.rng, np.random.Generator):
            return [int(idx) for idx in self.rng.permutation(length)]
        order = list(range(length))
        self.rng.shuffle(order)
        return order

    def produce(self, deck_count: int = 2, include_jokers: bool = True, joker_count: int = 4) -> list[Card]:
        if deck_count <= 0:
            raise ValueError("deck_count must be positive")
        if joker_count < 0:
            raise ValueError("joker_count must not be negative")
        cards = list(iter_standard_deck(deck_count, include_jokers, joker_count))
        self.shuffle(cards)
        logger.debug("produced shuffled deck of %d cards", len(cards))
        return cards
