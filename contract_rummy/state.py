"""Core table state data structures for contract rummy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List

from .cards import Card
from .deck import DeckProvider, ShuffledDeckProvider
from .melds import MAX_LEVEL, Meld
from .scoreboard import MatchHistory


class Phase(str, Enum):
    """Externally observable progress markers of a round."""

    DEAL = "deal"
    ANALYZE = "analyze"
    PLAY = "play"
    ROUND_END = "round_end"
    GAME_END = "game_end"


@dataclass(slots=True)
class TimerConfig:
    """Turn windows in milliseconds, stored for the host's turn clock."""

    analyze_ms: int = 15_000
    draw_window_ms: int = 15_000
    play_window_ms: int = 30_000


@dataclass(slots=True)
class TableConfig:
    """Runtime configuration for a table."""

    deck_count: int = 2
    include_jokers: bool = True
    joker_count: int = 4
    hand_size: int = 11
    max_me_claims: int = 3
    min_players: int = 3
    max_players: int = 6
    timers: TimerConfig = field(default_factory=TimerConfig)

    def __post_init__(self) -> None:
        if self.deck_count <= 0:
            raise ValueError("deck_count must be positive")
        if self.joker_count < 0:
            raise ValueError("joker_count must not be negative")
        if self.hand_size <= 0:
            raise ValueError("hand_size must be positive")
        if self.max_me_claims < 0:
            raise ValueError("max_me_claims must not be negative")
        if not 1 <= self.min_players <= self.max_players:
            raise ValueError("player bounds must satisfy 1 <= min_players <= max_players")

    @property
    def deck_size(self) -> int:
        jokers = self.joker_count if self.include_jokers else 0
        return 52 * self.deck_count + jokers


@dataclass(slots=True)
class PlayerState:
    """State tracked for each seated player."""

    id: str
    name: str
    seat: int
    hand: List[Card] = field(default_factory=list)
    melds: List[Meld] = field(default_factory=list)
    has_gone_down: bool = False
    current_hand: int = 1
    score: int = 0
    me_claims_used: int = 0
    finished: bool = False

    def holds(self, cards: Iterable[Card]) -> bool:
        """Return ``True`` when every card in ``cards`` is in this hand."""

        hand_ids = {card.id for card in self.hand}
        return all(card.id in hand_ids for card in cards)

    def remove_cards(self, cards: Iterable[Card]) -> None:
        used = {card.id for card in cards}
        self.hand = [card for card in self.hand if card.id not in used]

    def find_meld(self, meld_id: str) -> Meld | None:
        return next((meld for meld in self.melds if meld.id == meld_id), None)

    def advance_level(self) -> None:
        if self.current_hand < MAX_LEVEL:
            self.current_hand += 1

    def reset_for_round(self) -> None:
        self.hand = []
        self.melds = []
        self.has_gone_down = False
        self.me_claims_used = 0


@dataclass(slots=True)
class DiscardPile:
    """Face-up discards: one takeable cold card over buried dead cards."""

    cold: Card | None = None
    dead: List[Card] = field(default_factory=list)

    def bury_and_replace(self, card: Card) -> None:
        """Make ``card`` cold, moving the previous cold card to dead."""

        if self.cold is not None:
            self.dead.append(self.cold)
        self.cold = card


@dataclass(slots=True)
class UndealtPile:
    """Face-down stock with its exposed hot card; the stock top is the list end."""

    hot: Card | None = None
    remaining: List[Card] = field(default_factory=list)


@dataclass(slots=True)
class TableState:
    """Mutable aggregate owning every player and pile of a match."""

    players: List[PlayerState]
    config: TableConfig = field(default_factory=TableConfig)
    deck_provider: DeckProvider = field(default_factory=ShuffledDeckProvider)
    dealer_seat: int = 0
    active_seat: int = 0
    phase: Phase = Phase.DEAL
    discard: DiscardPile = field(default_factory=DiscardPile)
    undealt: UndealtPile = field(default_factory=UndealtPile)
    round_number: int = 1
    history: MatchHistory | None = None

    def __post_init__(self) -> None:
        if self.history is None and self.players:
            self.history = MatchHistory(num_players=len(self.players))

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def active_player(self) -> PlayerState:
        return self.players[self.active_seat]

    def player(self, seat: int) -> PlayerState:
        """Return the player at ``seat`` or raise ``ValueError``."""

        if seat < 0 or seat >= len(self.players):
            raise ValueError(f"invalid seat {seat}")
        return self.players[seat]

    def seat_after(self, seat: int) -> int:
        return (seat + 1) % len(self.players)

    def cards_in_piles(self) -> int:
        """Count cards held by the hot slot, the stock and the dead pile."""

        hot = 1 if self.undealt.hot is not None else 0
        return hot + len(self.undealt.remaining) + len(self.discard.dead)

    def all_cards(self) -> list[Card]:
        """Return every card on the table, in hands, melds and piles."""

        cards: list[Card] = []
        for player in self.players:
            cards.extend(player.hand)
            for meld in player.melds:
                cards.extend(meld.cards)
        if self.undealt.hot is not None:
            cards.append(self.undealt.hot)
        cards.extend(self.undealt.remaining)
        if self.discard.cold is not None:
            cards.append(self.discard.cold)
        cards.extend(self.discard.dead)
        return cards
