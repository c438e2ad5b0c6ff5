"""Helpers for tracking multi-round match results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

__all__ = ["PlayerRoundScore", "RoundSummary", "PlayerMatchTotal", "MatchHistory"]


@dataclass(frozen=True, slots=True)
class PlayerRoundScore:
    """Per-player scoring breakdown captured at the end of a round."""

    seat: int
    hand_points: int
    went_down: bool
    level_before: int
    level_after: int
    won_round: bool


@dataclass(frozen=True, slots=True)
class RoundSummary:
    """Summary captured after a single round."""

    round_number: int
    winner_seat: int
    scores: Sequence[PlayerRoundScore]


@dataclass(frozen=True, slots=True)
class PlayerMatchTotal:
    """Aggregate match totals accumulated across all recorded rounds."""

    seat: int
    wins: int
    penalty_points: int
    contracts_made: int


@dataclass(slots=True)
class MatchHistory:
    """Mutable tracker that accumulates round summaries for a match."""

    num_players: int
    rounds: list[RoundSummary] = field(default_factory=list)
    _wins: list[int] = field(init=False, repr=False)
    _points: list[int] = field(init=False, repr=False)
    _contracts: list[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.num_players <= 0:
            raise ValueError("num_players must be positive")
        self._wins = [0 for _ in range(self.num_players)]
        self._points = [0 for _ in range(self.num_players)]
        self._contracts = [0 for _ in range(self.num_players)]

    def record(self, summary: RoundSummary) -> None:
        """Record ``summary`` and update cumulative totals."""

        if len(summary.scores) != self.num_players:
            raise ValueError("score count does not match number of players")
        for score in summary.scores:
            if score.seat < 0 or score.seat >= self.num_players:
                raise ValueError("seat out of range")
        self.rounds.append(summary)
        for score in summary.scores:
            self._points[score.seat] += score.hand_points
            if score.went_down:
                self._contracts[score.seat] += 1
            if score.won_round:
                self._wins[score.seat] += 1

    def totals(self) -> list[PlayerMatchTotal]:
        """Return the cumulative totals for each player in seating order."""

        return [
            PlayerMatchTotal(
                seat=idx,
                wins=self._wins[idx],
                penalty_points=self._points[idx],
                contracts_made=self._contracts[idx],
            )
            for idx in range(self.num_players)
        ]
