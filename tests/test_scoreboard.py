from __future__ import annotations

import pytest

from contract_rummy import scoreboard
from contract_rummy.scoreboard import PlayerRoundScore


def _score(seat: int, points: int, went_down: bool, won: bool) -> PlayerRoundScore:
    return PlayerRoundScore(
        seat=seat,
        hand_points=points,
        went_down=went_down,
        level_before=1,
        level_after=2 if went_down else 1,
        won_round=won,
    )


def test_match_history_accumulates_totals() -> None:
    history = scoreboard.MatchHistory(num_players=2)
    history.record(
        scoreboard.RoundSummary(
            round_number=1,
            winner_seat=0,
            scores=[
                _score(0, points=0, went_down=True, won=True),
                _score(1, points=85, went_down=False, won=False),
            ],
        )
    )
    history.record(
        scoreboard.RoundSummary(
            round_number=2,
            winner_seat=1,
            scores=[
                _score(0, points=15, went_down=True, won=False),
                _score(1, points=0, went_down=True, won=True),
            ],
        )
    )

    totals = history.totals()
    assert len(history.rounds) == 2
    assert totals[0].wins == 1
    assert totals[1].wins == 1
    assert totals[0].penalty_points == 15
    assert totals[1].penalty_points == 85
    assert totals[0].contracts_made == 2
    assert totals[1].contracts_made == 1


def test_match_history_validates_player_count() -> None:
    history = scoreboard.MatchHistory(num_players=2)
    summary = scoreboard.RoundSummary(
        round_number=1,
        winner_seat=0,
        scores=[
            _score(0, points=0, went_down=True, won=True),
        ],
    )
    with pytest.raises(ValueError):
        history.record(summary)


def test_match_history_rejects_unknown_seat() -> None:
    history = scoreboard.MatchHistory(num_players=2)
    summary = scoreboard.RoundSummary(
        round_number=1,
        winner_seat=0,
        scores=[
            _score(0, points=0, went_down=True, won=True),
            _score(5, points=10, went_down=False, won=False),
        ],
    )
    with pytest.raises(ValueError):
        history.record(summary)
    assert history.rounds == []


def test_match_history_requires_players() -> None:
    with pytest.raises(ValueError):
        scoreboard.MatchHistory(num_players=0)
