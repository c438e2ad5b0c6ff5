from __future__ import annotations

import pytest

from contract_rummy import actions, rules
from contract_rummy.cards import Card
from contract_rummy.errors import NoColdCard
from contract_rummy.state import TableState


def _state(seed: int = 5) -> TableState:
    state = rules.create_table(["Ada", "Ben", "Cyd"], seed=seed)
    rules.start_round(state)
    rules.flip_first_cold(state)
    return state


def _cards(*codes: str) -> list[Card]:
    return [Card.from_code(code) for code in codes]


def test_no_draws_outside_play_phase() -> None:
    state = rules.create_table(["Ada", "Ben", "Cyd"], seed=1)

    assert actions.legal_draw_actions(state) == []


def test_draws_offer_hot_and_cold() -> None:
    state = _state()

    assert actions.legal_draw_actions(state) == [
        actions.DrawAction(source="hot"),
        actions.DrawAction(source="cold"),
    ]


def test_cold_draw_disappears_once_taken() -> None:
    state = _state()
    actions.apply_draw_action(state, actions.DrawAction(source="cold"))

    assert actions.legal_draw_actions(state) == [actions.DrawAction(source="hot")]
    with pytest.raises(NoColdCard):
        actions.apply_draw_action(state, actions.DrawAction(source="cold"))


def test_hot_draw_action_grows_hand() -> None:
    state = _state()
    before = len(state.active_player.hand)

    card = actions.apply_draw_action(state, actions.DrawAction(source="hot"))

    assert len(state.active_player.hand) == before + 1
    assert state.active_player.hand[-1] == card


def test_unknown_draw_source_is_rejected() -> None:
    with pytest.raises(ValueError):
        actions.apply_draw_action(_state(), actions.DrawAction(source="stock"))  # type: ignore[arg-type]


def test_discards_skip_wilds_and_sort_by_points() -> None:
    state = _state()
    state.players[1].hand = _cards("4C#1", "JOKER#1", "AH#1", "2D#1", "KS#1")

    discards = actions.legal_discard_actions(state, 1)

    assert [action.card.id for action in discards] == ["AH#1", "KS#1", "4C#1"]


def test_apply_discard_action_sets_cold_card() -> None:
    state = _state()
    card = next(card for card in state.players[1].hand if not card.is_wild)

    actions.apply_discard_action(state, 1, actions.DiscardAction(card=card))

    assert state.discard.cold == card


def test_can_claim_tracks_limit_and_cold_card() -> None:
    state = _state()

    assert actions.can_claim(state, 2)
    state.players[2].me_claims_used = state.config.max_me_claims
    assert not actions.can_claim(state, 2)
    assert actions.can_claim(state, 0)

    rules.active_draws_cold(state)
    assert not actions.can_claim(state, 0)
