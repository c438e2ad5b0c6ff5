"""Legal action enumeration utilities for hosts driving the engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from . import rules, scoring
from .cards import Card
from .state import Phase, TableState

DrawSource = Literal["hot", "cold"]


@dataclass(frozen=True)
class DrawAction:
    """Action describing where the active player draws from."""

    source: DrawSource


@dataclass(frozen=True)
class DiscardAction:
    """Action describing the card that ends a turn."""

    card: Card


def legal_draw_actions(state: TableState) -> list[DrawAction]:
    """Return the draws available to the active player."""

    if state.phase is not Phase.PLAY:
        return []
    actions: list[DrawAction] = []
    if state.undealt.hot is not None or state.undealt.remaining or state.discard.dead:
        actions.append(DrawAction(source="hot"))
    if state.discard.cold is not None:
        actions.append(DrawAction(source="cold"))
    return actions


def legal_discard_actions(state: TableState, seat: int) -> list[DiscardAction]:
    """Return discards for ``seat`` ordered from the highest point value down."""

    player = state.player(seat)
    candidates = [card for card in player.hand if rules.can_discard(card)]
    candidates.sort(key=lambda card: (scoring.card_points(card), card.id), reverse=True)
    return [DiscardAction(card=card) for card in candidates]


def can_claim(state: TableState, seat: int) -> bool:
    """Return ``True`` when ``seat`` may call "Me!" on the current cold card."""

    player = state.player(seat)
    if state.phase is not Phase.PLAY or state.discard.cold is None:
        return False
    return player.me_claims_used < state.config.max_me_claims


def apply_draw_action(state: TableState, action: DrawAction) -> Card:
    """Apply the provided draw action using the rules engine."""

    if action.source == "cold":
        return rules.active_draws_cold(state)
    if action.source == "hot":
        return rules.active_draws_hot(state)
    raise ValueError(f"Unknown draw source {action.source}")


def apply_discard_action(state: TableState, seat: int, action: DiscardAction) -> None:
    rules.discard(state, seat, action.card)
