"""Self-play harness that drives the round state machine with a naive policy."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Sequence

from . import actions, rules, scoreboard
from .cards import Card, Rank
from .errors import DeckExhausted, RuleViolation
from .melds import MeldKind, SetMeld, build_set, get_hand_requirement
from .scoring import hand_points
from .state import Phase, PlayerState, TableConfig, TableState

__all__ = ["SimulationReport", "play_match"]

logger = logging.getLogger(__name__)

TURN_LIMIT = 400


@dataclass(frozen=True, slots=True)
class SimulationReport:
    """Summary of a simulated match."""

    history: scoreboard.MatchHistory
    rounds_played: int
    winners: tuple[int, ...]
    final_levels: tuple[int, ...]
    final_scores: tuple[int, ...]


def _naturals_by_rank(hand: Sequence[Card]) -> dict[Rank, list[Card]]:
    groups: dict[Rank, list[Card]] = defaultdict(list)
    for card in hand:
        if card.rank is not None and not card.is_wild:
            groups[card.rank].append(card)
    return groups


def _wants(hand: Sequence[Card], card: Card | None) -> bool:
    if card is None or card.rank is None or card.is_wild:
        return False
    return len(_naturals_by_rank(hand).get(card.rank, [])) >= 2


def _greedy_sets(player: PlayerState) -> list[SetMeld] | None:
    """Return natural triples meeting an all-sets contract, or ``None``."""

    requirement = get_hand_requirement(player.current_hand)
    if requirement.runs:
        return None
    groups = _naturals_by_rank(player.hand)
    ranks = sorted((rank for rank, cards in groups.items() if len(cards) >= 3), key=lambda r: -len(groups[r]))
    if len(ranks) < requirement.sets:
        return None
    return [build_set(groups[rank][:3]) for rank in ranks[: requirement.sets]]


def _lay_off(state: TableState, seat: int) -> None:
    player = state.players[seat]
    for meld in list(player.melds):
        if meld.kind is not MeldKind.SET:
            continue
        matching = [card for card in player.hand if card.rank is meld.rank and not card.is_wild]
        if matching:
            rules.add_to_own_meld(state, seat, meld.id, matching)


def _take_turn(state: TableState) -> bool:
    """Play one turn for the active seat; return ``True`` when the round ended."""

    seat = state.active_seat
    player = state.players[seat]

    if _wants(player.hand, state.discard.cold):
        rules.active_draws_cold(state)
    else:
        for other in range(state.num_players):
            if other != seat and actions.can_claim(state, other) and _wants(state.players[other].hand, state.discard.cold):
                rules.claim_cold_via_me(state, other)
                break
        rules.active_draws_hot(state)

    if not player.has_gone_down:
        proposal = _greedy_sets(player)
        if proposal is not None:
            rules.player_goes_down(state, seat, proposal)
    if player.has_gone_down:
        _lay_off(state, seat)
        if rules.try_go_out_by_empty_hand(state, seat):
            return True

    discards = actions.legal_discard_actions(state, seat)
    if discards:
        actions.apply_discard_action(state, seat, discards[0])
        if rules.try_go_out_by_empty_hand(state, seat):
            return True
    rules.pass_turn(state)
    return False


def _play_round(state: TableState) -> None:
    rules.start_round(state)
    rules.flip_first_cold(state)
    for _ in range(TURN_LIMIT):
        try:
            if _take_turn(state):
                return
        except DeckExhausted:
            logger.info("round %d stalled: deck exhausted", state.round_number)
            break
    winner = min(state.players, key=lambda player: (hand_points(player.hand), player.seat))
    rules.end_round(state, winner.seat)


def play_match(
    names: Sequence[str],
    *,
    rounds: int = 7,
    seed: int = 123,
    config: TableConfig | None = None,
) -> SimulationReport:
    """Play up to ``rounds`` rounds, stopping early once the match ends."""

    if rounds <= 0:
        raise ValueError("rounds must be positive")

    state = rules.create_table(names, config=config, seed=seed)
    played = 0
    for _ in range(rounds):
        try:
            _play_round(state)
        except RuleViolation:
            logger.exception("simulated round %d aborted", state.round_number)
            raise
        played += 1
        if state.phase is Phase.GAME_END:
            break
        rules.prepare_next_round(state)

    history = state.history
    assert history is not None
    return SimulationReport(
        history=history,
        rounds_played=played,
        winners=tuple(rules.match_winners(state)),
        final_levels=tuple(player.current_hand for player in state.players),
        final_scores=tuple(player.score for player in state.players),
    )
