"""Round state machine: dealing, drawing, claiming, melding, discarding and scoring.

Every operation checks all of its preconditions before touching the table so
a raised :class:`~contract_rummy.errors.RuleViolation` leaves the state as it
was. The engine does not police turn order; callers act for the right seat.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, Sequence

from . import scoring
from .cards import Card
from .deck import DeckProvider, ShuffledDeckProvider
from .errors import (
    AlreadyDown,
    CardNotDiscardable,
    CardNotOwned,
    DeckExhausted,
    ExtensionInvalid,
    InvalidMeld,
    InvalidMeldComposition,
    InvalidPlayerCount,
    MeClaimLimitReached,
    MeldNotFound,
    NoColdCard,
    PhaseError,
    RuleViolation,
    TargetNotDown,
)
from .melds import MAX_LEVEL, Meld, check_composition, extend_meld, require_valid
from .scoreboard import PlayerRoundScore, RoundSummary
from .state import DiscardPile, Phase, PlayerState, TableConfig, TableState, UndealtPile

__all__ = [
    "create_table",
    "start_round",
    "flip_first_cold",
    "claim_cold_via_me",
    "active_draws_cold",
    "active_draws_hot",
    "player_goes_down",
    "add_to_own_meld",
    "add_to_other_players_meld",
    "discard",
    "try_go_out_by_empty_hand",
    "end_round",
    "prepare_next_round",
    "pass_turn",
    "match_winners",
    "ensure_hot",
    "can_discard",
]

logger = logging.getLogger(__name__)

HandPoints = Callable[[Sequence[Card]], int]


def _fresh_deck(config: TableConfig, provider: DeckProvider) -> list[Card]:
    return provider.produce(config.deck_count, config.include_jokers, config.joker_count)


def create_table(
    player_names: Sequence[str],
    *,
    config: TableConfig | None = None,
    deck_provider: DeckProvider | None = None,
    seed: int | None = None,
) -> TableState:
    """Seat the players in the given order and shuffle the first deck."""

    config = config if config is not None else TableConfig()
    names = list(player_names)
    if not config.min_players <= len(names) <= config.max_players:
        raise InvalidPlayerCount(
            f"Game supports {config.min_players} to {config.max_players} players, got {len(names)}"
        )

    provider = deck_provider if deck_provider is not None else ShuffledDeckProvider(seed=seed)
    players = [PlayerState(id=f"p{idx + 1}", name=name, seat=idx) for idx, name in enumerate(names)]
    state = TableState(
        players=players,
        config=config,
        deck_provider=provider,
        dealer_seat=0,
        active_seat=1 % len(players),
        phase=Phase.DEAL,
        undealt=UndealtPile(remaining=_fresh_deck(config, provider)),
    )
    logger.info("created table for %d players", len(players))
    return state


def _refill_hot(state: TableState) -> bool:
    """Populate the hot slot, reshuffling dead cards into an empty stock.

    Returns ``False`` without touching any pile when no card is available.
    """

    undealt = state.undealt
    if undealt.hot is not None:
        return True
    if not undealt.remaining:
        if not state.discard.dead:
            return False
        pool = list(state.discard.dead)
        state.deck_provider.shuffle(pool)
        state.discard.dead = []
        undealt.remaining = pool
        logger.info("reshuffled %d dead card(s) into the stock", len(pool))
    undealt.hot = undealt.remaining.pop()
    return True


def ensure_hot(state: TableState) -> Card:
    """Return the current hot card, refilling it first when the slot is empty."""

    if not _refill_hot(state):
        raise DeckExhausted("No cards left to reshuffle")
    hot = state.undealt.hot
    assert hot is not None
    return hot


def _take_hot(state: TableState) -> Card:
    card = ensure_hot(state)
    state.undealt.hot = None
    _refill_hot(state)
    return card


def _require_phase(state: TableState, expected: Phase, action: str) -> None:
    if state.phase is not expected:
        raise PhaseError(f"cannot {action} during phase '{state.phase.value}'")


def start_round(state: TableState) -> None:
    """Deal one card at a time, starting left of the dealer and ending on the dealer."""

    _require_phase(state, Phase.DEAL, "deal")
    num_players = state.num_players
    hand_size = state.config.hand_size
    needed = hand_size * num_players
    if state.cards_in_piles() < needed:
        raise DeckExhausted(f"need {needed} cards to deal, only {state.cards_in_piles()} available")

    for _ in range(hand_size):
        for offset in range(1, num_players + 1):
            seat = (state.dealer_seat + offset) % num_players
            state.players[seat].hand.append(_take_hot(state))
    _refill_hot(state)
    state.phase = Phase.ANALYZE
    logger.info("round %d dealt: %d card(s) each", state.round_number, hand_size)


def flip_first_cold(state: TableState) -> Card:
    """Turn the hot card face up as the first cold card and open play."""

    _require_phase(state, Phase.ANALYZE, "flip the first cold card")
    card = _take_hot(state)
    state.discard.bury_and_replace(card)
    state.phase = Phase.PLAY
    state.active_seat = state.seat_after(state.dealer_seat)
    logger.debug("first cold card %s, seat %d to act", card.code, state.active_seat)
    return card


def claim_cold_via_me(state: TableState, seat: int) -> tuple[Card, Card]:
    """Claim the cold card out of turn; the claimant must also take the hot card."""

    player = state.player(seat)
    if player.me_claims_used >= state.config.max_me_claims:
        raise MeClaimLimitReached(f"{player.name} has used all {state.config.max_me_claims} Me! claims")
    cold = state.discard.cold
    if cold is None:
        raise NoColdCard("No cold card to claim")
    ensure_hot(state)

    state.discard.cold = None
    player.hand.append(cold)
    hot = _take_hot(state)
    player.hand.append(hot)
    player.me_claims_used += 1
    logger.debug("seat %d claimed %s with forced %s (%d used)", seat, cold.code, hot.code, player.me_claims_used)
    return cold, hot


def active_draws_cold(state: TableState) -> Card:
    """Move the cold card into the active player's hand."""

    cold = state.discard.cold
    if cold is None:
        raise NoColdCard("No cold card to draw")
    state.discard.cold = None
    state.active_player.hand.append(cold)
    logger.debug("seat %d drew cold %s", state.active_seat, cold.code)
    return cold


def active_draws_hot(state: TableState) -> Card:
    """Move the hot card into the active player's hand."""

    card = _take_hot(state)
    state.active_player.hand.append(card)
    logger.debug("seat %d drew hot card", state.active_seat)
    return card


def _require_distinct(cards: Sequence[Card]) -> None:
    ids = [card.id for card in cards]
    if len(set(ids)) != len(ids):
        raise InvalidMeld("A card cannot be used more than once")


def player_goes_down(state: TableState, seat: int, melds: Iterable[Meld]) -> list[Meld]:
    """Lay down the melds that satisfy the player's current contract."""

    player = state.player(seat)
    proposed = list(melds)
    if player.has_gone_down:
        raise AlreadyDown(f"{player.name} has already gone down this round")
    composition = check_composition(proposed, player.current_hand)
    if not composition:
        raise InvalidMeldComposition(composition.reason)
    for meld in proposed:
        require_valid(meld)
    used = [card for meld in proposed for card in meld.cards]
    _require_distinct(used)
    if not player.holds(used):
        raise CardNotOwned("Player does not possess all cards for melds")
    named = [
        replace(meld, id=meld.id or f"{player.id}-m{idx}") for idx, meld in enumerate(proposed, start=1)
    ]
    if len({meld.id for meld in named}) != len(named):
        raise InvalidMeld("Meld identifiers must be unique")

    player.remove_cards(used)
    player.melds = named
    player.has_gone_down = True
    logger.debug("seat %d went down on hand %d with %d meld(s)", seat, player.current_hand, len(named))
    return named


def _extend(owner: PlayerState, actor: PlayerState, meld_id: str, cards: Sequence[Card]) -> Meld:
    meld = owner.find_meld(meld_id)
    if meld is None:
        raise MeldNotFound(f"Meld '{meld_id}' not found")
    added = list(cards)
    _require_distinct(added)
    candidate = extend_meld(meld, added)
    if not actor.holds(added):
        raise CardNotOwned("Player does not possess all cards to add")

    actor.remove_cards(added)
    owner.melds = [candidate if existing.id == meld_id else existing for existing in owner.melds]
    logger.debug("seat %d added %d card(s) to meld %s", actor.seat, len(added), meld_id)
    return candidate


def add_to_own_meld(state: TableState, seat: int, meld_id: str, cards: Sequence[Card]) -> Meld:
    """Extend one of the player's own melds, wild cards allowed."""

    player = state.player(seat)
    return _extend(player, player, meld_id, cards)


def add_to_other_players_meld(
    state: TableState,
    seat: int,
    target_seat: int,
    meld_id: str,
    cards: Sequence[Card],
) -> Meld:
    """Extend another player's meld with natural, non-wild cards only."""

    player = state.player(seat)
    target = state.player(target_seat)
    if seat == target_seat:
        raise RuleViolation("Use add_to_own_meld for own melds")
    if not target.has_gone_down:
        raise TargetNotDown(f"{target.name} has not gone down")
    if any(card.is_wild for card in cards):
        raise ExtensionInvalid("Cannot play wilds or natural 2s on other players' melds")
    return _extend(target, player, meld_id, cards)


def can_discard(card: Card) -> bool:
    """Jokers and natural 2s never enter the discard pile."""

    return not card.is_wild


def discard(state: TableState, seat: int, card: Card) -> None:
    """Discard ``card``; the previous cold card is buried as dead."""

    player = state.player(seat)
    if not can_discard(card):
        raise CardNotDiscardable("Cannot discard Jokers or 2s")
    held = next((candidate for candidate in player.hand if candidate.id == card.id), None)
    if held is None:
        raise CardNotOwned("Card not in hand")

    player.hand.remove(held)
    state.discard.bury_and_replace(held)
    logger.debug("seat %d discarded %s", seat, held.code)


def try_go_out_by_empty_hand(state: TableState, seat: int) -> bool:
    """End the round with ``seat`` as winner when its hand is empty."""

    _require_phase(state, Phase.PLAY, "go out")
    if state.player(seat).hand:
        return False
    end_round(state, seat)
    return True


def end_round(
    state: TableState,
    winner_seat: int,
    *,
    hand_points: HandPoints = scoring.hand_points,
) -> RoundSummary:
    """Score the losing hands and advance the contract of everyone who went down."""

    _require_phase(state, Phase.PLAY, "end the round")
    state.player(winner_seat)
    scores: list[PlayerRoundScore] = []
    for player in state.players:
        level_before = player.current_hand
        won = player.seat == winner_seat
        points = 0 if won else hand_points(player.hand)
        player.score += points
        if player.has_gone_down:
            if level_before == MAX_LEVEL:
                player.finished = True
            player.advance_level()
        scores.append(
            PlayerRoundScore(
                seat=player.seat,
                hand_points=points,
                went_down=player.has_gone_down,
                level_before=level_before,
                level_after=player.current_hand,
                won_round=won,
            )
        )

    summary = RoundSummary(round_number=state.round_number, winner_seat=winner_seat, scores=tuple(scores))
    if state.history is not None:
        state.history.record(summary)
    state.phase = Phase.GAME_END if any(player.finished for player in state.players) else Phase.ROUND_END
    logger.info("round %d won by seat %d, phase now %s", state.round_number, winner_seat, state.phase.value)
    return summary


def prepare_next_round(state: TableState) -> None:
    """Rotate the dealer, shuffle a fresh deck and reset every per-round field."""

    if state.phase is Phase.GAME_END:
        raise PhaseError("the match is over")
    _require_phase(state, Phase.ROUND_END, "prepare the next round")

    state.dealer_seat = state.seat_after(state.dealer_seat)
    state.active_seat = state.seat_after(state.dealer_seat)
    state.round_number += 1
    state.undealt = UndealtPile(remaining=_fresh_deck(state.config, state.deck_provider))
    state.discard = DiscardPile()
    for player in state.players:
        player.reset_for_round()
    state.phase = Phase.DEAL
    logger.info("prepared round %d, dealer seat %d", state.round_number, state.dealer_seat)


def pass_turn(state: TableState) -> int:
    """Hand the turn to the next seat clockwise and return it."""

    state.active_seat = state.seat_after(state.active_seat)
    return state.active_seat


def match_winners(state: TableState) -> list[int]:
    """Return the seats with the lowest score among players who cleared every contract.

    Before anybody has finished, every player is a candidate.
    """

    candidates = [player for player in state.players if player.finished] or state.players
    best = min(player.score for player in candidates)
    return [player.seat for player in candidates if player.score == best]
