"""Meld model and the pure validation rules for sets and runs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import ClassVar, Final, Iterable, Mapping, Sequence

from .cards import Card, Rank, Suit
from .errors import ExtensionInvalid, InvalidMeld

__all__ = [
    "MeldKind",
    "SetMeld",
    "RunMeld",
    "Meld",
    "MeldCheck",
    "HandRequirement",
    "HAND_REQUIREMENTS",
    "MAX_LEVEL",
    "build_set",
    "build_run",
    "validate_set",
    "validate_run",
    "infer_run_values",
    "validate_meld",
    "require_valid",
    "get_hand_requirement",
    "count_kinds",
    "check_composition",
    "extend_meld",
]

MIN_SET_LENGTH: Final[int] = 3
MIN_RUN_LENGTH: Final[int] = 4
MAX_RUN_LENGTH: Final[int] = 14
LOW_VALUE: Final[int] = Rank.TWO.logical_value
ACE_VALUE: Final[int] = Rank.ACE.logical_value
MAX_LEVEL: Final[int] = 7


class MeldKind(str, Enum):
    """Tag distinguishing the two meld shapes."""

    SET = "set"
    RUN = "run"


def _normalise(meld: "SetMeld | RunMeld") -> None:
    object.__setattr__(meld, "cards", tuple(meld.cards))
    object.__setattr__(meld, "wild_positions", frozenset(meld.wild_positions))


@dataclass(frozen=True, slots=True)
class SetMeld:
    """Same-rank grouping; ``wild_positions`` index the substituted cards."""

    rank: Rank
    cards: tuple[Card, ...]
    wild_positions: frozenset[int] = frozenset()
    id: str = ""

    kind: ClassVar[MeldKind] = MeldKind.SET

    def __post_init__(self) -> None:
        _normalise(self)


@dataclass(frozen=True, slots=True)
class RunMeld:
    """Same-suit sequence ordered from the lowest to the highest logical value."""

    suit: Suit
    cards: tuple[Card, ...]
    wild_positions: frozenset[int] = frozenset()
    id: str = ""

    kind: ClassVar[MeldKind] = MeldKind.RUN

    def __post_init__(self) -> None:
        _normalise(self)


Meld = SetMeld | RunMeld


@dataclass(frozen=True, slots=True)
class MeldCheck:
    """Outcome of a validation; truthy when the meld is legal."""

    ok: bool
    reason: str | None = None
    values: tuple[int, ...] = ()

    def __bool__(self) -> bool:
        return self.ok


_VALID: Final[MeldCheck] = MeldCheck(True)


def _fail(reason: str) -> MeldCheck:
    return MeldCheck(False, reason)


@dataclass(frozen=True, slots=True)
class HandRequirement:
    """Sets and runs a player must lay down to satisfy a contract level."""

    sets: int
    runs: int
    run_min_length: int | None = None


HAND_REQUIREMENTS: Final[Mapping[int, HandRequirement]] = MappingProxyType(
    {
        1: HandRequirement(sets=2, runs=0),
        2: HandRequirement(sets=1, runs=1),
        3: HandRequirement(sets=0, runs=2),
        4: HandRequirement(sets=2, runs=1),
        5: HandRequirement(sets=1, runs=2),
        6: HandRequirement(sets=3, runs=0),
        7: HandRequirement(sets=1, runs=1, run_min_length=7),
    }
)


def get_hand_requirement(level: int) -> HandRequirement:
    """Return the contract for ``level`` (1..7)."""

    try:
        return HAND_REQUIREMENTS[level]
    except KeyError:
        raise ValueError(f"contract level must be between 1 and {MAX_LEVEL}, got {level}") from None


def build_set(cards: Sequence[Card], *, rank: Rank | None = None, meld_id: str = "") -> SetMeld:
    """Create a set flagging every wild card; the rank defaults to the first natural."""

    if rank is None:
        rank = next((card.rank for card in cards if not card.is_wild), None)
        if rank is None:
            raise ValueError("cannot infer the rank of a set without a natural card")
    wilds = {idx for idx, card in enumerate(cards) if card.is_wild}
    return SetMeld(rank=rank, cards=tuple(cards), wild_positions=frozenset(wilds), id=meld_id)


def build_run(
    cards: Sequence[Card],
    *,
    suit: Suit | None = None,
    wild_positions: Iterable[int] | None = None,
    meld_id: str = "",
) -> RunMeld:
    """Create a run from ordered cards.

    Without explicit ``wild_positions`` jokers are flagged, and so are 2s whose
    suit differs from the run suit; a 2 of the run suit is kept natural.
    """

    if suit is None:
        suit = next((card.suit for card in cards if not card.is_wild), None)
        if suit is None:
            raise ValueError("cannot infer the suit of a run without a natural card")
    if wild_positions is None:
        wild_positions = [
            idx for idx, card in enumerate(cards) if card.is_joker or (card.is_wild and card.suit is not suit)
        ]
    return RunMeld(suit=suit, cards=tuple(cards), wild_positions=frozenset(wild_positions), id=meld_id)


def _wild_positions_hold_wilds(meld: Meld) -> bool:
    for pos in meld.wild_positions:
        if not 0 <= pos < len(meld.cards) or not meld.cards[pos].is_wild:
            return False
    return True


def validate_set(meld: SetMeld) -> MeldCheck:
    """Check the set rules: natural rank (never 2), three or more cards, a natural majority."""

    if meld.rank is Rank.TWO:
        return _fail("Sets of natural 2s are not allowed")
    cards = meld.cards
    if len(cards) < MIN_SET_LENGTH:
        return _fail("Set must have at least 3 cards")

    for idx, card in enumerate(cards):
        if idx in meld.wild_positions:
            continue
        if card.is_wild or card.rank is not meld.rank:
            return _fail("Natural cards in a set must match the set rank and cannot be Jokers or 2s")

    wild_count = len(meld.wild_positions)
    natural_count = len(cards) - wild_count
    if wild_count > max(0, natural_count - 1):
        return _fail("Too many wilds in set (must be <= natural - 1)")

    if not _wild_positions_hold_wilds(meld):
        return _fail("Wild position must contain a wild card (Joker or 2)")

    return _VALID


def _successor(value: int, wrap: bool) -> int | None:
    if value == ACE_VALUE:
        return LOW_VALUE if wrap else None
    return value + 1


def _predecessor(value: int, wrap: bool) -> int | None:
    if value == LOW_VALUE:
        return ACE_VALUE if wrap else None
    return value - 1


def _rotate(value: int) -> int:
    return LOW_VALUE if value == ACE_VALUE else value + 1


def infer_run_values(meld: RunMeld, *, allow_ace_wrap: bool = True) -> MeldCheck:
    """Assign a logical value to every position of ``meld``.

    The chain is grown outwards from the first natural card, then rotated one
    step at a time until every natural sits on its own value. A King-Ace-2
    wrap falls out of the rotation when ``allow_ace_wrap`` is set.
    """

    fixed: list[tuple[int, int]] = []
    for idx, card in enumerate(meld.cards):
        if idx in meld.wild_positions:
            continue
        if card.rank is None:
            return _fail("Natural cards must have rank and suit")
        fixed.append((idx, card.rank.logical_value))
    if not fixed:
        return _fail("Run must contain at least one natural card")

    values = [0] * len(meld.cards)
    anchor_idx, anchor_value = fixed[0]
    values[anchor_idx] = anchor_value
    for idx in range(anchor_idx - 1, -1, -1):
        previous = _predecessor(values[idx + 1], allow_ace_wrap)
        if previous is None:
            return _fail("Run sequence invalid without wrap")
        values[idx] = previous
    for idx in range(anchor_idx + 1, len(values)):
        following = _successor(values[idx - 1], allow_ace_wrap)
        if following is None:
            return _fail("Run sequence invalid without wrap")
        values[idx] = following

    for _ in range(MAX_RUN_LENGTH):
        if all(values[idx] == value for idx, value in fixed):
            break
        values = [_rotate(value) for value in values]
    else:
        return _fail("Natural cards cannot align into a single continuous sequence")

    for left, right in zip(values, values[1:]):
        if left == right:
            return _fail("Runs cannot repeat a rank")

    return MeldCheck(True, values=tuple(values))


def validate_run(meld: RunMeld, *, allow_ace_wrap: bool = True) -> MeldCheck:
    """Check the run rules and infer the logical value of every position."""

    cards = meld.cards
    if len(cards) < MIN_RUN_LENGTH:
        return _fail("Run must have at least 4 cards")
    if len(cards) > MAX_RUN_LENGTH:
        return _fail("Run cannot exceed 14 cards")

    for idx in range(1, len(cards)):
        if idx - 1 in meld.wild_positions and idx in meld.wild_positions:
            return _fail("No consecutive wilds allowed in runs")

    if not _wild_positions_hold_wilds(meld):
        return _fail("Wild position must contain a wild card (Joker or 2)")

    natural_values: list[int] = []
    for idx, card in enumerate(cards):
        if idx in meld.wild_positions:
            continue
        if card.rank is None or card.suit is None:
            return _fail("Natural cards must have rank and suit")
        if card.suit is not meld.suit:
            return _fail("All natural cards in a run must match the run suit")
        natural_values.append(card.rank.logical_value)

    if len(set(natural_values)) != len(natural_values):
        return _fail("Runs cannot contain duplicate ranks (even across duplicate physical cards)")

    wild_count = len(meld.wild_positions)
    if wild_count > len(natural_values):
        return _fail("Too many wilds in run (must be <= natural count)")

    return infer_run_values(meld, allow_ace_wrap=allow_ace_wrap)


def validate_meld(meld: Meld) -> MeldCheck:
    """Dispatch to the validator for the meld's shape."""

    if isinstance(meld, SetMeld):
        return validate_set(meld)
    if isinstance(meld, RunMeld):
        return validate_run(meld, allow_ace_wrap=True)
    raise TypeError(f"unsupported meld type {type(meld).__name__}")


def require_valid(meld: Meld) -> Meld:
    """Return ``meld`` unchanged or raise :class:`InvalidMeld` with the failing rule."""

    check = validate_meld(meld)
    if not check:
        raise InvalidMeld(check.reason or "unknown rule")
    return meld


def count_kinds(melds: Iterable[Meld]) -> tuple[int, int]:
    """Return ``(sets, runs)`` contained in ``melds``."""

    sets = runs = 0
    for meld in melds:
        if meld.kind is MeldKind.SET:
            sets += 1
        else:
            runs += 1
    return sets, runs


def check_composition(melds: Sequence[Meld], level: int) -> MeldCheck:
    """Check that ``melds`` hold exactly the sets and runs contract ``level`` asks for."""

    requirement = get_hand_requirement(level)
    sets, runs = count_kinds(melds)
    if sets != requirement.sets or runs != requirement.runs:
        return _fail(
            f"Hand {level} requires {requirement.sets} set(s) and {requirement.runs} run(s), "
            f"got {sets} and {runs}"
        )
    if requirement.run_min_length is not None:
        longest = max((len(meld.cards) for meld in melds if meld.kind is MeldKind.RUN), default=0)
        if longest < requirement.run_min_length:
            return _fail(f"Hand {level} requires a run of at least {requirement.run_min_length}")
    return _VALID


def _run_candidate(meld: RunMeld, cards: Sequence[Card], *, left: bool) -> RunMeld:
    added = tuple(cards)
    if left:
        combined = added + meld.cards
        wilds = {pos + len(added) for pos in meld.wild_positions}
        wilds.update(idx for idx, card in enumerate(added) if card.is_wild)
    else:
        combined = meld.cards + added
        wilds = set(meld.wild_positions)
        wilds.update(len(meld.cards) + idx for idx, card in enumerate(added) if card.is_wild)
    return replace(meld, cards=combined, wild_positions=frozenset(wilds))


def extend_meld(meld: Meld, cards: Sequence[Card]) -> Meld:
    """Return ``meld`` with ``cards`` added, validated as a whole.

    Sets grow at the end. Runs are tried on the left end, then on the right
    end; cards are never inserted inside a run.
    """

    if not cards:
        raise ExtensionInvalid("No cards to add")

    if isinstance(meld, SetMeld):
        start = len(meld.cards)
        wilds = set(meld.wild_positions)
        wilds.update(start + idx for idx, card in enumerate(cards) if card.is_wild)
        candidate = replace(meld, cards=meld.cards + tuple(cards), wild_positions=frozenset(wilds))
        check = validate_set(candidate)
        if not check:
            raise ExtensionInvalid(f"Invalid extension: {check.reason}")
        return candidate

    for left in (True, False):
        run_candidate = _run_candidate(meld, cards, left=left)
        if validate_run(run_candidate):
            return run_candidate
    raise ExtensionInvalid("Cannot append cards to run at either end while preserving validity")
