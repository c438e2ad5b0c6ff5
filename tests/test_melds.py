from __future__ import annotations

import pytest

from contract_rummy.cards import Card, Rank, Suit
from contract_rummy.errors import ExtensionInvalid, InvalidMeld
from contract_rummy.melds import (
    HandRequirement,
    RunMeld,
    SetMeld,
    build_run,
    build_set,
    check_composition,
    extend_meld,
    get_hand_requirement,
    infer_run_values,
    require_valid,
    validate_meld,
    validate_run,
    validate_set,
)


def _cards(*codes: str) -> tuple[Card, ...]:
    return tuple(Card.from_code(code) for code in codes)


def _set(rank: Rank, codes: tuple[str, ...], wilds: set[int] | None = None) -> SetMeld:
    return SetMeld(rank=rank, cards=_cards(*codes), wild_positions=frozenset(wilds or ()))


def _run(suit: Suit, codes: tuple[str, ...], wilds: set[int] | None = None) -> RunMeld:
    return RunMeld(suit=suit, cards=_cards(*codes), wild_positions=frozenset(wilds or ()))


@pytest.mark.parametrize(
    ("codes", "wilds", "expected"),
    [
        (("3H#1", "3S#1", "JOKER#1"), {2}, True),
        (("3H#1", "3H#2", "3S#1"), set(), True),
        (("3H#1", "3S#1", "3D#1", "2C#1"), {3}, True),
        (("3H#1", "JOKER#1", "JOKER#2"), {1, 2}, False),
        (("3H#1", "3S#1", "JOKER#1", "2D#1"), {2, 3}, False),
        (("3H#1", "3S#1"), set(), False),
        (("3H#1", "4S#1", "3D#1"), set(), False),
        (("3H#1", "3S#1", "2D#1"), set(), False),
        (("3H#1", "3S#1", "3D#1", "3C#1"), {3}, False),
    ],
)
def test_validate_set_rules(codes: tuple[str, ...], wilds: set[int], expected: bool) -> None:
    assert bool(validate_set(_set(Rank.THREE, codes, wilds))) is expected


def test_set_of_natural_twos_is_rejected() -> None:
    check = validate_set(_set(Rank.TWO, ("2H#1", "2D#1", "2S#1")))

    assert not check
    assert check.reason == "Sets of natural 2s are not allowed"


def test_set_reports_specific_reasons() -> None:
    assert validate_set(_set(Rank.THREE, ("3H#1", "JOKER#1", "JOKER#2"), {1, 2})).reason == (
        "Too many wilds in set (must be <= natural - 1)"
    )
    assert validate_set(_set(Rank.THREE, ("3H#1", "3S#1", "3D#1", "3C#1"), {3})).reason == (
        "Wild position must contain a wild card (Joker or 2)"
    )


def test_simple_natural_run_infers_values() -> None:
    check = validate_run(_run(Suit.SPADES, ("3S#1", "4S#1", "5S#1", "6S#1")))

    assert check
    assert check.values == (3, 4, 5, 6)


@pytest.mark.parametrize(
    ("codes", "wilds", "reason"),
    [
        (("3H#1", "4H#1", "5H#1"), set(), "Run must have at least 4 cards"),
        (("3H#1", "2D#1", "JOKER#1", "6H#1"), {1, 2}, "No consecutive wilds allowed in runs"),
        (
            ("3H#1", "4H#1", "4H#2", "5H#1"),
            set(),
            "Runs cannot contain duplicate ranks (even across duplicate physical cards)",
        ),
        (("3H#1", "4H#1", "5S#1", "6H#1"), set(), "All natural cards in a run must match the run suit"),
        (("3H#1", "4H#1", "5H#1", "6H#1"), {1}, "Wild position must contain a wild card (Joker or 2)"),
        (("3H#1", "4H#1", "5H#1", "6H#1"), {9}, "Wild position must contain a wild card (Joker or 2)"),
        (
            ("JOKER#1", "4H#1", "JOKER#2", "6H#1", "JOKER#3"),
            {0, 2, 4},
            "Too many wilds in run (must be <= natural count)",
        ),
        (
            ("3H#1", "5H#1", "6H#1", "7H#1"),
            set(),
            "Natural cards cannot align into a single continuous sequence",
        ),
    ],
)
def test_validate_run_failures(codes: tuple[str, ...], wilds: set[int], reason: str) -> None:
    check = validate_run(_run(Suit.HEARTS, codes, wilds))

    assert not check
    assert check.reason == reason


def test_run_longer_than_fourteen_is_rejected() -> None:
    codes = tuple(f"{rank.value}H#1" for rank in Rank) + ("3H#2", "4H#2")
    check = validate_run(_run(Suit.HEARTS, codes))

    assert not check
    assert check.reason == "Run cannot exceed 14 cards"


def test_wild_fills_gap_in_run() -> None:
    check = validate_run(_run(Suit.HEARTS, ("3H#1", "JOKER#1", "5H#1", "6H#1"), {1}))

    assert check
    assert check.values == (3, 4, 5, 6)


def test_off_suit_two_substitutes_inside_run() -> None:
    assert validate_run(_run(Suit.HEARTS, ("3H#1", "2D#1", "5H#1", "6H#1"), {1}))


def test_leading_wild_extends_below_first_natural() -> None:
    check = validate_run(_run(Suit.CLUBS, ("JOKER#1", "4C#1", "5C#1", "6C#1"), {0}))

    assert check.values == (3, 4, 5, 6)


def test_king_ace_two_wrap_depends_on_option() -> None:
    meld = _run(Suit.CLUBS, ("KC#1", "AC#1", "2C#1", "JOKER#1"), {3})

    wrapped = validate_run(meld)
    assert wrapped
    assert wrapped.values == (13, 14, 2, 3)

    assert not validate_run(meld, allow_ace_wrap=False)


def test_ace_low_needs_wrap_and_ace_high_does_not() -> None:
    low = _run(Suit.HEARTS, ("AH#1", "2H#1", "3H#1", "4H#1"))
    high = _run(Suit.HEARTS, ("JH#1", "QH#1", "KH#1", "AH#1"))

    assert validate_run(low)
    assert not validate_run(low, allow_ace_wrap=False)
    assert validate_run(high, allow_ace_wrap=False).values == (11, 12, 13, 14)


def test_infer_run_values_needs_a_natural() -> None:
    check = infer_run_values(_run(Suit.HEARTS, ("JOKER#1", "JOKER#2", "JOKER#3", "JOKER#4"), {0, 1, 2, 3}))

    assert not check
    assert check.reason == "Run must contain at least one natural card"


def test_validate_meld_dispatches_on_shape() -> None:
    assert validate_meld(_set(Rank.NINE, ("9H#1", "9S#1", "9D#1")))
    assert validate_meld(_run(Suit.SPADES, ("9S#1", "10S#1", "JS#1", "QS#1")))
    assert not validate_meld(_run(Suit.SPADES, ("9S#1", "10S#1", "JS#1")))


def test_require_valid_raises_with_reason() -> None:
    with pytest.raises(InvalidMeld) as excinfo:
        require_valid(_set(Rank.THREE, ("3H#1", "3S#1")))

    assert excinfo.value.reason == "Set must have at least 3 cards"


@pytest.mark.parametrize(
    ("level", "expected"),
    [
        (1, HandRequirement(sets=2, runs=0)),
        (2, HandRequirement(sets=1, runs=1)),
        (3, HandRequirement(sets=0, runs=2)),
        (4, HandRequirement(sets=2, runs=1)),
        (5, HandRequirement(sets=1, runs=2)),
        (6, HandRequirement(sets=3, runs=0)),
        (7, HandRequirement(sets=1, runs=1, run_min_length=7)),
    ],
)
def test_hand_requirements(level: int, expected: HandRequirement) -> None:
    assert get_hand_requirement(level) == expected


@pytest.mark.parametrize("level", [0, 8])
def test_hand_requirement_rejects_unknown_level(level: int) -> None:
    with pytest.raises(ValueError):
        get_hand_requirement(level)


def test_check_composition_counts_kinds() -> None:
    a_set = _set(Rank.NINE, ("9H#1", "9S#1", "9D#1"))
    a_run = _run(Suit.SPADES, ("3S#1", "4S#1", "5S#1", "6S#1"))

    assert not check_composition([a_set, a_run], 1)
    assert check_composition([a_set, a_run], 2)


def test_check_composition_requires_long_run_for_last_contract() -> None:
    a_set = _set(Rank.NINE, ("9H#1", "9S#1", "9D#1"))
    short = _run(Suit.SPADES, ("3S#1", "4S#1", "5S#1", "6S#1"))
    long = _run(Suit.SPADES, ("3S#1", "4S#1", "5S#1", "6S#1", "7S#1", "8S#1", "9S#1"))

    assert not check_composition([a_set, short], 7)
    assert check_composition([a_set, long], 7)


def test_build_helpers_flag_wild_cards() -> None:
    triple = build_set(_cards("7H#1", "7S#1", "2D#1"))
    wrap = build_run(_cards("KC#1", "AC#1", "2C#1", "JOKER#1"))

    assert triple.rank is Rank.SEVEN
    assert triple.wild_positions == frozenset({2})
    assert wrap.suit is Suit.CLUBS
    assert wrap.wild_positions == frozenset({3})


def test_extend_set_appends_and_flags_wilds() -> None:
    meld = _set(Rank.THREE, ("3H#1", "3S#1", "3D#1"))

    extended = extend_meld(meld, _cards("3C#1", "JOKER#1"))

    assert [card.id for card in extended.cards] == ["3H#1", "3S#1", "3D#1", "3C#1", "JOKER#1"]
    assert extended.wild_positions == frozenset({4})


def test_extend_set_rejects_wild_majority() -> None:
    meld = _set(Rank.THREE, ("3H#1", "3S#1", "JOKER#1"), {2})

    with pytest.raises(ExtensionInvalid):
        extend_meld(meld, _cards("JOKER#2", "JOKER#3"))


def test_extend_run_on_either_end() -> None:
    meld = _run(Suit.HEARTS, ("4H#1", "5H#1", "6H#1", "7H#1"))

    right = extend_meld(meld, _cards("8H#1"))
    left = extend_meld(meld, _cards("3H#1"))

    assert [card.id for card in right.cards][-1] == "8H#1"
    assert [card.id for card in left.cards][0] == "3H#1"


def test_extend_run_prefers_left_end_for_wilds() -> None:
    meld = _run(Suit.HEARTS, ("4H#1", "5H#1", "6H#1", "7H#1"), set())

    extended = extend_meld(meld, _cards("JOKER#1"))

    assert extended.cards[0].is_joker
    assert extended.wild_positions == frozenset({0})


def test_extend_run_shifts_existing_wild_positions() -> None:
    meld = _run(Suit.HEARTS, ("4H#1", "JOKER#1", "6H#1", "7H#1"), {1})

    extended = extend_meld(meld, _cards("3H#1"))

    assert extended.wild_positions == frozenset({2})
    assert validate_run(extended).values == (3, 4, 5, 6, 7)


def test_extend_run_never_inserts_inside() -> None:
    meld = _run(Suit.HEARTS, ("4H#1", "5H#1", "6H#1", "7H#1"))

    with pytest.raises(ExtensionInvalid, match="either end"):
        extend_meld(meld, _cards("9H#1"))


def test_extend_requires_cards() -> None:
    with pytest.raises(ExtensionInvalid):
        extend_meld(_set(Rank.THREE, ("3H#1", "3S#1", "3D#1")), ())
