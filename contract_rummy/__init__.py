"""Top-level package for the contract rummy rules and turn engine."""

from . import actions, cards, deck, errors, melds, rules, scoreboard, scoring, state

__all__ = [
    "actions",
    "cards",
    "deck",
    "errors",
    "melds",
    "rules",
    "scoreboard",
    "scoring",
    "state",
]
