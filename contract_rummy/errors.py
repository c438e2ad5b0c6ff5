"""Exceptions raised by the meld validator and the round state machine."""

from __future__ import annotations

__all__ = [
    "RuleViolation",
    "InvalidPlayerCount",
    "InvalidMeldComposition",
    "InvalidMeld",
    "CardNotOwned",
    "CardNotDiscardable",
    "NoColdCard",
    "DeckExhausted",
    "NoHotCard",
    "MeClaimLimitReached",
    "TargetNotDown",
    "ExtensionInvalid",
    "MeldNotFound",
    "AlreadyDown",
    "PhaseError",
]


class RuleViolation(RuntimeError):
    """Base class for every illegal action reported to the host."""


class InvalidPlayerCount(RuleViolation):
    """Raised when a table is created with an unsupported number of players."""


class InvalidMeldComposition(RuleViolation):
    """Raised when proposed melds do not match the player's contract."""


class InvalidMeld(RuleViolation):
    """Raised when a meld fails validation; ``reason`` names the broken rule."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid meld: {reason}")
        self.reason = reason


class CardNotOwned(RuleViolation):
    """Raised when a referenced card is not in the acting player's hand."""


class CardNotDiscardable(RuleViolation):
    """Raised when a joker or natural 2 is offered as a discard."""


class NoColdCard(RuleViolation):
    """Raised when a cold card is required but the discard pile is empty."""


class DeckExhausted(RuleViolation):
    """Raised when neither the stock nor the dead pile can produce a hot card."""


NoHotCard = DeckExhausted


class MeClaimLimitReached(RuleViolation):
    """Raised when a player has used all of their "Me!" claims this round."""


class TargetNotDown(RuleViolation):
    """Raised when extending the melds of a player who has not gone down."""


class ExtensionInvalid(RuleViolation):
    """Raised when cards cannot be added to a meld while keeping it valid."""


class MeldNotFound(RuleViolation):
    """Raised when a meld identifier does not exist on the target player."""


class AlreadyDown(RuleViolation):
    """Raised when a player attempts to go down twice in one round."""


class PhaseError(RuleViolation):
    """Raised when a round transition is requested from the wrong phase."""
