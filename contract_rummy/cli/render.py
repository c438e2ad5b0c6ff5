"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from typing import Iterable

from rich.console import RenderableType
from rich.panel import Panel

from ..cards import Card, Suit
from ..state import TableState
from .views import StateSummaryView

_SUIT_COLOURS = {
    Suit.SPADES: "cyan",
    Suit.HEARTS: "red",
    Suit.DIAMONDS: "magenta",
    Suit.CLUBS: "green",
}


def format_card(card: Card) -> str:
    """Return a Rich-rendered label for ``card``."""

    if card.rank is None or card.suit is None:
        return f"[bold magenta]{card.label()}[/bold magenta]"
    colour = _SUIT_COLOURS[card.suit]
    suffix = "′" if card.deck > 1 else ""
    return f"[{colour}]{card.label()}{suffix}[/{colour}]"


def render_state(
    state: TableState,
    *,
    reveal_players: Iterable[int] | None = None,
    title: str = "Contract Rummy",
) -> RenderableType:
    """Return a Rich panel describing the current table state."""

    view = StateSummaryView(
        state=state,
        reveal_players=set(reveal_players or set()),
        card_formatter=format_card,
    )
    return Panel(view.render(), title=title, padding=(0, 1), border_style="cyan")
