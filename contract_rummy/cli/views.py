"""Composable view primitives for the contract rummy CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Set

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table

from ..cards import Card
from ..melds import MeldKind
from ..state import TableState


@dataclass(slots=True)
class StateSummaryView:
    """Renderable summarising the current table state."""

    state: TableState
    reveal_players: Set[int]
    card_formatter: Callable[[Card], str]

    def _cards_markup(self, cards: list[Card], visible: bool) -> str:
        if not visible:
            return f"{len(cards)} cards"
        if not cards:
            return "—"
        return " ".join(self.card_formatter(card) for card in cards)

    def _metadata_panel(self) -> Panel:
        state = self.state
        grid = Table.grid(expand=True)
        grid.add_column(justify="left")
        grid.add_row(f"[cyan]Round[/cyan]: {state.round_number} ({state.phase.value})")
        grid.add_row(f"[cyan]Stock[/cyan]: {len(state.undealt.remaining)} card(s)")
        hot = "face down" if state.undealt.hot is not None else "—"
        grid.add_row(f"[cyan]Hot[/cyan]: {hot}")
        if state.discard.cold is not None:
            grid.add_row(f"[cyan]Cold[/cyan]: {self.card_formatter(state.discard.cold)}")
        else:
            grid.add_row("[cyan]Cold[/cyan]: —")
        grid.add_row(f"[cyan]Dead[/cyan]: {len(state.discard.dead)} card(s)")
        return Panel(grid, title="Table State", box=box.SQUARE, border_style="blue")

    def render(self) -> RenderableType:
        table = Table(box=box.ROUNDED, expand=True)
        table.add_column("Seat", justify="left", style="bold")
        table.add_column("Player", justify="left")
        table.add_column("Hand", justify="left")
        table.add_column("Contract", justify="right")
        table.add_column("Score", justify="right")
        table.add_column("Me!", justify="right")
        table.add_column("Status", justify="left")

        for player in self.state.players:
            name = f"S{player.seat}"
            if player.seat == self.state.active_seat:
                name = f"[bold yellow]{name}[/bold yellow]"
            if player.seat == self.state.dealer_seat:
                name += " (D)"
            status = "Down" if player.has_gone_down else "Up"
            if player.finished:
                status = "[bold green]Finished[/bold green]"
            table.add_row(
                name,
                player.name,
                self._cards_markup(player.hand, player.seat in self.reveal_players),
                str(player.current_hand),
                str(player.score),
                str(player.me_claims_used),
                status,
            )

        components: list[RenderableType] = [table, self._metadata_panel()]

        melds = [(player, meld) for player in self.state.players for meld in player.melds]
        if melds:
            meld_table = Table(box=box.MINIMAL, expand=True)
            meld_table.add_column("Meld", justify="left", style="bold")
            meld_table.add_column("Owner", justify="left")
            meld_table.add_column("Kind", justify="left")
            meld_table.add_column("Cards", justify="left")
            for player, meld in melds:
                kind_label = "Set" if meld.kind is MeldKind.SET else "Run"
                meld_table.add_row(meld.id, player.name, kind_label, self._cards_markup(list(meld.cards), True))
            components.append(Panel(meld_table, title="Table Melds", box=box.SQUARE, border_style="green"))

        return Group(*components)
