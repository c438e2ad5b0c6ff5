"""Typer entry-point wiring for the contract rummy CLI."""

from __future__ import annotations

import logging
from typing import Sequence

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .. import rules, simulate
from ..cards import Card, cards_from_codes
from ..errors import InvalidPlayerCount
from ..melds import Meld, MeldKind, RunMeld, SetMeld, build_run, build_set, validate_run, validate_set
from .render import format_card, render_state

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()

DEFAULT_NAMES = ("Ada", "Ben", "Cyd")


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine events while running."),
) -> None:
    """Contract rummy rules engine."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _meld_from_codes(cards: Sequence[Card], kind: MeldKind, wild: Sequence[int] | None) -> Meld:
    if kind is MeldKind.SET:
        if wild is None:
            # all wild: take the first ranked card
            rank = next((card.rank for card in cards if not card.is_wild), None) or next(
                (card.rank for card in cards if card.rank is not None), None
            )
            if rank is None:
                raise typer.BadParameter("a set needs at least one natural card")
            return build_set(cards, rank=rank)
        natural = next((card for idx, card in enumerate(cards) if idx not in wild and card.rank is not None), None)
        if natural is None or natural.rank is None:
            raise typer.BadParameter("a set needs at least one natural card")
        return SetMeld(rank=natural.rank, cards=tuple(cards), wild_positions=frozenset(wild))
    if wild is None:
        suit = next((card.suit for card in cards if not card.is_wild), None) or next(
            (card.suit for card in cards if card.suit is not None), None
        )
        if suit is None:
            raise typer.BadParameter("a run needs at least one natural card")
        return build_run(cards, suit=suit)
    natural = next((card for idx, card in enumerate(cards) if idx not in wild and card.suit is not None), None)
    if natural is None or natural.suit is None:
        raise typer.BadParameter("a run needs at least one natural card")
    return build_run(cards, suit=natural.suit, wild_positions=wild)


@app.command()
def validate(
    codes: list[str] = typer.Argument(..., help="Card codes in meld order, e.g. KC#1 AC#1 2C#1 JOKER#1."),
    kind: MeldKind = typer.Option(MeldKind.SET, "--kind", "-k", help="Meld shape to validate."),
    wild: list[int] | None = typer.Option(None, "--wild", "-w", help="Wild position (repeatable)."),
    wrap: bool = typer.Option(True, "--wrap/--no-wrap", help="Allow King-Ace-2 wraparound in runs."),
) -> None:
    """Check whether the given cards form a legal set or run."""

    try:
        cards = cards_from_codes(codes)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    meld = _meld_from_codes(cards, kind, wild)
    if isinstance(meld, RunMeld):
        check = validate_run(meld, allow_ace_wrap=wrap)
    else:
        check = validate_set(meld)

    labels = " ".join(format_card(card) for card in meld.cards)
    if check:
        console.print(f"[green]valid {kind.value}[/green]: {labels}")
        if check.values:
            console.print(f"[dim]values: {' '.join(str(value) for value in check.values)}[/dim]")
        return
    console.print(f"[red]invalid {kind.value}[/red]: {labels}\n{check.reason}")
    raise typer.Exit(code=1)


@app.command()
def deal(
    player: list[str] | None = typer.Option(None, "--player", "-p", help="Seat a player (repeatable, 3-6)."),
    seed: int | None = typer.Option(None, help="Random seed for reproducible deals (omit for randomness)."),
    reveal: bool = typer.Option(True, "--reveal/--hide", help="Show every player's hand."),
) -> None:
    """Create a table, deal the first round and flip the first cold card."""

    names = list(player) if player else list(DEFAULT_NAMES)
    try:
        state = rules.create_table(names, seed=seed)
    except InvalidPlayerCount as exc:
        raise typer.BadParameter(str(exc)) from exc
    rules.start_round(state)
    rules.flip_first_cold(state)
    seats = range(state.num_players) if reveal else ()
    console.print(render_state(state, reveal_players=seats))


@app.command("simulate")
def simulate_cli(
    players: int = typer.Option(3, min=3, max=6, help="Number of seated players."),
    rounds: int = typer.Option(7, min=1, help="Maximum number of rounds to play."),
    seed: int = typer.Option(123, help="Random seed for the simulation."),
) -> None:
    """Play a match between naive bots and report the totals."""

    names = [f"Bot {idx + 1}" for idx in range(players)]
    report = simulate.play_match(names, rounds=rounds, seed=seed)

    table = Table(title="Simulated Match", box=box.SIMPLE_HEAVY)
    table.add_column("Player", justify="left")
    table.add_column("Wins", justify="right")
    table.add_column("Contracts", justify="right")
    table.add_column("Level", justify="right")
    table.add_column("Score", justify="right")
    for total in report.history.totals():
        name = names[total.seat]
        if total.seat in report.winners:
            name = f"[bold green]{name}[/bold green]"
        table.add_row(
            name,
            str(total.wins),
            str(total.contracts_made),
            str(report.final_levels[total.seat]),
            str(report.final_scores[total.seat]),
        )

    console.print(table)
    console.print(f"[cyan]{report.rounds_played} round(s) simulated.[/cyan]")


def main() -> None:
    """Entry-point for the ``contract-rummy`` console script."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
