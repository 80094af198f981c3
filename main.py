#!/usr/bin/env python3
"""Mars Decisions — input-resolution core of a Terraforming-Mars-style game."""

import argparse
import logging
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree


def _input_tree(description: dict, tree: Tree | None = None) -> Tree:
    """Render a ``model_dump()`` of a pending input as a rich tree."""
    label = f"[bold]{description['title']}[/bold] [dim]({description['type']})[/dim]"
    if description["type"] == "amount":
        label += f" {description['min_amount']}..{description['max_amount']}"
    elif description["type"] == "player":
        label += f" {', '.join(description['players'])}"
    elif description["type"] == "card":
        label += (
            f" pick {description['min_cards_to_select']}-{description['max_cards_to_select']}"
            f" of {', '.join(description['cards'])}"
        )
    elif description["type"] == "value":
        label += f" {', '.join(description['values'])}"
    node = tree.add(label) if tree is not None else Tree(label)
    for index, child in enumerate(description.get("options", ())):
        _input_tree(child, node.add(f"[cyan]{index}[/cyan]") if description["type"] == "or" else node)
    return node


def _players_table(game) -> Table:
    table = Table(title=f"{game.game_id} — generation {game.generation}")
    table.add_column("Player")
    table.add_column("Corporation")
    table.add_column("TR", justify="right")
    for resource in ("MC", "Steel", "Ti", "Plants", "Energy", "Heat"):
        table.add_column(resource, justify="right")
    table.add_column("Hand")
    for p in game.players:
        corp = p.corporation_card.title if p.corporation_card else "-"
        amounts = [
            (p.mega_credits, p.mega_credit_production),
            (p.steel, p.steel_production),
            (p.titanium, p.titanium_production),
            (p.plants, p.plant_production),
            (p.energy, p.energy_production),
            (p.heat, p.heat_production),
        ]
        table.add_row(
            f"{p.name} ({p.id})",
            corp,
            str(p.terraform_rating),
            *[f"{a} [dim]+{prod}[/dim]" for a, prod in amounts],
            ", ".join(n.value for n in p.cards_in_hand) or "-",
        )
    return table


def _run_demo(console: Console, save: bool) -> int:
    from game.demo import run_demo

    game = None
    for step, game in run_demo():
        heading = step.kind if not step.player_id else f"{step.player_id}: {step.kind}"
        if step.card is not None:
            heading += f" {step.card.value}"
        if step.payload is not None:
            heading += f" {step.payload}"
        console.rule(heading)
        if step.note:
            console.print(f"[dim]{step.note}[/dim]")
        for player in game.players:
            pending = game.describe_waiting_for(player.id)
            if pending is not None:
                console.print(Panel(_input_tree(pending), title=f"waiting for {player.id}"))
    console.print(_players_table(game))

    if save:
        from game.save import SaveManager

        path = SaveManager.autosave(game)
        console.print(f"Saved to [bold]{path}[/bold]")
    return 0


def _show_save(console: Console, game_id: str) -> int:
    from game.errors import DeserializationToleranceError
    from game.save import SaveManager

    try:
        game = SaveManager.load_game(game_id)
    except FileNotFoundError:
        console.print(f"[red]No save named {game_id!r}[/red]")
        return 1
    except DeserializationToleranceError as exc:
        console.print(f"[red]Cannot load {game_id!r}: {exc}[/red]")
        return 1
    console.print(_players_table(game))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Mars Decisions — pending decisions, answers and deferred actions.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Environment:
  MARS_SAVES_DIR                    Where saves are written (default: ./saves)
  MARS_LOG_LEVEL                    Logging level (default: WARNING)
  MARS_AUTO_RESOLVE_SINGLE_PLAYER   Auto-pick a lone target player (default: off)

Examples:
  python main.py --demo             Play the scripted two-player session
  python main.py --demo --save      ...and save the result
  python main.py --list             List saved games
  python main.py --show demo        Show a saved game
""",
    )
    parser.add_argument("--demo", action="store_true", help="Play the scripted demo session")
    parser.add_argument("--save", action="store_true", help="With --demo, save the finished session")
    parser.add_argument("--show", metavar="ID", help="Load a saved game and show its players")
    parser.add_argument("--list", action="store_true", help="List saved games")
    args = parser.parse_args()

    from game import config

    logging.basicConfig(level=config.log_level(), format="%(levelname)s %(name)s: %(message)s")
    console = Console()

    if args.demo:
        sys.exit(_run_demo(console, args.save))
    if args.show:
        sys.exit(_show_save(console, args.show))
    if args.list:
        from game.save import SaveManager

        for meta in SaveManager.list_saves():
            console.print(
                f"{meta.game_id:<20} gen {meta.generation:<3} "
                f"{meta.player_count} players  {meta.saved_at}"
            )
        sys.exit(0)
    parser.print_help()


if __name__ == "__main__":
    main()
