#!/usr/bin/env python3
"""Ad hoc query runner for Sous Chef.

Generate or edit recipes from the terminal and render them as kitchen tickets.
Runs the pipeline in-process by default, or posts to a running server with --url.

Usage:
    python query.py "Spicy noodles"
    python query.py --drink --mood "celebratory" --ingredient gin --ingredient lime "Something fizzy"
    python query.py --edit recipe.json "make it vegetarian"
    python query.py --url http://localhost:7777 "Crispy fish"
    python query.py --debug "Spicy noodles"  # Show raw JSON response

Like the web page, a generate answer is only rendered if it is a JSON array;
anything else is shown as an error.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from src.api.routes import CONFIG_ERROR_MESSAGE, EDIT_FAILURE_MESSAGE, GENERATE_FAILURE_MESSAGE
from src.hooks.normalize_input import RequestShapeError, parse_edit_request, parse_generation_request
from src.pipeline.recipe_pipeline import ConfigurationError, build_pipeline
from src.utils.config import config
from src.utils.logger import logger

console = Console()

UNREADABLE_TICKET = "The Chef returned an unreadable ticket."
UNREACHABLE_KITCHEN = "Failed to reach the kitchen server."


def render_ticket(recipe: dict, index: int) -> Panel:
    """Render one recipe as a ticket panel.

    Missing or empty lists are tolerated, the ticket just shows fewer lines.
    """
    tags = recipe.get("tags") or []
    stats = Text.assemble(
        (f"⏱ {recipe.get('prepTime', '?')} min", "bold"),
        "   ",
        (f"🔥 {recipe.get('calories', '?')} kcal", "bold"),
        "   ",
        (tags[0] if tags else "Fresh", "italic magenta"),
    )

    ingredients = Table(show_header=False, box=None, padding=(0, 1))
    for ing in recipe.get("ingredients") or []:
        ingredients.add_row(str(ing.get("item", "")), Text(str(ing.get("amount", "")), style="dim"))

    steps = Table(show_header=False, box=None, padding=(0, 1))
    for i, step in enumerate(recipe.get("steps") or [], start=1):
        steps.add_row(
            Text(f"{i:02d}", style="bold cyan"),
            Text(str(step.get("action", "")), style="bold"),
            str(step.get("description", "")),
        )

    body = Group(
        stats,
        Text(f"\"{recipe.get('tagline', '')}\"", style="italic"),
        Text("\nMise en place", style="bold underline"),
        ingredients,
        Text("\nExecution", style="bold underline"),
        steps,
    )
    return Panel(
        body,
        title=f"[bold]{recipe.get('title', 'Untitled')}[/bold]",
        subtitle=f"Ticket #{recipe.get('id', index + 1)}",
        expand=False,
    )


def show_result(data: Any, editing: bool = False) -> bool:
    """Render a response body, checking its shape first.

    Args:
        data: Parsed response body.
        editing: True for an edit answer (single object), False for a generate answer (array).

    Returns:
        True if recipes were rendered, False if an error was shown.
    """
    if editing and isinstance(data, dict) and "error" not in data:
        console.print(render_ticket(data, 0))
        return True
    if not editing and isinstance(data, list):
        for i, recipe in enumerate(data):
            console.print(render_ticket(recipe if isinstance(recipe, dict) else {}, i))
        return True

    logger.error(f"API returned unexpected format: {data}")
    message = data.get("error") if isinstance(data, dict) else None
    console.print(f"[red]✗ {message or UNREADABLE_TICKET}[/red]")
    return False


async def run_local(payload: dict, editing: bool) -> Any:
    """Run the pipeline in-process and answer like the HTTP API would."""
    pipeline = build_pipeline(config)
    failure = EDIT_FAILURE_MESSAGE if editing else GENERATE_FAILURE_MESSAGE
    try:
        if editing:
            return await pipeline.edit(parse_edit_request(json.dumps(payload)))
        return await pipeline.generate(parse_generation_request(json.dumps(payload)))
    except ConfigurationError:
        return {"error": CONFIG_ERROR_MESSAGE}
    except (RequestShapeError, RuntimeError) as e:
        logger.error(f"Error: {e}")
        return {"error": failure}


def run_remote(base_url: str, payload: dict, editing: bool) -> Any:
    """Post to a running server. Returns the decoded body or an error dict."""
    path = "/api/edit" if editing else "/api/generate"
    try:
        with httpx.Client(base_url=base_url, timeout=None) as client:
            response = client.post(path, json=payload)
        return response.json()
    except httpx.HTTPError as e:
        logger.error(f"Network Error: {e}")
        return {"error": UNREACHABLE_KITCHEN}
    except json.JSONDecodeError:
        return {"error": UNREADABLE_TICKET}


def run_query(
    text: str,
    drink: bool = False,
    mood: Optional[str] = None,
    ingredients: Optional[list[str]] = None,
    edit_path: Optional[str] = None,
    url: Optional[str] = None,
    debug: bool = False,
) -> bool:
    """Execute a single generate or edit query and print the tickets.

    Returns:
        True on success, False if an error was displayed.
    """
    editing = edit_path is not None
    if editing:
        recipe_file = Path(edit_path)
        if not recipe_file.exists():
            console.print(f"[red]✗ Error: Recipe file not found: {edit_path}[/red]")
            return False
        recipe = json.loads(recipe_file.read_text(encoding="utf-8"))
        payload = {"recipe": recipe, "request": text}
    else:
        payload = {"craving": text, "type": "DRINK" if drink else "FOOD", "ingredients": ingredients or []}
        if mood:
            payload["mood"] = mood

    console.print("[dim]Chef is thinking...[/dim]")
    data = run_remote(url, payload, editing) if url else asyncio.run(run_local(payload, editing))

    if debug:
        console.print("[bold cyan]Debug Mode: Full Response[/bold cyan]")
        console.print_json(data=data)
        console.print()

    return show_result(data, editing=editing)


USAGE = (
    'Usage: python query.py [--drink] [--mood TEXT] [--ingredient NAME]... [--edit FILE] '
    '[--url URL] [--debug] "<craving or edit request>"'
)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    drink_mode = False
    debug_mode = False
    mood_text = None
    edit_file = None
    server_url = None
    wanted_ingredients: list[str] = []
    argv_start = 1

    # Flags that take a value
    value_flags = ("--mood", "--ingredient", "--edit", "--url")

    while argv_start < len(sys.argv) and sys.argv[argv_start].startswith("--"):
        flag = sys.argv[argv_start]
        if flag == "--drink":
            drink_mode = True
        elif flag == "--debug":
            debug_mode = True
        elif flag in value_flags:
            argv_start += 1
            if argv_start >= len(sys.argv):
                print(f"Error: {flag} flag requires a value")
                sys.exit(1)
            value = sys.argv[argv_start]
            if flag == "--mood":
                mood_text = value
            elif flag == "--ingredient":
                wanted_ingredients.append(value)
            elif flag == "--edit":
                edit_file = value
            else:
                server_url = value
        else:
            print(f"Unknown flag: {flag}")
            sys.exit(1)
        argv_start += 1

    if argv_start >= len(sys.argv):
        print("Error: No craving provided")
        print(USAGE)
        sys.exit(1)

    query_text = " ".join(sys.argv[argv_start:])

    try:
        ok = run_query(
            query_text,
            drink=drink_mode,
            mood=mood_text,
            ingredients=wanted_ingredients,
            edit_path=edit_file,
            url=server_url,
            debug=debug_mode,
        )
    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    sys.exit(0 if ok else 1)
