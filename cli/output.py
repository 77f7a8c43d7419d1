"""Rendering of resources as tables, JSON or NDJSON"""

import json
from typing import Any, Iterable, List, Sequence, Tuple

from pydantic import BaseModel
from rich.console import Console
from rich.table import Table


def _plain(item: Any) -> Any:
    if isinstance(item, BaseModel):
        return item.model_dump(mode="json")
    return item


def print_json(console: Console, data: Any):
    if isinstance(data, list):
        data = [_plain(item) for item in data]
    else:
        data = _plain(data)
    console.print_json(json.dumps(data))


def print_ndjson(console: Console, items: Iterable[Any]):
    for item in items:
        # Raw write: no wrapping, markup or highlighting
        console.out(json.dumps(_plain(item)), highlight=False)


def print_table(console: Console, title: str, columns: Sequence[str], rows: List[Tuple[Any, ...]],
                empty_message: str = "Nothing to show"):
    if not rows:
        console.print(f"[dim]{empty_message}[/dim]")
        return

    table = Table(title=title)
    for index, column in enumerate(columns):
        table.add_column(column, style="cyan" if index == 0 else None)
    for row in rows:
        table.add_row(*("" if value is None else str(value) for value in row))
    console.print(table)


def render(console: Console, args, items: List[Any], title: str, columns: Sequence[str],
           row, empty_message: str = "Nothing to show"):
    """Render a list according to the --json / --ndjson flags

    Args:
        row: Maps one item to a tuple of column values for the table view
    """
    if getattr(args, "json", False):
        print_json(console, items)
    elif getattr(args, "ndjson", False):
        print_ndjson(console, items)
    else:
        print_table(console, title, columns, [row(item) for item in items], empty_message)
