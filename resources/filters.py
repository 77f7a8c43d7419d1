"""Saved filters via the legacy sync API"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from sync import SyncClient, SyncCommand

logger = logging.getLogger(__name__)


class Filter(BaseModel):
    """Saved task filter"""
    id: str
    name: str
    query: str
    color: Optional[str] = None
    item_order: Optional[int] = None
    is_favorite: bool = False
    is_deleted: bool = False


def parse_filter(data: Dict[str, Any]) -> Filter:
    return Filter(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        query=str(data.get("query", "")),
        color=str(data["color"]) if data.get("color") else None,
        item_order=int(data["item_order"]) if data.get("item_order") is not None else None,
        is_favorite=bool(data.get("is_favorite")),
        is_deleted=bool(data.get("is_deleted")),
    )


async def fetch_filters(client: SyncClient) -> List[Filter]:
    """Live filters, in the user's order"""
    data = await client.read(["filters"])
    filters = [parse_filter(item) for item in data.get("filters") or []]
    live = [f for f in filters if not f.is_deleted]
    live.sort(key=lambda f: (f.item_order is None, f.item_order or 0))
    return live


async def add_filter(
    client: SyncClient,
    name: str,
    query: str,
    color: Optional[str] = None,
    is_favorite: Optional[bool] = None,
) -> Filter:
    """Create a filter

    Returns:
        The new filter, carrying the server-assigned id
    """
    args: Dict[str, Any] = {"name": name, "query": query}
    if color:
        args["color"] = color
    if is_favorite is not None:
        args["is_favorite"] = is_favorite

    command = SyncCommand.create("filter_add", args)
    response = await client.execute([command])
    filter_id = response.resolve_command_id(command)
    logger.info(f"Added filter {filter_id}")
    return Filter(
        id=filter_id,
        name=name,
        query=query,
        color=color,
        is_favorite=bool(is_favorite),
    )


async def update_filter(
    client: SyncClient,
    filter_id: str,
    name: Optional[str] = None,
    query: Optional[str] = None,
    color: Optional[str] = None,
    is_favorite: Optional[bool] = None,
) -> None:
    changes = {
        key: value
        for key, value in (
            ("name", name),
            ("query", query),
            ("color", color),
            ("is_favorite", is_favorite),
        )
        if value is not None
    }
    if not changes:
        raise ValueError("No filter changes to apply")
    await client.execute([SyncCommand("filter_update", {"id": filter_id, **changes})])


async def delete_filter(client: SyncClient, filter_id: str) -> None:
    await client.execute([SyncCommand("filter_delete", {"id": filter_id})])
