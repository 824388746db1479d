from __future__ import annotations

import logging
from typing import Any, Dict, List

from rpc import RpcClient

logger = logging.getLogger(__name__)


def _extract_rows(data: Any) -> List[Dict[str, Any]]:
    """
    trips.list normally returns a bare array, but some backends wrap
    collections as {"items": [...]}. This helper supports both.
    """
    if data is None:
        return []
    if isinstance(data, dict):
        return data.get("items", []) or []
    return list(data)


def fetch_trips(client: RpcClient) -> List[Dict[str, Any]]:
    """
    Fetch every trip of the signed-in user. The backend scopes by session.
    """
    return _extract_rows(client.query("trips.list", fallback="Could not load trips."))


def insert_trip(client: RpcClient, payload: Dict[str, Any]) -> Dict[str, Any]:
    data = client.mutate("trips.create", payload, fallback="Could not save the trip.")
    if not isinstance(data, dict):
        data = {}
    logger.info("Created trip %s", data.get("id"))
    return data


def update_trip(client: RpcClient, trip_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    data = client.mutate(
        "trips.update",
        {"id": trip_id, **payload},
        fallback="Could not update the trip.",
    )
    logger.info("Updated trip %s", trip_id)
    return data if isinstance(data, dict) else {}


def delete_trip(client: RpcClient, trip_id: int) -> None:
    client.mutate("trips.delete", {"id": trip_id}, fallback="Could not delete the trip.")
    logger.info("Deleted trip %s", trip_id)
