# core/inventory.py

"""
Stock movements triggered by order status changes.

Each item is adjusted independently through a stored procedure. A failing
item is logged and skipped; the caller's order update is never rolled back.
"""

from typing import Dict, Iterable, List

from core.logging_config import logger
from core.supabase_client import get_supabase_client


def _adjust(rpc_name: str, params_for, items: Iterable[dict], action: str) -> Dict[str, List[str]]:
    summary = {"updated": [], "failed": []}

    client = get_supabase_client()
    if not client:
        logger.error(f"Supabase unavailable; inventory {action} skipped")
        summary["failed"] = [item.get("product_id") for item in items]
        return summary

    for item in items:
        product_id = item.get("product_id")
        quantity = int(item.get("quantity") or 0)
        if not product_id or quantity <= 0:
            continue

        try:
            client.rpc(rpc_name, params_for(product_id, quantity)).execute()
            summary["updated"].append(product_id)
        except Exception as e:
            logger.error(f"Error during inventory {action} for product {product_id}: {e}")
            summary["failed"].append(product_id)

    if summary["failed"]:
        logger.warning(
            f"Inventory {action} incomplete: {len(summary['failed'])} of "
            f"{len(summary['failed']) + len(summary['updated'])} items failed"
        )
    return summary


def decrement_stock(items: Iterable[dict]) -> Dict[str, List[str]]:
    """Take ordered quantities out of stock (``decrement_quantity`` RPC)."""
    return _adjust(
        "decrement_quantity",
        lambda product_id, quantity: {"item_id": product_id, "amount": quantity},
        list(items or []),
        "decrement",
    )


def restore_stock(items: Iterable[dict]) -> Dict[str, List[str]]:
    """Put quantities of a cancelled order back (``update_stock`` RPC)."""
    return _adjust(
        "update_stock",
        lambda product_id, quantity: {"p_id": product_id, "quantity": quantity},
        list(items or []),
        "restore",
    )
