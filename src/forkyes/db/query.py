"""
Query execution with error mapping.

Every Supabase call in the services goes through execute() so a failing
store surfaces as StoreUnavailable carrying the upstream message.
"""

import logging
from typing import Any

from forkyes.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def execute(builder: Any, operation: str) -> Any:
    """
    Execute a PostgREST builder (table query or rpc).

    Args:
        builder: Anything with .execute()
        operation: Short description for logs, e.g. "get family preferences"

    Returns:
        The APIResponse, or None when a maybe_single() query found no row.
    """
    try:
        return builder.execute()
    except Exception as e:
        message = getattr(e, "message", None) or str(e) or f"Failed to {operation}"
        logger.error(f"Store call failed ({operation}): {message}")
        raise StoreUnavailable(message, {"operation": operation}) from e


def maybe_data(response: Any) -> Any:
    """Data of a maybe_single() response, None when no row matched."""
    if response is None:
        return None
    return response.data
