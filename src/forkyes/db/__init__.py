"""
ForkYes - Database access.

Supabase clients and the adapter protocol the services are written against.
"""

from forkyes.db.adapter import DatabaseAdapter
from forkyes.db.client import get_authenticated_client, get_client, get_service_client

__all__ = [
    "DatabaseAdapter",
    "get_authenticated_client",
    "get_client",
    "get_service_client",
]
