"""
Database Adapter Protocol.

The services only need the Supabase/PostgREST query builder surface:
table() returns a fluent query builder, rpc() calls a database function.
A supabase.Client satisfies this protocol; tests pass a fake.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DatabaseAdapter(Protocol):
    """
    Abstract database access for the ForkYes services.

    The table() builder must support the PostgREST-style fluent API:
    .select(), .insert(), .upsert(), .update(), .eq(), .order(), .execute(), ...

    rpc() returns an object whose .execute() yields .data.
    """

    def table(self, name: str) -> Any:
        ...

    def rpc(self, function_name: str, params: dict | None = None) -> Any:
        ...
