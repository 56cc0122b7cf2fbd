"""
ForkYes - Service layer.

Thin functions over the Supabase query/RPC surface. Each takes the
client to use as its first argument.
"""
