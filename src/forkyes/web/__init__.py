"""ForkYes - HTTP API (FastAPI)."""
