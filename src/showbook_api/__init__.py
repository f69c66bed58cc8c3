"""HTTP layer for the show booking backend (FastAPI + Mangum)."""
