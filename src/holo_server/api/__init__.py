"""HTTP admin surface (FastAPI)."""
