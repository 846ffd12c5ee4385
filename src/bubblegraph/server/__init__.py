"""FastAPI application hosting the live layouts."""
