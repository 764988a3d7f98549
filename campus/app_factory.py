"""ASGI entry point: `uvicorn campus.app_factory:app`."""
from campus.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
