"""FastAPI routers acting as controllers in the MVC architecture."""

from . import calls

__all__ = ["calls"]
