"""API routers."""

try:
    from api.routers import cigars
except ImportError:
    from src.api.routers import cigars

__all__ = ["cigars"]
