"""FastAPI routers for the transaction API."""

from .health import router as health_router
from .transactions import router as transactions_router

__all__ = ["health_router", "transactions_router"]
