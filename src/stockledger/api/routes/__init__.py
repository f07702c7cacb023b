"""API route modules."""

from stockledger.api.routes.health import router as health_router
from stockledger.api.routes.materials import router as materials_router
from stockledger.api.routes.reports import router as reports_router
from stockledger.api.routes.sections import router as sections_router
from stockledger.api.routes.stock import router as stock_router

__all__ = [
    "health_router",
    "materials_router",
    "stock_router",
    "sections_router",
    "reports_router",
]
