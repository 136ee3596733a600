"""
app/api/routers package marker.
"""

from app.api.routers.price_averaging import router as price_averaging_router

__all__ = [
    "price_averaging_router",
]
