"""
app/api/routers package marker.
"""

from app.api.routers.points_import import router as points_import_router

__all__ = [
    "points_import_router",
]
