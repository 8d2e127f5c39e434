"""
API routes for the Aides Simulator
"""

from .simulation import router as simulation_router
from .saved_aides import router as saved_aides_router

__all__ = [
    "simulation_router",
    "saved_aides_router"
]
