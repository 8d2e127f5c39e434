"""
Shared route dependencies: caller identity and service instances
"""
from typing import Optional
from fastapi import Header, HTTPException

from ..services.simulation_service import SimulationService, simulation_service
from ..services.saved_aide_service import SavedAideService, saved_aide_service


async def get_optional_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> Optional[str]:
    """User id set by the authentication layer, if the caller is signed in"""
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return None


async def get_current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    """User id for routes that require a signed-in caller"""
    user_id = await get_optional_user_id(x_user_id)
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id


def get_simulation_service() -> SimulationService:
    return simulation_service


def get_saved_aide_service() -> SavedAideService:
    return saved_aide_service
