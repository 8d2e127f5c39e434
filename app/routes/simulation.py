"""
API routes for running simulations and browsing simulation history
"""
import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from pydantic import ValidationError

from ..config import settings
from ..models.situation import UserSituation
from ..models.simulation import SimulationRequest
from ..services.errors import ServiceError
from ..services.simulation_service import SimulationService
from ..utils.validators import validate_language, validate_situation_data
from .dependencies import get_current_user_id, get_optional_user_id, get_simulation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/simulation", tags=["simulation"])


@router.post("/run")
async def run_simulation(
    request: SimulationRequest,
    background_tasks: BackgroundTasks,
    user_id: Optional[str] = Depends(get_optional_user_id),
    service: SimulationService = Depends(get_simulation_service)
):
    """
    Run the eligibility pipeline for a user situation

    The result is returned immediately; for signed-in users it is also appended
    to their history once the response has been sent.
    """
    try:
        language = (request.language or settings.native_language).strip().lower()
        if not validate_language(language):
            raise HTTPException(status_code=400, detail=f"Unsupported language: {request.language}")

        try:
            situation = UserSituation(**request.answers)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid situation data: {str(e)}")

        errors = validate_situation_data(situation.model_dump())
        if errors:
            raise HTTPException(status_code=400, detail="; ".join(errors))

        result = await service.run_simulation(situation, language)

        if user_id:
            background_tasks.add_task(service.save_simulation, user_id, result)

        return {"success": True, "data": result.model_dump(mode="json")}

    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error running simulation: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to run simulation: {str(e)}")


@router.get("/history")
async def get_history(
    limit: int = Query(settings.history_default_limit, ge=1, le=100, description="Maximum number of simulations"),
    user_id: str = Depends(get_current_user_id),
    service: SimulationService = Depends(get_simulation_service)
):
    """
    Get the caller's most recent simulations
    """
    try:
        history = await service.get_simulation_history(user_id, limit)
        return {"success": True, "data": [result.model_dump(mode="json") for result in history]}

    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error fetching simulation history: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to retrieve history: {str(e)}")


@router.get("/latest")
async def get_latest(
    user_id: str = Depends(get_current_user_id),
    service: SimulationService = Depends(get_simulation_service)
):
    """
    Get the caller's latest simulation, or null when there is none
    """
    try:
        latest = await service.get_latest_simulation(user_id)
        return {"success": True, "data": latest.model_dump(mode="json") if latest else None}

    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error fetching latest simulation: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to retrieve simulation: {str(e)}")


@router.get("/{simulation_id}")
async def get_simulation(
    simulation_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SimulationService = Depends(get_simulation_service)
):
    """
    Get one of the caller's simulations by id
    """
    try:
        result = await service.get_simulation(user_id, simulation_id)
        return {"success": True, "data": result.model_dump(mode="json")}

    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error fetching simulation {simulation_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to retrieve simulation: {str(e)}")


@router.delete("/{simulation_id}")
async def delete_simulation(
    simulation_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SimulationService = Depends(get_simulation_service)
):
    """
    Delete one of the caller's simulations. Saved aides are not affected.
    """
    try:
        await service.delete_simulation(user_id, simulation_id)
        return {"success": True, "message": "Simulation deleted"}

    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error deleting simulation {simulation_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to delete simulation: {str(e)}")
