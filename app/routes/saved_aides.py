"""
API routes for saved aides (bookmarks) and their application status
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Response

from ..models.simulation import NotesUpdateRequest, SaveAideRequest, StatusUpdateRequest
from ..services.errors import ServiceError
from ..services.saved_aide_service import SavedAideService
from .dependencies import get_current_user_id, get_saved_aide_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/saved-aides", tags=["saved-aides"])


@router.get("")
async def list_saved_aides(
    user_id: str = Depends(get_current_user_id),
    service: SavedAideService = Depends(get_saved_aide_service)
):
    """
    List the caller's saved aides, newest first
    """
    try:
        saved = await service.list_saved(user_id)
        return {"success": True, "data": [aide.model_dump(mode="json") for aide in saved]}

    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error listing saved aides: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to retrieve saved aides: {str(e)}")


@router.post("", status_code=201)
async def save_aide(
    request: SaveAideRequest,
    user_id: str = Depends(get_current_user_id),
    service: SavedAideService = Depends(get_saved_aide_service)
):
    """
    Bookmark an aide. Saving the same program twice is a conflict.
    """
    try:
        saved = await service.save(user_id, request.aide, request.simulation_id, request.notes)
        return {"success": True, "data": saved.model_dump(mode="json")}

    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error saving aide: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to save aide: {str(e)}")


@router.patch("/{saved_id}/status")
async def update_status(
    saved_id: str,
    request: StatusUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: SavedAideService = Depends(get_saved_aide_service)
):
    """
    Move a saved aide to a new application status
    """
    try:
        saved = await service.update_status(user_id, saved_id, request.status, request.notes)
        return {"success": True, "data": saved.model_dump(mode="json")}

    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error updating status of saved aide {saved_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to update status: {str(e)}")


@router.patch("/{saved_id}/notes")
async def update_notes(
    saved_id: str,
    request: NotesUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: SavedAideService = Depends(get_saved_aide_service)
):
    """
    Replace the notes of a saved aide
    """
    try:
        saved = await service.update_notes(user_id, saved_id, request.notes)
        return {"success": True, "data": saved.model_dump(mode="json")}

    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error updating notes of saved aide {saved_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to update notes: {str(e)}")


@router.delete("/{saved_id}", status_code=204)
async def remove_saved_aide(
    saved_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SavedAideService = Depends(get_saved_aide_service)
):
    """
    Delete a saved aide
    """
    try:
        await service.remove(user_id, saved_id)
        return Response(status_code=204)

    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error removing saved aide {saved_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to remove saved aide: {str(e)}")
