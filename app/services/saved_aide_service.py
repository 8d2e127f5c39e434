"""
Bookmarking workflow: saved aides and their application status
"""
import logging
from typing import List, Optional

from pymongo.errors import DuplicateKeyError

from ..models.simulation import (
    AideSnapshot,
    SavedAide,
    SavedAideStatus,
    STATUS_TRANSITIONS,
    get_current_utc_time,
)
from ..utils.validators import generate_record_id
from .errors import ConflictError, InvalidStatusTransitionError, NotFoundError
from .mongo_service import MongoService, mongo_service

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset(status for status, targets in STATUS_TRANSITIONS.items() if not targets)


class SavedAideService:
    """Per-user bookmarks of estimated aides"""

    def __init__(self, store: Optional[MongoService] = None):
        self.store = store or mongo_service

    async def save(self, user_id: str, aide: AideSnapshot, simulation_id: Optional[str] = None,
                   notes: Optional[str] = None) -> SavedAide:
        """
        Bookmark an aide in state ``saved``

        Args:
            user_id: Owner
            aide: Snapshot of the estimated aide
            simulation_id: Originating simulation, if any
            notes: Free-text notes

        Returns:
            The stored SavedAide

        Raises:
            ConflictError: the user already saved this program
        """
        conflict = ConflictError("Aide already saved", {"aide_id": aide.id})

        existing = await self.store.find_saved_aide_by_program(user_id, aide.id)
        if existing:
            raise conflict

        saved = SavedAide(
            id=generate_record_id(),
            user_id=user_id,
            aide_id=aide.id,
            aide_name=aide.name,
            aide_description=aide.description,
            aide_category=aide.category or aide.category_key,
            monthly_amount=aide.monthly_amount,
            source_url=aide.source_url,
            application_url=aide.application_url,
            simulation_id=simulation_id,
            notes=notes,
        )

        try:
            await self.store.insert_saved_aide(saved.to_document())
        except DuplicateKeyError:
            # Lost a race with a concurrent save of the same program
            raise conflict

        logger.info(f"User {user_id} saved aide {aide.id}")
        return saved

    async def list_saved(self, user_id: str) -> List[SavedAide]:
        documents = await self.store.find_saved_aides(user_id)
        return [SavedAide(**doc) for doc in documents]

    async def get_saved(self, user_id: str, saved_id: str) -> SavedAide:
        doc = await self.store.find_saved_aide(user_id, saved_id)
        if not doc:
            raise NotFoundError("Saved aide", {"id": saved_id})
        return SavedAide(**doc)

    async def update_status(self, user_id: str, saved_id: str, new_status: SavedAideStatus,
                            notes: Optional[str] = None) -> SavedAide:
        """
        Move a bookmark along saved -> applied -> received | rejected

        Raises:
            NotFoundError: unknown bookmark for this user
            InvalidStatusTransitionError: the move is not in the transition graph
            ConflictError: the status changed concurrently
        """
        current = await self.get_saved(user_id, saved_id)
        new_status = SavedAideStatus(new_status)

        if new_status not in STATUS_TRANSITIONS[current.status]:
            raise InvalidStatusTransitionError(current.status.value, new_status.value)

        now = get_current_utc_time()
        update = {"status": new_status.value, "updated_at": now}
        if new_status == SavedAideStatus.APPLIED:
            update["applied_at"] = now
        if new_status in TERMINAL_STATUSES:
            update["resolved_at"] = now
        if notes is not None:
            update["notes"] = notes

        doc = await self.store.update_saved_aide(user_id, saved_id, update, expected_status=current.status.value)
        if not doc:
            raise ConflictError("Saved aide status changed concurrently", {"id": saved_id})

        logger.info(f"Saved aide {saved_id} moved from {current.status.value} to {new_status.value}")
        return SavedAide(**doc)

    async def update_notes(self, user_id: str, saved_id: str, notes: Optional[str]) -> SavedAide:
        doc = await self.store.update_saved_aide(
            user_id, saved_id, {"notes": notes, "updated_at": get_current_utc_time()}
        )
        if not doc:
            raise NotFoundError("Saved aide", {"id": saved_id})
        return SavedAide(**doc)

    async def remove(self, user_id: str, saved_id: str):
        """Hard-delete a bookmark"""
        deleted = await self.store.delete_saved_aide(user_id, saved_id)
        if not deleted:
            raise NotFoundError("Saved aide", {"id": saved_id})
        logger.info(f"User {user_id} removed saved aide {saved_id}")


# Global saved aide service instance
saved_aide_service = SavedAideService()
