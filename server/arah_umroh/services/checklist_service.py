"""Pre-departure checklist service with per-user progress."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..models.content import Checklist, ChecklistCategory, UserChecklist
from ..schemas.content import ChecklistInput, UpdateChecklistRequest

logger = logging.getLogger(__name__)


def percent_complete(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(completed / total * 100)


class ChecklistService:
    """Service for checklist items and users' check state."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_checklist_or_raise(self, checklist_id: UUID, active_only: bool = False) -> Checklist:
        checklist = await self.db.get(Checklist, checklist_id)
        if checklist is None or (active_only and not checklist.is_active):
            raise NotFoundError(resource_type="checklist", resource_id=str(checklist_id))
        return checklist

    async def list_checklists(self, include_inactive: bool = False) -> list[Checklist]:
        stmt = select(Checklist).order_by(Checklist.category, Checklist.priority, Checklist.title)
        if not include_inactive:
            stmt = stmt.where(Checklist.is_active.is_(True))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_checklists_with_progress(self, user_id: str) -> dict:
        """Every active item with the user's check state, plus overall and per-category totals."""
        checklists = await self.list_checklists()
        result = await self.db.execute(select(UserChecklist).where(UserChecklist.user_id == user_id))
        states = {state.checklist_id: state for state in result.scalars().all()}

        by_category = {category.value: {"total": 0, "completed": 0} for category in ChecklistCategory}
        items = []
        for checklist in checklists:
            state = states.get(checklist.id)
            checked = bool(state and state.is_checked)
            bucket = by_category.setdefault(checklist.category, {"total": 0, "completed": 0})
            bucket["total"] += 1
            bucket["completed"] += int(checked)
            items.append({
                "id": checklist.id,
                "title": checklist.title,
                "description": checklist.description,
                "category": checklist.category,
                "phase": checklist.phase,
                "priority": checklist.priority,
                "icon": checklist.icon,
                "is_active": checklist.is_active,
                "is_checked": checked,
                "checked_at": state.checked_at if state else None,
                "notes": state.notes if state else None,
            })

        completed = sum(1 for item in items if item["is_checked"])
        return {
            "items": items,
            "total": len(items),
            "completed": completed,
            "percent_complete": percent_complete(completed, len(items)),
            "by_category": by_category,
        }

    async def _get_or_create_state(self, user_id: str, checklist_id: UUID) -> UserChecklist:
        await self.get_checklist_or_raise(checklist_id, active_only=True)
        result = await self.db.execute(
            select(UserChecklist).where(
                UserChecklist.user_id == user_id,
                UserChecklist.checklist_id == checklist_id,
            )
        )
        state = result.scalar_one_or_none()
        if state is None:
            state = UserChecklist(user_id=user_id, checklist_id=checklist_id, is_checked=False)
            self.db.add(state)
        return state

    async def toggle_checklist(self, user_id: str, checklist_id: UUID) -> UserChecklist:
        state = await self._get_or_create_state(user_id, checklist_id)
        state.is_checked = not state.is_checked
        state.checked_at = datetime.utcnow() if state.is_checked else None
        await self.db.commit()

        logger.info(
            "Checklist toggled",
            extra={"checklist_id": str(checklist_id), "user_id": user_id, "is_checked": state.is_checked}
        )
        return state

    async def set_checklist_notes(self, user_id: str, checklist_id: UUID, notes: Optional[str]) -> UserChecklist:
        state = await self._get_or_create_state(user_id, checklist_id)
        state.notes = notes
        await self.db.commit()
        return state

    # Admin

    async def create_checklist(self, request: ChecklistInput) -> Checklist:
        checklist = Checklist(**request.model_dump(mode="json"))
        self.db.add(checklist)
        await self.db.commit()
        logger.info("Checklist created", extra={"checklist_id": str(checklist.id)})
        return checklist

    async def update_checklist(self, request: UpdateChecklistRequest) -> Checklist:
        checklist = await self.get_checklist_or_raise(request.id)
        for field, value in request.model_dump(mode="json", exclude={"id"}).items():
            setattr(checklist, field, value)
        await self.db.commit()
        return checklist

    async def delete_checklist(self, checklist_id: UUID) -> None:
        checklist = await self.get_checklist_or_raise(checklist_id)
        await self.db.delete(checklist)
        await self.db.commit()
        logger.info("Checklist deleted", extra={"checklist_id": str(checklist_id)})
