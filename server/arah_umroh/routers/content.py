"""Content router: prayers, pre-departure checklists and manasik guides."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, CurrentUser, DatabaseSession, RequiredAuth
from ..schemas.content import (
    Checklist,
    ChecklistInput,
    ChecklistItemProgress,
    ChecklistNotesRequest,
    ChecklistProgress,
    IdRequest,
    ListManasikGuidesRequest,
    ListPrayersRequest,
    ManasikGuide,
    ManasikGuideInput,
    ManasikGuideList,
    Prayer,
    PrayerCategory,
    PrayerCategoryInput,
    PrayerCategoryList,
    PrayerInput,
    PrayerList,
    ToggleChecklistRequest,
    UpdateChecklistRequest,
    UpdateManasikGuideRequest,
    UpdatePrayerCategoryRequest,
    UpdatePrayerRequest,
)
from ..services.checklist_service import ChecklistService
from ..services.manasik_service import ManasikService
from ..services.prayer_service import PrayerService

router = APIRouter(prefix="/v1/content", tags=["content"])


def _deleted(resource_id) -> JSONResponse:
    return JSONResponse(status_code=200, content={"id": str(resource_id), "deleted": True})


def _checklist_state(checklist, state) -> dict:
    """Progress row for a single toggled or annotated item."""
    return ChecklistItemProgress(
        **Checklist.model_validate(checklist).model_dump(),
        is_checked=state.is_checked,
        checked_at=state.checked_at,
        notes=state.notes,
    ).model_dump(mode="json")


# Prayers

@router.post("/prayer/categories", response_model=PrayerCategoryList)
async def list_prayer_categories(db: AsyncSession = DatabaseSession) -> JSONResponse:
    categories = await PrayerService(db).list_categories()
    response_data = PrayerCategoryList(items=[PrayerCategory.model_validate(c) for c in categories])
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/prayer/list", response_model=PrayerList)
async def list_prayers(
    request: ListPrayersRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    prayers = await PrayerService(db).list_prayers(request)
    response_data = PrayerList(items=[Prayer.model_validate(p) for p in prayers])
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/prayer/get", response_model=Prayer)
async def get_prayer(
    request: IdRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    prayer = await PrayerService(db).get_prayer(request.id)
    return JSONResponse(status_code=200, content=Prayer.model_validate(prayer).model_dump(mode="json"))


@router.post("/prayer/category/create", response_model=PrayerCategory)
async def create_prayer_category(
    request: PrayerCategoryInput,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    category = await PrayerService(db).create_category(request)
    return JSONResponse(status_code=200, content=PrayerCategory.model_validate(category).model_dump(mode="json"))


@router.post("/prayer/category/update", response_model=PrayerCategory)
async def update_prayer_category(
    request: UpdatePrayerCategoryRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    category = await PrayerService(db).update_category(request)
    return JSONResponse(status_code=200, content=PrayerCategory.model_validate(category).model_dump(mode="json"))


@router.post("/prayer/category/delete")
async def delete_prayer_category(
    request: IdRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    await PrayerService(db).delete_category(request.id)
    return _deleted(request.id)


@router.post("/prayer/create", response_model=Prayer)
async def create_prayer(
    request: PrayerInput,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    prayer = await PrayerService(db).create_prayer(request)
    return JSONResponse(status_code=200, content=Prayer.model_validate(prayer).model_dump(mode="json"))


@router.post("/prayer/update", response_model=Prayer)
async def update_prayer(
    request: UpdatePrayerRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    prayer = await PrayerService(db).update_prayer(request)
    return JSONResponse(status_code=200, content=Prayer.model_validate(prayer).model_dump(mode="json"))


@router.post("/prayer/delete")
async def delete_prayer(
    request: IdRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    await PrayerService(db).delete_prayer(request.id)
    return _deleted(request.id)


# Checklists

@router.post("/checklist/progress", response_model=ChecklistProgress)
async def checklist_progress(
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Every active checklist item with the caller's check state and totals."""
    progress = await ChecklistService(db).list_checklists_with_progress(user.user_id)
    return JSONResponse(
        status_code=200,
        content=ChecklistProgress.model_validate(progress).model_dump(mode="json")
    )


@router.post("/checklist/toggle", response_model=ChecklistItemProgress)
async def toggle_checklist(
    request: ToggleChecklistRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    checklist_service = ChecklistService(db)
    state = await checklist_service.toggle_checklist(user.user_id, request.checklist_id)
    checklist = await checklist_service.get_checklist_or_raise(request.checklist_id)
    return JSONResponse(status_code=200, content=_checklist_state(checklist, state))


@router.post("/checklist/notes", response_model=ChecklistItemProgress)
async def set_checklist_notes(
    request: ChecklistNotesRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    checklist_service = ChecklistService(db)
    state = await checklist_service.set_checklist_notes(user.user_id, request.checklist_id, request.notes)
    checklist = await checklist_service.get_checklist_or_raise(request.checklist_id)
    return JSONResponse(status_code=200, content=_checklist_state(checklist, state))


@router.post("/checklist/create", response_model=Checklist)
async def create_checklist(
    request: ChecklistInput,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    checklist = await ChecklistService(db).create_checklist(request)
    return JSONResponse(status_code=200, content=Checklist.model_validate(checklist).model_dump(mode="json"))


@router.post("/checklist/update", response_model=Checklist)
async def update_checklist(
    request: UpdateChecklistRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    checklist = await ChecklistService(db).update_checklist(request)
    return JSONResponse(status_code=200, content=Checklist.model_validate(checklist).model_dump(mode="json"))


@router.post("/checklist/delete")
async def delete_checklist(
    request: IdRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    await ChecklistService(db).delete_checklist(request.id)
    return _deleted(request.id)


# Manasik guides

@router.post("/manasik/list", response_model=ManasikGuideList)
async def list_manasik_guides(
    request: ListManasikGuidesRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Ritual steps in walkthrough order."""
    guides = await ManasikService(db).list_guides(request.category)
    response_data = ManasikGuideList(
        category=request.category,
        items=[ManasikGuide.model_validate(g) for g in guides],
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/manasik/get", response_model=ManasikGuide)
async def get_manasik_guide(
    request: IdRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    guide = await ManasikService(db).get_guide(request.id)
    return JSONResponse(status_code=200, content=ManasikGuide.model_validate(guide).model_dump(mode="json"))


@router.post("/manasik/create", response_model=ManasikGuide)
async def create_manasik_guide(
    request: ManasikGuideInput,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    guide = await ManasikService(db).create_guide(request)
    return JSONResponse(status_code=200, content=ManasikGuide.model_validate(guide).model_dump(mode="json"))


@router.post("/manasik/update", response_model=ManasikGuide)
async def update_manasik_guide(
    request: UpdateManasikGuideRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    guide = await ManasikService(db).update_guide(request)
    return JSONResponse(status_code=200, content=ManasikGuide.model_validate(guide).model_dump(mode="json"))


@router.post("/manasik/delete")
async def delete_manasik_guide(
    request: IdRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    await ManasikService(db).delete_guide(request.id)
    return _deleted(request.id)
