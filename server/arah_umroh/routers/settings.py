"""Platform settings router (admin only)."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, CurrentUser, DatabaseSession
from ..schemas.setting import PlatformSetting, PlatformSettingList, SetSettingRequest, SettingKeyRequest
from ..services.settings_service import SettingsService

router = APIRouter(prefix="/v1/settings", tags=["settings"])


@router.post("/get", response_model=PlatformSetting)
async def get_setting(
    request: SettingKeyRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Stored value of a key, or its built-in default."""
    settings_service = SettingsService(db)
    row = await settings_service.get_setting_row(request.key)
    if row is not None:
        response_data = PlatformSetting.model_validate(row)
    else:
        response_data = PlatformSetting(
            key=request.key,
            value=await settings_service.get(request.key),
            is_default=True,
        )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/set", response_model=PlatformSetting)
async def set_setting(
    request: SetSettingRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    row = await SettingsService(db).set(request.key, request.value, description=request.description)
    return JSONResponse(
        status_code=200,
        content=PlatformSetting.model_validate(row).model_dump(mode="json")
    )


@router.post("/list", response_model=PlatformSettingList)
async def list_settings(
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    items = await SettingsService(db).list_settings()
    response_data = PlatformSettingList(items=[PlatformSetting.model_validate(item) for item in items])
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))
