"""Settings router"""

from fastapi import APIRouter, Depends

from ...firestore import get_firestore
from .schemas import AppSettings, AppSettingsUpdate
from .service import SettingsService

router = APIRouter(prefix="/settings", tags=["Settings"])


def get_settings_service(client=Depends(get_firestore)) -> SettingsService:
    return SettingsService(client)


@router.get("/{settings_id}", response_model=AppSettings)
async def get_settings(settings_id: str, service: SettingsService = Depends(get_settings_service)):
    return await service.get_settings(settings_id)


@router.patch("/{settings_id}", response_model=AppSettings)
async def update_settings(
    settings_id: str,
    data: AppSettingsUpdate,
    service: SettingsService = Depends(get_settings_service),
):
    return await service.update_settings(settings_id, data)
