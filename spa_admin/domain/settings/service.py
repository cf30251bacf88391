"""Settings service - read and merge application settings"""

import logging

from .repository import SettingsRepository
from .schemas import AppSettings, AppSettingsUpdate

logger = logging.getLogger(__name__)


class SettingsService:
    """Settings documents are read straight from Firestore, never mirrored"""

    def __init__(self, client):
        self.repo = SettingsRepository(client)

    async def get_settings(self, settings_id: str) -> dict:
        """Stored settings over the defaults; a missing document yields the defaults"""
        stored = await self.repo.get(settings_id)
        if stored is None:
            logger.info(f"Settings {settings_id} not stored yet, using defaults")
            stored = {"id": settings_id}
        return AppSettings(**stored).model_dump()

    async def update_settings(self, settings_id: str, data: AppSettingsUpdate) -> dict:
        """Merge the given fields into the document, creating it when missing"""
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        await self.repo.set(settings_id, changes, merge=True)
        logger.info(f"⚙️ Settings {settings_id} updated: {sorted(changes)}")
        return await self.get_settings(settings_id)
