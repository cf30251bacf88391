"""Settings repository - application settings documents"""

from ...accessor import CollectionAccessor


class SettingsRepository(CollectionAccessor):
    """Repository for settings documents (caller-chosen ids)"""

    collection_name = "settings"
