import logging

from .config import load_config
from .exchange import DataExchange
from .favorites import FavoritesRepository
from .journal import JournalRepository
from .offline import CacheStorage, OfflineCacheManager
from .paths import get_cache_path, get_storage_path
from .persistence import PersistenceAdapter
from .scripture import ScriptureClient
from .settings import SettingsRepository, ThemeController
from .storage import LocalStorage
from .store import Store

logger = logging.getLogger("FaithDive")


class AppServices:
    """One store and one set of repositories per running application.

    Built once at startup and passed to whatever needs it; nothing in the
    package keeps module-level instances.
    """

    def __init__(self, config=None, cache_fetcher=None):
        self.config = config or load_config()
        data_dir = self.config.get("data_dir") or None

        self.local_storage = LocalStorage(get_storage_path(data_dir), quota_bytes=self.config["storage_quota"])
        self.persistence = PersistenceAdapter(self.local_storage)
        self.store = Store(self.persistence)

        self.journals = JournalRepository(self.store)
        self.favorites = FavoritesRepository(self.store)
        self.settings = SettingsRepository(self.store)
        self.theme = ThemeController(self.settings)
        self.exchange = DataExchange(self.store, self.favorites, self.settings)

        self.scripture = ScriptureClient(
            self.config["bible_api_key"],
            self.config["bible_api_base_url"],
            timeout=self.config["bible_api_timeout"],
        )
        self.offline = OfflineCacheManager(
            CacheStorage(get_cache_path(data_dir)),
            origin=self.config["origin"],
            fetcher=cache_fetcher,
        )

    def initialize(self):
        self.store.initialize()
        self.theme.init()
        logger.info(
            "Local data ready: %d journal entries, %d favorites",
            self.journals.get_count(),
            self.favorites.get_count(),
        )
        return self

    def close(self):
        self.store.close()
