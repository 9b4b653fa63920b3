import json
import logging

from .constants import DB_SLOT
from .errors import PersistenceError, StorageQuotaExceeded

logger = logging.getLogger("FaithDive")


class PersistenceAdapter:
    """Writes the store's binary image to one durable slot and reads it back.

    The image is stored as a JSON array of byte values. Flushes are
    synchronous; a failed flush raises ``PersistenceError`` and the caller's
    in-memory change is left in place.
    """

    def __init__(self, storage, slot=DB_SLOT):
        self.storage = storage
        self.slot = slot

    def flush(self, image):
        payload = json.dumps(list(bytes(image)), separators=(",", ":"))
        try:
            self.storage.set_item(self.slot, payload)
        except StorageQuotaExceeded as exc:
            logger.error("Database image of %d bytes does not fit local storage: %s", len(image), exc)
            raise PersistenceError(PersistenceError.QUOTA_EXCEEDED, str(exc)) from exc
        except OSError as exc:
            logger.error("Failed to write database image: %s", exc)
            raise PersistenceError(PersistenceError.WRITE_FAILED, str(exc)) from exc

    def load(self):
        try:
            raw = self.storage.get_item(self.slot)
        except (OSError, ValueError) as exc:
            raise PersistenceError(PersistenceError.CORRUPT_IMAGE, str(exc)) from exc
        if raw is None:
            return None
        try:
            values = json.loads(raw)
            if not isinstance(values, list):
                raise TypeError("image slot does not hold a byte array")
            return bytes(values)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(PersistenceError.CORRUPT_IMAGE, str(exc)) from exc

    def clear(self):
        try:
            self.storage.remove_item(self.slot)
        except OSError as exc:
            raise PersistenceError(PersistenceError.WRITE_FAILED, str(exc)) from exc
