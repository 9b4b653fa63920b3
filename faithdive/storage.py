import json
import logging
import os
import tempfile
import threading

from .errors import StorageQuotaExceeded

logger = logging.getLogger("FaithDive")

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


class LocalStorage:
    """Durable string key-value slots kept in one JSON file.

    Every write rewrites the whole file through a temp file and ``os.replace``,
    so a crash leaves either the old or the new contents on disk. The quota
    counts the UTF-8 size of all keys and values together.
    """

    def __init__(self, path, quota_bytes=DEFAULT_QUOTA_BYTES):
        self.path = path
        self.quota_bytes = int(quota_bytes)
        self._lock = threading.Lock()
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)

    def _read(self):
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a key-value object")
        return data

    def _write(self, data):
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(prefix=".storage-", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, separators=(",", ":"))
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    @staticmethod
    def _size_of(data):
        return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in data.items())

    def get_item(self, key):
        with self._lock:
            value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key, value):
        with self._lock:
            data = self._read()
            data[key] = str(value)
            needed = self._size_of(data)
            if needed > self.quota_bytes:
                raise StorageQuotaExceeded(needed, self.quota_bytes)
            self._write(data)

    def remove_item(self, key):
        with self._lock:
            data = self._read()
            if key not in data:
                return
            del data[key]
            self._write(data)

    def keys(self):
        with self._lock:
            return sorted(self._read().keys())

    def usage(self):
        with self._lock:
            return self._size_of(self._read())
