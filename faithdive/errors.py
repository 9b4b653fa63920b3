class FaithDiveError(Exception):
    pass


class StoreError(FaithDiveError):
    """Malformed statement or constraint violation inside the embedded store."""


class PersistenceError(FaithDiveError):
    QUOTA_EXCEEDED = "quota_exceeded"
    WRITE_FAILED = "write_failed"
    CORRUPT_IMAGE = "corrupt_image"

    def __init__(self, reason, detail=""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class ImportDataError(FaithDiveError):
    NO_RECOGNIZED_DATA = "no_recognized_data"
    INVALID_JSON = "invalid_json"

    def __init__(self, reason, detail=""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class StorageQuotaExceeded(FaithDiveError):
    def __init__(self, needed, quota):
        self.needed = needed
        self.quota = quota
        super().__init__(f"storage quota exceeded ({needed} > {quota} bytes)")


class CacheInstallError(FaithDiveError):
    def __init__(self, url, msg):
        self.url = url
        self.msg = msg
        super().__init__(f"failed to cache {url}: {msg}")
