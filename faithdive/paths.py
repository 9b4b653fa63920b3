import os


def get_data_dir(base=None):
    # Explicit directory first, then the environment, then the user's home.
    base = base or os.environ.get("FAITHDIVE_DATA_DIR") or os.path.join(os.path.expanduser("~"), ".faithdive")
    os.makedirs(base, exist_ok=True)
    return base


def get_storage_path(base=None):
    return os.path.join(get_data_dir(base), "local_storage.json")


def get_cache_path(base=None):
    return os.path.join(get_data_dir(base), "offline_cache.db")


def get_public_dir(base=None):
    return base or os.environ.get("FAITHDIVE_PUBLIC_DIR") or os.path.join(os.path.dirname(__file__), "public")
