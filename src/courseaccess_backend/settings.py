import os
import threading

class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE","development")
        # Key/value backend: "redis" in deployments, "memory" for local runs and tests
        self.STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "redis").lower()
        self.REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
        self.REDIS_PORT = int(os.environ.get("REDIS_PORT", "6379"))
        self.REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD", "")
        self.REDIS_DB = int(os.environ.get("REDIS_DB", "0"))
        # Expiry in seconds of access records and their indices; 0 keeps them forever.
        # Catalog, admin and prerequisite keys never expire.
        self.DURABLE_TTL = int(os.environ.get("DURABLE_TTL", "0"))
        self.EPHEMERAL_TTL = int(os.environ.get("EPHEMERAL_TTL", "900"))  # 15 minutes
        # YAML file mapping bearer tokens to principal ids
        self.API_TOKENS_FILE = os.environ.get("API_TOKENS_FILE", None)

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

settings = BackendSettings()
