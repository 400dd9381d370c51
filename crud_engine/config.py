"""
Configuration management for CRUD_ENGINE.

Values come from explicit constructor arguments first, then environment
variables, then defaults.
"""

import os

from .constants import DEFAULT_ADMIN_ROLE, DEFAULT_MODELS_DIR

STORAGE_BACKENDS = ("memory", "mongo")


class EngineConfig:
    """
    CRUD Engine configuration.

    Example:
        # Using environment variables
        config = EngineConfig()

        # Or using direct parameters
        config = EngineConfig(models_dir="/srv/models", storage_backend="memory")
    """

    def __init__(
        self,
        models_dir: str | None = None,
        storage_backend: str | None = None,
        mongo_uri: str | None = None,
        db_name: str | None = None,
        admin_role: str | None = None,
        secret_key: str | None = None,
    ):
        """
        Initialize configuration.

        Args:
            models_dir: Directory holding one JSON definition per model
                (defaults to CRUD_MODELS_DIR env var or ./models)
            storage_backend: "memory" or "mongo" (defaults to CRUD_STORAGE or "memory")
            mongo_uri: MongoDB connection URI (defaults to MONGO_URI env var)
            db_name: Database name (defaults to DB_NAME env var)
            admin_role: Role that bypasses ownership scoping
                (defaults to CRUD_ADMIN_ROLE or "Admin")
            secret_key: JWT verification secret (defaults to SECRET_KEY env var)
        """
        self.models_dir = models_dir or os.getenv("CRUD_MODELS_DIR", DEFAULT_MODELS_DIR)
        self.storage_backend = storage_backend or os.getenv("CRUD_STORAGE", "memory")
        self.mongo_uri = mongo_uri or os.getenv("MONGO_URI", "")
        self.db_name = db_name or os.getenv("DB_NAME", "")
        self.admin_role = admin_role or os.getenv("CRUD_ADMIN_ROLE", DEFAULT_ADMIN_ROLE)
        self.secret_key = secret_key or os.getenv("SECRET_KEY", "")

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If required configuration is missing or invalid
        """
        if not self.models_dir:
            raise ValueError("models_dir is required (set CRUD_MODELS_DIR or pass directly)")

        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"storage_backend must be one of {STORAGE_BACKENDS}, got {self.storage_backend!r}"
            )

        if self.storage_backend == "mongo":
            if not self.mongo_uri:
                raise ValueError(
                    "mongo_uri is required for the mongo backend "
                    "(set MONGO_URI environment variable or pass directly)"
                )
            if not self.db_name:
                raise ValueError(
                    "db_name is required for the mongo backend "
                    "(set DB_NAME environment variable or pass directly)"
                )

        if not self.admin_role:
            raise ValueError("admin_role must not be empty")
