"""Backend-specific configuration extending core settings."""

from casebridge import Settings as CoreSettings
from typing import Set


class Settings(CoreSettings):
    """Backend application settings extending core configuration.

    Adds what only the HTTP service needs; everything shared with the
    core package (database, Stripe, token secrets) stays in
    ``casebridge.config``.
    """

    # ===== API SETTINGS =====
    API_HOST: str = "localhost"
    """API host address."""

    API_PORT: int = 8000
    """API port number."""

    # ===== DATABASE =====
    DATABASE_ECHO: bool = False
    """Enable SQLAlchemy echo for SQL debugging."""

    # ===== FILE UPLOAD =====
    UPLOAD_DIR: str = "./uploads"
    """Directory case files are stored in."""

    MAX_UPLOAD_SIZE: int = 10485760  # 10MB
    """Maximum size of a single uploaded file in bytes."""

    MAX_FILES_PER_UPLOAD: int = 10
    """Maximum number of files in one upload request."""

    ALLOWED_MIME_TYPES: str = "application/pdf,image/png,image/jpeg,image/jpg"
    """Comma-separated list of accepted content types."""

    @property
    def allowed_mime_types(self) -> Set[str]:
        return {mime.strip().lower() for mime in self.ALLOWED_MIME_TYPES.split(",") if mime.strip()}

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Singleton instance
settings = Settings()
