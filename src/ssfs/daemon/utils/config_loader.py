import yaml
import os
from pathlib import Path
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Literal, Optional
from .logging_config import StructuredLogger

logger = StructuredLogger(__name__)

# --- Settings Schema ---

class Settings(BaseModel):
    service_name: str = Field("ssfs-ethan-oct16", min_length=1)
    bucket_name: str = Field("ssfs-bucket", min_length=1)
    # Credit cost per 1 lead
    cost_per_unit: int = Field(2, ge=1)
    callback_url: Optional[str] = None
    internal_routing: str = "ssfs-internal"
    gcp_project: str = "ssfs-202408"
    firestore_database: str = "ssfs"
    subscriptions_collection: str = "subscriptions"
    api_key_field: str = Field("ssfs_account_api_key", min_length=1)
    backend: Literal["gcp", "memory"] = "gcp"
    debug_logs_on: bool = False
    log_level: str = "INFO"
    http_timeout_seconds: float = Field(60.0, gt=0)

    @field_validator("callback_url")
    def validate_callback_url(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Callback URL must be http(s), got '{v}'")
        return v

    @field_validator("log_level")
    def validate_log_level(cls, v):
        return v.upper()


# Environment variable -> settings field. `debug_logs_on` and the callback URL
# keep the names the deployed function already uses.
_ENV_FIELDS = {
    "SSFS_SERVICE_NAME": "service_name",
    "SSFS_BUCKET_NAME": "bucket_name",
    "SSFS_COST_PER_UNIT": "cost_per_unit",
    "SSFS_SERVICE_CALLBACK_URL": "callback_url",
    "SSFS_INTERNAL_ROUTING": "internal_routing",
    "SSFS_GCP_PROJECT": "gcp_project",
    "SSFS_FIRESTORE_DATABASE": "firestore_database",
    "SSFS_SUBSCRIPTIONS_COLLECTION": "subscriptions_collection",
    "SSFS_API_KEY_FIELD": "api_key_field",
    "SSFS_BACKEND": "backend",
    "debug_logs_on": "debug_logs_on",
    "SSFS_LOG_LEVEL": "log_level",
    "SSFS_HTTP_TIMEOUT_SECONDS": "http_timeout_seconds",
}


def _env_overrides(environ) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for env_name, field in _ENV_FIELDS.items():
        raw = environ.get(env_name)
        if raw is None:
            continue
        if field == "debug_logs_on":
            overrides[field] = raw.strip().lower() == "true"
        else:
            overrides[field] = raw.strip()
    return overrides

# --- Config Loader (Atomic Reload) ---

class ConfigLoader:
    def __init__(self):
        explicit = os.getenv("SSFS_CONFIG_FILE")
        if explicit:
            self.config_file = Path(explicit)
        else:
            self.config_dir = Path(os.getenv("SSFS_CONFIG_DIR", "/etc/ssfs"))
            self.config_file = self.config_dir / "ssfs.yaml"
        self.settings: Optional[Settings] = None

    def load_settings(self, environ=None) -> Settings:
        """
        Loads settings from the optional YAML file, overlaid by environment variables.
        ATOMIC: On failure, previous settings are preserved.
        Raises ValueError if invalid and no previous settings exist.
        """
        environ = os.environ if environ is None else environ
        try:
            raw_data: Dict[str, Any] = {}
            if self.config_file.exists():
                with open(self.config_file, "r") as f:
                    loaded = yaml.safe_load(f) or {}
                if not isinstance(loaded, dict):
                    raise ValueError("Config file must contain a mapping")
                raw_data.update(loaded)
                logger.info("Loading configuration", path=str(self.config_file))

            raw_data.update(_env_overrides(environ))

            # Validate into temporary — never touch self.settings until success
            new_settings = Settings(**raw_data)

            self.settings = new_settings

            logger.info("Configuration loaded successfully",
                        backend=new_settings.backend,
                        bucket=new_settings.bucket_name,
                        service=new_settings.service_name)
            return self.settings

        except Exception as e:
            logger.error("Configuration validation failed", error=str(e))
            if self.settings is not None:
                logger.warning("Keeping previous valid configuration")
                raise ValueError(f"Invalid configuration (previous config retained): {e}")
            else:
                logger.critical("No previous configuration to fall back to")
                raise ValueError(f"Invalid configuration (no fallback): {e}")

    def get_settings(self) -> Settings:
        if not self.settings:
            self.load_settings()
        return self.settings

config_loader = ConfigLoader()
