import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic_settings import (
    PydanticBaseSettingsSource,
)

logger = logging.getLogger(__name__)


def read_secret_file(field_name: str) -> Optional[str]:
    """Read the value of ``field_name`` from the file named by ``<field_name>_FILE``.

    Returns None when the variable is unset, the file is missing, or it
    cannot be read.
    """
    file_path = os.getenv(f"{field_name}_FILE")
    if not file_path:
        return None

    path = Path(file_path)
    if not path.exists():
        return None

    try:
        return path.read_text().strip()
    except OSError as e:
        # Settings load before logging is configured
        logger.warning("Could not read secret from %s: %s", file_path, e)
        return None


class DockerSecretsSettingsSource(PydanticBaseSettingsSource):
    """
    Settings source that reads Docker secrets from files.

    Example:
        If REDIS_URL_FILE=/run/secrets/hubproxy_redis_url
        Then REDIS_URL will be read from that file
    """

    def get_field_value(
        self, field_name: str, field_info: Any
    ) -> tuple[Any, str, bool]:
        return read_secret_file(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        values: dict[str, Any] = {}

        for field_name, field_info in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field_name, field_info)
            if value is not None:
                values[key] = value

        return values
