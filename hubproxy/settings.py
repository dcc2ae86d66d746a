from typing import Literal

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from hubproxy.utils.settings_utils import DockerSecretsSettingsSource


class GeneralConfig(BaseSettings):
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = ""
    USER_AGENT: str = "hubproxy"


class UpstreamConfig(BaseSettings):
    REGISTRY_URL: str = "https://registry-1.docker.io"
    AUTH_URL: str = "https://auth.docker.io/token"
    AUTH_SERVICE: str = "registry.docker.io"

    TOKEN_TTL_SECONDS: int = 300
    """Lifetime assumed for every token, `expires_in` from the token endpoint is ignored"""

    UPSTREAM_CONNECT_TIMEOUT: float = 30.0
    UPSTREAM_READ_TIMEOUT: float = 1800.0  # 30 minutes for large layer downloads
    UPSTREAM_WRITE_TIMEOUT: float = 1800.0
    UPSTREAM_POOL_TIMEOUT: float = 10.0


class TokenCacheConfig(BaseSettings):
    TOKEN_CACHE_TYPE: Literal["memory", "redis"] = "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    TOKEN_CACHE_PREFIX: str = "hubproxy:token:"


class Settings(
    GeneralConfig,
    UpstreamConfig,
    TokenCacheConfig,
    BaseSettings,
):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.prod", ".env.test"),
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Explicit kwargs, then `<NAME>_FILE` secrets, then the environment, then .env files."""
        return (
            init_settings,
            DockerSecretsSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )


settings = Settings()
