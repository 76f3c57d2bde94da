from dataclasses import dataclass
from typing import List, Optional

from pydantic import AnyUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from persona_chat.adapters.llm.constants import OpenAIModels
from persona_chat.domain.errors import (ConfigurationSettingEmptyError,
                                        ConfigurationSettingMissingError,
                                        GatewayConfigurationError)
from persona_chat.domain.validators import (IMAGE_CONTENT_TYPES,
                                            IMAGE_EXTENSIONS,
                                            IMAGE_MAX_FILE_SIZE_BYTES)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    DATABASE_URL: Optional[AnyUrl] = None
    USE_INMEMORY_REPO: bool = Field(default=False)
    DISABLE_DB_POOL: bool = Field(default=False)
    POOL_MIN: int = 1
    POOL_MAX: int = 10
    HISTORY_LIMIT: int = 50
    LOG_LEVEL: str = 'INFO'
    TRAINING_DATA_DIR: str = 'training-data/personas'
    IMAGE_STORAGE_DIR: str = 'uploads/personas'
    IMAGE_BASE_URL: str = '/uploads/personas'
    IMAGE_MAX_FILE_SIZE_BYTES: int = IMAGE_MAX_FILE_SIZE_BYTES
    IMAGE_ALLOWED_EXTENSIONS: List[str] = list(IMAGE_EXTENSIONS)
    IMAGE_ALLOWED_CONTENT_TYPES: List[str] = list(IMAGE_CONTENT_TYPES)
    CORS_ORIGINS: List[str] = ['http://localhost:3000']

    OPENAI_BASE_URL: str = 'https://api.openai.com'
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = OpenAIModels.GPT_35_TURBO.value
    OPENAI_TIMEOUT_S: float = 60
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_MAX_TOKENS: int = 500

    AUTH_DOMAIN: Optional[str] = None
    AUTH_AUDIENCE: Optional[str] = None

    @field_validator('DATABASE_URL', mode='before')
    def allow_blank_database_url(cls, v):
        if v == '' or v is None:
            return None
        return v

    @field_validator('OPENAI_API_KEY', mode='before')
    def allow_blank_openai(cls, v):
        if v == '' or v is None:
            return None
        return v

    @field_validator('AUTH_DOMAIN', 'AUTH_AUDIENCE', mode='before')
    def allow_blank_auth(cls, v):
        if v == '' or v is None:
            return None
        return v

    @property
    def auth_enabled(self) -> bool:
        return bool(self.AUTH_DOMAIN)


def require_setting(name: str, value):
    if value is None:
        raise ConfigurationSettingMissingError(f'{name} is not configured')
    if isinstance(value, str) and not value.strip():
        raise ConfigurationSettingEmptyError(f'{name} is configured but empty')
    return value


@dataclass(frozen=True)
class GatewayConfig:
    """Resolved settings for the OpenAI gateway, checked once at startup."""

    base_url: str
    api_key: str
    model: str = OpenAIModels.GPT_35_TURBO.value
    timeout_s: float = 60
    temperature: float = 0.7
    max_tokens: int = 500

    @classmethod
    def from_settings(cls, s: 'Settings') -> 'GatewayConfig':
        try:
            base_url = require_setting('OPENAI_BASE_URL', s.OPENAI_BASE_URL)
            api_key = require_setting('OPENAI_API_KEY', s.OPENAI_API_KEY)
        except (ConfigurationSettingMissingError, ConfigurationSettingEmptyError) as e:
            raise GatewayConfigurationError(f'OpenAI gateway: {e.message}', cause=e)

        if s.OPENAI_TIMEOUT_S <= 0:
            raise GatewayConfigurationError('OpenAI gateway: OPENAI_TIMEOUT_S must be positive')
        if s.OPENAI_MAX_TOKENS <= 0:
            raise GatewayConfigurationError('OpenAI gateway: OPENAI_MAX_TOKENS must be positive')

        return cls(
            base_url=base_url.rstrip('/'),
            api_key=api_key,
            model=(s.OPENAI_MODEL or OpenAIModels.GPT_35_TURBO.value).strip(),
            timeout_s=s.OPENAI_TIMEOUT_S,
            temperature=s.OPENAI_TEMPERATURE,
            max_tokens=s.OPENAI_MAX_TOKENS,
        )


settings = Settings()
