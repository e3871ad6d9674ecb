"""
Configuration management for the translator client.
Supports different environments (development, staging, production).
"""

import os
from dataclasses import dataclass
from typing import Optional
from enum import Enum

from mstranslator.utils.exceptions import ConfigurationError


class Environment(Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class CacheBackend(Enum):
    REDIS = "redis"
    MEMORY = "memory"


@dataclass
class RedisConfig:
    host: str
    port: int
    password: Optional[str] = None
    db: int = 7
    max_connections: int = 20
    url: Optional[str] = None


@dataclass
class TranslatorConfig:
    auth_url: str = "https://datamarket.accesscontrol.windows.net/v2/OAuth2-13"
    scope: str = "http://api.microsofttranslator.com"
    grant_type: str = "client_credentials"
    translate_url: str = "http://api.microsofttranslator.com/v2/Http.svc/Translate"
    translate_array_url: str = "http://api.microsofttranslator.com/V2/Http.svc/TranslateArray"
    detect_array_url: str = "http://api.microsofttranslator.com/V2/Http.svc/DetectArray"
    timeout_seconds: float = 30.0
    client_id: Optional[str] = None
    client_secret: Optional[str] = None


@dataclass
class CacheConfig:
    enabled: bool = True
    backend: CacheBackend = CacheBackend.REDIS
    include_source_language: bool = False


@dataclass
class MonitoringConfig:
    log_level: str = "INFO"


@dataclass
class Config:
    environment: Environment
    redis: RedisConfig
    translator: TranslatorConfig
    cache: CacheConfig
    monitoring: MonitoringConfig


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _env_int(name: str, default: str) -> int:
    value = os.getenv(name, default)
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'", config_key=name)


def _env_float(name: str, default: str) -> float:
    value = os.getenv(name, default)
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{value}'", config_key=name)


def _env_enum(enum_cls, name: str, default: str):
    value = os.getenv(name, default)
    try:
        return enum_cls(value.lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"{name} must be one of [{allowed}], got '{value}'", config_key=name)


def load_config() -> Config:
    """Load configuration based on environment variables."""
    env = _env_enum(Environment, "ENVIRONMENT", "development")

    redis_config = RedisConfig(
        host=os.getenv("REDIS_HOST", "localhost"),
        port=_env_int("REDIS_PORT", "6379"),
        password=os.getenv("REDIS_PASSWORD"),
        db=_env_int("REDIS_DB", "7"),
        max_connections=_env_int("REDIS_MAX_CONNECTIONS", "20"),
        url=os.getenv("REDIS_URL")
    )

    defaults = TranslatorConfig()
    translator_config = TranslatorConfig(
        auth_url=os.getenv("MS_AUTH_URL", defaults.auth_url),
        scope=os.getenv("MS_SCOPE", defaults.scope),
        grant_type=os.getenv("MS_GRANT_TYPE", defaults.grant_type),
        translate_url=os.getenv("MS_TRANSLATE_URL", defaults.translate_url),
        translate_array_url=os.getenv("MS_TRANSLATE_ARRAY_URL", defaults.translate_array_url),
        detect_array_url=os.getenv("MS_DETECT_ARRAY_URL", defaults.detect_array_url),
        timeout_seconds=_env_float("HTTP_TIMEOUT_SECONDS", "30"),
        client_id=os.getenv("MS_CLIENT_ID"),
        client_secret=os.getenv("MS_CLIENT_SECRET")
    )

    cache_config = CacheConfig(
        enabled=_env_bool("CACHE_ENABLED", "true"),
        backend=_env_enum(CacheBackend, "CACHE_BACKEND", "redis"),
        include_source_language=_env_bool("CACHE_KEY_INCLUDE_SOURCE_LANGUAGE", "false")
    )

    monitoring_config = MonitoringConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO").upper()
    )

    return Config(
        environment=env,
        redis=redis_config,
        translator=translator_config,
        cache=cache_config,
        monitoring=monitoring_config
    )


# Global configuration instance
config = load_config()
