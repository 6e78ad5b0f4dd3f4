import importlib
import os

_SETTINGS_BY_ENV = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module(env=None) -> str:
    """Settings module for ``env`` or APP_ENV; anything unknown means development."""
    name = (env or os.getenv("APP_ENV") or "development").strip().lower()
    return _SETTINGS_BY_ENV.get(name, "config.development")


def load_settings(env=None):
    return importlib.import_module(get_settings_module(env))
