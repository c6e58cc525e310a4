import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unknown falls back to development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def env_list(name: str, default: str) -> tuple[str, ...]:
    """Comma separated environment variable -> tuple of non-empty items."""
    return tuple(item.strip() for item in os.getenv(name, default).split(",") if item.strip())
