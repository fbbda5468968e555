import os


def get_settings_module() -> str:
    # APP_ENV selects the settings module; development is the default.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "geoface.config.production"

    if env in {"test", "testing"}:
        return "geoface.config.testing"

    return "geoface.config.development"
