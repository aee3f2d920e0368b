import os
from dotenv import load_dotenv

load_dotenv()


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(item.strip().lower() for item in raw.split(",") if item.strip())


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Tenant resolution
    SITE_APEX_DOMAIN = os.getenv("SITE_APEX_DOMAIN", "likhasiteworks.studio")
    SITE_HOSTING_DENYLIST = _split_csv(
        os.getenv(
            "SITE_HOSTING_DENYLIST",
            "vercel.app,netlify.app,pages.dev,onrender.com,example-hosting.app",
        )
    )
    SITE_QUERY_KEYS = ("site", "website")

    # Inline editor
    EDITOR_SAVE_DEBOUNCE_MS = int(os.getenv("EDITOR_SAVE_DEBOUNCE_MS", "100"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///sitebuilder-dev.db")


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URI", "sqlite:///:memory:")
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    SITE_APEX_DOMAIN = "example.com"
    SITE_HOSTING_DENYLIST = ("example-hosting.app", "vercel.app")


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
