"""Application configuration for planorder."""

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from environment (PLANORDER_*) and .env.

    Command-line flags override these values.
    """

    # Oracle connection
    oracle_dsn: str = ""
    oracle_user: str = ""
    oracle_password: str = ""
    oracle_echo: bool = False

    # Report defaults
    plan_table: str = "PLAN_TABLE"
    plan_format: str = "TYPICAL"

    # Annotation
    qualify_names: bool = True
    mismatch_severity: str = "ignore"
    footer_placement: str = "report"

    # AWR reports need the Diagnostics Pack
    diagnostics_pack_licensed: bool = False

    class Config:
        env_prefix = "PLANORDER_"
        env_file = ".env"


def build_database_url(dsn: str, user: str, password: str = "") -> str:
    """Build an ``oracle+oracledb`` URL from an Easy Connect string.

    Accepts ``host:port/service`` (or ``host/service``); a full SQLAlchemy
    URL is returned unchanged.
    """
    if "://" in dsn:
        return dsn
    credentials = quote_plus(user)
    if password:
        credentials += ":" + quote_plus(password)
    host, _, service = dsn.partition("/")
    url = f"oracle+oracledb://{credentials}@{host}"
    if service:
        url += f"/?service_name={quote_plus(service)}"
    return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
