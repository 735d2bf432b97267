import os
from dataclasses import dataclass, field
from datetime import date

from dotenv import load_dotenv

from holiday_calendar import load_holidays

DEFAULT_PORT = 3000


class MissingCredentials(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    channel_access_token: str
    channel_secret: str
    port: int = DEFAULT_PORT
    base_url: str = f"http://localhost:{DEFAULT_PORT}"
    liff_id: str = ""
    database_url: str | None = None
    log_level: str = "INFO"
    holidays: frozenset[date] = field(default_factory=frozenset)


def _env(environ, name: str, default: str = "") -> str:
    return (environ.get(name, default) or default).strip()


def load_settings(environ=None) -> Settings:
    """Read settings from the environment (and a local .env when reading os.environ).

    Holidays are resolved here, once, so the rest of the app only sees a frozen set.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    token = _env(environ, "LINE_CHANNEL_ACCESS_TOKEN")
    secret = _env(environ, "LINE_CHANNEL_SECRET")
    if not token or not secret:
        raise MissingCredentials("Missing LINE credentials (LINE_CHANNEL_ACCESS_TOKEN / LINE_CHANNEL_SECRET)")

    port = int(_env(environ, "PORT", str(DEFAULT_PORT)))
    database_url = _env(environ, "DATABASE_URL") or None

    return Settings(
        channel_access_token=token,
        channel_secret=secret,
        port=port,
        base_url=(_env(environ, "BASE_URL") or f"http://localhost:{port}").rstrip("/"),
        liff_id=_env(environ, "LIFF_ID"),
        database_url=database_url,
        log_level=_env(environ, "LOG_LEVEL", "INFO").upper(),
        holidays=load_holidays(_env(environ, "HOLIDAYS"), database_url),
    )
