import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    database_url: str
    timezone: str

    default_origin: str
    default_destination: str

    retention_months: int

    log_level: str
    log_file: str | None


def resolve_data_dir() -> Path:
    """
    DATA_DIR if set, else a mounted /data volume if present, else ./data next to backend/.
    """
    explicit = (os.getenv("DATA_DIR") or "").strip()
    if explicit:
        return Path(explicit)
    if Path("/data").is_dir():
        return Path("/data")
    return Path(__file__).resolve().parents[2] / "data"


def load_settings() -> Settings:
    database_url = (os.getenv("DATABASE_URL") or "").strip()
    if not database_url:
        data_dir = resolve_data_dir()
        database_url = f"sqlite:///{data_dir / 'platformwatch.db'}"

    return Settings(
        database_url=database_url,
        timezone=os.getenv("PLATFORMWATCH_TIMEZONE", "Europe/London"),
        default_origin=os.getenv("DEFAULT_ORIGIN", "PAD").upper(),
        default_destination=os.getenv("DEFAULT_DESTINATION", "TLH").upper(),
        retention_months=int(os.getenv("RETENTION_MONTHS", "3")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=(os.getenv("LOG_FILE") or "").strip() or None,
    )
