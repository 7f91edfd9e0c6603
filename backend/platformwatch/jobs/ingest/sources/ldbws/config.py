import os
from dataclasses import dataclass


@dataclass(frozen=True)
class LdbwsConfig:
    base_url: str
    api_key: str

    connect_timeout: float
    read_timeout: float
    write_timeout: float
    pool_timeout: float

    num_rows: int
    time_window: int

    retries: int
    backoff_base: float


def load_config() -> LdbwsConfig:
    api_key = (os.getenv("LDBWS_API_KEY") or "").strip()
    if not api_key:
        raise RuntimeError("LDBWS_API_KEY not set in backend/.env")

    return LdbwsConfig(
        base_url=os.getenv("LDBWS_BASE_URL", "https://api1.raildata.org.uk/1010-live-departure-board-dep1_2"),
        api_key=api_key,
        connect_timeout=float(os.getenv("LDBWS_CONNECT_TIMEOUT_SECONDS", "10")),
        read_timeout=float(os.getenv("LDBWS_READ_TIMEOUT_SECONDS", "20")),
        write_timeout=float(os.getenv("LDBWS_WRITE_TIMEOUT_SECONDS", "10")),
        pool_timeout=float(os.getenv("LDBWS_POOL_TIMEOUT_SECONDS", "10")),
        num_rows=int(os.getenv("LDBWS_NUM_ROWS", "10")),
        time_window=int(os.getenv("LDBWS_TIME_WINDOW", "120")),
        retries=int(os.getenv("LDBWS_RETRIES", "3")),
        backoff_base=float(os.getenv("LDBWS_BACKOFF_BASE_SECONDS", "1.0")),
    )
