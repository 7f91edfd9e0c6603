import logging
import random
import time
from typing import Optional

import httpx

from .config import LdbwsConfig

logger = logging.getLogger(__name__)

RETRY_STATUSES = {429, 502, 503, 504, 520, 522, 524}


def mask_api_key(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}****{value[-4:]}"


def log_request(request: httpx.Request) -> None:
    logger.debug("HTTP %s %s", request.method, request.url)
    logger.debug("HTTP x-apikey: %s", mask_api_key(request.headers.get("x-apikey")))


def make_client(cfg: LdbwsConfig) -> httpx.Client:
    timeout = httpx.Timeout(
        connect=cfg.connect_timeout,
        read=cfg.read_timeout,
        write=cfg.write_timeout,
        pool=cfg.pool_timeout,
    )
    return httpx.Client(
        base_url=cfg.base_url,
        timeout=timeout,
        headers={"x-apikey": cfg.api_key, "Content-Type": "application/json"},
        event_hooks={"request": [log_request]},
    )


def sleep_backoff(cfg: LdbwsConfig, *, attempt: int, path: str) -> None:
    sleep_s = cfg.backoff_base * (2 ** (attempt - 1))
    sleep_s += random.uniform(0, 0.5)
    logger.info("Sleeping %.2fs before retrying %s", sleep_s, path)
    time.sleep(sleep_s)


def get_with_retry(cfg: LdbwsConfig, client: httpx.Client, path: str, params: dict) -> dict:
    last_err: Exception | None = None
    attempts = max(cfg.retries, 1)

    for attempt in range(1, attempts + 1):
        t0 = time.perf_counter()
        try:
            r = client.get(path, params=params)
            elapsed = time.perf_counter() - t0

            if r.status_code in RETRY_STATUSES:
                snippet = (r.text or "")[:300]
                logger.warning(
                    "Retryable HTTP %d (attempt %d/%d) GET %s after %.2fs body_snippet=%r",
                    r.status_code,
                    attempt,
                    attempts,
                    path,
                    elapsed,
                    snippet,
                )
                raise httpx.HTTPStatusError("Retryable status", request=r.request, response=r)

            logger.debug("GET %s completed in %.2fs status=%d", path, elapsed, r.status_code)

            r.raise_for_status()
            return r.json()

        except httpx.TransportError as e:
            last_err = e
            logger.warning(
                "%s (attempt %d/%d) GET %s after %.2fs",
                e.__class__.__name__,
                attempt,
                attempts,
                path,
                time.perf_counter() - t0,
            )

        except httpx.HTTPStatusError as e:
            last_err = e
            status = e.response.status_code if e.response is not None else None
            if status not in RETRY_STATUSES:
                snippet = (e.response.text or "")[:300] if e.response is not None else None
                logger.error("Non-retryable HTTP %s GET %s body_snippet=%r", status, path, snippet)
                raise

        if attempt < attempts:
            sleep_backoff(cfg, attempt=attempt, path=path)

    raise last_err  # type: ignore
