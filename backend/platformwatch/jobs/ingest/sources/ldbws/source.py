import logging
from typing import Optional

import httpx

from platformwatch.core.errors import UpstreamUnavailable
from platformwatch.jobs.ingest.sources.base import BaseSource, DepartureBoard

from .board import parse_departure_board
from .config import LdbwsConfig, load_config
from .http import get_with_retry, make_client

logger = logging.getLogger(__name__)

BOARD_PATH = "/LDBWS/api/20220120/GetNextDepartures/{from_loc}/{to_loc}"


class LdbwsSource(BaseSource):
    """
    National Rail live departure board (LDBWS):
      - GET GetNextDepartures/{from}/{to} for the next services to the destination
    """

    def __init__(self, cfg: Optional[LdbwsConfig] = None, client: Optional[httpx.Client] = None):
        self.cfg = cfg or load_config()
        self._client = client

        logger.info(
            "LDBWS configured base_url=%s timeouts(connect=%.1f read=%.1f) retries=%d time_window=%d",
            self.cfg.base_url,
            self.cfg.connect_timeout,
            self.cfg.read_timeout,
            self.cfg.retries,
            self.cfg.time_window,
        )

    def _get(self, path: str, params: dict) -> dict:
        if self._client is not None:
            return get_with_retry(self.cfg, self._client, path, params)
        with make_client(self.cfg) as client:
            return get_with_retry(self.cfg, client, path, params)

    def fetch_board(self, from_loc: str, to_loc: str) -> DepartureBoard:
        from_loc = from_loc.upper()
        to_loc = to_loc.upper()
        path = BOARD_PATH.format(from_loc=from_loc, to_loc=to_loc)
        params = {"timeOffset": 0, "timeWindow": self.cfg.time_window}

        try:
            payload = self._get(path, params)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("LDBWS board %s->%s unavailable: %r", from_loc, to_loc, e)
            raise UpstreamUnavailable(f"departure board {from_loc}->{to_loc} unavailable: {e}") from e

        if not isinstance(payload, dict):
            raise UpstreamUnavailable(f"departure board {from_loc}->{to_loc} returned {type(payload).__name__}")

        updates = parse_departure_board(payload, fallback_destination=to_loc)
        logger.info("LDBWS board %s->%s services=%d", from_loc, to_loc, len(updates))
        return DepartureBoard(from_loc=from_loc, to_loc=to_loc, payload=payload, updates=updates)
