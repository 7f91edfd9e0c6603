from abc import ABC, abstractmethod
from dataclasses import dataclass

from platformwatch.history.types import RawDepartureUpdate


@dataclass(frozen=True)
class DepartureBoard:
    from_loc: str
    to_loc: str
    payload: dict
    updates: list[RawDepartureUpdate]


class BaseSource(ABC):
    @abstractmethod
    def fetch_board(self, from_loc: str, to_loc: str) -> DepartureBoard:
        """
        Fetch and parse the live board. Raise UpstreamUnavailable on any failure; never invent data.
        """
        raise NotImplementedError
