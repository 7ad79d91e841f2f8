"""Live/demo data mode shared by every resource hook."""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class DataMode(Enum):
    """Where resource data comes from.

    LIVE: fetched from the upstream intelligence API
    DEMO: synthesized locally from the mocks package
    """
    LIVE = "live"
    DEMO = "demo"

    @property
    def is_live(self) -> bool:
        return self is DataMode.LIVE

    @classmethod
    def from_flag(cls, is_live: bool) -> "DataMode":
        return cls.LIVE if is_live else cls.DEMO


class DataModeContext:
    """Process-wide holder of the current data mode.

    Routes read the mode here once per request and hand it to the hooks as an
    argument; fetch functions never consult this object themselves.
    """

    def __init__(self, mode: DataMode = DataMode.DEMO):
        self._mode = mode

    @property
    def mode(self) -> DataMode:
        return self._mode

    @property
    def is_live(self) -> bool:
        return self._mode.is_live

    def set_live(self, is_live: bool) -> DataMode:
        new_mode = DataMode.from_flag(is_live)
        if new_mode is not self._mode:
            logger.info("DATA MODE CHANGE: %s → %s", self._mode.value, new_mode.value)
            self._mode = new_mode
        return self._mode

    def toggle(self) -> DataMode:
        return self.set_live(not self.is_live)

    def as_dict(self) -> dict:
        return {"mode": self._mode.value, "is_live": self.is_live}
