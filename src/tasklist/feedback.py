from __future__ import annotations

import enum
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class ImpactStyle(str, enum.Enum):
    LIGHT = "light"
    MEDIUM = "medium"


# PUBLIC_INTERFACE
class FeedbackSink(Protocol):
    """
    Side-effect hooks fired by the view model after a mutation
    (haptics, sounds, animations on a real device).
    """

    def success(self) -> None:
        ...

    def impact(self, style: ImpactStyle) -> None:
        ...


class LoggingFeedback:
    """Default sink for headless runs: records feedback events in the log."""

    def success(self) -> None:
        logger.debug("feedback: success")

    def impact(self, style: ImpactStyle) -> None:
        logger.debug("feedback: impact (%s)", style.value)
