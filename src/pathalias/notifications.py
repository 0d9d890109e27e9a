"""Operator notifications routed through the package logger."""

from __future__ import annotations

import logging

from pathalias.contracts import NotificationSink, Operation

logger = logging.getLogger(__name__)


class LoggingNotifier(NotificationSink):
    """Logs notifications at INFO when ``verbose`` is on, DEBUG otherwise.

    Bulk updates always log at DEBUG; one message per item would bury
    anything useful.
    """

    def __init__(self, *, verbose: bool = False) -> None:
        self.verbose = verbose

    def notify(self, message: str, operation: Operation | str) -> None:
        if self.verbose and operation != Operation.BULKUPDATE:
            logger.info("%s", message)
        else:
            logger.debug("[%s] %s", operation, message)
