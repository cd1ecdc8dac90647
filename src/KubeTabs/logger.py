from __future__ import annotations

import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from KubeTabs.config import AppConfig

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"


class AppLogger:
    """Manages the application's logging setup.

    While the TUI owns the terminal, records are handed to a background
    listener that writes them to the configured log file. Without a log
    file, and when ``to_stderr`` is set, records go to stderr instead.
    """

    def __init__(self, app_config: AppConfig, *, to_stderr: bool = False) -> None:
        self.log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
        self.log_listener: QueueListener | None = None
        self._queue_handler: QueueHandler | None = None
        self._stream_handler: logging.Handler | None = None
        self._null_handler: logging.Handler | None = None

        log_level = app_config.log_level_value
        app_logger = logging.getLogger("KubeTabs")
        app_logger.setLevel(log_level)

        formatter = logging.Formatter(LOG_FORMAT)
        if app_config.log_file:
            log_handler = logging.FileHandler(app_config.log_file, mode="w")
            log_handler.setFormatter(formatter)

            self.log_listener = QueueListener(self.log_queue, log_handler)
            self._queue_handler = QueueHandler(self.log_queue)
            root_logger = logging.getLogger()
            root_logger.addHandler(self._queue_handler)
            root_logger.setLevel(log_level)
            self.log_listener.start()
        elif to_stderr:
            self._stream_handler = logging.StreamHandler(sys.stderr)
            self._stream_handler.setFormatter(formatter)
            app_logger.addHandler(self._stream_handler)
        else:
            # Nothing may write to the terminal under the TUI.
            self._null_handler = logging.NullHandler()
            app_logger.propagate = False
            app_logger.addHandler(self._null_handler)

        logging.getLogger("kubernetes_asyncio.client.rest").setLevel(logging.INFO)
        log.info("--- KubeTabs Logger Initialized ---")

    def stop(self) -> None:
        """Stop the log listener and detach the handlers."""
        if self.log_listener:
            self.log_listener.stop()
            self.log_listener = None
        if self._queue_handler:
            logging.getLogger().removeHandler(self._queue_handler)
            self._queue_handler = None
        if self._stream_handler:
            logging.getLogger("KubeTabs").removeHandler(self._stream_handler)
            self._stream_handler = None
        if self._null_handler:
            app_logger = logging.getLogger("KubeTabs")
            app_logger.removeHandler(self._null_handler)
            app_logger.propagate = True
            self._null_handler = None
