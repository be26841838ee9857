import logging
from enum import Enum
import os
from datetime import datetime

class LogLevel(Enum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

class TransferLogger:
    """Attaches file and console handlers to a ``pynear_transfer`` logger.

    Module loggers (``logging.getLogger(__name__)``) propagate here, so one
    TransferLogger on the package logger captures the whole run.
    """

    def __init__(self, name: str = "pynear_transfer", level: LogLevel = LogLevel.INFO,
                 log_dir: str = "logs"):
        os.makedirs(log_dir, exist_ok=True)

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)

        # Prevent duplicate handlers
        if not self.logger.handlers:
            # File handler - detailed logging
            timestamp = datetime.now().strftime("%Y%m%d")
            file_handler = logging.FileHandler(
                os.path.join(log_dir, f"{name.replace('.', '_')}_{timestamp}.log")
            )
            file_formatter = logging.Formatter(
                '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
            )
            file_handler.setFormatter(file_formatter)
            file_handler.setLevel(logging.DEBUG)  # Log everything to file
            self.logger.addHandler(file_handler)

            # Console handler - balances and outcomes, on stderr
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(console_handler)

        self.set_console_level(level)

    def set_console_level(self, level: LogLevel) -> None:
        for handler in self.logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(level.value)

    def close(self) -> None:
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)


def setup_logging(verbose: bool = False, log_dir: str = "logs") -> TransferLogger:
    """Configure logging for a command line run."""
    level = LogLevel.DEBUG if verbose else LogLevel.INFO
    return TransferLogger("pynear_transfer", level=level, log_dir=log_dir)
