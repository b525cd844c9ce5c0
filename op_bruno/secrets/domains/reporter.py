"""Progress reporting passed into each component.

Core logic never prints. It receives a ``Reporter`` and the caller decides
whether messages reach the console or a logger.
"""
import logging
import sys
from abc import ABC, abstractmethod
from typing import Optional


class Reporter(ABC):
    """Sink for user-facing progress messages."""

    @abstractmethod
    def info(self, message: str) -> None:
        pass

    @abstractmethod
    def warn(self, message: str) -> None:
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        pass


class LoggingReporter(Reporter):
    """Routes messages to a standard library logger (library default)."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("op_bruno")

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)


class ConsoleReporter(Reporter):
    """Progress to stdout, warnings and errors to stderr."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    def info(self, message: str) -> None:
        if not self.quiet:
            print(message)

    def warn(self, message: str) -> None:
        print(f"Warning: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)
