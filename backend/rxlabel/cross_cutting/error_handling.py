"""
Error Handling

A context manager for loops of independent attempts, where one failed
attempt is logged and the loop moves on.
"""

from typing import Optional
import logging

from ..domain.exceptions import DomainException


class ErrorHandler:
    """
    Log an exception escaping the block and optionally swallow it.

    Only ``Exception`` subclasses are handled; KeyboardInterrupt and
    friends always propagate. The caught error stays on the handler so
    the caller can branch on it afterwards.

    Usage:
        with ErrorHandler(logger, context="ndc 1234-5678", suppress=True) as handler:
            response = session.get(url)
        if handler.has_error:
            continue

    Args:
        logger: Where the failure is reported
        context: Prefix identifying the attempt, e.g. the code being looked up
        suppress: Swallow the exception instead of re-raising it
        level: Level the one-line failure message is logged at
    """

    def __init__(
        self,
        logger: logging.Logger,
        context: str = "",
        suppress: bool = False,
        level: int = logging.ERROR
    ):
        self.logger = logger
        self.context = context
        self.suppress = suppress
        self.level = level
        self.error: Optional[Exception] = None

    def __enter__(self) -> "ErrorHandler":
        self.error = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if not isinstance(exc_val, Exception):
            return False

        self.error = exc_val
        prefix = f"[{self.context}] " if self.context else ""
        self.logger.log(self.level, f"{prefix}{exc_val}")

        if isinstance(exc_val, DomainException):
            self.logger.debug(f"{prefix}details: {exc_val.details}")
        else:
            self.logger.debug(f"{prefix}{exc_type.__name__} traceback", exc_info=(exc_type, exc_val, exc_tb))

        return self.suppress

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def is_recoverable(self) -> bool:
        """Whether a retry makes sense; only domain errors can say yes."""
        if self.error is None:
            return True
        return isinstance(self.error, DomainException) and self.error.is_recoverable
