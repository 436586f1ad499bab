"""Mapping of exceptions raised inside payment use cases to Result errors"""

import asyncio
from libs.result import Error
from src.domain.exceptions import BillingDomainError

STORAGE_FAILURE = "STORAGE_FAILURE"


def error_from_exception(exc: Exception, message: str) -> Error:
    """
    Build the Result error for a failed use case

    Domain errors keep their own code and message. Timeouts and any other
    exception are storage failures.
    """
    if isinstance(exc, BillingDomainError):
        return Error(code=exc.code, message=str(exc), reason=type(exc).__name__)

    if isinstance(exc, asyncio.TimeoutError):
        return Error(
            code=STORAGE_FAILURE,
            message=message,
            reason="Storage did not respond in time",
        )

    return Error(code=STORAGE_FAILURE, message=message, reason=str(exc))
