"""
Railway-Oriented Programming (ROP) helpers.

Explicit, composable error handling — stages return Result, never raise.

    from enum import unique
    from railway import ErrorCode, Result

    @unique
    class AgeError(ErrorCode):
        NEGATIVE = "NEGATIVE"

    def validate_age(age: int) -> Result[int]:
        if age < 0:
            return Result.failure(AgeError.NEGATIVE, "Age must be non-negative")
        return Result.success(age)
"""

from railway.assertions import ResultAssertions
from railway.failure import ErrorCode, FailureDescription
from railway.result import Failure, Result, Success

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ResultAssertions",
]

__version__ = "1.1.0"
