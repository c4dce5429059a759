"""
Railway-Oriented Programming (ROP) support for the CRL monitor.

Explicit, composable error handling — decode and transport steps return
Result values instead of raising.

    from railway import Result, ErrorCode

    def require_crl_suffix(url: str) -> Result[str]:
        if not url.lower().endswith(".crl"):
            return Result.failure(ErrorCode.CONFIGURATION_ERROR, f"Not a .crl URL: {url}")
        return Result.success(url)
"""

from railway.result import Result, Success, Failure
from railway.failure import ErrorCode, FailureDescription
from railway.execution import LoggingExecutionContext
from railway.assertions import ResultAssertions

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "LoggingExecutionContext",
    "ResultAssertions",
]

__version__ = "1.1.0"
