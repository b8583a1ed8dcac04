"""
Custom Exception Classes

Defines bridge-specific exceptions for error handling and logging.
"""

from typing import Any, Dict, Optional


class BridgeException(Exception):
    """Base exception for all bridge errors"""

    def __init__(
        self,
        message: str,
        error_code: str = "BRIDGE_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/API responses"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class UpException(BridgeException):
    """Up webhook or API related errors"""

    def __init__(
        self,
        message: str,
        error_code: str = "UP_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, details=details)


class UpSignatureException(UpException):
    """Up webhook authenticity signature did not match"""

    def __init__(self, message: str = "Could not verify webhook"):
        super().__init__(
            message,
            error_code="UP_SIGNATURE_ERROR",
            details={"verification": "failed"},
        )


class UpAPIException(UpException):
    """Up REST API call errors"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, error_code="UP_API_ERROR", details=details)


class PocketSmithException(BridgeException):
    """PocketSmith API related errors"""

    def __init__(
        self,
        message: str,
        error_code: str = "POCKETSMITH_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, details=details)


class PocketSmithAPIException(PocketSmithException):
    """PocketSmith REST API call errors"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, error_code="POCKETSMITH_API_ERROR", details=details)


class UnmappedAccountException(BridgeException):
    """Up account has no PocketSmith account in the mapping table"""

    def __init__(self, source_account_id: str):
        super().__init__(
            f"No PocketSmith account mapped for Up account {source_account_id}",
            error_code="UNMAPPED_ACCOUNT",
            details={"up_account_id": source_account_id},
        )


class ConfigurationException(BridgeException):
    """Configuration or environment errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="CONFIG_ERROR", details=details)


class ValidationException(BridgeException):
    """Data validation errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="VALIDATION_ERROR", details=details)
