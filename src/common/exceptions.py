"""
vmtray Exception Hierarchy

Provides clear, actionable error messages with structured information
for logging, user feedback, and programmatic error handling.
"""

from typing import Optional, Dict, Any


class VMTrayError(Exception):
    """
    Base exception for all vmtray errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context as key-value pairs
        cause: Original exception that caused this error
        recoverable: Whether the error is recoverable
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        self.recoverable = recoverable

    def __str__(self):
        s = f"[{self.code}] {self.message}"
        if self.details:
            s += f" (details: {self.details})"
        if self.cause:
            s += f" caused by: {self.cause}"
        return s

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# VM transition errors
# =============================================================================

class VMError(VMTrayError):
    """Base for VM-related errors."""
    pass


class VMNotFoundError(VMError):
    """VM is not part of the current enumeration."""
    def __init__(self, vm_name: str):
        super().__init__(
            f"Virtual machine '{vm_name}' not found",
            code="VM_NOT_FOUND",
            details={"vm_name": vm_name},
        )


class UnsupportedTransitionError(VMError):
    """Requested target state is not one the tray can request."""
    def __init__(self, vm_name: str, requested_state: str):
        super().__init__(
            f"Cannot request state '{requested_state}' for VM '{vm_name}'",
            code="VM_UNSUPPORTED_TRANSITION",
            details={"vm_name": vm_name, "requested_state": requested_state},
        )


class ProviderRejectedError(VMError):
    """Provider acknowledged a request with a failure code."""
    def __init__(self, vm_name: str, operation: str, return_code: int):
        super().__init__(
            f"{operation} rejected for VM '{vm_name}' (return code {return_code})",
            code="VM_REQUEST_REJECTED",
            details={
                "vm_name": vm_name,
                "operation": operation,
                "return_code": return_code,
            },
        )


class CapabilityMissingError(VMError):
    """VM exposes no graceful shutdown capability."""
    def __init__(self, vm_name: str):
        super().__init__(
            f"Virtual machine '{vm_name}' does not support graceful shutdown",
            code="VM_SHUTDOWN_UNAVAILABLE",
            details={"vm_name": vm_name},
        )


# =============================================================================
# Connection errors
# =============================================================================

class ConnectionError(VMTrayError):
    """Base for connection-related errors."""
    pass


class ProviderConnectionError(ConnectionError):
    """Failed to connect to the hypervisor."""
    def __init__(self, uri: str, cause: Optional[Exception] = None):
        super().__init__(
            f"Cannot connect to hypervisor at {uri}",
            code="PROVIDER_CONNECTION_FAILED",
            details={"uri": uri},
            cause=cause,
            recoverable=False,
        )


class SubscriptionError(ConnectionError):
    """State change subscription could not be established."""
    def __init__(self, reason: str, cause: Optional[Exception] = None):
        super().__init__(
            f"Cannot watch virtual machine state changes: {reason}",
            code="SUBSCRIPTION_FAILED",
            cause=cause,
            recoverable=False,
        )


# =============================================================================
# Configuration errors
# =============================================================================

class ConfigError(VMTrayError):
    """Base for configuration errors."""
    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration."""
    def __init__(self, field: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration: {field}={value}: {reason}",
            code="INVALID_CONFIG",
            details={"field": field, "value": str(value), "reason": reason},
        )
