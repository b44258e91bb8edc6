"""
Error Classification

Every failure the core can surface to an operator is a ``LaunchpadError``
carrying a category and an ``ErrorContext``. Only ``ValidationError`` is
recovered locally (the conversation reprompts); everything else ends the
action and is reported.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCategory(str, Enum):
    """Categories of errors for reporting decisions."""

    VALIDATION = "validation"         # Malformed operator input
    AUTHORIZATION = "authorization"   # Caller lacks the required role
    PRECONDITION = "precondition"     # Wrong on-chain state, balance, allowance
    CHAIN = "chain"                   # RPC failure, submission rejection, revert
    CONFIGURATION = "configuration"   # Missing or invalid settings
    DECODING = "decoding"             # Log entry does not match the schema


@dataclass
class ErrorContext:
    """Additional context about an error."""

    category: ErrorCategory = ErrorCategory.CHAIN
    recoverable: bool = False
    suggested_action: Optional[str] = None
    tx_hash: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class LaunchpadError(Exception):
    """Base class for all errors raised by the orchestration core."""

    category: ErrorCategory = ErrorCategory.CHAIN
    recoverable: bool = False

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        **details: Any,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext(
            category=self.category,
            recoverable=self.recoverable,
            details={k: v for k, v in details.items() if v is not None},
        )

    @property
    def details(self) -> Dict[str, Any]:
        return self.context.details


class ValidationError(LaunchpadError):
    """Operator input failed the current step's constraint."""

    category = ErrorCategory.VALIDATION
    recoverable = True


class AuthorizationError(LaunchpadError):
    """The signer is not allowed to perform the action."""

    category = ErrorCategory.AUTHORIZATION

    def __init__(
        self,
        message: str = "Only the contract owner can do this",
        required: Optional[str] = None,
        actual: Optional[str] = None,
    ):
        super().__init__(
            message,
            context=ErrorContext(
                category=self.category,
                suggested_action="Switch PRIVATE_KEY_OWNER to the owner wallet",
                details={k: v for k, v in {"required": required, "actual": actual}.items() if v},
            ),
        )
        self.required = required
        self.actual = actual


class PreconditionError(LaunchpadError):
    """On-chain state does not allow the action (state, balance, allowance)."""

    category = ErrorCategory.PRECONDITION


class ChainError(LaunchpadError):
    """RPC failure, rejected submission, failed estimate or on-chain revert."""

    category = ErrorCategory.CHAIN

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        revert_data: Optional[str] = None,
        decoded: Optional[str] = None,
    ):
        super().__init__(
            message,
            context=ErrorContext(
                category=self.category,
                tx_hash=tx_hash,
                details={k: v for k, v in {"revert_data": revert_data, "decoded": decoded}.items() if v},
            ),
        )
        self.tx_hash = tx_hash
        self.revert_data = revert_data
        self.decoded = decoded


class ConfigError(LaunchpadError):
    """Required settings are missing or unusable."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message, missing=missing)
        self.missing = missing or []


class LogDecodeError(LaunchpadError):
    """A receipt log entry does not match any event in the contract schema."""

    category = ErrorCategory.DECODING
    recoverable = True


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "LaunchpadError",
    "ValidationError",
    "AuthorizationError",
    "PreconditionError",
    "ChainError",
    "ConfigError",
    "LogDecodeError",
]
