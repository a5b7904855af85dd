"""Custom exceptions for querysieve.

This module defines all custom exceptions used throughout the library for
consistent error handling and clear error messaging. Every error raised while
a processor applies a model is either one of these or gets wrapped into a
plain `SieveError` at the processor boundary.
"""

from typing import Any, Dict, List, Optional


# Base exception
class SieveError(Exception):
    """Base exception for all querysieve errors.

    Attributes:
        message: Error message
        details: Additional error context as key-value pairs
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        """Initialize exception with message and additional details.

        Args:
            message: Human-readable error message
            **kwargs: Additional context (e.g., property_name, entity_type, method_name)
        """
        self.message = message
        self.details: Dict[str, Any] = kwargs
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the complete error message with details."""
        if not self.details:
            return self.message

        details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        if self.message:
            return f"{self.message} ({details_str})"
        return details_str

    def __repr__(self) -> str:
        """Return detailed representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# Member resolution exceptions
class MemberNotFoundError(SieveError):
    """Raised when a path segment is neither a member nor a static expression of its type.

    Example:
        >>> raise MemberNotFoundError("Member not found", member="titel", entity_type="Post")
    """


class AmbiguousMemberError(SieveError):
    """Raised when a member is declared on more than one implemented interface.

    Example:
        >>> raise AmbiguousMemberError("Member is repeated in interface hierarchy", member="name")
    """


class RegistrationError(SieveError):
    """Raised when the property mapper is used incorrectly (e.g., registering after freeze).

    Example:
        >>> raise RegistrationError("Property mapper is frozen", entity_type="Post")
    """


# Filter exceptions
class InvalidFilterValueError(SieveError):
    """Raised when a filter value cannot be converted to the target member type.

    Example:
        >>> raise InvalidFilterValueError("Cannot convert value", value="abc", target_type="int")
    """


# Custom method exceptions
class MethodNotFoundError(SieveError):
    """Raised when no custom method with the requested name exists.

    Example:
        >>> raise MethodNotFoundError("is_new not found.", method_name="is_new")
    """


class IncompatibleMethodError(SieveError):
    """Raised when custom methods with the requested name exist but none fits the entity type.

    The aggregate error raised by the dispatcher carries one nested
    `IncompatibleMethodError` per mismatched candidate in `errors`.

    Example:
        >>> raise IncompatibleMethodError("is_new failed", method_name="is_new", expected="Post", actual="Comment")
    """

    def __init__(
        self, message: str = "", errors: Optional[List["IncompatibleMethodError"]] = None, **kwargs: Any
    ) -> None:
        self.errors: List[IncompatibleMethodError] = list(errors or [])
        super().__init__(message, **kwargs)


# Execution layer exceptions
class TranslationError(SieveError):
    """Raised when a compiler cannot express an expression node in its target syntax.

    Example:
        >>> raise TranslationError("Node is not translatable to SQL", node="Invoke")
    """


# Configuration exceptions
class InvalidConfigError(SieveError):
    """Raised when configuration values are invalid.

    Example:
        >>> raise InvalidConfigError("Invalid config value", config_key="paramstyle", value="named")
    """
