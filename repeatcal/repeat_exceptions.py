"""Exception hierarchy for repeatcal.

The recurrence core itself never raises for "nothing to do" situations
(unbounded rule, inverted range, unknown occurrence id); those yield empty or
unchanged collections. These exceptions cover malformed input arriving at the
boundary and unusable configuration.
"""

from typing import Any, Optional


class RepeatScheduleError(Exception):
    """Base exception for all repeatcal errors."""


class RepeatValidationError(RepeatScheduleError):
    """Boundary input failed validation.

    Raised when:
    - An event form or occurrence mapping has missing or malformed fields
    - A change set names an unknown field or carries an invalid value
    - A mutation scope is not one of ``single`` / ``all``

    The underlying pydantic error list, when there is one, is kept on
    ``errors`` so callers can surface field-level messages.
    """

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class RepeatConfigError(RepeatScheduleError):
    """Configuration file could not be read or has the wrong shape."""
