"""repeatcal - recurrence engine for a calendar application.

Expands a repeating event definition into concrete occurrences and edits or
deletes those occurrences with "this event only" or "all events" scope.
"""

__version__ = "0.1.0"

from typing import Optional

from .occurrence_mutator import MutationScope, delete, group_members, remove, update
from .repeat_exceptions import RepeatConfigError, RepeatScheduleError, RepeatValidationError
from .repeat_expander import RepeatExpanderConfig, expand
from .repeat_models import (
    DailyRepeat,
    EventDefinition,
    MonthlyRepeat,
    NoRepeat,
    Occurrence,
    RecurrenceRule,
    RepeatType,
    WeeklyRepeat,
    YearlyRepeat,
    parse_recurrence_rule,
)
from .scheduler import RepeatScheduler

__all__ = [
    "DailyRepeat",
    "EventDefinition",
    "MonthlyRepeat",
    "MutationScope",
    "NoRepeat",
    "Occurrence",
    "RecurrenceRule",
    "RepeatConfigError",
    "RepeatExpanderConfig",
    "RepeatScheduleError",
    "RepeatScheduler",
    "RepeatType",
    "RepeatValidationError",
    "WeeklyRepeat",
    "YearlyRepeat",
    "delete",
    "expand",
    "group_members",
    "parse_recurrence_rule",
    "remove",
    "update",
]


def _init_logging(level_name: Optional[str]) -> None:
    """Send repeatcal log output to the console at ``level_name``.

    Unknown or missing level names mean INFO. A truthy REPEATCAL_DEBUG
    overrides the level with DEBUG.
    """
    import logging

    from .repeat_logging import env_flag_enabled, install_console_handler

    if env_flag_enabled("REPEATCAL_DEBUG"):
        level_name = "DEBUG"

    root = logging.getLogger()
    install_console_handler(root)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Console logging at level %s", logging.getLevelName(level)
    )
