"""Data models for repeating calendar events.

All models are frozen. Derived values are built with ``copy_with()`` rather
than by mutating an instance, so occurrence lists handed out by the expander
and mutator can be shared freely.

Wire form uses camelCase keys (``startTime``, ``endDate``, ``groupId``...)
with ISO ``YYYY-MM-DD`` dates and ``HH:MM`` times. Python code may use either
the snake_case field names or the wire names when constructing models.
"""

import datetime
from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from .repeat_exceptions import RepeatValidationError

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    populate_by_name=True,
    alias_generator=to_camel,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RepeatType(str, Enum):
    """Supported recurrence frequencies."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class _RepeatBase(BaseModel):
    model_config = _MODEL_CONFIG

    interval: int = Field(default=1, ge=1, description="Units between occurrences")
    end_date: Optional[datetime.date] = Field(
        default=None, description="Last date a repetition may fall on (inclusive)"
    )


class NoRepeat(_RepeatBase):
    """A standalone event, or an occurrence detached from its series."""

    type: Literal["none"] = "none"

    @property
    def group_id(self) -> None:
        """Standalone events never belong to a group."""
        return None

    @property
    def is_repeating(self) -> bool:
        return False


class _GroupedRepeat(_RepeatBase):
    group_id: Optional[str] = Field(
        default=None, description="Token shared by every occurrence of one expansion"
    )

    @property
    def is_repeating(self) -> bool:
        return True

    def with_group(self, group_id: str) -> "_GroupedRepeat":
        """Return a copy bound to ``group_id``."""
        return self.model_copy(update={"group_id": group_id})

    def detached(self) -> NoRepeat:
        """Return the rule an occurrence carries once it leaves its group."""
        return NoRepeat(interval=self.interval, end_date=self.end_date)


class DailyRepeat(_GroupedRepeat):
    """Repeat every day."""

    type: Literal["daily"] = "daily"


class WeeklyRepeat(_GroupedRepeat):
    """Repeat every week on the anchor's weekday."""

    type: Literal["weekly"] = "weekly"


class MonthlyRepeat(_GroupedRepeat):
    """Repeat every month on the anchor's day of month."""

    type: Literal["monthly"] = "monthly"


class YearlyRepeat(_GroupedRepeat):
    """Repeat every year on the anchor's month and day."""

    type: Literal["yearly"] = "yearly"


RecurrenceRule = Annotated[
    Union[NoRepeat, DailyRepeat, WeeklyRepeat, MonthlyRepeat, YearlyRepeat],
    Field(discriminator="type"),
]

_RULE_ADAPTER: TypeAdapter = TypeAdapter(RecurrenceRule)


def _field_name(model_cls: type[BaseModel], key: str) -> str:
    """Map a wire (alias) name to the model's field name."""
    if key in model_cls.model_fields:
        return key
    for name, info in model_cls.model_fields.items():
        if info.alias == key:
            return name
    # Unknown keys are left for extra="forbid" to reject
    return key


def _validate(model_cls: type[ModelT], data: Any) -> ModelT:
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise RepeatValidationError(
            f"Invalid {model_cls.__name__}: {exc.error_count()} validation error(s)",
            errors=exc.errors(include_url=False),
        ) from exc


def parse_recurrence_rule(data: Any) -> Union[NoRepeat, _GroupedRepeat]:
    """Validate a rule mapping (``{"type": "daily", "endDate": ...}``) into its variant.

    Raises:
        RepeatValidationError: If the mapping is not a valid rule
    """
    try:
        return _RULE_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise RepeatValidationError(
            f"Invalid recurrence rule: {exc.error_count()} validation error(s)",
            errors=exc.errors(include_url=False),
        ) from exc


class EventDefinition(BaseModel):
    """The event form a user submits; input to the expander."""

    model_config = _MODEL_CONFIG

    title: str = Field(..., description="Event title")
    date: datetime.date = Field(..., description="Anchor date")
    start_time: str = Field(..., pattern=_TIME_PATTERN, description="Start time, HH:MM")
    end_time: str = Field(..., pattern=_TIME_PATTERN, description="End time, HH:MM")
    description: str = Field(default="", description="Free-text description")
    location: str = Field(default="", description="Free-text location")
    category: str = Field(default="", description="Free-text category")
    repeat: RecurrenceRule = Field(default_factory=NoRepeat, description="Recurrence rule")
    notification_time: int = Field(
        default=10, ge=0, description="Notification lead time in minutes"
    )

    @classmethod
    def from_dict(cls: type[ModelT], data: Any) -> ModelT:
        """Build an instance from a wire mapping.

        Raises:
            RepeatValidationError: If the mapping is malformed
        """
        return _validate(cls, data)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire mapping (camelCase keys, ISO dates)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def copy_with(self: ModelT, **overrides: Any) -> ModelT:
        """Return a copy with ``overrides`` applied and every other field carried over.

        Keys may be field names or wire names. The result is validated.

        Raises:
            RepeatValidationError: If a key is unknown or a value is invalid
        """
        return self.apply_changes(overrides)

    def apply_changes(self: ModelT, changes: Mapping[str, Any]) -> ModelT:
        """Mapping form of ``copy_with()`` for change sets coming off the wire.

        Raises:
            RepeatValidationError: If a key is not a string, is unknown, or a
                value is invalid
        """
        model_cls = type(self)
        data = self.model_dump()
        for key, value in changes.items():
            if not isinstance(key, str):
                raise RepeatValidationError(
                    f"Invalid {model_cls.__name__}: field names must be strings, got {key!r}"
                )
            if isinstance(value, BaseModel):
                value = value.model_dump()
            data[_field_name(model_cls, key)] = value
        return _validate(model_cls, data)


class Occurrence(EventDefinition):
    """A materialized calendar entry."""

    id: str = Field(..., min_length=1, description="Unique, stable occurrence id")

    @classmethod
    def from_definition(
        cls,
        definition: EventDefinition,
        *,
        occurrence_id: str,
        occurrence_date: datetime.date,
        repeat: Union[NoRepeat, _GroupedRepeat],
    ) -> "Occurrence":
        """Materialize one occurrence of ``definition``.

        Every field is copied from the definition except the id, the date and
        the rule (which carries the group token).
        """
        data = definition.model_dump()
        data.update(id=occurrence_id, date=occurrence_date, repeat=repeat.model_dump())
        return _validate(cls, data)

    @property
    def group_id(self) -> Optional[str]:
        """Group token of the series this occurrence belongs to, if any."""
        return self.repeat.group_id

    @property
    def is_grouped(self) -> bool:
        return self.group_id is not None
