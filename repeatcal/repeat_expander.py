"""Recurrence expansion: one event definition in, concrete occurrences out."""

import datetime
import itertools
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Optional

from dateutil.rrule import DAILY, MONTHLY, WEEKLY, YEARLY, rrule

from .id_factory import IdFactory, uuid_id_factory
from .repeat_models import EventDefinition, Occurrence, RepeatType

logger = logging.getLogger(__name__)

# dateutil follows RFC 5545 here: a BYMONTHDAY/BYMONTH taken from DTSTART that
# does not exist in a period (31st of April, Feb 29 of a common year) yields no
# instance for that period. Nothing is clamped or shifted.
_FREQUENCIES: dict[str, int] = {
    RepeatType.DAILY.value: DAILY,
    RepeatType.WEEKLY.value: WEEKLY,
    RepeatType.MONTHLY.value: MONTHLY,
    RepeatType.YEARLY.value: YEARLY,
}


@dataclass
class RepeatExpanderConfig:
    """Settings for recurrence expansion.

    ``max_occurrences_per_rule`` of None means the date range alone bounds
    the expansion.
    """

    max_occurrences_per_rule: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: Any) -> "RepeatExpanderConfig":
        """Extract expansion settings from a config object.

        Args:
            settings: Object with expansion attributes (e.g. ``Config``), or None

        Returns:
            RepeatExpanderConfig with values from settings or defaults
        """
        return cls(
            max_occurrences_per_rule=getattr(settings, "max_occurrences_per_rule", None),
        )


def iter_occurrence_dates(
    rule_type: str, anchor: datetime.date, end_date: datetime.date
) -> Iterator[datetime.date]:
    """Yield the calendar dates of a rule between ``anchor`` and ``end_date`` inclusive.

    Dates come out in ascending order and the anchor is always the first one
    when ``anchor <= end_date``.

    Args:
        rule_type: One of the repeating RepeatType values
        anchor: First date of the series
        end_date: Inclusive upper bound

    Raises:
        ValueError: If ``rule_type`` is not a repeating type
    """
    try:
        freq = _FREQUENCIES[RepeatType(rule_type).value]
    except (KeyError, ValueError):
        raise ValueError(f"Not a repeating rule type: {rule_type!r}") from None

    dtstart = datetime.datetime.combine(anchor, datetime.time.min)
    until = datetime.datetime.combine(end_date, datetime.time.min)
    for occurrence in rrule(freq, dtstart=dtstart, until=until, interval=1):
        yield occurrence.date()


def expand(
    definition: EventDefinition,
    id_factory: Optional[IdFactory] = None,
    config: Optional[RepeatExpanderConfig] = None,
) -> list[Occurrence]:
    """Expand an event definition into its ordered list of occurrences.

    - ``none`` rules give exactly one ungrouped occurrence on the anchor date.
    - A repeating rule without an end date, or whose end date precedes the
      anchor, gives an empty list.
    - Otherwise every occurrence shares one freshly allocated group id.

    Args:
        definition: Event form to expand
        id_factory: Identifier generator for occurrence and group ids
            (defaults to random UUIDs)
        config: Expansion settings

    Returns:
        Occurrences in ascending date order
    """
    new_id = id_factory or uuid_id_factory
    config = config or RepeatExpanderConfig()
    rule = definition.repeat
    anchor = definition.date

    if not rule.is_repeating:
        logger.debug("Non-repeating event %r on %s", definition.title, anchor)
        return [
            Occurrence.from_definition(
                definition, occurrence_id=new_id(), occurrence_date=anchor, repeat=rule
            )
        ]

    if rule.end_date is None:
        logger.debug(
            "Repeating event %r has no end date; nothing to create", definition.title
        )
        return []

    if anchor > rule.end_date:
        logger.debug(
            "Repeating event %r starts %s after its end date %s; nothing to create",
            definition.title,
            anchor,
            rule.end_date,
        )
        return []

    if rule.interval != 1:
        logger.warning(
            "Interval %d on %s rule for %r is not supported; expanding every %s",
            rule.interval,
            rule.type,
            definition.title,
            rule.type,
        )

    dates: Iterator[datetime.date] = iter_occurrence_dates(rule.type, anchor, rule.end_date)
    limit = config.max_occurrences_per_rule
    if limit is None:
        occurrence_dates = list(dates)
    else:
        occurrence_dates = list(itertools.islice(dates, limit + 1))
        if len(occurrence_dates) > limit:
            logger.warning(
                "Expansion of %r limited to %d occurrences (max_occurrences_per_rule)",
                definition.title,
                limit,
            )
            occurrence_dates = occurrence_dates[:limit]

    grouped_rule = rule.with_group(new_id())
    occurrences = [
        Occurrence.from_definition(
            definition,
            occurrence_id=new_id(),
            occurrence_date=occurrence_date,
            repeat=grouped_rule,
        )
        for occurrence_date in occurrence_dates
    ]

    logger.debug(
        "Expanded %s rule for %r: %d occurrence(s) %s..%s, group %s",
        rule.type,
        definition.title,
        len(occurrences),
        anchor,
        rule.end_date,
        grouped_rule.group_id,
    )
    return occurrences
