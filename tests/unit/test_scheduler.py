"""Tests for the RepeatScheduler mapping facade.

These follow the user flows of the calendar: create a repeating event, edit
one occurrence or the whole series, delete one occurrence or the whole series.
"""

import logging
import uuid

import pytest

from repeatcal.config_loader import ENV_OVERRIDES, Config
from repeatcal.id_factory import SequentialIdFactory
from repeatcal.repeat_exceptions import RepeatValidationError
from repeatcal.repeat_logging import PACKAGE_LOGGERS, QUIET_LOGGERS
from repeatcal.scheduler import RepeatScheduler

pytestmark = pytest.mark.unit

ENV_VARS = [*ENV_OVERRIDES, "REPEATCAL_DEBUG"]


@pytest.fixture
def scheduler(id_factory):
    return RepeatScheduler(id_factory=id_factory)


@pytest.fixture
def stored(scheduler, make_form):
    """Five daily standups, 2025-01-01..05, as the event store would hold them."""
    return scheduler.create(make_form(end_date="2025-01-05"))


class TestCreate:
    def test_daily_series(self, stored):
        assert [e["date"] for e in stored] == [
            "2025-01-01",
            "2025-01-02",
            "2025-01-03",
            "2025-01-04",
            "2025-01-05",
        ]
        assert {e["repeat"]["groupId"] for e in stored} == {"evt-1"}
        assert all(e["repeat"]["type"] == "daily" for e in stored)

    def test_standalone_event(self, scheduler, make_form):
        events = scheduler.create(make_form(repeat_type="none", end_date=None))

        assert len(events) == 1
        assert events[0]["repeat"] == {"type": "none", "interval": 1}

    def test_missing_end_date_creates_nothing(self, scheduler, make_form):
        assert scheduler.create(make_form(end_date=None)) == []

    def test_malformed_form_raises_with_details(self, scheduler, make_form):
        with pytest.raises(RepeatValidationError) as exc_info:
            scheduler.create(make_form(date="01/01/2025"))

        assert exc_info.value.errors

    def test_config_cap_applies(self, make_form):
        scheduler = RepeatScheduler(Config(max_occurrences_per_rule=2), SequentialIdFactory())

        assert len(scheduler.create(make_form())) == 2

    def test_default_strategy_uses_uuids(self, make_form):
        events = RepeatScheduler().create(make_form(end_date="2025-01-02"))

        for event in events:
            uuid.UUID(event["id"])

    def test_sequential_strategy_from_config(self, make_form):
        scheduler = RepeatScheduler(Config(id_strategy="sequential", id_prefix="cal"))

        events = scheduler.create(make_form(end_date="2025-01-02"))

        assert [e["id"] for e in events] == ["cal-2", "cal-3"]


class TestEdit:
    def test_single_edit_detaches(self, scheduler, stored):
        result = scheduler.edit(
            stored,
            "evt-4",
            {"title": "Daily standup (changed)", "startTime": "10:00", "endTime": "10:30"},
            "single",
        )

        edited = next(e for e in result if e["id"] == "evt-4")
        assert edited["title"] == "Daily standup (changed)"
        assert edited["repeat"]["type"] == "none"
        assert "groupId" not in edited["repeat"]

        others = [e for e in result if e["id"] != "evt-4"]
        assert len(others) == 4
        assert all(e["title"] == "Daily standup" for e in others)
        assert all(e["repeat"]["groupId"] == "evt-1" for e in others)

    def test_all_edit_keeps_series(self, scheduler, stored):
        result = scheduler.edit(stored, "evt-3", {"title": "Team sync", "startTime": "15:00"}, "all")

        assert all(e["title"] == "Team sync" for e in result)
        assert all(e["startTime"] == "15:00" for e in result)
        assert all(e["repeat"]["groupId"] == "evt-1" for e in result)

    def test_unknown_id_returns_same_events(self, scheduler, stored):
        assert scheduler.edit(stored, "missing", {"title": "x"}, "all") == stored

    def test_malformed_stored_event_reports_position(self, scheduler, stored):
        broken = [*stored[:2], {**stored[2], "startTime": "late"}]

        with pytest.raises(RepeatValidationError, match="position 2"):
            scheduler.edit(broken, "evt-2", {"title": "x"}, "single")

    @pytest.mark.parametrize("changes", [{"self": "x"}, {1: "x"}])
    def test_malformed_change_set_raises_validation_error(self, scheduler, stored, changes):
        with pytest.raises(RepeatValidationError):
            scheduler.edit(stored, "evt-2", changes, "single")


class TestDelete:
    def test_single_then_all(self, scheduler, stored):
        after_single = scheduler.delete(stored, "evt-4", "single")
        after_all = scheduler.delete(after_single, "evt-2", "all")

        assert len(after_single) == 4
        assert after_all == []

    def test_unknown_id_returns_same_events(self, scheduler, stored):
        assert scheduler.delete(stored, "missing", "single") == stored

    def test_invalid_scope(self, scheduler, stored):
        with pytest.raises(RepeatValidationError):
            scheduler.delete(stored, "evt-2", "both")


def test_group_members_counts_series(scheduler, stored):
    assert len(scheduler.group_members(stored, "evt-3")) == 5
    assert scheduler.group_members(stored, "missing") == []


@pytest.fixture
def clean_logging(monkeypatch):
    """Clear repeatcal env vars and restore logger levels afterwards."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    names = ["", *PACKAGE_LOGGERS, *QUIET_LOGGERS]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


class TestFromConfigFile:
    def test_builds_scheduler_from_file(self, tmp_path, make_form, clean_logging):
        path = tmp_path / "repeatcal.yaml"
        path.write_text("id_strategy: sequential\nid_prefix: cfg\nlog_level: INFO\n")

        scheduler = RepeatScheduler.from_config_file(str(path))

        assert scheduler.config.id_prefix == "cfg"
        assert scheduler.create(make_form(repeat_type="none", end_date=None))[0]["id"] == "cfg-1"

    def test_configures_package_loggers(self, tmp_path, clean_logging):
        path = tmp_path / "repeatcal.yaml"
        path.write_text("log_level: DEBUG\n")

        RepeatScheduler.from_config_file(str(path))

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("repeatcal.scheduler").level == logging.DEBUG
        assert logging.getLogger("yaml").level == logging.WARNING

    def test_quiet_level_reaches_package_loggers(self, tmp_path, clean_logging):
        path = tmp_path / "repeatcal.yaml"
        path.write_text("log_level: WARNING\n")

        RepeatScheduler.from_config_file(str(path))

        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("repeatcal.repeat_expander").level == logging.WARNING

    @pytest.mark.parametrize("flag", ["1", "true", "yes", "on", " ON "])
    def test_debug_env_flag(self, tmp_path, monkeypatch, clean_logging, flag):
        path = tmp_path / "repeatcal.yaml"
        path.write_text("log_level: ERROR\n")
        monkeypatch.setenv("REPEATCAL_DEBUG", flag)

        RepeatScheduler.from_config_file(str(path))

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("repeatcal").level == logging.DEBUG
