"""
Unit tests for the observer hub.
"""

from unittest.mock import Mock

import pytest

from imexport.core.types import (
    ErrorKind,
    ImExportErrorReport,
    ImExportWarningReport,
    WarningKind,
)
from imexport.progress.observers import ImExportObserver, ObserverHub, get_observer_hub


def make_observer():
    return Mock(spec=ImExportObserver)


class TestRegistration:
    """Tests for register/unregister."""

    def test_register(self, hub):
        observer = make_observer()

        assert hub.register(observer) is True
        assert len(hub) == 1

    def test_register_twice_does_not_change_set(self, hub):
        observer = make_observer()
        hub.register(observer)

        assert hub.register(observer) is False
        assert len(hub) == 1

    def test_unregister(self, hub):
        observer = make_observer()
        hub.register(observer)

        assert hub.unregister(observer) is True
        assert hub.unregister(observer) is False
        assert hub.observers() == []

    def test_abstract_observer_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            ImExportObserver()


class TestPublishing:
    """Tests for event fan-out."""

    def test_progress_delivered_to_all_once(self, hub):
        first, second = make_observer(), make_observer()
        hub.register(first)
        hub.register(second)

        hub.publish_progress(42.0)

        first.on_progress.assert_called_once_with(42.0)
        second.on_progress.assert_called_once_with(42.0)

    def test_failing_observer_does_not_block_others(self, hub, caplog):
        failing, healthy = make_observer(), make_observer()
        failing.on_progress.side_effect = RuntimeError("boom")
        hub.register(failing)
        hub.register(healthy)

        hub.publish_progress(42.0)

        healthy.on_progress.assert_called_once_with(42.0)
        assert any("on_progress" in record.getMessage() for record in caplog.records)

    def test_warning_and_error(self, hub, observer):
        warning = ImExportWarningReport(WarningKind.EMPTY_TABLE, ("Person",))
        error = ImExportErrorReport(ErrorKind.TABLE_NOT_FOUND, ("Nope",))

        hub.publish_warning(warning)
        hub.publish_error(error)

        assert observer.warnings == [warning]
        assert observer.errors == [error]

    def test_failing_error_observer_isolated(self, hub, observer):
        failing = make_observer()
        failing.on_error.side_effect = ValueError("bad observer")
        hub.register(failing)
        error = ImExportErrorReport(ErrorKind.SUB_RUN_FAILED, ("Person", "x"))

        hub.publish_error(error)

        assert observer.errors == [error]

    def test_observer_may_unregister_during_delivery(self, hub):
        class SelfRemoving(ImExportObserver):
            def __init__(self):
                self.calls = 0

            def on_progress(self, percentage):
                self.calls += 1
                hub.unregister(self)

            def on_warning(self, warning):
                pass

            def on_error(self, error):
                pass

        removing = SelfRemoving()
        other = make_observer()
        hub.register(removing)
        hub.register(other)

        hub.publish_progress(1.0)
        hub.publish_progress(2.0)

        assert removing.calls == 1
        assert other.on_progress.call_count == 2

    def test_no_observers(self, hub):
        hub.publish_progress(10.0)


class TestReports:
    """Tests for structured warning/error values."""

    def test_error_message_template(self):
        error = ImExportErrorReport(ErrorKind.TABLE_NOT_FOUND, ("Nope",))

        assert error.message == "The table with the name \"Nope\" doesn't exist for im- or export."
        assert error.to_dict()["kind"] == "table_not_found"
        assert error.to_dict()["cause"] is None

    def test_error_keeps_cause(self):
        cause = ValueError("bad")
        error = ImExportErrorReport(ErrorKind.SUB_RUN_FAILED, ("Person", cause), cause)

        assert error.cause is cause
        assert "bad" in error.message

    def test_every_kind_has_template(self):
        for kind in ErrorKind:
            assert kind.message_template
        for kind in WarningKind:
            assert kind.message_template


def test_global_hub_is_shared():
    assert get_observer_hub() is get_observer_hub()
