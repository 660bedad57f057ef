"""Tests for the command-line entry points, with the server replaced by fakes."""
from datetime import datetime
from unittest.mock import patch

import pytest

from conftest import FakeSession, event_api_data, events_page
from zm_toolkit.cli import config as config_cli
from zm_toolkit.cli import events as events_cli
from zm_toolkit.cli import monitors as monitors_cli
from zm_toolkit.errors import UnknownParameterError
from zm_toolkit.query import Query, TimeWindow
from zm_toolkit.schema import EntityKind

CONNECTION = ["--api-url", "https://zm.example.com/zm/api"]


class ClosableFakeSession(FakeSession):

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True


@pytest.mark.unit
class TestSplitTargets:

    def test_monitor_parameters_only(self, resolver, lawn):
        targets = config_cli.split_targets(resolver, lawn, ["Function:Modect", "MaxFPS:5"])
        assert len(targets) == 1
        assert targets[0].tokens == ["Function:Modect", "MaxFPS:5"]

    def test_zone_tokens_follow_zone_key(self, resolver, lawn):
        targets = config_cli.split_targets(
            resolver, lawn, ["Function:Modect", "Driveway", "MinAlarmPixels:5", "Porch", "Type:Inactive"])

        assert [(t.kind, t.entity.name, t.tokens) for t in targets] == [
            (EntityKind.MONITOR, "Lawn", ["Function:Modect"]),
            (EntityKind.ZONE, "Driveway", ["MinAlarmPixels:5"]),
            (EntityKind.ZONE, "Porch", ["Type:Inactive"]),
        ]

    def test_monitor_parameter_after_zone_returns_to_monitor(self, resolver, lawn):
        targets = config_cli.split_targets(resolver, lawn, ["Driveway", "Units", "Enabled"])
        assert targets[0].tokens == ["Enabled"]
        assert targets[1].tokens == ["Units"]

    def test_shared_name_after_zone_key_belongs_to_zone(self, resolver, lawn):
        targets = config_cli.split_targets(resolver, lawn, ["Porch", "Name:Steps"])
        assert targets[1].tokens == ["Name:Steps"]
        assert targets[0].tokens == []

    def test_token_that_is_neither(self, resolver, lawn):
        with pytest.raises(UnknownParameterError) as exc_info:
            config_cli.split_targets(resolver, lawn, ["Function", "Nowhere"])
        assert "neither a parameter of monitor 'Lawn' nor one of its zones" in str(exc_info.value)


@pytest.mark.unit
class TestConfigCli:

    def test_set_converts_and_posts(self, registry):
        session = ClosableFakeSession()
        with patch.object(config_cli, "connect", return_value=(session, registry)):
            status = config_cli.run(CONNECTION + ["set", "Lawn", "Function:Record", "Driveway", "MaxAlarmPixels:40"])

        assert status == 0
        assert session.posts == [
            ("monitors/7.json", {"Monitor[Function]": "Record"}),
            ("zones/11.json", {"Zone[MaxAlarmPixels]": "4000"}),
        ]

    def test_set_validates_everything_first(self, registry):
        session = ClosableFakeSession()
        with patch.object(config_cli, "connect", return_value=(session, registry)):
            status = config_cli.run(CONNECTION + ["set", "Lawn", "Function:Record", "Driveway", "MaxAlarmPixels:140"])

        assert status == 1
        assert session.posts == []

    def test_set_rejects_bare_names(self, registry):
        session = ClosableFakeSession()
        with patch.object(config_cli, "connect", return_value=(session, registry)):
            assert config_cli.run(CONNECTION + ["set", "7", "Function"]) == 1
        assert session.posts == []

    def test_get_prints_values(self, registry, capsys):
        with patch.object(config_cli, "connect", return_value=(ClosableFakeSession(), registry)):
            status = config_cli.run(CONNECTION + ["get", "Lawn", "Function", "Zones", "Driveway", "MinAlarmPixels"])

        out = capsys.readouterr().out.splitlines()
        assert status == 0
        assert out == ["Function: Modect", "Zones:", "  11: Driveway", "  12: Porch", "Driveway/MinAlarmPixels: 25%"]

    def test_unknown_monitor(self, registry):
        with patch.object(config_cli, "connect", return_value=(ClosableFakeSession(), registry)):
            assert config_cli.run(CONNECTION + ["get", "Shed"]) == 1


@pytest.mark.unit
class TestEventsCli:

    def _session(self):
        query = Query(TimeWindow(datetime(2021, 1, 1), datetime(2021, 1, 2)), monitor_ids=(2, 3))
        page = events_page([event_api_data(1, monitor_id=2), event_api_data(2, monitor_id=3, notes="")], 1)
        return ClosableFakeSession({query.path(1): page})

    def test_lists_events_for_deny_list(self, registry, capsys):
        session = self._session()
        with patch.object(events_cli, "connect", return_value=(session, registry)):
            status = events_cli.run(CONNECTION + ["--since", "2021-01-01", "--until", "2021-01-02",
                                                  "--monitor", "!Lawn"])

        assert status == 0
        assert len(session.gets) == 1
        out = capsys.readouterr().out
        assert "Patio" in out and "Critters" in out
        assert "2 events" in out

    def test_count(self, registry, capsys):
        with patch.object(events_cli, "connect", return_value=(self._session(), registry)):
            events_cli.run(CONNECTION + ["--since", "2021-01-01", "--until", "2021-01-02",
                                         "-m", "!Lawn", "--count"])
        assert capsys.readouterr().out.strip() == "2"

    def test_reversed_window_fails_before_connecting(self):
        with patch.object(events_cli, "connect") as connect:
            status = events_cli.run(CONNECTION + ["--since", "2021-01-02", "--until", "2021-01-01"])
        assert status == 1
        connect.assert_not_called()

    def test_concat_requires_a_download_action(self):
        with pytest.raises(SystemExit):
            events_cli.run(CONNECTION + ["--concat", "out.mp4"])


@pytest.mark.unit
def test_monitor_listing(registry, capsys):
    with patch.object(monitors_cli, "connect", return_value=(ClosableFakeSession(), registry)):
        assert monitors_cli.run(CONNECTION + ["--zones"]) == 0
    out = capsys.readouterr().out
    assert "Lawn" in out
    assert "Driveway" in out and "10,000 px" in out
    assert "600 px" in out


def test_get_refuses_values(registry, capsys):
    with patch.object(config_cli, "connect", return_value=(ClosableFakeSession(), registry)):
        assert config_cli.run(CONNECTION + ["get", "Lawn", "Function:Modect"]) == 1
    assert capsys.readouterr().out == ""
