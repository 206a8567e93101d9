from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from conftest import make_fixture, make_team
from core.models import BootstrapData, Fixture, Team
from providers.fpl.exceptions import DecodeError
from providers.fpl.schema import parse_bootstrap, parse_fixtures


def test_parse_bootstrap_ok(bootstrap_payload):
    data = parse_bootstrap(bootstrap_payload)
    assert isinstance(data, BootstrapData)
    assert [t.name for t in data.teams] == ["Arsenal", "Aston Villa", "Chelsea", "Liverpool"]
    assert data.total_players == 11_000_000
    assert data.elements[0]["web_name"] == "Saka"
    # campi non modellati restano disponibili
    assert data.model_extra["events"][0]["id"] == 10


def test_parse_bootstrap_minimal_payload():
    data = parse_bootstrap({"teams": [{"id": 1, "name": "Arsenal"}]})
    assert data.total_players is None
    assert data.elements == ()


def test_missing_teams_is_decode_error():
    with pytest.raises(DecodeError) as exc:
        parse_bootstrap({"elements": []})
    assert exc.value.fields == ("bootstrap.teams",)
    assert "bootstrap.teams" in str(exc.value)


def test_teams_not_a_sequence_is_decode_error():
    with pytest.raises(DecodeError) as exc:
        parse_bootstrap({"teams": "Arsenal"})
    assert "bootstrap.teams" in exc.value.fields


def test_bad_team_field_enumerates_location():
    with pytest.raises(DecodeError) as exc:
        parse_bootstrap({"teams": [make_team(1, "Arsenal"), {"id": "x", "name": "Chelsea"}]})
    assert exc.value.fields == ("bootstrap.teams.1.id",)


def test_bootstrap_must_be_an_object():
    with pytest.raises(DecodeError):
        parse_bootstrap([{"id": 1}])


def test_parse_fixtures_ok(fixtures_payload):
    fixtures = parse_fixtures(fixtures_payload)
    assert len(fixtures) == 10
    first = fixtures[0]
    assert isinstance(first, Fixture)
    assert first.kickoff_time == datetime(2025, 10, 25, 14, 0, tzinfo=timezone.utc)
    assert first.involves(1) and first.involves(2) and not first.involves(3)


def test_parse_fixture_with_stats_and_nulls():
    raw = make_fixture(
        1,
        1,
        2,
        event=None,
        kickoff_time=None,
        team_h_score=2,
        team_a_score=0,
        stats=[
            {"identifier": "goals_scored", "a": [], "h": [{"value": 2, "element": 7}]},
            {"identifier": "new_metric", "a": [{"value": 1, "element": 9}], "h": []},
        ],
    )
    fixture = parse_fixtures([raw])[0]
    assert fixture.event is None
    assert fixture.kickoff_time is None
    assert fixture.stats[0].h[0].element == 7
    assert fixture.stats[1].identifier == "new_metric"


def test_fixture_missing_team_is_decode_error(fixtures_payload):
    del fixtures_payload[3]["team_h"]
    with pytest.raises(DecodeError) as exc:
        parse_fixtures(fixtures_payload)
    assert exc.value.fields == ("fixtures.3.team_h",)


def test_fixtures_must_be_an_array():
    with pytest.raises(DecodeError):
        parse_fixtures({"fixtures": []})


def test_models_are_immutable():
    team = Team(id=1, name="Arsenal")
    with pytest.raises(ValidationError):
        team.name = "Chelsea"


def test_status_flags_accept_null():
    raw = make_fixture(1, 1, 2, started=None, finished=None, finished_provisional=None)
    fixture = parse_fixtures([raw])[0]
    assert fixture.started is None
    assert fixture.finished is None
    assert fixture.finished_provisional is None


def test_status_flags_default_to_false():
    raw = make_fixture(1, 1, 2)
    for key in ("started", "finished", "finished_provisional"):
        del raw[key]
    fixture = parse_fixtures([raw])[0]
    assert (fixture.started, fixture.finished, fixture.finished_provisional) == (False, False, False)
