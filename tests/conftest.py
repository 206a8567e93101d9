import json
import sys
import threading
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from core.config import Settings, _reset_settings_cache_for_tests  # noqa: E402


@pytest.fixture(autouse=True)
def reset_settings_cache():
    _reset_settings_cache_for_tests()
    yield
    _reset_settings_cache_for_tests()


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, headers=None, text="", reason=""):
        self.status_code = status_code
        self._json_data = json_data
        self.headers = headers or {}
        self.reason = reason
        self.text = text or (json.dumps(json_data) if isinstance(json_data, (dict, list)) else "")

    def json(self):
        if self._json_data is None:
            raise ValueError("Invalid JSON")
        return self._json_data


class FakeSession:
    """
    Sostituto di requests.Session: risposte in coda per frammento di path.
    L'ultimo elemento di ogni coda viene ripetuto all'infinito.
    """

    def __init__(self):
        self.headers = {}
        self.calls = []
        self.closed = False
        self.gate = None  # threading.Event: se presente, get() attende il via
        self._routes = {}
        self._lock = threading.Lock()

    def queue(self, path_fragment, *items):
        self._routes.setdefault(path_fragment, []).extend(items)
        return self

    def count(self, path_fragment):
        with self._lock:
            return sum(1 for url, _ in self.calls if path_fragment in url)

    def get(self, url, params=None, timeout=None):
        with self._lock:
            self.calls.append((url, params))
            seq = next(v for k, v in self._routes.items() if k in url)
            item = seq.pop(0) if len(seq) > 1 else seq[0]
        if self.gate is not None:
            self.gate.wait(5)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_team(team_id, name, **extra):
    return {"id": team_id, "name": name, "short_name": name[:3].upper(), "code": team_id * 10, **extra}


def make_fixture(fixture_id, team_h, team_a, **extra):
    record = {
        "id": fixture_id,
        "code": 2_000_000 + fixture_id,
        "event": 10,
        "kickoff_time": "2025-10-25T14:00:00Z",
        "minutes": 0,
        "provisional_start_time": False,
        "started": False,
        "finished": False,
        "finished_provisional": False,
        "team_h": team_h,
        "team_a": team_a,
        "team_h_score": None,
        "team_a_score": None,
        "team_h_difficulty": 3,
        "team_a_difficulty": 4,
        "stats": [],
        "pulse_id": 100_000 + fixture_id,
    }
    record.update(extra)
    return record


@pytest.fixture
def settings():
    return Settings(
        base_url="https://fpl.test/api",
        timeout=1.0,
        user_agent="fpl-client-tests",
        log_level="WARNING",
        max_attempts=3,
        backoff_base=0.01,
        backoff_factor=2.0,
        backoff_jitter=0.0,
        request_timeout_total=None,
    )


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def bootstrap_payload():
    return {
        "teams": [
            make_team(1, "Arsenal"),
            make_team(2, "Aston Villa"),
            make_team(3, "Chelsea"),
            make_team(4, "Liverpool"),
        ],
        "total_players": 11_000_000,
        "elements": [{"id": 1, "web_name": "Saka", "team": 1}],
        "events": [{"id": 10, "name": "Gameweek 10"}],
    }


@pytest.fixture
def fixtures_payload():
    # 10 fixtures; Arsenal (1) in 1, 4, 7, 10
    pairs = [(1, 2), (3, 4), (2, 3), (4, 1), (3, 2), (4, 2), (1, 3), (2, 4), (3, 4), (2, 1)]
    return [make_fixture(i + 1, h, a) for i, (h, a) in enumerate(pairs)]


@pytest.fixture
def fake_response():
    return FakeResponse
