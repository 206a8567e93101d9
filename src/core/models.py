from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

# Identificativi noti dei breakdown statistici; quelli nuovi vengono accettati.
KNOWN_STAT_IDENTIFIERS = (
    "goals_scored",
    "assists",
    "own_goals",
    "penalties_saved",
    "yellow_cards",
    "penalties_missed",
    "red_cards",
    "saves",
    "bonus",
    "bps",
    "defensive_contribution",
)


class _Record(BaseModel):
    # Valori immutabili; i campi non modellati passano intatti.
    model_config = ConfigDict(frozen=True, extra="allow")


class Team(_Record):
    id: int
    name: str
    code: Optional[int] = None
    short_name: Optional[str] = None
    pulse_id: Optional[int] = None

    played: Optional[int] = None
    points: Optional[int] = None
    position: Optional[int] = None
    win: Optional[int] = None
    draw: Optional[int] = None
    loss: Optional[int] = None

    strength: Optional[int] = None
    strength_overall_home: Optional[int] = None
    strength_overall_away: Optional[int] = None
    strength_attack_home: Optional[int] = None
    strength_attack_away: Optional[int] = None
    strength_defence_home: Optional[int] = None
    strength_defence_away: Optional[int] = None


class BootstrapData(_Record):
    teams: Tuple[Team, ...]
    total_players: Optional[int] = None
    # record giocatore opachi
    elements: Tuple[Dict[str, Any], ...] = ()


class StatEntry(_Record):
    value: int
    element: int


class FixtureStat(_Record):
    identifier: Optional[str] = None
    a: Tuple[StatEntry, ...] = ()
    h: Tuple[StatEntry, ...] = ()


class Fixture(_Record):
    # identità / calendario
    id: int
    code: int
    event: Optional[int] = None  # None = fixture non ancora in calendario
    kickoff_time: Optional[datetime] = None

    # stato
    minutes: int = 0
    provisional_start_time: bool = False
    started: Optional[bool] = False
    finished: Optional[bool] = False
    finished_provisional: Optional[bool] = False

    # squadre e punteggio
    team_h: int
    team_a: int
    team_h_score: Optional[int] = None
    team_a_score: Optional[int] = None
    team_h_difficulty: int
    team_a_difficulty: int

    stats: Tuple[FixtureStat, ...] = ()
    pulse_id: int

    def involves(self, team_id: int) -> bool:
        return self.team_h == team_id or self.team_a == team_id


__all__ = [
    "KNOWN_STAT_IDENTIFIERS",
    "Team",
    "BootstrapData",
    "StatEntry",
    "FixtureStat",
    "Fixture",
]
