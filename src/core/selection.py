from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Fixture, Team


def normalize_team_name(name: str) -> str:
    return name.strip().casefold()


def build_team_index(teams: Iterable[Team]) -> Tuple[Dict[str, int], List[str]]:
    """
    Indice nome squadra (case-insensitive) -> id squadra.
    In caso di nomi che collidono vince l'ultimo in ordine di iterazione;
    ritorna anche la lista dei nomi normalizzati che hanno colliso.
    """
    index: Dict[str, int] = {}
    collisions: List[str] = []
    for team in teams:
        key = normalize_team_name(team.name)
        if key in index and index[key] != team.id:
            collisions.append(key)
        index[key] = team.id
    return index, collisions


def filter_by_team(fixtures: Iterable[Fixture], team_id: Optional[int]) -> List[Fixture]:
    # None = nessun filtro; l'ordine upstream è preservato
    if team_id is None:
        return list(fixtures)
    return [f for f in fixtures if f.involves(team_id)]


def take_first(fixtures: Sequence[Fixture], limit: Optional[int]) -> List[Fixture]:
    if limit is None:
        return list(fixtures)
    if limit <= 0:
        return []
    return list(fixtures[:limit])


__all__ = ["normalize_team_name", "build_team_index", "filter_by_team", "take_first"]
