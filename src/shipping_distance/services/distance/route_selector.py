"""Pick one route out of the candidates the distance API returned."""

from __future__ import annotations

from typing import Sequence

from ...errors import NoCandidatesError
from .models import RouteCandidate, RoutePreference


def select_route(
    candidates: Sequence[RouteCandidate],
    preference: RoutePreference = "shortest_distance",
) -> RouteCandidate:
    """Return the candidate preferred by ``preference``.

    Sorting is stable, so among equal candidates the one the provider listed
    first wins. Unknown preferences fall back to shortest distance.
    """
    if not candidates:
        raise NoCandidatesError()

    match preference:
        case "longest_distance":
            ranked = sorted(candidates, key=lambda candidate: candidate.distance, reverse=True)
        case "shortest_duration":
            ranked = sorted(candidates, key=lambda candidate: candidate.duration)
        case "longest_duration":
            ranked = sorted(candidates, key=lambda candidate: candidate.duration, reverse=True)
        case _:
            ranked = sorted(candidates, key=lambda candidate: candidate.distance)
    return ranked[0]
