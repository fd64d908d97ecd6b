"""
Core types and constants for Derby Stats.

This module provides:
- TeamSide enum (home / visiting)
- Period filter constants and parsing
- Table name constants for the jam ledger and its registries
"""

from enum import Enum
from typing import Literal, Union

from .errors import InvalidSelectionError


class TeamSide(str, Enum):
    """Side of a bout a team plays on."""

    home = "home"
    visiting = "visiting"

    @property
    def opposite(self) -> "TeamSide":
        """The other side of the bout."""
        return TeamSide.visiting if self is TeamSide.home else TeamSide.home


# =============================================================================
# Periods
# =============================================================================

PERIODS: tuple[int, ...] = (1, 2)
ALL_PERIODS = "all"

PeriodFilter = Union[Literal["all"], int]


def parse_period_filter(value: Union[str, int, None]) -> PeriodFilter:
    """
    Normalize a period filter coming from a query string or CLI flag.

    Accepts "all" (or None), 1, 2, "1", "2".

    Raises:
        InvalidSelectionError: If the value is not a known period filter
    """
    if value is None or value == ALL_PERIODS:
        return ALL_PERIODS
    try:
        period = int(value)
    except (TypeError, ValueError):
        raise InvalidSelectionError(f"Invalid period filter: {value!r}") from None
    if period not in PERIODS:
        raise InvalidSelectionError(f"Invalid period filter: {value!r}")
    return period


def parse_side(value: Union[str, TeamSide]) -> TeamSide:
    """
    Normalize a team side selector.

    Raises:
        InvalidSelectionError: If the value is not home or visiting
    """
    if isinstance(value, TeamSide):
        return value
    try:
        return TeamSide(value)
    except ValueError:
        raise InvalidSelectionError(f"Invalid team side: {value!r}") from None


# =============================================================================
# Table names
# =============================================================================

TEAMS_TABLE = "teams"
SKATERS_TABLE = "skaters"
GAMES_TABLE = "games"
ROSTER_LINES_TABLE = "roster_lines"
JAMS_TABLE = "jams"
TEAMS_SKATERS_TABLE = "teams_skaters"
GAME_ROSTERS_TABLE = "game_rosters"
ROSTER_JAMMERS_TABLE = "roster_jammers"
