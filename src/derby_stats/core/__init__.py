"""
Core module for Derby Stats.

This module provides the foundational components:
- Configuration management (config.py)
- Domain exceptions (errors.py)
- Data models (models.py)
- Team side / period types and table names (types.py)

Usage:
    from derby_stats.core import Settings, get_settings
    from derby_stats.core import TeamSide, parse_period_filter
    from derby_stats.core import JamRecord, JammerSummaryRow
"""

# Configuration
from .config import Settings, get_settings

# Errors
from .errors import (
    DerbyStatsError,
    EntityNotFoundError,
    GameNotFoundError,
    InvalidReferenceError,
    InvalidSelectionError,
    JamNotFoundError,
    RosterNotFoundError,
    SkaterNotFoundError,
    StaleResponseError,
    TeamNotFoundError,
)

# Types
from .types import (
    ALL_PERIODS,
    PERIODS,
    PeriodFilter,
    TeamSide,
    parse_period_filter,
    parse_side,
)

# Models
from .models import (
    GameInput,
    GameModel,
    GameStatsReport,
    JamEntry,
    JamRecord,
    JammerSummaryRow,
    LineRef,
    LineSummaryRow,
    MembershipInput,
    RosterInput,
    RosterModel,
    SkaterInput,
    SkaterRef,
    TeamInput,
    TeamModel,
    TimelinePoint,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "DerbyStatsError",
    "EntityNotFoundError",
    "GameNotFoundError",
    "InvalidReferenceError",
    "InvalidSelectionError",
    "JamNotFoundError",
    "RosterNotFoundError",
    "SkaterNotFoundError",
    "StaleResponseError",
    "TeamNotFoundError",
    # Types
    "ALL_PERIODS",
    "PERIODS",
    "PeriodFilter",
    "TeamSide",
    "parse_period_filter",
    "parse_side",
    # Models
    "GameInput",
    "GameModel",
    "GameStatsReport",
    "JamEntry",
    "JamRecord",
    "JammerSummaryRow",
    "LineRef",
    "LineSummaryRow",
    "MembershipInput",
    "RosterInput",
    "RosterModel",
    "SkaterInput",
    "SkaterRef",
    "TeamInput",
    "TeamModel",
    "TimelinePoint",
]
