"""
Pydantic models for Derby Stats entities.

These models are used for:
- Normalizing rows from the database into one fixed shape
- Validating jam entry and management input before it is written
- API response serialization of aggregation output
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    NonNegativeInt,
    StringConstraints,
    computed_field,
    field_validator,
    model_validator,
)

from .types import TeamSide


def unwrap_singleton(value: Any) -> Any:
    """Collapse a one-element list (as embedded relations sometimes arrive) to its element."""
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        if len(value) == 1:
            return value[0]
    return value


def _normalize_id(value: Any) -> Any:
    value = unwrap_singleton(value)
    if isinstance(value, UUID):
        return str(value)
    if value == "":
        return None
    return value


ID_FIELDS = (
    "id",
    "game_id",
    "team_id",
    "home_team_id",
    "visiting_team_id",
    "home_jammer_id",
    "home_line_id",
    "visiting_jammer_id",
    "visiting_line_id",
)


def _normalize_row(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    row = {key: unwrap_singleton(value) for key, value in data.items()}
    for key in ID_FIELDS:
        if key in row:
            row[key] = _normalize_id(row[key])
    return row


# =============================================================================
# Registry Models
# =============================================================================


class TeamModel(BaseModel):
    """Team master record."""

    id: str
    name: str
    city: Optional[str] = None
    country: Optional[str] = None
    light_color: Optional[str] = None
    dark_color: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        return _normalize_row(data)


class SkaterRef(BaseModel):
    """Display identity of a skater: jersey number and name."""

    model_config = ConfigDict(frozen=True)

    id: str
    number: str
    name: str

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        row = _normalize_row(data)
        if isinstance(row, dict) and isinstance(row.get("number"), int):
            row["number"] = str(row["number"])
        return row


class LineRef(BaseModel):
    """Display identity of a roster line."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        return _normalize_row(data)


class GameModel(BaseModel):
    """A bout between a home and a visiting team."""

    id: str
    home_team_id: str
    home_team_color: Optional[str] = None
    visiting_team_id: str
    visiting_team_color: Optional[str] = None
    start_date: Optional[datetime] = None
    location: Optional[str] = None
    home_team: Optional[TeamModel] = None
    visiting_team: Optional[TeamModel] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        return _normalize_row(data)

    def team_id(self, side: TeamSide) -> str:
        return self.home_team_id if side is TeamSide.home else self.visiting_team_id

    def team_name(self, side: TeamSide) -> Optional[str]:
        team = self.home_team if side is TeamSide.home else self.visiting_team
        return team.name if team else None

    def side_of(self, team_id: str) -> Optional[TeamSide]:
        """The side `team_id` plays on in this game, if it plays at all."""
        for side in TeamSide:
            if self.team_id(side) == team_id:
                return side
        return None


class RosterModel(BaseModel):
    """A team's roster for one game: the skaters who may jam and its named lines."""

    id: str
    game_id: str
    team_id: str
    jammers: list[SkaterRef] = []
    lines: list[LineRef] = []

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        row = dict(data)
        for key in ("id", "game_id", "team_id"):
            if key in row:
                row[key] = _normalize_id(row[key])
        return row

    @property
    def jammer_ids(self) -> set[str]:
        return {jammer.id for jammer in self.jammers}

    @property
    def line_ids(self) -> set[str]:
        return {line.id for line in self.lines}


# =============================================================================
# Management Input
# =============================================================================

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


class TeamInput(BaseModel):
    """Values for creating or updating a team."""

    name: NonBlankStr
    city: Optional[str] = None
    country: Optional[str] = None
    light_color: Optional[str] = None
    dark_color: Optional[str] = None

    @field_validator("city", "country", "light_color", "dark_color", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)


class SkaterInput(BaseModel):
    """Values for creating or updating a skater. Jersey numbers are text."""

    number: NonBlankStr
    name: NonBlankStr

    @field_validator("number", mode="before")
    @classmethod
    def _number_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class GameInput(BaseModel):
    """Values for creating or updating a game."""

    home_team_id: NonBlankStr
    home_team_color: Optional[str] = None
    visiting_team_id: NonBlankStr
    visiting_team_color: Optional[str] = None
    start_date: Optional[datetime] = None
    location: Optional[str] = None

    @field_validator("home_team_color", "visiting_team_color", "start_date", "location", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def _check_teams(self) -> "GameInput":
        if self.home_team_id == self.visiting_team_id:
            raise ValueError("Home team and visiting team must be different")
        return self


class MembershipInput(BaseModel):
    """Skaters to add to a team."""

    skater_ids: list[NonBlankStr]

    @field_validator("skater_ids")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return _unique(value)


class RosterInput(BaseModel):
    """
    A team's roster for a game.

    Blank line names are dropped and duplicates collapse, so the form can
    submit its trailing empty line field as is.
    """

    jammer_ids: list[NonBlankStr] = []
    line_names: list[str] = []

    @field_validator("jammer_ids")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return _unique(value)

    @field_validator("line_names")
    @classmethod
    def _clean_names(cls, value: list[str]) -> list[str]:
        return _unique([name.strip() for name in value if name.strip()])


# =============================================================================
# Jam Ledger
# =============================================================================


class JamRecord(BaseModel):
    """
    One row of the jam ledger.

    (game_id, period, jam_number) identifies the slot. Jammer and line IDs
    are optional per side; points may arrive as NULL and count as zero
    wherever they are summed.
    """

    model_config = ConfigDict(frozen=True)

    game_id: str
    period: Literal[1, 2]
    jam_number: int
    home_jammer_id: Optional[str] = None
    home_line_id: Optional[str] = None
    home_points: Optional[NonNegativeInt] = 0
    visiting_jammer_id: Optional[str] = None
    visiting_line_id: Optional[str] = None
    visiting_points: Optional[NonNegativeInt] = 0
    lead_team: Optional[TeamSide] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        row = _normalize_row(data)
        if isinstance(row, dict) and row.get("lead_team") in ("", "none"):
            row["lead_team"] = None
        return row

    @model_validator(mode="after")
    def _check_jam_number(self) -> "JamRecord":
        if self.jam_number < 1:
            raise ValueError("jam_number must start at 1")
        return self

    @property
    def slot(self) -> tuple[int, int]:
        return (self.period, self.jam_number)

    def jammer_for(self, side: TeamSide) -> Optional[str]:
        return self.home_jammer_id if side is TeamSide.home else self.visiting_jammer_id

    def line_for(self, side: TeamSide) -> Optional[str]:
        return self.home_line_id if side is TeamSide.home else self.visiting_line_id

    def points_for(self, side: TeamSide) -> int:
        points = self.home_points if side is TeamSide.home else self.visiting_points
        return points or 0


class JamEntry(BaseModel):
    """Jam values submitted from the stats entry screen for one slot."""

    home_jammer_id: Optional[str] = None
    home_line_id: Optional[str] = None
    home_points: NonNegativeInt = 0
    visiting_jammer_id: Optional[str] = None
    visiting_line_id: Optional[str] = None
    visiting_points: NonNegativeInt = 0
    lead_team: Optional[TeamSide] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        row = _normalize_row(data)
        if isinstance(row, dict) and row.get("lead_team") in ("", "none"):
            row["lead_team"] = None
        return row

    def is_empty(self) -> bool:
        """True when nothing at all was entered for the jam."""
        return (
            not self.home_jammer_id
            and not self.home_line_id
            and self.home_points == 0
            and not self.visiting_jammer_id
            and not self.visiting_line_id
            and self.visiting_points == 0
            and self.lead_team is None
        )

    def to_record(self, game_id: str, period: int, jam_number: int) -> JamRecord:
        return JamRecord(
            game_id=game_id,
            period=period,
            jam_number=jam_number,
            **self.model_dump(),
        )


# =============================================================================
# Aggregation Output
# =============================================================================


class _SummaryRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    jam_count: int
    lead_count: int
    lead_percentage: float
    points_for: int
    points_against: int

    @computed_field
    @property
    def point_differential(self) -> int:
        """Points for minus points against."""
        return self.points_for - self.points_against


class JammerSummaryRow(_SummaryRow):
    """Per-jammer totals for one side of a game."""

    skater_id: str
    skater_number: str
    skater_name: str


class LineSummaryRow(_SummaryRow):
    """Per-line totals for one side of a game."""

    line_id: str
    line_name: str


class TimelinePoint(BaseModel):
    """Cumulative score after one jam."""

    model_config = ConfigDict(frozen=True)

    label: str
    period: int
    jam_number: int
    home_score: int
    visiting_score: int


class GameStatsReport(BaseModel):
    """Everything the game stats page renders for one selection."""

    game_id: str
    side: TeamSide
    period: Union[Literal["all"], int]
    total_jams: int
    jammers: list[JammerSummaryRow]
    lines: list[LineSummaryRow]
    timeline: list[TimelinePoint]

    @computed_field
    @property
    def has_data(self) -> bool:
        return bool(self.jammers or self.lines or self.timeline)
