"""
Pytest configuration for derby-stats tests.

Provides in-memory repositories and jam factories so services, the API and
the CLI can be exercised without a database. PostgreSQL integration tests
use the `database_url` fixture and are skipped when no URL is configured.
"""

import itertools
import os
from typing import Iterable, Optional

import pytest

from derby_stats.core.models import (
    GameInput,
    GameModel,
    JamRecord,
    LineRef,
    RosterInput,
    RosterModel,
    SkaterInput,
    SkaterRef,
    TeamInput,
    TeamModel,
)
from derby_stats.repositories.base import (
    GameRepository,
    JamRepository,
    LineRepository,
    RepositorySet,
    RosterRepository,
    SkaterRepository,
    TeamRepository,
)

GAME_ID = "game-1"


def pytest_configure(config):
    """Configure pytest with database URL if available."""
    # Try to load from .env file if environment variables not already set
    env_file = os.path.join(os.path.dirname(__file__), "..", ".env")
    if os.path.exists(env_file):
        with open(env_file) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip().strip('"').strip("'")
                    if key not in os.environ:
                        os.environ[key] = value


@pytest.fixture(scope="session")
def database_url():
    """Get the PostgreSQL database URL."""
    url = os.environ.get("DATABASE_URL") or os.environ.get("NEON_DATABASE_URL")
    if not url:
        pytest.skip("DATABASE_URL not set")
    return url


def make_jam(period: int = 1, jam_number: int = 1, game_id: str = GAME_ID, **fields) -> JamRecord:
    """Build a jam record with zero points and nobody recorded unless given."""
    return JamRecord(game_id=game_id, period=period, jam_number=jam_number, **fields)


# =========================================================================
# In-memory repositories
# =========================================================================

_new_ids = itertools.count(1)


def _new_id(prefix: str) -> str:
    return f"{prefix}-new-{next(_new_ids)}"


class InMemoryTeamRepository(TeamRepository):
    def __init__(self, teams: Iterable[TeamModel] = (), skaters: "InMemorySkaterRepository" = None):
        self.teams = {team.id: team for team in teams}
        self.members: dict[str, set[str]] = {team_id: set() for team_id in self.teams}
        self.skater_repo = skaters or InMemorySkaterRepository()

    def find_by_id(self, team_id: str) -> TeamModel | None:
        return self.teams.get(team_id)

    def list_all(self) -> list[TeamModel]:
        return sorted(self.teams.values(), key=lambda team: (team.name, team.id))

    def create(self, data: TeamInput) -> TeamModel:
        team = TeamModel(id=_new_id("t"), **data.model_dump())
        self.teams[team.id] = team
        self.members[team.id] = set()
        return team

    def update(self, team_id: str, data: TeamInput) -> TeamModel | None:
        if team_id not in self.teams:
            return None
        self.teams[team_id] = TeamModel(id=team_id, **data.model_dump())
        return self.teams[team_id]

    def delete(self, team_id: str) -> bool:
        self.members.pop(team_id, None)
        return self.teams.pop(team_id, None) is not None

    def list_skaters(self, team_id: str) -> list[SkaterRef]:
        found = self.skater_repo.find_by_ids(self.members.get(team_id, ()))
        return sorted(found.values(), key=lambda skater: (skater.number, skater.id))

    def add_skaters(self, team_id: str, skater_ids: Iterable[str]) -> None:
        self.members.setdefault(team_id, set()).update(skater_ids)

    def remove_skater(self, team_id: str, skater_id: str) -> bool:
        members = self.members.get(team_id, set())
        if skater_id not in members:
            return False
        members.discard(skater_id)
        return True

    def list_for_skater(self, skater_id: str) -> list[TeamModel]:
        teams = [self.teams[team_id] for team_id, ids in self.members.items() if skater_id in ids]
        return sorted(teams, key=lambda team: (team.name, team.id))


class InMemoryGameRepository(GameRepository):
    def __init__(self, games: Iterable[GameModel] = (), teams: InMemoryTeamRepository = None):
        self.games = {game.id: game for game in games}
        self.team_repo = teams or InMemoryTeamRepository()

    def _build(self, game_id: str, data: GameInput) -> GameModel:
        return GameModel(
            id=game_id,
            home_team=self.team_repo.find_by_id(data.home_team_id),
            visiting_team=self.team_repo.find_by_id(data.visiting_team_id),
            **data.model_dump(),
        )

    def find_by_id(self, game_id: str) -> GameModel | None:
        return self.games.get(game_id)

    def list_all(self) -> list[GameModel]:
        dated = sorted(
            (game for game in self.games.values() if game.start_date),
            key=lambda game: game.start_date,
            reverse=True,
        )
        undated = [game for game in self.games.values() if not game.start_date]
        return dated + undated

    def create(self, data: GameInput) -> GameModel:
        game = self._build(_new_id("game"), data)
        self.games[game.id] = game
        return game

    def update(self, game_id: str, data: GameInput) -> GameModel | None:
        if game_id not in self.games:
            return None
        self.games[game_id] = self._build(game_id, data)
        return self.games[game_id]

    def delete(self, game_id: str) -> bool:
        return self.games.pop(game_id, None) is not None


class InMemoryJamRepository(JamRepository):
    def __init__(self, jams: Iterable[JamRecord] = ()):
        self.jams = {(jam.game_id, jam.period, jam.jam_number): jam for jam in jams}
        self.list_calls = 0

    def list_for_game(self, game_id: str, period: Optional[int] = None) -> list[JamRecord]:
        self.list_calls += 1
        jams = [
            jam
            for jam in self.jams.values()
            if jam.game_id == game_id and (period is None or jam.period == period)
        ]
        return sorted(jams, key=lambda jam: jam.slot)

    def find(self, game_id: str, period: int, jam_number: int) -> JamRecord | None:
        return self.jams.get((game_id, period, jam_number))

    def upsert(self, jam: JamRecord) -> None:
        self.jams[(jam.game_id, jam.period, jam.jam_number)] = jam


class InMemorySkaterRepository(SkaterRepository):
    def __init__(self, skaters: Iterable[SkaterRef] = ()):
        self.skaters = {skater.id: skater for skater in skaters}

    def find_by_ids(self, skater_ids: Iterable[str]) -> dict[str, SkaterRef]:
        return {ident: self.skaters[ident] for ident in skater_ids if ident in self.skaters}

    def find_by_id(self, skater_id: str) -> SkaterRef | None:
        return self.skaters.get(skater_id)

    def list_all(self) -> list[SkaterRef]:
        return sorted(self.skaters.values(), key=lambda skater: (skater.number, skater.id))

    def create(self, data: SkaterInput) -> SkaterRef:
        skater = SkaterRef(id=_new_id("s"), **data.model_dump())
        self.skaters[skater.id] = skater
        return skater

    def update(self, skater_id: str, data: SkaterInput) -> SkaterRef | None:
        if skater_id not in self.skaters:
            return None
        self.skaters[skater_id] = SkaterRef(id=skater_id, **data.model_dump())
        return self.skaters[skater_id]

    def delete(self, skater_id: str) -> bool:
        return self.skaters.pop(skater_id, None) is not None


class InMemoryLineRepository(LineRepository):
    def __init__(self, lines: Iterable[LineRef] = ()):
        self.lines = {line.id: line for line in lines}

    def find_by_ids(self, line_ids: Iterable[str]) -> dict[str, LineRef]:
        return {ident: self.lines[ident] for ident in line_ids if ident in self.lines}


class InMemoryRosterRepository(RosterRepository):
    """Rosters keyed by (game_id, team_id); new lines are registered with the line repository."""

    def __init__(
        self,
        rosters: Iterable[RosterModel] = (),
        skaters: InMemorySkaterRepository = None,
        lines: InMemoryLineRepository = None,
    ):
        self.rosters = {(roster.game_id, roster.team_id): roster for roster in rosters}
        self.skater_repo = skaters or InMemorySkaterRepository()
        self.line_repo = lines or InMemoryLineRepository()

    def list_for_game(self, game_id: str) -> list[RosterModel]:
        return [roster for (gid, _), roster in sorted(self.rosters.items()) if gid == game_id]

    def save(self, game_id: str, team_id: str, data: RosterInput) -> RosterModel:
        existing = self.rosters.get((game_id, team_id))
        kept = {line.name: line for line in existing.lines} if existing else {}

        lines = []
        for name in data.line_names:
            line = kept.get(name) or LineRef(id=_new_id("l"), name=name)
            self.line_repo.lines[line.id] = line
            lines.append(line)

        found = self.skater_repo.find_by_ids(data.jammer_ids)
        roster = RosterModel(
            id=existing.id if existing else _new_id("r"),
            game_id=game_id,
            team_id=team_id,
            jammers=[found[ident] for ident in data.jammer_ids if ident in found],
            lines=lines,
        )
        self.rosters[(game_id, team_id)] = roster
        return roster

    def delete(self, game_id: str, team_id: str) -> bool:
        return self.rosters.pop((game_id, team_id), None) is not None


# =========================================================================
# Fixtures
# =========================================================================


@pytest.fixture
def skaters():
    return {
        "s-2": SkaterRef(id="s-2", number="2", name="Two Fast"),
        "s-5": SkaterRef(id="s-5", number="5", name="Bench Warmer"),
        "s-10": SkaterRef(id="s-10", number="10", name="Ten Speed"),
        "s-77": SkaterRef(id="s-77", number="77", name="Lucky Sevens"),
        "s-v1": SkaterRef(id="s-v1", number="31", name="Visiting Star"),
    }


@pytest.fixture
def lines():
    return {
        "l-a": LineRef(id="l-a", name="Alpha"),
        "l-b": LineRef(id="l-b", name="bravo"),
        "l-c": LineRef(id="l-c", name="Charlie"),
        "l-v": LineRef(id="l-v", name="Visitors"),
    }


@pytest.fixture
def teams():
    return {
        "t-home": TeamModel(id="t-home", name="Rollin' Rebels"),
        "t-away": TeamModel(id="t-away", name="Derby Dames"),
        "t-other": TeamModel(id="t-other", name="Bay Bombers", city="Oakland"),
    }


@pytest.fixture
def game(teams):
    return GameModel(
        id=GAME_ID,
        home_team_id="t-home",
        visiting_team_id="t-away",
        home_team=teams["t-home"],
        visiting_team=teams["t-away"],
    )


@pytest.fixture
def rosters(skaters, lines):
    """Home roster jams s-2, s-10 and s-77 (s-5 is on the team but not rostered)."""
    return [
        RosterModel(
            id="r-home",
            game_id=GAME_ID,
            team_id="t-home",
            jammers=[skaters["s-2"], skaters["s-10"], skaters["s-77"]],
            lines=[lines["l-a"], lines["l-b"], lines["l-c"]],
        ),
        RosterModel(
            id="r-away",
            game_id=GAME_ID,
            team_id="t-away",
            jammers=[skaters["s-v1"]],
            lines=[lines["l-v"]],
        ),
    ]


@pytest.fixture
def bout_jams():
    """A small two-period bout, deliberately stored out of order."""
    return [
        make_jam(2, 1, home_jammer_id="s-10", home_line_id="l-b", home_points=8,
                 visiting_jammer_id="s-v1", visiting_line_id="l-v", visiting_points=0,
                 lead_team="home"),
        make_jam(1, 1, home_jammer_id="s-2", home_line_id="l-a", home_points=4,
                 visiting_jammer_id="s-v1", visiting_line_id="l-v", visiting_points=0,
                 lead_team="home"),
        make_jam(1, 2, home_jammer_id="s-10", home_line_id="l-c", home_points=0,
                 visiting_jammer_id="s-v1", visiting_line_id="l-v", visiting_points=12,
                 lead_team="visiting"),
        make_jam(1, 3, home_jammer_id="s-2", home_line_id="l-a", home_points=None,
                 visiting_jammer_id=None, visiting_points=2),
        make_jam(2, 2, home_jammer_id="s-ghost", home_line_id="l-ghost", home_points=3,
                 visiting_jammer_id="s-v1", visiting_points=1, lead_team="home"),
    ]


@pytest.fixture
def repos(game, bout_jams, skaters, lines, teams, rosters):
    skater_repo = InMemorySkaterRepository(skaters.values())
    line_repo = InMemoryLineRepository(lines.values())
    team_repo = InMemoryTeamRepository(teams.values(), skater_repo)
    team_repo.add_skaters("t-home", ["s-2", "s-5", "s-10", "s-77"])
    team_repo.add_skaters("t-away", ["s-v1"])

    return RepositorySet(
        games=InMemoryGameRepository([game], team_repo),
        jams=InMemoryJamRepository(bout_jams),
        skaters=skater_repo,
        lines=line_repo,
        teams=team_repo,
        rosters=InMemoryRosterRepository(rosters, skater_repo, line_repo),
    )
