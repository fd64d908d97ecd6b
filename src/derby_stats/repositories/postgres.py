"""
PostgreSQL repository implementations.

Every row leaving this module is validated into a fixed pydantic model, so
callers never see UUID objects, empty-string IDs or relations embedded as
singleton lists. IDs that are not UUIDs cannot exist in these tables and
are treated as unknown instead of being sent to the database.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Optional
from uuid import UUID

from ..core.models import (
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
from ..core.types import (
    GAME_ROSTERS_TABLE,
    GAMES_TABLE,
    JAMS_TABLE,
    ROSTER_JAMMERS_TABLE,
    ROSTER_LINES_TABLE,
    SKATERS_TABLE,
    TEAMS_SKATERS_TABLE,
    TEAMS_TABLE,
)
from .base import (
    GameRepository,
    JamRepository,
    LineRepository,
    RosterRepository,
    SkaterRepository,
    TeamRepository,
)

if TYPE_CHECKING:
    from ..pg_connection import PostgresDB

logger = logging.getLogger(__name__)


JAM_COLUMNS = (
    "game_id",
    "period",
    "jam_number",
    "home_jammer_id",
    "home_line_id",
    "home_points",
    "visiting_jammer_id",
    "visiting_line_id",
    "visiting_points",
    "lead_team",
)

TEAM_COLUMNS = ("id", "name", "city", "country", "light_color", "dark_color")
TEAM_INPUT_COLUMNS = TEAM_COLUMNS[1:]

GAME_COLUMNS = (
    "id",
    "home_team_id",
    "home_team_color",
    "visiting_team_id",
    "visiting_team_color",
    "start_date",
    "location",
)
GAME_INPUT_COLUMNS = GAME_COLUMNS[1:]

SKATER_COLUMNS = ("id", "number", "name")


def _is_uuid(value: Any) -> bool:
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


def _unique_ids(ids: Iterable[Any]) -> list[str]:
    return sorted({str(ident) for ident in ids if ident and _is_uuid(ident)})


def _write_returning(db: "PostgresDB", query: str, params: tuple) -> Optional[dict[str, Any]]:
    """Run a write with a RETURNING clause and commit it."""
    with db.transaction() as conn:
        return conn.execute(query, params).fetchone()


def _columns(columns: Iterable[str], alias: str = "") -> str:
    prefix = f"{alias}." if alias else ""
    return ", ".join(f"{prefix}{col}" for col in columns)


def _insert_sql(table: str, columns: tuple[str, ...], returning: tuple[str, ...]) -> str:
    placeholders = ", ".join(["%s"] * len(columns))
    return f"INSERT INTO {table} ({_columns(columns)}) VALUES ({placeholders}) RETURNING {_columns(returning)}"


def _update_sql(table: str, columns: tuple[str, ...], returning: tuple[str, ...]) -> str:
    assignments = ", ".join(f"{col} = %s" for col in columns)
    return f"UPDATE {table} SET {assignments} WHERE id = %s RETURNING {_columns(returning)}"


class PostgresGameRepository(GameRepository):
    """PostgreSQL implementation for game data access."""

    def __init__(self, db: "PostgresDB"):
        self.db = db

    def _with_teams(self, rows: list[dict[str, Any]]) -> list[GameModel]:
        team_ids = _unique_ids(
            row[key] for row in rows for key in ("home_team_id", "visiting_team_id")
        )
        teams: dict[str, TeamModel] = {}
        if team_ids:
            for team_row in self.db.fetchall(
                f"SELECT {_columns(TEAM_COLUMNS)} FROM {TEAMS_TABLE} WHERE id = ANY(%s::uuid[])",
                (team_ids,),
            ):
                team = TeamModel.model_validate(team_row)
                teams[team.id] = team

        games = []
        for row in rows:
            game = dict(row)
            game["home_team"] = teams.get(str(row["home_team_id"]))
            game["visiting_team"] = teams.get(str(row["visiting_team_id"]))
            games.append(GameModel.model_validate(game))
        return games

    def find_by_id(self, game_id: str) -> GameModel | None:
        if not _is_uuid(game_id):
            return None
        row = self.db.fetchone(
            f"SELECT {_columns(GAME_COLUMNS)} FROM {GAMES_TABLE} WHERE id = %s",
            (game_id,),
        )
        if not row:
            return None
        return self._with_teams([row])[0]

    def list_all(self) -> list[GameModel]:
        rows = self.db.fetchall(
            f"""
            SELECT {_columns(GAME_COLUMNS)}
            FROM {GAMES_TABLE}
            ORDER BY start_date DESC NULLS LAST, id
            """
        )
        return self._with_teams(rows)

    def create(self, data: GameInput) -> GameModel:
        values = data.model_dump()
        row = _write_returning(
            self.db,
            _insert_sql(GAMES_TABLE, GAME_INPUT_COLUMNS, ("id",)),
            tuple(values[col] for col in GAME_INPUT_COLUMNS),
        )
        logger.info("Created game %s", row["id"])
        return self.find_by_id(str(row["id"]))

    def update(self, game_id: str, data: GameInput) -> GameModel | None:
        if not _is_uuid(game_id):
            return None
        values = data.model_dump()
        row = _write_returning(
            self.db,
            _update_sql(GAMES_TABLE, GAME_INPUT_COLUMNS, ("id",)),
            tuple(values[col] for col in GAME_INPUT_COLUMNS) + (game_id,),
        )
        return self.find_by_id(game_id) if row else None

    def delete(self, game_id: str) -> bool:
        if not _is_uuid(game_id):
            return False
        row = _write_returning(
            self.db, f"DELETE FROM {GAMES_TABLE} WHERE id = %s RETURNING id", (game_id,)
        )
        return row is not None


class PostgresJamRepository(JamRepository):
    """PostgreSQL implementation of the jam ledger."""

    def __init__(self, db: "PostgresDB"):
        self.db = db

    def list_for_game(self, game_id: str, period: Optional[int] = None) -> list[JamRecord]:
        if not _is_uuid(game_id):
            return []
        query = f"SELECT {_columns(JAM_COLUMNS)} FROM {JAMS_TABLE} WHERE game_id = %s"
        params: tuple = (game_id,)
        if period is not None:
            query += " AND period = %s"
            params += (period,)
        query += " ORDER BY period, jam_number"

        return [JamRecord.model_validate(row) for row in self.db.fetchall(query, params)]

    def find(self, game_id: str, period: int, jam_number: int) -> JamRecord | None:
        if not _is_uuid(game_id):
            return None
        row = self.db.fetchone(
            f"""
            SELECT {_columns(JAM_COLUMNS)}
            FROM {JAMS_TABLE}
            WHERE game_id = %s AND period = %s AND jam_number = %s
            """,
            (game_id, period, jam_number),
        )
        return JamRecord.model_validate(row) if row else None

    def upsert(self, jam: JamRecord) -> None:
        data = jam.model_dump(mode="json")
        placeholders = ", ".join(["%s"] * len(JAM_COLUMNS))
        update_str = ", ".join(
            f"{col} = excluded.{col}"
            for col in JAM_COLUMNS
            if col not in ("game_id", "period", "jam_number")
        )

        query = f"""
            INSERT INTO {JAMS_TABLE} ({_columns(JAM_COLUMNS)})
            VALUES ({placeholders})
            ON CONFLICT(game_id, period, jam_number) DO UPDATE SET
                {update_str}
        """
        # NULL points are stored as zero; the column is NOT NULL.
        params = tuple(
            0 if col.endswith("_points") and data[col] is None else data[col]
            for col in JAM_COLUMNS
        )

        self.db.execute(query, params)
        logger.debug("Saved jam P%d J%d for game %s", jam.period, jam.jam_number, jam.game_id)


class PostgresSkaterRepository(SkaterRepository):
    """PostgreSQL implementation for skater data access."""

    def __init__(self, db: "PostgresDB"):
        self.db = db

    def find_by_ids(self, skater_ids: Iterable[str]) -> dict[str, SkaterRef]:
        ids = _unique_ids(skater_ids)
        if not ids:
            return {}
        rows = self.db.fetchall(
            f"SELECT {_columns(SKATER_COLUMNS)} FROM {SKATERS_TABLE} WHERE id = ANY(%s::uuid[])",
            (ids,),
        )
        skaters = [SkaterRef.model_validate(row) for row in rows]
        return {skater.id: skater for skater in skaters}

    def find_by_id(self, skater_id: str) -> SkaterRef | None:
        if not _is_uuid(skater_id):
            return None
        row = self.db.fetchone(
            f"SELECT {_columns(SKATER_COLUMNS)} FROM {SKATERS_TABLE} WHERE id = %s",
            (skater_id,),
        )
        return SkaterRef.model_validate(row) if row else None

    def list_all(self) -> list[SkaterRef]:
        rows = self.db.fetchall(
            f"SELECT {_columns(SKATER_COLUMNS)} FROM {SKATERS_TABLE} ORDER BY number, id"
        )
        return [SkaterRef.model_validate(row) for row in rows]

    def create(self, data: SkaterInput) -> SkaterRef:
        row = _write_returning(
            self.db,
            _insert_sql(SKATERS_TABLE, ("number", "name"), SKATER_COLUMNS),
            (data.number, data.name),
        )
        return SkaterRef.model_validate(row)

    def update(self, skater_id: str, data: SkaterInput) -> SkaterRef | None:
        if not _is_uuid(skater_id):
            return None
        row = _write_returning(
            self.db,
            _update_sql(SKATERS_TABLE, ("number", "name"), SKATER_COLUMNS),
            (data.number, data.name, skater_id),
        )
        return SkaterRef.model_validate(row) if row else None

    def delete(self, skater_id: str) -> bool:
        if not _is_uuid(skater_id):
            return False
        row = _write_returning(
            self.db, f"DELETE FROM {SKATERS_TABLE} WHERE id = %s RETURNING id", (skater_id,)
        )
        return row is not None


class PostgresLineRepository(LineRepository):
    """PostgreSQL implementation for roster line lookups."""

    def __init__(self, db: "PostgresDB"):
        self.db = db

    def find_by_ids(self, line_ids: Iterable[str]) -> dict[str, LineRef]:
        ids = _unique_ids(line_ids)
        if not ids:
            return {}
        rows = self.db.fetchall(
            f"SELECT id, name FROM {ROSTER_LINES_TABLE} WHERE id = ANY(%s::uuid[])",
            (ids,),
        )
        lines = [LineRef.model_validate(row) for row in rows]
        return {line.id: line for line in lines}


class PostgresTeamRepository(TeamRepository):
    """PostgreSQL implementation for teams and team membership."""

    def __init__(self, db: "PostgresDB"):
        self.db = db

    def find_by_id(self, team_id: str) -> TeamModel | None:
        if not _is_uuid(team_id):
            return None
        row = self.db.fetchone(
            f"SELECT {_columns(TEAM_COLUMNS)} FROM {TEAMS_TABLE} WHERE id = %s",
            (team_id,),
        )
        return TeamModel.model_validate(row) if row else None

    def list_all(self) -> list[TeamModel]:
        rows = self.db.fetchall(
            f"SELECT {_columns(TEAM_COLUMNS)} FROM {TEAMS_TABLE} ORDER BY name, id"
        )
        return [TeamModel.model_validate(row) for row in rows]

    def create(self, data: TeamInput) -> TeamModel:
        values = data.model_dump()
        row = _write_returning(
            self.db,
            _insert_sql(TEAMS_TABLE, TEAM_INPUT_COLUMNS, TEAM_COLUMNS),
            tuple(values[col] for col in TEAM_INPUT_COLUMNS),
        )
        logger.info("Created team %s (%s)", row["name"], row["id"])
        return TeamModel.model_validate(row)

    def update(self, team_id: str, data: TeamInput) -> TeamModel | None:
        if not _is_uuid(team_id):
            return None
        values = data.model_dump()
        row = _write_returning(
            self.db,
            _update_sql(TEAMS_TABLE, TEAM_INPUT_COLUMNS, TEAM_COLUMNS),
            tuple(values[col] for col in TEAM_INPUT_COLUMNS) + (team_id,),
        )
        return TeamModel.model_validate(row) if row else None

    def delete(self, team_id: str) -> bool:
        if not _is_uuid(team_id):
            return False
        row = _write_returning(
            self.db, f"DELETE FROM {TEAMS_TABLE} WHERE id = %s RETURNING id", (team_id,)
        )
        return row is not None

    def list_skaters(self, team_id: str) -> list[SkaterRef]:
        if not _is_uuid(team_id):
            return []
        rows = self.db.fetchall(
            f"""
            SELECT {_columns(SKATER_COLUMNS, "s")}
            FROM {TEAMS_SKATERS_TABLE} ts
            JOIN {SKATERS_TABLE} s ON s.id = ts.skater_id
            WHERE ts.team_id = %s
            ORDER BY s.number, s.id
            """,
            (team_id,),
        )
        return [SkaterRef.model_validate(row) for row in rows]

    def add_skaters(self, team_id: str, skater_ids: Iterable[str]) -> None:
        params = [(team_id, skater_id) for skater_id in skater_ids]
        if not params:
            return
        with self.db.transaction() as conn:
            with conn.cursor() as cur:
                cur.executemany(
                    f"""
                    INSERT INTO {TEAMS_SKATERS_TABLE} (team_id, skater_id)
                    VALUES (%s, %s)
                    ON CONFLICT (team_id, skater_id) DO NOTHING
                    """,
                    params,
                )

    def remove_skater(self, team_id: str, skater_id: str) -> bool:
        if not (_is_uuid(team_id) and _is_uuid(skater_id)):
            return False
        row = _write_returning(
            self.db,
            f"""
            DELETE FROM {TEAMS_SKATERS_TABLE}
            WHERE team_id = %s AND skater_id = %s
            RETURNING skater_id
            """,
            (team_id, skater_id),
        )
        return row is not None

    def list_for_skater(self, skater_id: str) -> list[TeamModel]:
        if not _is_uuid(skater_id):
            return []
        rows = self.db.fetchall(
            f"""
            SELECT {_columns(TEAM_COLUMNS, "t")}
            FROM {TEAMS_SKATERS_TABLE} ts
            JOIN {TEAMS_TABLE} t ON t.id = ts.team_id
            WHERE ts.skater_id = %s
            ORDER BY t.name, t.id
            """,
            (skater_id,),
        )
        return [TeamModel.model_validate(row) for row in rows]


class PostgresRosterRepository(RosterRepository):
    """PostgreSQL implementation of game rosters with their jammers and lines."""

    def __init__(self, db: "PostgresDB"):
        self.db = db

    def _assemble(self, rows: list[dict[str, Any]]) -> list[RosterModel]:
        roster_ids = [str(row["id"]) for row in rows]
        if not roster_ids:
            return []

        jammers: dict[str, list[dict[str, Any]]] = {ident: [] for ident in roster_ids}
        for row in self.db.fetchall(
            f"""
            SELECT rj.game_roster_id, {_columns(SKATER_COLUMNS, "s")}
            FROM {ROSTER_JAMMERS_TABLE} rj
            JOIN {SKATERS_TABLE} s ON s.id = rj.skater_id
            WHERE rj.game_roster_id = ANY(%s::uuid[])
            ORDER BY s.number, s.id
            """,
            (roster_ids,),
        ):
            jammers[str(row["game_roster_id"])].append(row)

        lines: dict[str, list[dict[str, Any]]] = {ident: [] for ident in roster_ids}
        for row in self.db.fetchall(
            f"""
            SELECT game_roster_id, id, name
            FROM {ROSTER_LINES_TABLE}
            WHERE game_roster_id = ANY(%s::uuid[])
            ORDER BY name, id
            """,
            (roster_ids,),
        ):
            lines[str(row["game_roster_id"])].append(row)

        return [
            RosterModel.model_validate(
                {
                    **row,
                    "jammers": [SkaterRef.model_validate(j) for j in jammers[str(row["id"])]],
                    "lines": [LineRef.model_validate(line) for line in lines[str(row["id"])]],
                }
            )
            for row in rows
        ]

    def list_for_game(self, game_id: str) -> list[RosterModel]:
        if not _is_uuid(game_id):
            return []
        rows = self.db.fetchall(
            f"SELECT id, game_id, team_id FROM {GAME_ROSTERS_TABLE} WHERE game_id = %s ORDER BY id",
            (game_id,),
        )
        return self._assemble(rows)

    def save(self, game_id: str, team_id: str, data: RosterInput) -> RosterModel:
        with self.db.transaction() as conn:
            roster_id = conn.execute(
                f"""
                INSERT INTO {GAME_ROSTERS_TABLE} (game_id, team_id)
                VALUES (%s, %s)
                ON CONFLICT (game_id, team_id) DO UPDATE SET team_id = EXCLUDED.team_id
                RETURNING id
                """,
                (game_id, team_id),
            ).fetchone()["id"]

            conn.execute(
                f"DELETE FROM {ROSTER_JAMMERS_TABLE} WHERE game_roster_id = %s", (roster_id,)
            )
            if data.jammer_ids:
                with conn.cursor() as cur:
                    cur.executemany(
                        f"INSERT INTO {ROSTER_JAMMERS_TABLE} (game_roster_id, skater_id) VALUES (%s, %s)",
                        [(roster_id, skater_id) for skater_id in data.jammer_ids],
                    )

            # Lines that keep their name keep their ID, so recorded jams still resolve.
            conn.execute(
                f"""
                DELETE FROM {ROSTER_LINES_TABLE}
                WHERE game_roster_id = %s AND NOT (name = ANY(%s::text[]))
                """,
                (roster_id, data.line_names),
            )
            conn.execute(
                f"""
                INSERT INTO {ROSTER_LINES_TABLE} (game_roster_id, name)
                SELECT %s, new_name
                FROM unnest(%s::text[]) AS new_name
                WHERE NOT EXISTS (
                    SELECT 1 FROM {ROSTER_LINES_TABLE}
                    WHERE game_roster_id = %s AND name = new_name
                )
                """,
                (roster_id, data.line_names, roster_id),
            )

        logger.info(
            "Saved roster for team %s in game %s (%d jammers, %d lines)",
            team_id,
            game_id,
            len(data.jammer_ids),
            len(data.line_names),
        )
        rows = self.db.fetchall(
            f"SELECT id, game_id, team_id FROM {GAME_ROSTERS_TABLE} WHERE id = %s",
            (roster_id,),
        )
        return self._assemble(rows)[0]

    def delete(self, game_id: str, team_id: str) -> bool:
        if not (_is_uuid(game_id) and _is_uuid(team_id)):
            return False
        row = _write_returning(
            self.db,
            f"DELETE FROM {GAME_ROSTERS_TABLE} WHERE game_id = %s AND team_id = %s RETURNING id",
            (game_id, team_id),
        )
        return row is not None
