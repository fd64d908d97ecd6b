"""
API tests for the Derby Stats API.

Routers run against in-memory repositories through a dependency override,
so these tests need no database. The lifespan is not entered, which keeps
the connection pool closed.
"""

from __future__ import annotations

import psycopg
import pytest
from starlette.testclient import TestClient

from conftest import GAME_ID
from derby_stats.api.dependencies import get_repositories
from derby_stats.api.main import app


@pytest.fixture
def client(repos):
    app.dependency_overrides[get_repositories] = lambda: repos
    yield TestClient(app)
    app.dependency_overrides.clear()


def assert_error(response, status_code: int, code: str):
    assert response.status_code == status_code
    data = response.json()
    assert data["error"]["code"] == code
    assert "message" in data["error"]


class TestHealthEndpoints:
    def test_health_basic(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert "X-Process-Time" in r.headers

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert r.json()["name"] == "Derby Stats API"


class TestGamesEndpoints:
    def test_get_game(self, client):
        r = client.get(f"/api/v1/games/{GAME_ID}")
        assert r.status_code == 200
        data = r.json()
        assert data["home_team"]["name"] == "Rollin' Rebels"
        assert data["visiting_team_id"] == "t-away"

    def test_get_game_not_found(self, client):
        assert_error(client.get("/api/v1/games/missing"), 404, "NOT_FOUND")

    def test_list_jams(self, client):
        r = client.get(f"/api/v1/games/{GAME_ID}/jams")
        assert r.status_code == 200
        data = r.json()
        assert data["period"] == "all"
        assert [(jam["period"], jam["jam_number"]) for jam in data["jams"]] == [
            (1, 1), (1, 2), (1, 3), (2, 1), (2, 2),
        ]

    def test_list_jams_for_period(self, client):
        r = client.get(f"/api/v1/games/{GAME_ID}/jams", params={"period": "2"})
        assert r.status_code == 200
        assert len(r.json()["jams"]) == 2

    def test_list_jams_bad_period(self, client):
        assert_error(
            client.get(f"/api/v1/games/{GAME_ID}/jams", params={"period": "5"}),
            400,
            "VALIDATION_ERROR",
        )

    def test_get_jam(self, client):
        r = client.get(f"/api/v1/games/{GAME_ID}/jams/1/2")
        assert r.status_code == 200
        data = r.json()
        assert data["lead_team"] == "visiting"
        assert data["visiting_points"] == 12

    def test_get_missing_jam(self, client):
        assert_error(client.get(f"/api/v1/games/{GAME_ID}/jams/2/7"), 404, "NOT_FOUND")

    def test_save_jam(self, client, repos):
        r = client.put(
            f"/api/v1/games/{GAME_ID}/jams/2/3",
            json={"home_jammer_id": "s-77", "home_points": 5, "lead_team": "home"},
        )
        assert r.status_code == 200
        data = r.json()
        assert data["saved"] is True
        assert data["jam"]["jam_number"] == 3
        assert repos.jams.find(GAME_ID, 2, 3).home_points == 5

    def test_save_empty_jam_is_skipped(self, client, repos):
        r = client.put(
            f"/api/v1/games/{GAME_ID}/jams/2/4",
            json={"home_jammer_id": "", "home_points": 0, "lead_team": None},
        )
        assert r.status_code == 200
        assert r.json() == {"saved": False, "jam": None}
        assert repos.jams.find(GAME_ID, 2, 4) is None

    def test_save_jam_rejects_negative_points(self, client):
        r = client.put(f"/api/v1/games/{GAME_ID}/jams/1/1", json={"home_points": -2})
        assert r.status_code == 422

    def test_save_jam_rejects_bad_period(self, client):
        r = client.put(f"/api/v1/games/{GAME_ID}/jams/3/1", json={"home_points": 2})
        assert r.status_code == 422


class TestStatsEndpoints:
    def test_stats(self, client):
        r = client.get(f"/api/v1/games/{GAME_ID}/stats")
        assert r.status_code == 200
        data = r.json()
        assert data["side"] == "home"
        assert data["period"] == "all"
        assert data["total_jams"] == 5
        assert [row["skater_number"] for row in data["jammers"]] == ["10", "2"]
        assert data["jammers"][0]["point_differential"] == -4
        assert data["timeline"][-1] == {
            "label": "P2 J2",
            "period": 2,
            "jam_number": 2,
            "home_score": 15,
            "visiting_score": 15,
        }
        assert data["has_data"] is True

    def test_stats_for_visiting_period(self, client):
        r = client.get(f"/api/v1/games/{GAME_ID}/stats", params={"side": "visiting", "period": "1"})
        assert r.status_code == 200
        data = r.json()
        assert data["period"] == 1
        assert data["jammers"][0]["jam_count"] == 2
        assert [point["label"] for point in data["timeline"]] == ["J1", "J2", "J3"]

    def test_stats_bad_side(self, client):
        r = client.get(f"/api/v1/games/{GAME_ID}/stats", params={"side": "away"})
        assert r.status_code == 422

    def test_stats_bad_period(self, client):
        assert_error(
            client.get(f"/api/v1/games/{GAME_ID}/stats", params={"period": "ot"}),
            400,
            "VALIDATION_ERROR",
        )

    def test_stats_unknown_game(self, client):
        assert_error(client.get("/api/v1/games/missing/stats"), 404, "NOT_FOUND")

    def test_charts(self, client):
        r = client.get(f"/api/v1/games/{GAME_ID}/stats/charts", params={"side": "visiting"})
        assert r.status_code == 200
        data = r.json()
        assert data["jammers"]["labels"] == ["#31 Visiting Star"]
        assert data["lines"]["labels"] == ["Visitors"]
        assert data["score_evolution"]["datasets"][1]["label"] == "Derby Dames"


def test_database_errors_map_to_503(repos):
    def broken_repositories():
        raise psycopg.OperationalError("connection refused")

    app.dependency_overrides[get_repositories] = broken_repositories
    try:
        r = TestClient(app).get(f"/api/v1/games/{GAME_ID}/stats")
    finally:
        app.dependency_overrides.clear()

    assert_error(r, 503, "SERVICE_UNAVAILABLE")


def test_missing_reference_in_write_maps_to_400(client, repos, monkeypatch):
    def team_still_used(team_id):
        raise psycopg.errors.ForeignKeyViolation(
            'update or delete on table "teams" violates foreign key constraint on table "games"'
        )

    monkeypatch.setattr(repos.teams, "delete", team_still_used)

    assert_error(client.delete("/api/v1/teams/t-home"), 400, "VALIDATION_ERROR")


def test_malformed_value_in_write_maps_to_400(client, repos, monkeypatch):
    def bad_uuid(jam):
        raise psycopg.errors.InvalidTextRepresentation('invalid input syntax for type uuid: "s-77"')

    monkeypatch.setattr(repos.jams, "upsert", bad_uuid)

    r = client.put(f"/api/v1/games/{GAME_ID}/jams/2/3", json={"home_jammer_id": "s-77"})
    assert_error(r, 400, "VALIDATION_ERROR")


class TestJamEntryReferences:
    def test_jammer_off_roster_is_rejected(self, client, repos):
        r = client.put(
            f"/api/v1/games/{GAME_ID}/jams/2/3",
            json={"home_jammer_id": "not-a-uuid", "home_points": 4},
        )
        assert_error(r, 400, "VALIDATION_ERROR")
        assert repos.jams.find(GAME_ID, 2, 3) is None

    def test_line_from_other_side_is_rejected(self, client):
        r = client.put(f"/api/v1/games/{GAME_ID}/jams/2/3", json={"visiting_line_id": "l-a"})
        assert_error(r, 400, "VALIDATION_ERROR")

    def test_unknown_game(self, client):
        r = client.put("/api/v1/games/missing/jams/1/1", json={"home_points": 1})
        assert_error(r, 404, "NOT_FOUND")


class TestTeamEndpoints:
    def test_list_teams(self, client):
        r = client.get("/api/v1/teams")
        assert r.status_code == 200
        assert [team["name"] for team in r.json()["teams"]] == [
            "Bay Bombers", "Derby Dames", "Rollin' Rebels",
        ]

    def test_team_crud(self, client):
        r = client.post("/api/v1/teams", json={"name": "Night Owls", "light_color": "#fff"})
        assert r.status_code == 201
        team_id = r.json()["id"]

        r = client.put(f"/api/v1/teams/{team_id}", json={"name": "Night Owls", "city": "Portland"})
        assert r.status_code == 200
        assert r.json()["city"] == "Portland"

        assert client.delete(f"/api/v1/teams/{team_id}").status_code == 204
        assert_error(client.get(f"/api/v1/teams/{team_id}"), 404, "NOT_FOUND")

    def test_blank_team_name(self, client):
        assert client.post("/api/v1/teams", json={"name": " "}).status_code == 422

    def test_get_team_with_skaters(self, client):
        r = client.get("/api/v1/teams/t-away")
        assert r.status_code == 200
        data = r.json()
        assert data["name"] == "Derby Dames"
        assert [skater["id"] for skater in data["skaters"]] == ["s-v1"]

    def test_membership(self, client):
        r = client.post("/api/v1/teams/t-other/skaters", json={"skater_ids": ["s-2", "s-5"]})
        assert r.status_code == 200
        assert [skater["number"] for skater in r.json()["skaters"]] == ["2", "5"]

        assert client.delete("/api/v1/teams/t-other/skaters/s-2").status_code == 204
        r = client.get("/api/v1/teams/t-other/skaters")
        assert [skater["id"] for skater in r.json()["skaters"]] == ["s-5"]

        assert_error(client.delete("/api/v1/teams/t-other/skaters/s-2"), 404, "NOT_FOUND")

    def test_add_unknown_skater(self, client):
        r = client.post("/api/v1/teams/t-home/skaters", json={"skater_ids": ["ghost"]})
        assert_error(r, 404, "NOT_FOUND")
        assert r.json()["error"]["message"] == "Skater not found"


class TestSkaterEndpoints:
    def test_skater_crud(self, client):
        r = client.post("/api/v1/skaters", json={"number": "00", "name": "Double Zero"})
        assert r.status_code == 201
        skater_id = r.json()["id"]

        r = client.put(f"/api/v1/skaters/{skater_id}", json={"number": "0", "name": "Zero"})
        assert r.json() == {"id": skater_id, "number": "0", "name": "Zero"}

        assert client.delete(f"/api/v1/skaters/{skater_id}").status_code == 204
        assert_error(client.delete(f"/api/v1/skaters/{skater_id}"), 404, "NOT_FOUND")

    def test_list_skaters(self, client):
        r = client.get("/api/v1/skaters")
        assert [skater["number"] for skater in r.json()["skaters"]] == ["10", "2", "31", "5", "77"]

    def test_get_skater_with_teams(self, client):
        r = client.get("/api/v1/skaters/s-77")
        assert r.status_code == 200
        assert [team["id"] for team in r.json()["teams"]] == ["t-home"]


class TestGameManagementEndpoints:
    def test_list_games(self, client):
        r = client.get("/api/v1/games")
        assert r.status_code == 200
        assert [game["id"] for game in r.json()["games"]] == [GAME_ID]

    def test_game_crud(self, client):
        r = client.post(
            "/api/v1/games",
            json={"home_team_id": "t-other", "visiting_team_id": "t-home", "start_date": "2024-05-04T19:00:00Z"},
        )
        assert r.status_code == 201
        game = r.json()
        assert game["home_team"]["name"] == "Bay Bombers"

        r = client.put(
            f"/api/v1/games/{game['id']}",
            json={"home_team_id": "t-other", "visiting_team_id": "t-away", "location": "Rink 2"},
        )
        assert r.status_code == 200
        assert r.json()["visiting_team"]["name"] == "Derby Dames"

        assert client.delete(f"/api/v1/games/{game['id']}").status_code == 204
        assert_error(client.get(f"/api/v1/games/{game['id']}"), 404, "NOT_FOUND")

    def test_same_team_on_both_sides(self, client):
        r = client.post("/api/v1/games", json={"home_team_id": "t-home", "visiting_team_id": "t-home"})
        assert r.status_code == 422

    def test_unknown_team(self, client):
        r = client.post("/api/v1/games", json={"home_team_id": "t-home", "visiting_team_id": "ghost"})
        assert_error(r, 400, "VALIDATION_ERROR")


class TestRosterEndpoints:
    def test_list_rosters(self, client):
        r = client.get(f"/api/v1/games/{GAME_ID}/rosters")
        assert r.status_code == 200
        rosters = {roster["team_id"]: roster for roster in r.json()["rosters"]}
        assert [jammer["id"] for jammer in rosters["t-away"]["jammers"]] == ["s-v1"]
        assert [line["name"] for line in rosters["t-home"]["lines"]] == ["Alpha", "bravo", "Charlie"]

    def test_save_roster(self, client):
        r = client.put(
            f"/api/v1/games/{GAME_ID}/rosters/t-home",
            json={"jammer_ids": ["s-5"], "line_names": ["bravo", "Echo", ""]},
        )
        assert r.status_code == 200
        data = r.json()
        assert [jammer["id"] for jammer in data["jammers"]] == ["s-5"]
        lines = {line["name"]: line["id"] for line in data["lines"]}
        assert lines["bravo"] == "l-b"
        assert set(lines) == {"bravo", "Echo"}

        r = client.put(
            f"/api/v1/games/{GAME_ID}/jams/2/3",
            json={"home_jammer_id": "s-5", "home_line_id": lines["Echo"], "home_points": 4},
        )
        assert r.json()["saved"] is True

    def test_roster_for_team_not_playing(self, client):
        r = client.put(f"/api/v1/games/{GAME_ID}/rosters/t-other", json={"jammer_ids": []})
        assert_error(r, 400, "VALIDATION_ERROR")

    def test_delete_roster(self, client):
        assert client.delete(f"/api/v1/games/{GAME_ID}/rosters/t-away").status_code == 204
        assert_error(client.delete(f"/api/v1/games/{GAME_ID}/rosters/t-away"), 404, "NOT_FOUND")

    def test_rosters_of_unknown_game(self, client):
        assert_error(client.get("/api/v1/games/missing/rosters"), 404, "NOT_FOUND")
