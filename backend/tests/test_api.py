import math

from poker_ledger.core.deps import get_rank_ladder, get_store
from poker_ledger.core.exceptions import StorageError
from poker_ledger.main import app
from poker_ledger.models.entities import Rank
from poker_ledger.services.stats_service import RankLadder

SYNC = {"X-Sync-Key": "friday-game"}


def _session_payload(date="2026-10-02T20:00:00Z", players=None, **extra):
    payload = {
        "date": date,
        "location": "Dat's place",
        "duration_minutes": 240,
        "players": players
        if players is not None
        else [
            {"name": "Dat", "buy_in": 2000, "cash_out": 5000},
            {"name": "Tung", "buy_in": 10000, "cash_out": 7000},
        ],
    }
    payload.update(extra)
    return payload


def test_root_and_health(client):
    assert client.get("/").json()["ok"] is True
    assert client.get("/health").json() == {"status": "ok"}


def test_create_list_update_delete_local(client, local_store_path):
    r = client.post("/api/sessions", json=_session_payload())
    assert r.status_code == 201
    sessions = r.json()
    assert len(sessions) == 1
    created = sessions[0]
    assert created["overview"]["total_pot"] == 12000
    assert created["overview"]["top_winner"] == "Dat"
    assert local_store_path.exists()

    sid = created["id"]
    r = client.put(f"/api/sessions/{sid}", json=_session_payload(location="Casino"))
    assert r.status_code == 200
    assert r.json()[0]["location"] == "Casino"
    assert r.json()[0]["id"] == sid

    assert client.get(f"/api/sessions/{sid}").json()["location"] == "Casino"

    r = client.delete(f"/api/sessions/{sid}")
    assert r.status_code == 200
    assert r.json() == []


def test_sync_key_uses_cloud_partition(client, local_store_path):
    client.post("/api/sessions", json=_session_payload(), headers=SYNC)
    assert not local_store_path.exists()

    assert len(client.get("/api/sessions", headers=SYNC).json()) == 1
    assert client.get("/api/sessions", headers={"X-Sync-Key": "other"}).json() == []
    assert client.get("/api/sessions").json() == []


def test_blank_player_rows_dropped_and_empty_session_rejected(client):
    players = [{"name": "  ", "buy_in": 100, "cash_out": 0}, {"name": " Dat ", "buy_in": 1, "cash_out": 2}]
    r = client.post("/api/sessions", json=_session_payload(players=players))
    assert r.status_code == 201
    assert [p["name"] for p in r.json()[0]["players"]] == ["Dat"]

    r = client.post("/api/sessions", json=_session_payload(players=[{"name": "", "buy_in": 1, "cash_out": 1}]))
    assert r.status_code == 400


def test_unknown_session_is_404(client):
    assert client.get("/api/sessions/nope").status_code == 404
    assert client.delete("/api/sessions/nope").status_code == 404
    assert client.put("/api/sessions/nope", json=_session_payload()).status_code == 404


def test_player_stats_ranked(client):
    client.post("/api/sessions", json=_session_payload(), headers=SYNC)
    client.post(
        "/api/sessions",
        json=_session_payload(
            date="2026-10-03T20:00:00Z",
            players=[{"name": "Tung", "buy_in": 1000, "cash_out": 2_500_000}],
        ),
        headers=SYNC,
    )

    stats = client.get("/api/stats/players", headers=SYNC).json()
    assert [s["name"] for s in stats] == ["Tung", "Dat"]
    tung = stats[0]
    assert tung["total_profit"] == tung["total_cash_out"] - tung["total_buy_in"]
    assert tung["sessions_played"] == 2
    assert tung["rank"]["name"] == "Bạc"
    assert stats[1]["rank"]["name"] == "Đồng"


def test_custom_period_needs_range(client):
    assert client.get("/api/stats/players", params={"period": "custom"}).status_code == 400
    r = client.get(
        "/api/stats/players",
        params={"period": "custom", "start": "2026-10-01", "end": "2026-10-02"},
    )
    assert r.status_code == 200


def test_player_detail_and_missing_player(client):
    client.post("/api/sessions", json=_session_payload())
    detail = client.get("/api/stats/players/Dat").json()
    assert detail["stat"]["total_profit"] == 3000
    assert [h["cumulative"] for h in detail["history"]] == [3000]
    assert client.get("/api/stats/players/Nobody").status_code == 404


def test_ranks_and_rank_lookup(client):
    ranks = client.get("/api/stats/ranks").json()
    assert len(ranks) == 9
    assert ranks[0]["threshold"] is None
    assert client.get("/api/stats/rank", params={"profit": 5_000_000}).json()["name"] == "Vàng"


def test_substituted_ladder(client):
    app.dependency_overrides[get_rank_ladder] = lambda: RankLadder(
        [Rank("Fish", -math.inf, "gray", "🐟"), Rank("Shark", 1, "blue", "🦈")]
    )
    client.post("/api/sessions", json=_session_payload())
    stats = client.get("/api/stats/players").json()
    assert [s["rank"]["name"] for s in stats] == ["Shark", "Fish"]


def test_summary(client):
    client.post("/api/sessions", json=_session_payload())
    summary = client.get("/api/stats/summary").json()
    assert summary["total_sessions"] == 1
    assert summary["total_volume"] == 12000
    assert summary["total_discrepancy"] == 0
    assert summary["win_loss"] == {"winners": 1, "losers": 1, "break_even": 0}
    assert [row["name"] for row in summary["leaderboard"]] == ["Dat", "Tung"]


def test_quick_parse_preview(client):
    r = client.post("/api/quick/parse", json={"text": "A buy 6000 2000\nB buy 4000 7500\nnoise"})
    body = r.json()
    assert [e["name"] for e in body["entries"]] == ["A", "B"]
    assert body["totals"] == {"sum_buy_in": 10000, "sum_cash_out": 9500, "discrepancy": -500}
    assert body["can_save"] is True


def test_quick_session_saves_despite_discrepancy(client):
    text = "A buy 6000 2000\nB buy 4000 7500"
    r = client.post("/api/quick/sessions", json={"text": text, "location": "Club"}, headers=SYNC)
    assert r.status_code == 201
    body = r.json()
    assert body["totals"]["discrepancy"] == -500
    assert body["session"]["notes"] == text
    assert body["session"]["duration_minutes"] == 180
    assert len(client.get("/api/sessions", headers=SYNC).json()) == 1


def test_quick_session_empty_blocks_save(client):
    preview = client.post("/api/quick/parse", json={"text": "nothing to see"}).json()
    assert preview["entries"] == []
    assert preview["can_save"] is False

    r = client.post("/api/quick/sessions", json={"text": "nothing to see"})
    assert r.status_code == 422
    assert client.get("/api/sessions").json() == []


def test_avatars(client):
    r = client.get("/api/avatars", headers=SYNC)
    assert len(r.json()["catalogue"]) == 16
    assert r.json()["avatars"] == {}

    assert client.put("/api/avatars/Dat", json={"avatar": "🤠"}, headers=SYNC).status_code == 200
    assert client.put("/api/avatars/Dat", json={"avatar": "X"}, headers=SYNC).status_code == 400

    client.post("/api/sessions", json=_session_payload(), headers=SYNC)
    stats = client.get("/api/stats/players", headers=SYNC).json()
    assert {s["name"]: s["avatar"] for s in stats} == {"Dat": "🤠", "Tung": None}


class _BrokenStore:
    def load(self):
        raise StorageError("backend down")

    def add(self, session):
        raise StorageError("backend down")

    def update(self, session):
        raise StorageError("backend down")

    def remove(self, session_id):
        raise StorageError("backend down")

    def load_avatars(self):
        raise StorageError("backend down")

    def set_avatar(self, name, avatar):
        raise StorageError("backend down")


def test_storage_failure_reads_as_empty_and_writes_fail(client):
    app.dependency_overrides[get_store] = lambda: _BrokenStore()

    assert client.get("/api/stats/players").json() == []
    assert client.get("/api/stats/summary").json()["total_sessions"] == 0
    assert client.post("/api/sessions", json=_session_payload()).status_code == 503
    assert client.get("/api/sessions").status_code == 503


def test_player_names_for_autocomplete(client):
    client.post("/api/sessions", json=_session_payload())
    client.post(
        "/api/sessions",
        json=_session_payload(players=[{"name": "An", "buy_in": 1, "cash_out": 1}]),
    )
    assert client.get("/api/sessions/players/names").json() == ["An", "Dat", "Tung"]


def test_non_finite_amounts_rejected(client, local_store_path):
    for amount in ("NaN", "inf", "-Infinity"):
        players = [{"name": "Dat", "buy_in": amount, "cash_out": 100}]
        r = client.post("/api/sessions", json=_session_payload(players=players))
        assert r.status_code == 422
        players = [{"name": "Dat", "buy_in": 100, "cash_out": amount}]
        r = client.post("/api/sessions", json=_session_payload(players=players))
        assert r.status_code == 422
    assert not local_store_path.exists()


def test_malformed_local_record_reads_as_empty(client, local_store_path):
    local_store_path.write_text(
        '{"sessions": [{"id": "x", "location": "a", "players": []}]}', encoding="utf-8"
    )

    assert client.get("/api/stats/players").status_code == 200
    assert client.get("/api/stats/players").json() == []
    assert client.get("/api/stats/summary").json()["total_sessions"] == 0
    assert client.get("/api/sessions").status_code == 503
    assert client.post("/api/sessions", json=_session_payload()).status_code == 503
