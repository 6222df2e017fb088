import pytest

from factories import make_session
from poker_ledger.core.exceptions import SessionNotFoundError, StorageError
from poker_ledger.core.store import CloudSessionStore, LocalSessionStore


def test_local_store_round_trip(tmp_path):
    store = LocalSessionStore(tmp_path / "ledger.json")
    assert store.load() == []

    first = make_session("2026-10-01T20:00:00", [("Dat", 2000, 5000)], notes="raw text")
    second = make_session("2026-10-02T20:00:00", [("Tung", 100, 50)])
    store.add(first)
    sessions = store.add(second)

    # newest insertion first
    assert [s.id for s in sessions] == [second.id, first.id]
    assert sessions[1] == first


def test_local_store_update_and_remove(tmp_path):
    store = LocalSessionStore(tmp_path / "ledger.json")
    session = make_session("2026-10-01T20:00:00", [("Dat", 2000, 5000)])
    store.add(session)

    session.location = "Casino"
    assert store.update(session)[0].location == "Casino"
    assert store.remove(session.id) == []


def test_local_store_unknown_id(tmp_path):
    store = LocalSessionStore(tmp_path / "ledger.json")
    with pytest.raises(SessionNotFoundError):
        store.remove("missing")
    with pytest.raises(SessionNotFoundError):
        store.update(make_session("2026-10-01T20:00:00", [("Dat", 1, 2)], session_id="missing"))


def test_local_store_corrupt_file_is_storage_error(tmp_path):
    path = tmp_path / "ledger.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        LocalSessionStore(path).load()


def test_local_store_record_shape(tmp_path):
    path = tmp_path / "ledger.json"
    store = LocalSessionStore(path)
    store.add(make_session("2026-10-01T20:00:00", [("Dat", 2000, 5000)], session_id="abc"))

    import json

    record = json.loads(path.read_text(encoding="utf-8"))["sessions"][0]
    assert record == {
        "id": "abc",
        "date": "2026-10-01T20:00:00.000Z",
        "location": "Home Game",
        "durationMinutes": 180,
        "players": [{"name": "Dat", "buyIn": 2000, "cashOut": 5000}],
    }


def test_local_store_avatars(tmp_path):
    store = LocalSessionStore(tmp_path / "ledger.json")
    assert store.load_avatars() == {}
    assert store.set_avatar("Dat", "🤠") == {"Dat": "🤠"}
    assert store.set_avatar("Dat", "🤖") == {"Dat": "🤖"}


def test_cloud_store_partitions_by_sync_key(db):
    ours = CloudSessionStore(db, "group-a")
    theirs = CloudSessionStore(db, "group-b")

    ours.add(make_session("2026-10-01T20:00:00", [("Dat", 2000, 5000)]))
    theirs.add(make_session("2026-10-02T20:00:00", [("Tung", 1, 2)]))

    assert [p.name for s in ours.load() for p in s.players] == ["Dat"]
    assert [p.name for s in theirs.load() for p in s.players] == ["Tung"]


def test_cloud_store_update_remove(db):
    store = CloudSessionStore(db, "group-a")
    session = make_session("2026-10-01T20:00:00", [("Dat", 2000, 5000)])
    store.add(session)

    session.players[0].cash_out = 6000
    updated = store.update(session)
    assert updated[0].players[0].cash_out == 6000

    with pytest.raises(SessionNotFoundError):
        CloudSessionStore(db, "group-b").remove(session.id)

    assert store.remove(session.id) == []


def test_cloud_store_duplicate_id_rolls_back(db):
    store = CloudSessionStore(db, "group-a")
    session = make_session("2026-10-01T20:00:00", [("Dat", 2000, 5000)])
    store.add(session)
    with pytest.raises(StorageError):
        store.add(session)
    assert len(store.load()) == 1


def test_cloud_store_avatars(db):
    store = CloudSessionStore(db, "group-a")
    store.set_avatar("Dat", "🤠")
    assert store.set_avatar("Dat", "🦊") == {"Dat": "🦊"}
    assert CloudSessionStore(db, "group-b").load_avatars() == {}


@pytest.mark.parametrize(
    "content",
    [
        '{"sessions": [{"id": "x", "location": "a", "players": []}]}',
        '{"sessions": [{"id": "x", "date": "last friday", "location": "a", "players": []}]}',
        '{"sessions": ["x"]}',
        '{"sessions": {"id": "x"}}',
        '{"avatars": []}',
        "[]",
        "null",
    ],
)
def test_local_store_malformed_contents_are_storage_errors(tmp_path, content):
    path = tmp_path / "ledger.json"
    path.write_text(content, encoding="utf-8")
    store = LocalSessionStore(path)
    with pytest.raises(StorageError):
        store.load()
    with pytest.raises(StorageError):
        store.add(make_session("2026-10-01T20:00:00", [("Dat", 1, 2)]))


def test_cloud_store_malformed_row_is_storage_error(db):
    from poker_ledger.models.db import CloudSession

    db.add(CloudSession(id="x", user_key="group-a", data={"id": "x", "location": "a", "players": []}))
    db.commit()
    with pytest.raises(StorageError):
        CloudSessionStore(db, "group-a").load()
    assert CloudSessionStore(db, "group-b").load() == []


def test_cloud_store_lookup_failures_are_storage_errors(db):
    from poker_ledger.models.db import Base

    store = CloudSessionStore(db, "group-a")
    session = make_session("2026-10-01T20:00:00", [("Dat", 2000, 5000)])
    Base.metadata.drop_all(bind=db.get_bind())

    with pytest.raises(StorageError):
        store.update(session)
    with pytest.raises(StorageError):
        store.remove(session.id)
    with pytest.raises(StorageError):
        store.set_avatar("Dat", "🤠")
