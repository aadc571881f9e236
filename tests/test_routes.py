import pytest
from fastapi.testclient import TestClient

from ballotbox.database import connection
from ballotbox.database.connection import get_store
from ballotbox.main import app
from ballotbox.notifications import CredentialNotifier, get_notifier
from ballotbox.security import create_access_token
from ballotbox.storage import MemoryElectionStore


class RecordingNotifier(CredentialNotifier):
    def __init__(self):
        self.sent = []

    def send(self, election, voter):
        self.sent.append(voter.voter_id)


def auth(creator_id="organizer-1"):
    return {"Authorization": f"Bearer {create_access_token({'sub': creator_id})}"}


@pytest.fixture
def client():
    store = MemoryElectionStore()
    notifier = RecordingNotifier()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier
    c = TestClient(app)
    c.notifier = notifier
    yield c
    app.dependency_overrides.clear()


@pytest.fixture
def created(client):
    r = client.post("/election/create", headers=auth(), json={
        "title": "Club president",
        "description": "Yearly vote",
        "nominees": ["Alice", "Bob"],
        "voters": [{"name": "n1", "email": "a@x.com"}, {"name": "n2", "email": "b@x.com"}],
    })
    assert r.status_code == 201
    return r.json()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


def test_create_requires_token(client):
    r = client.post("/election/create", json={"title": "x", "nominees": ["a"], "voters": []})
    assert r.status_code == 401
    r = client.post("/election/create", headers={"Authorization": "Bearer junk"},
                    json={"title": "x", "nominees": ["a"], "voters": []})
    assert r.status_code == 401


def test_create_election(client, created):
    assert created["status"] == "active"
    assert created["voters_count"] == 2
    assert len(created["credentials"]) == 2
    assert created["voting_url"].endswith("/vote/" + created["voting_token"])
    assert sorted(client.notifier.sent) == sorted(c["voter_id"] for c in created["credentials"])


def test_create_rejects_empty_nominee(client):
    r = client.post("/election/create", headers=auth(), json={
        "title": "x", "nominees": ["Alice", ""], "voters": [{"name": "n", "email": "n@x.com"}],
    })
    assert r.status_code == 422
    assert r.json()["code"] == "validation_error"


def test_create_with_mixed_timezone_dates(client):
    r = client.post("/election/create", headers=auth(), json={
        "title": "Later", "nominees": ["Alice"], "voters": [{"name": "n", "email": "n@x.com"}],
        "start_date": "2030-01-01T00:00:00Z", "end_date": "2030-01-02T00:00:00",
    })
    assert r.status_code == 201
    assert r.json()["status"] == "scheduled"


def test_create_rejects_inverted_mixed_timezone_dates(client):
    r = client.post("/election/create", headers=auth(), json={
        "title": "Later", "nominees": ["Alice"], "voters": [{"name": "n", "email": "n@x.com"}],
        "start_date": "2030-01-02T00:00:00", "end_date": "2030-01-01T00:00:00+00:00",
    })
    assert r.status_code == 422
    assert r.json()["code"] == "validation_error"


def test_create_rejects_bad_email(client):
    r = client.post("/election/create", headers=auth(), json={
        "title": "x", "nominees": ["Alice"], "voters": [{"name": "n", "email": ""}],
    })
    assert r.status_code == 422


def test_full_voting_flow(client, created):
    token = created["voting_token"]
    cred = created["credentials"][0]

    r = client.get(f"/election/vote/{token}")
    assert r.status_code == 200
    ballot = r.json()
    assert [n["name"] for n in ballot["nominees"]] == ["Alice", "Bob"]
    bob = ballot["nominees"][1]["id"]

    # lower-case input is normalized before the exact comparison
    body = {"voting_token": token, "voter_id": cred["voter_id"].lower(), "voter_key": cred["voter_key"].lower()}
    r = client.post("/vote/verify", json=body)
    assert r.status_code == 200
    assert r.json()["voter"] == {"name": "n1", "voter_id": cred["voter_id"]}

    r = client.post("/vote/cast", json={**body, "nominee_id": bob})
    assert r.status_code == 200
    assert r.json()["voted_for"] == "Bob"

    r = client.post("/vote/cast", json={**body, "nominee_id": bob})
    assert r.status_code == 409
    assert r.json()["code"] == "already_voted"

    r = client.get(f"/election/results/{created['id']}")
    assert r.status_code == 200
    res = r.json()
    assert res["nominees"] == [{"name": "Alice", "vote_count": 0}, {"name": "Bob", "vote_count": 1}]
    assert res["total_voters"] == 2
    assert res["voted_count"] == 1


def test_vote_errors(client, created):
    token = created["voting_token"]
    cred = created["credentials"][0]
    nominee = client.get(f"/election/vote/{token}").json()["nominees"][0]["id"]

    r = client.post("/vote/cast", json={"voting_token": "missing", "voter_id": cred["voter_id"],
                                        "voter_key": cred["voter_key"], "nominee_id": nominee})
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"

    r = client.post("/vote/cast", json={"voting_token": token, "voter_id": cred["voter_id"],
                                        "voter_key": "000000000000", "nominee_id": nominee})
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_credentials"

    r = client.post("/vote/cast", json={"voting_token": token, "voter_id": cred["voter_id"],
                                        "voter_key": cred["voter_key"], "nominee_id": "nobody"})
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_nominee"


def test_unknown_ballot_and_results(client):
    assert client.get("/election/vote/missing").status_code == 404
    assert client.get("/election/results/missing").status_code == 404


def test_my_elections(client, created):
    r = client.get("/election/mine", headers=auth())
    assert r.status_code == 200
    rows = r.json()
    assert [row["id"] for row in rows] == [created["id"]]
    assert rows[0]["voters_count"] == 2
    assert client.get("/election/mine", headers=auth("someone-else")).json() == []


def test_close_election(client, created):
    assert client.post(f"/election/{created['id']}/close", headers=auth("intruder")).status_code == 403

    r = client.post(f"/election/{created['id']}/close", headers=auth())
    assert r.status_code == 200
    assert r.json()["status"] == "closed"

    cred = created["credentials"][0]
    r = client.post("/vote/verify", json={"voting_token": created["voting_token"],
                                          "voter_id": cred["voter_id"], "voter_key": cred["voter_key"]})
    assert r.status_code == 409
    assert r.json()["code"] == "election_closed"


def test_delete_election(client, created):
    r = client.delete(f"/election/{created['id']}", headers=auth("intruder"))
    assert r.status_code == 403
    assert r.json()["code"] == "forbidden"

    r = client.delete(f"/election/{created['id']}", headers=auth())
    assert r.status_code == 200
    assert client.get(f"/election/results/{created['id']}").status_code == 404
    assert client.delete(f"/election/{created['id']}", headers=auth()).status_code == 404


class ClosingStore(MemoryElectionStore):
    closed = False

    def close(self):
        self.closed = True


def test_shutdown_closes_store(monkeypatch):
    store = ClosingStore()
    monkeypatch.setattr(connection, "_store", store)
    with TestClient(app) as c:
        assert c.get("/health").status_code == 200
    assert store.closed
    assert connection._store is None
