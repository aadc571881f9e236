import pytest

from ballotbox.errors import NotFound
from ballotbox.ledger import cast_vote
from ballotbox.queries import public_ballot, results, summary, turnout, voting_url


def test_public_ballot_hides_roster_and_counts(store, election):
    ballot = public_ballot(store, election.voting_token)
    assert ballot["title"] == "Board"
    assert ballot["description"] == "Annual board vote"
    assert ballot["status"] == "active"
    assert ballot["nominees"] == [{"id": n.id, "name": n.name} for n in election.nominees]
    assert "voters" not in ballot
    assert all("vote_count" not in n for n in ballot["nominees"])


def test_public_ballot_unknown_token(store):
    with pytest.raises(NotFound):
        public_ballot(store, "missing")


def test_results(store, election):
    voter = election.voters[1]
    cast_vote(store, election.voting_token, voter.voter_id, voter.voter_key, election.nominees[0].id)

    res = results(store, election.id)
    assert res["nominees"] == [{"name": "Alice", "vote_count": 1}, {"name": "Bob", "vote_count": 0}]
    assert res["total_voters"] == 2
    assert res["voted_count"] == 1
    assert res["turnout"] == 0.5
    assert "voters" not in res

    with pytest.raises(NotFound):
        results(store, "missing")


def test_summary_only_lists_own_elections(store, election):
    store.create_election("Foreign", "", "creator-2", ["X"], [{"name": "z", "email": "z@x.com"}])
    rows = summary(store, "creator-1")
    assert len(rows) == 1
    row = rows[0]
    assert row["id"] == election.id
    assert row["voters_count"] == 2
    assert row["voted_count"] == 0
    assert row["voting_url"] == voting_url(election.voting_token)
    assert summary(store, "nobody") == []


def test_turnout_empty_roster():
    assert turnout(0, 0) == 0.0
    assert turnout(3, 4) == 0.75
