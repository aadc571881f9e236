# ballotbox/notifications.py
import logging

from .models.election_model import Election, Voter
from .queries import voting_url

logger = logging.getLogger(__name__)


class CredentialNotifier:
    """Delivers a voter's credential pair. Email and similar channels plug in here."""

    def send(self, election: Election, voter: Voter) -> None:
        raise NotImplementedError


class LoggingNotifier(CredentialNotifier):
    """Writes the credential block to the application log, for development."""

    def send(self, election: Election, voter: Voter) -> None:
        logger.info(
            "\n========================================\n"
            f"VOTER CREDENTIALS for {election.title}\n"
            "========================================\n"
            f"Name: {voter.name}\n"
            f"Email: {voter.email}\n"
            f"Voter ID: {voter.voter_id}\n"
            f"Voter Key: {voter.voter_key}\n"
            f"Voting URL: {voting_url(election.voting_token)}\n"
            "========================================"
        )


def notify_voters(notifier: CredentialNotifier, election: Election) -> int:
    """
    Send every voter their credentials. The election is already stored, so a
    failed delivery is logged and skipped rather than undoing it. Returns the
    number of voters notified.
    """
    sent = 0
    for voter in election.voters:
        try:
            notifier.send(election, voter)
            sent += 1
        except Exception:
            logger.exception(f"Failed to deliver credentials to {voter.email} for election {election.id}")
    return sent


_notifier: CredentialNotifier = LoggingNotifier()


def get_notifier() -> CredentialNotifier:
    """FastAPI dependency; override it to wire in a real delivery channel."""
    return _notifier
