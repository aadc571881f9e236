"""BallotBox: closed-roster elections with one-time voter credentials."""

__version__ = "0.1.0"
