"""
Error taxonomy shared by the store, the casting engine and the query layer.

Every error is terminal for the caller: it describes a problem with the
request, never a transient fault. The HTTP layer renders them as
``{"detail": message, "code": code}`` with ``status_code``.
"""


class ElectionError(Exception):
    status_code = 400
    code = "election_error"
    default_message = "Election request failed."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(ElectionError):
    status_code = 404
    code = "not_found"
    default_message = "Election not found."


class InvalidCredentials(ElectionError):
    status_code = 400
    code = "invalid_credentials"
    default_message = "Invalid voter ID or voter key."


class AlreadyVoted(ElectionError):
    status_code = 409
    code = "already_voted"
    default_message = "This voter has already voted in this election."


class InvalidNominee(ElectionError):
    status_code = 400
    code = "invalid_nominee"
    default_message = "Invalid nominee selected."


class Forbidden(ElectionError):
    status_code = 403
    code = "forbidden"
    default_message = "Not authorized to modify this election."


class ValidationError(ElectionError):
    status_code = 422
    code = "validation_error"
    default_message = "Invalid election data."


class ConflictError(ElectionError):
    status_code = 409
    code = "conflict"
    default_message = "Could not generate unique election credentials."


class ElectionClosed(ElectionError):
    status_code = 409
    code = "election_closed"
    default_message = "This election is not open for voting."
