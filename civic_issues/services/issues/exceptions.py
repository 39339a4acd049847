class IssueError(Exception):
    """Base class for issue store and lifecycle errors."""

    status_code: int = 400
    code: str = "bad_request"

    def __init__(self, message: str, issue_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.issue_id = issue_id


class IssueNotFoundError(IssueError):
    status_code = 404
    code = "not_found"

    def __init__(self, issue_id: str):
        super().__init__(f"Issue {issue_id} not found", issue_id)


class InvalidStatusError(IssueError):
    def __init__(self, status: object):
        super().__init__(f"Invalid status: {status!r}")
        self.status = status


class InvalidUpdateError(IssueError):
    pass


class StatusTransitionError(IssueError):
    status_code = 409
    code = "conflict"

    def __init__(self, issue_id: str, current: str, requested: str):
        super().__init__(f"Cannot move issue from {current} to {requested}", issue_id)
        self.current = current
        self.requested = requested


class StoreUnavailableError(IssueError):
    """The store could not be reached at all."""

    status_code = 503
    code = "service_unavailable"


class IssueWriteError(IssueError):
    """The store rejected or failed a create or update. Not retried."""

    status_code = 503
    code = "write_failed"


class IssueReadError(IssueError):
    """A read or a subscription delivery failed."""

    status_code = 503
    code = "read_failed"
