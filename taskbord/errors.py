"""Service-layer exceptions.

Services raise these (all ValueError subclasses, so callers that only know
about ValueError still catch them). Each carries the HTTP status the
blueprints map it to via the error handler registered in create_app().
"""


class AssignmentError(ValueError):
    status_code = 400

    def __init__(self, message, **payload):
        super().__init__(message)
        self.message = message
        self.payload = payload

    def to_dict(self):
        body = {"error": self.message}
        body.update(self.payload)
        return body


class ValidationError(AssignmentError):
    """Missing/invalid fields, non-friend recipient, editing a completed task."""

    status_code = 400


class ConflictError(AssignmentError):
    """Kanban double assignment and other single-owner violations."""

    status_code = 400


class ForbiddenError(AssignmentError):
    status_code = 403

    def __init__(self, message="Forbidden", **payload):
        super().__init__(message, **payload)


class NotFoundError(AssignmentError):
    status_code = 404

    def __init__(self, resource="Resource", **payload):
        super().__init__(f"{resource} not found", **payload)


class PublishConfirmationRequired(AssignmentError):
    """Not a failure: the caller must resubmit the publish with force=true."""

    status_code = 422

    def __init__(self, count):
        super().__init__(
            f"Publishing {count} tasks at once. Send with force: true to proceed.",
            count=count,
        )
        self.count = count

    def to_dict(self):
        return {"warning": self.message, "count": self.count}
