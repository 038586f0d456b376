"""Error taxonomy shared by the clients and workflows.

Clients raise these; the workflows in ``app.engines`` catch them at their
boundary and turn them into ``ActionResult`` payloads (or ``None`` for reads).
"""


class HireWiseError(Exception):
    """Base class for application errors."""


class AlreadyExistsError(HireWiseError):
    pass


class NotFoundError(HireWiseError):
    pass


class ProviderError(HireWiseError):
    """Failure reported by the identity gateway, document store or scoring client."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code


class EmailDeliveryError(HireWiseError):
    def __init__(self, status: int, body: str):
        super().__init__(f"EmailJS responded with {status}: {body}")
        self.status = status
        self.body = body
