"""Client configuration exceptions.

These are raised while discovering, building or validating clients.
They are never raised by dispatch operations.
"""


class ClientConfigurationError(Exception):
    """Raised when a client cannot be discovered, instantiated or configured.

    Attributes:
        client_name: Name of the client (or plugin) that failed
        message: Human-readable error description
    """

    def __init__(self, client_name: str, message: str) -> None:
        self.client_name = client_name
        self.message = message
        super().__init__(f"Client '{client_name}' failed: {message}")
