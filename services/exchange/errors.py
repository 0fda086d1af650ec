class ExchangeError(Exception):
    """Base class for failures talking to the rates API."""


class NetworkError(ExchangeError):
    """No connectivity, DNS failure or timeout."""


class ProtocolError(ExchangeError):
    """The API answered with a non-2xx status."""

    def __init__(self, status: int, message: str):
        super().__init__(f"{status} - {message}")
        self.status = status
        self.message = message


class MalformedResponseError(ExchangeError):
    """The body could not be decoded or has wrongly typed fields."""


class EmptyResponseError(ExchangeError):
    """The request succeeded but carried no rates."""
