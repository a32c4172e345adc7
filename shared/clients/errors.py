"""Typed errors raised at the boundary between the bridge and remote backends."""


class ClientRequestError(Exception):
    """A backend answered with a non-success status code."""

    def __init__(self, url: str, status_code: int, body: str = "") -> None:
        super().__init__(f"Request to {url} failed with status {status_code}")
        self.url = url
        self.status_code = status_code
        self.body = body


class MalformedResponseError(ValueError):
    """A backend answered 2xx but the JSON body does not have the expected shape."""

    def __init__(self, engine: str, detail: str) -> None:
        super().__init__(f"Malformed response from {engine}: {detail}")
        self.engine = engine
        self.detail = detail
