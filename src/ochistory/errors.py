from __future__ import annotations


class OCHistoryError(Exception):
    pass


class TransportError(OCHistoryError):
    pass


class RemoteError(OCHistoryError):
    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"bad status: {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ConfigurationError(OCHistoryError):
    pass


class SinkError(OCHistoryError):
    def __init__(self, target: str, message: str) -> None:
        super().__init__(f"{target}: {message}")
        self.target = target
