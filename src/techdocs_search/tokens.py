from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class TokenError(RuntimeError):
    pass


@dataclass(frozen=True)
class ServerToken:
    token: str


class TokenManager(Protocol):
    """Issues service tokens; raises TokenError when none can be issued."""

    def get_token(self) -> ServerToken: ...


class StaticTokenManager:
    def __init__(self, token: str) -> None:
        self._token = token

    @classmethod
    def noop(cls) -> StaticTokenManager:
        return cls("")

    def get_token(self) -> ServerToken:
        if any(char.isspace() for char in self._token):
            raise TokenError("Configured service token must not contain whitespace")
        return ServerToken(token=self._token)


def auth_headers(token: str) -> dict[str, str]:
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}
