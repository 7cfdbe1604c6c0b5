"""
Token Cache
Single-slot async cell holding the current bearer token.
"""
import asyncio
from typing import Awaitable, Callable, Tuple, TypeVar

from ausms.domain.models.sms import Token

T = TypeVar("T")


class TokenCache:
    """
    Holds exactly one Token and serializes every update to it.

    modify() is the only way to change the stored token. While one caller is
    inside modify() (possibly awaiting a refresh), every other caller waits,
    so at most one refresh is in flight and nobody sees a half-updated value.
    """

    def __init__(self, initial: Token):
        self._token = initial
        self._lock = asyncio.Lock()

    @property
    def current(self) -> Token:
        """Snapshot of the stored token."""
        return self._token

    async def modify(self, fn: Callable[[Token], Awaitable[Tuple[Token, T]]]) -> T:
        """
        Atomically replace the token.

        Args:
            fn: Receives the current token, returns (new_token, result)

        Returns:
            The result produced by fn

        If fn raises, the stored token is left as it was.
        """
        async with self._lock:
            new_token, result = await fn(self._token)
            self._token = new_token
            return result
