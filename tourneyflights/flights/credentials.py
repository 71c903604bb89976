from typing import Sequence

from ..errors import NoCredentialsError


class CredentialRotator:
    """Ordered SerpAPI keys with a forward-only cursor.

    The cursor only moves on advance() and only back to the first key on reset(); it never wraps past the
    last key, so callers know when every key has been throttled. One instance per session, not thread-safe.
    """

    def __init__(self, keys: Sequence[str]):
        self._keys = tuple(keys)
        self._index = 0

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def keys(self) -> tuple[str, ...]:
        return self._keys

    @property
    def index(self) -> int:
        return self._index

    def current(self) -> str:
        if not self._keys:
            raise NoCredentialsError("No provider API keys configured")
        return self._keys[self._index]

    def advance(self) -> bool:
        if self._index + 1 >= len(self._keys):
            return False
        self._index += 1
        return True

    def reset(self) -> None:
        self._index = 0

    @staticmethod
    def mask(key: str) -> str:
        if len(key) <= 8:
            return '****'
        return f"{key[:4]}...{key[-4:]}"

    def describe_current(self) -> str:
        return f"key {self._index + 1}/{len(self._keys)} ({self.mask(self.current())})"
