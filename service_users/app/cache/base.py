"""
Cache capability interface for Users Service.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_json

from shared.errors import DecodeError

DEFAULT_TTL_SECONDS = 300  # 5 minutes


class Cache(ABC):
    """Key-value cache with per-entry expiration.

    Values are stored as bytes. ``set`` is best-effort and never raises;
    ``get`` raises ``NotFoundError`` for absent or expired keys,
    ``DecodeError`` for payloads that cannot be decoded and
    ``BackendIOError`` for transport failures; ``delete`` raises
    ``BackendIOError``.
    """

    def __init__(self, default_ttl: int = DEFAULT_TTL_SECONDS):
        self.default_ttl = default_ttl

    async def start(self):
        """Connect to the backend."""

    async def stop(self):
        """Release backend connections."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store ``value`` under ``key``; returns False when the write failed."""

    @abstractmethod
    async def get(self, key: str, type_: Any = None) -> Any:
        """Fetch and decode the value under ``key``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``."""

    async def health_check(self) -> bool:
        return True

    def _ttl(self, ttl: Optional[int]) -> int:
        return self.default_ttl if ttl is None else ttl

    @staticmethod
    def encode(value: Any) -> bytes:
        """Serialize a value for storage; raw bytes pass through."""
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        return to_json(value)

    @staticmethod
    def decode(key: str, data: bytes, type_: Any = None) -> Any:
        """Decode stored bytes, into ``type_`` when given."""
        try:
            if type_ is None:
                return json.loads(data)
            if not isinstance(type_, TypeAdapter):
                type_ = TypeAdapter(type_)
            return type_.validate_json(data)
        except (ValueError, PydanticValidationError) as e:
            raise DecodeError(f"failed to decode key {key}", {"key": key, "error": str(e)}) from e
