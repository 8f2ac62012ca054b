"""Hex digest value type used for catalog hashes and sidecar contents."""

import binascii
import hmac
import typing as t

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema


class Hash(str):
    """Hexadecimal digest text.

    The text is stored exactly as received. Comparison against raw digest
    bytes always goes through ``digest()``; malformed text never raises from
    ``matches``, it simply compares unequal.
    """

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: t.Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls, core_schema.str_schema()
        )

    @classmethod
    def from_digest(cls, raw: bytes) -> "Hash":
        """Build a Hash from raw digest bytes (lowercase hex)."""
        return cls(raw.hex())

    def digest(self) -> bytes:
        """Decode to raw bytes.

        Raises:
            ValueError: If the text is not valid hexadecimal.
        """
        try:
            return binascii.unhexlify(self)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"Malformed hex digest {str(self)!r}: {exc}") from exc

    def matches(self, other: bytes) -> bool:
        """True when this hash decodes to exactly ``other``."""
        try:
            own = self.digest()
        except ValueError:
            return False
        if len(own) != len(other):
            return False
        return hmac.compare_digest(own, other)
