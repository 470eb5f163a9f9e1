"""Nonces: immutable, length-typed random identifiers.

Nonces identify lobbies, games and challenges. They are immutable once
constructed, and can be converted to a self-describing binary form (a
length byte followed by content) or to URL-safe base64 text.

Nonce length is significant: nonces of different lengths are never equal,
regardless of their content bytes. `ZERO` is a zero-length nonce usable as
a non-null default; no randomly generated nonce can ever equal it.

Ordering compares content bytes as *signed* 8-bit integers. This matches
the byte ordering used by existing peers and must not be changed to an
unsigned comparison.
"""

from __future__ import annotations

import base64
import binascii
import secrets
from typing import Final

from nonce_effort.core.errors import NonceDecodeError, NonceError, NonceStateError
from nonce_effort.core.settings import settings
from nonce_effort.utils.hash import sha1_bytes

DEFAULT_NUMBER_OF_BYTES: Final[int] = 18
# So that the length byte and the content fit in 255 bytes.
MAXIMUM_NUMBER_OF_BYTES: Final[int] = 254
LENGTH_BYTE_OFFSET: Final[int] = -128

# b ^ 0x80 maps signed byte order onto unsigned byte order.
_SIGNED_ORDER: Final[bytes] = bytes(b ^ 0x80 for b in range(256))

_ToBytes = bytes | bytearray | memoryview


def to_sms_safe(text: str) -> str:
    """Convert URL-safe base64 text to the `+/` alphabet."""
    return text.replace("-", "+").replace("_", "/")


def from_sms_safe(text: str) -> str:
    """Convert `+/` alphabet base64 text back to the URL-safe alphabet."""
    return text.replace("+", "-").replace("/", "_")


def _encode_length(length: int) -> int:
    """Return the unsigned value of the signed length byte."""
    return (length + LENGTH_BYTE_OFFSET) & 0xFF


def _decode_length(length_byte: int) -> int:
    # Reverse of _encode_length for a raw unsigned byte.
    return (length_byte - LENGTH_BYTE_OFFSET) & 0xFF


def _check_length(length: int, *, minimum: int = 1) -> None:
    if not isinstance(length, int) or isinstance(length, bool):
        raise NonceError(f"Nonce length must be an integer, got {type(length).__name__}")
    if not minimum <= length <= MAXIMUM_NUMBER_OF_BYTES:
        raise NonceError(
            f"Nonce length must be between {minimum} and {MAXIMUM_NUMBER_OF_BYTES}, got {length}"
        )


def decode_base64(text: str) -> bytes:
    """Decode URL-safe base64, accepting omitted padding.

    Raises:
        NonceDecodeError: If `text` is not valid base64.
    """
    padding = "=" * (-len(text) % 4)
    try:
        return base64.b64decode(text + padding, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as err:
        raise NonceDecodeError(f"Invalid base64 nonce encoding: {err}") from err


def _encode_text(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii")


class Nonce:
    """An immutable nonce value.

    Use the class methods to construct nonces; calling `Nonce(data)`
    directly wraps raw content bytes (0 to 254 of them) without drawing
    any randomness.
    """

    __slots__ = ("_bytes", "_text")

    def __init__(self, data: _ToBytes = b"") -> None:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            # bytes(18) would silently build 18 zero bytes; use Nonce.random(18).
            raise TypeError(
                f"Nonce content must be a bytes-like buffer, got {type(data).__name__}"
            )
        content = bytes(data)
        _check_length(len(content), minimum=0)
        self._bytes = content
        self._text: str | None = None

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def random(cls, length: int | None = None) -> Nonce:
        """Return a nonce of `length` bytes drawn from a secure random source.

        Args:
            length: Number of content bytes. Defaults to the configured
                `default_nonce_bytes`.

        Raises:
            NonceError: If `length` is outside [1, 254].
        """
        if length is None:
            length = settings.default_nonce_bytes
        _check_length(length)
        return cls(secrets.token_bytes(length))

    @classmethod
    def from_string_hash(cls, text: str, length: int) -> Nonce:
        """Return a nonce derived deterministically from `text`.

        The SHA-1 digest of `text` is repeated as many times as needed to
        fill `length` bytes.
        """
        _check_length(length)
        digest = sha1_bytes(text)
        return cls(bytes(digest[i % len(digest)] for i in range(length)))

    @classmethod
    def from_binary(cls, buffer: _ToBytes, offset: int = 0) -> Nonce:
        """Decode a nonce previously written by `write_binary`.

        Raises:
            NonceDecodeError: If the buffer is too short for the declared
                length, or the length byte is out of range.
        """
        view = memoryview(buffer).cast("B")
        if offset < 0 or offset >= len(view):
            raise NonceDecodeError(f"No nonce length byte at offset {offset}")
        length = _decode_length(view[offset])
        if length > MAXIMUM_NUMBER_OF_BYTES:
            raise NonceDecodeError(f"Nonce length byte declares {length} bytes")
        end = offset + 1 + length
        if end > len(view):
            raise NonceDecodeError(
                f"Buffer holds {len(view) - offset - 1} bytes after the length byte, "
                f"nonce requires {length}"
            )
        return cls(view[offset + 1 : end])

    @classmethod
    def from_text(cls, text: str) -> Nonce:
        """Decode a nonce from its URL-safe (or SMS-safe) base64 text."""
        normalized = from_sms_safe(text.strip())
        data = decode_base64(normalized)
        if len(data) > MAXIMUM_NUMBER_OF_BYTES:
            raise NonceDecodeError(f"Decoded nonce has {len(data)} bytes")
        nonce = cls(data)
        if _encode_text(data) == normalized:
            nonce._text = normalized
        return nonce

    def copy(self) -> Nonce:
        """Return an equal nonce that shares this one's cached text form."""
        dup = Nonce(self._bytes)
        dup._text = self._text
        return dup

    __copy__ = copy

    def __deepcopy__(self, memo: dict[int, object]) -> Nonce:
        return self.copy()

    def __reduce__(self) -> tuple[object, tuple[bytes]]:
        return (Nonce.from_binary, (self.to_binary(),))

    # ------------------------------------------------------------------ #
    # Extension
    #
    # A second party can append randomness to a base nonce; neither party
    # alone controls the result, and anyone can check the prefix.
    # ------------------------------------------------------------------ #

    def extend_with_bytes(self, count: int) -> Nonce:
        """Return a new nonce: this nonce's bytes followed by `count` random bytes."""
        if count < 0:
            raise NonceError(f"Cannot extend a nonce by {count} bytes")
        _check_length(len(self._bytes) + count, minimum=0)
        return Nonce(self._bytes + secrets.token_bytes(count))

    def is_base_of(self, other: Nonce) -> bool:
        """Could `other` have been produced by `self.extend_with_bytes(x)`?"""
        return other._bytes.startswith(self._bytes)

    def is_extension_of(self, other: Nonce) -> bool:
        """Could `self` have been produced by `other.extend_with_bytes(x)`?"""
        return other.is_base_of(self)

    # ------------------------------------------------------------------ #
    # Comparison
    # ------------------------------------------------------------------ #

    def small_int(self) -> int:
        """Return a small positive integer determined by the first three bytes."""
        res = 1
        for b in self._bytes[:3]:
            res = res * 0x100 + abs(b - 256 if b >= 0x80 else b)
        return res

    def __hash__(self) -> int:
        return self.small_int()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Nonce):
            return NotImplemented
        return self._bytes == other._bytes

    def equals_binary(self, buffer: _ToBytes, offset: int = 0) -> bool:
        """Is this nonce equal to the binary representation at `offset`?"""
        view = memoryview(buffer).cast("B")
        length = len(self._bytes)
        end = offset + 1 + length
        if offset < 0 or end > len(view):
            return False
        if view[offset] != _encode_length(length):
            return False
        return view[offset + 1 : end] == self._bytes

    def equals_text(self, text: str) -> bool:
        """Is this nonce equal to the given base64 text representation?

        Accepts everything `from_text` accepts. Malformed text is simply
        unequal. On a match the text is kept as the cached text form when it
        is the canonical encoding.
        """
        normalized = from_sms_safe(text.strip())
        try:
            data = decode_base64(normalized)
        except NonceDecodeError:
            return False
        if data != self._bytes:
            return False
        if self._text is None and _encode_text(data) == normalized:
            self._text = normalized
        return True

    def _sort_key(self) -> tuple[int, bytes]:
        return (len(self._bytes), self._bytes.translate(_SIGNED_ORDER))

    def compare_to(self, other: Nonce) -> int:
        """Return -1, 0 or 1 as this nonce sorts before, equal to or after `other`.

        Shorter nonces sort first. Equal-length nonces compare content bytes
        as signed 8-bit integers, index 0 first.
        """
        mine, theirs = self._sort_key(), other._sort_key()
        if mine == theirs:
            return 0
        return -1 if mine < theirs else 1

    def __lt__(self, other: Nonce) -> bool:
        if not isinstance(other, Nonce):
            return NotImplemented
        return self.compare_to(other) < 0

    def __le__(self, other: Nonce) -> bool:
        if not isinstance(other, Nonce):
            return NotImplemented
        return self.compare_to(other) <= 0

    def __gt__(self, other: Nonce) -> bool:
        if not isinstance(other, Nonce):
            return NotImplemented
        return self.compare_to(other) > 0

    def __ge__(self, other: Nonce) -> bool:
        if not isinstance(other, Nonce):
            return NotImplemented
        return self.compare_to(other) >= 0

    # ------------------------------------------------------------------ #
    # Representation
    # ------------------------------------------------------------------ #

    def __len__(self) -> int:
        return len(self._bytes)

    def __getitem__(self, index: int) -> int:
        return self._bytes[index]

    def __bytes__(self) -> bytes:
        return self._bytes

    @property
    def content(self) -> bytes:
        """The raw content bytes, without the length byte."""
        return self._bytes

    @property
    def text(self) -> str:
        """The canonical URL-safe base64 form, computed once."""
        text = self._text
        if text is None:
            # Encoding is a pure function of the bytes; racing writers store
            # equal strings.
            text = _encode_text(self._bytes)
            self._text = text
        return text

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Nonce({self.text!r})"

    @property
    def binary_length(self) -> int:
        """Number of bytes `write_binary` writes: content plus the length byte."""
        return len(self._bytes) + 1

    def write_binary(self, buffer: bytearray | memoryview, offset: int = 0) -> int:
        """Write the length-prefixed form into `buffer` and return the byte count.

        Raises:
            ValueError: If `buffer` cannot hold the nonce at `offset`.
        """
        view = memoryview(buffer).cast("B")
        end = offset + self.binary_length
        if offset < 0 or end > len(view):
            raise ValueError(
                f"Buffer of {len(view)} bytes cannot hold {self.binary_length} bytes at {offset}"
            )
        view[offset] = _encode_length(len(self._bytes))
        view[offset + 1 : end] = self._bytes
        return self.binary_length

    def to_binary(self) -> bytes:
        """Return the length-prefixed binary form as new bytes."""
        out = bytearray(self.binary_length)
        self.write_binary(out)
        return bytes(out)


ZERO: Final[Nonce] = Nonce.from_binary(bytes([_encode_length(0)]))


def nonces_equal(a: Nonce | None, b: Nonce | None) -> bool:
    """Null-safe equality: two `None` values are equal, `None` equals nothing else."""
    if a is None or b is None:
        return a is None and b is None
    return a == b


class MutableNonce:
    """A reusable random buffer that can be frozen into a `Nonce` exactly once.

    Only the owning thread may use a mutable nonce, and it must not be
    shared before `freeze` is called.
    """

    __slots__ = ("_buffer",)

    def __init__(self, length: int | None = None) -> None:
        if length is None:
            length = settings.default_nonce_bytes
        _check_length(length)
        self._buffer: bytearray | None = bytearray(secrets.token_bytes(length))

    def _live(self) -> bytearray:
        if self._buffer is None:
            raise NonceStateError("MutableNonce is no longer mutable.")
        return self._buffer

    def __len__(self) -> int:
        return len(self._live())

    @property
    def frozen(self) -> bool:
        return self._buffer is None

    @property
    def view(self) -> memoryview:
        """Read-only view of the current content bytes."""
        return memoryview(self._live()).toreadonly()

    def regenerate(self) -> None:
        """Replace the content with fresh random bytes, in place."""
        buf = self._live()
        buf[:] = secrets.token_bytes(len(buf))

    def freeze(self) -> Nonce:
        """Return the current content as a `Nonce` and release the buffer."""
        nonce = Nonce(self._live())
        self._buffer = None
        return nonce
