"""Conversion of opaque secrets to plaintext with scoped buffer erasure.

Secrets travel through credvault as pydantic ``SecretStr``/``SecretBytes``
values, which keep the value out of reprs, logs and tracebacks. When a
plaintext string is genuinely needed (writing to a store, printing with
``--show-value``) it is produced here and nowhere else.

The intermediate buffer is a ``bytearray`` so it can be overwritten in place;
``plaintext_buffer`` guarantees that every byte is zeroed when the scope
exits, whether the body returns, raises, or decoding fails.

Example:
    >>> import hashlib
    >>> from pydantic import SecretStr
    >>> to_plaintext(SecretStr("hunter2"))
    'hunter2'
    >>> with plaintext_buffer(SecretStr("hunter2")) as buf:
    ...     digest = hashlib.sha256(buf).hexdigest()
"""

from collections.abc import Iterator
from contextlib import contextmanager

from pydantic import SecretBytes, SecretStr

OpaqueSecret = SecretStr | SecretBytes | bytes | bytearray | memoryview


def zero_fill(buffer: bytearray) -> None:
    """Overwrite every byte of ``buffer`` with zero, in place."""
    buffer[:] = bytes(len(buffer))


def _copy_to_buffer(secret: OpaqueSecret) -> bytearray:
    if isinstance(secret, SecretStr):
        return bytearray(secret.get_secret_value(), "utf-8")
    if isinstance(secret, SecretBytes):
        return bytearray(secret.get_secret_value())
    if isinstance(secret, bytes | bytearray | memoryview):
        return bytearray(secret)
    raise TypeError(f"Unsupported secret type: {type(secret).__name__}")


@contextmanager
def plaintext_buffer(secret: OpaqueSecret) -> Iterator[bytearray]:
    """Expose a secret as a mutable UTF-8 buffer for the duration of a block.

    The buffer is a private copy; the caller's object is never modified.
    On exit the buffer is zero-filled and released, including when the
    body or the copy itself raises.

    Args:
        secret: Opaque secret to expose

    Yields:
        bytearray holding the secret's bytes

    Raises:
        TypeError: If ``secret`` is not a supported opaque type
    """
    buffer = bytearray()
    try:
        buffer = _copy_to_buffer(secret)
        yield buffer
    finally:
        zero_fill(buffer)
        del buffer


def to_plaintext(secret: OpaqueSecret | str) -> str:
    """Convert an opaque secret to a plaintext string.

    Callers should keep the returned value's lifetime as short as possible.
    Plain strings are returned unchanged.

    Args:
        secret: Opaque secret (or a string that is already plaintext)

    Returns:
        The decoded plaintext

    Raises:
        UnicodeDecodeError: If a bytes secret is not valid UTF-8; the
            intermediate buffer is still zeroed
        TypeError: If ``secret`` is not a supported opaque type
    """
    if isinstance(secret, str):
        return secret

    with plaintext_buffer(secret) as buffer:
        return buffer.decode("utf-8")


def to_secret(value: str) -> SecretStr:
    """Wrap plaintext in the opaque representation used across credvault."""
    return SecretStr(value)
