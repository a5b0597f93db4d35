"""Chunking codec for stores with a per-entry size ceiling.

A secret longer than the store's capacity is split into an ordered chunk
set. Entry names are visible in the platform's credential manager UI and
must stay stable for existing stored data:

- ``<resource>_<username>`` for a secret that fits in one entry
- ``<resource>_<username>_Chunk<NN>`` for chunk NN (00, 01, ...)

Decoding is pull-based: chunks are requested in ascending order until the
store reports one missing. A missing middle chunk therefore truncates the
recovered secret at the gap.
"""

import re
from collections.abc import Callable

import structlog

log = structlog.get_logger(__name__)

# Single-entry capacity of the legacy command-line store, in UTF-16 code units
MAX_CHUNK_SIZE = 1200

CHUNK_SUFFIX_PATTERN = re.compile(r"_Chunk(\d{2,})$")


def entry_name(resource: str, username: str) -> str:
    """Name of the unchunked entry for an identity."""
    return f"{resource}_{username}"


def chunk_name(resource: str, username: str, index: int) -> str:
    """Name of chunk ``index`` for an identity.

    Example:
        >>> chunk_name("site.example.com", "alice", 3)
        'site.example.com_alice_Chunk03'
    """
    if index < 0:
        raise ValueError(f"Chunk index cannot be negative: {index}")
    return f"{entry_name(resource, username)}_Chunk{index:02d}"


def utf16_length(text: str) -> int:
    """Length of ``text`` in UTF-16 code units, the unit the legacy store limits.

    Characters outside the Basic Multilingual Plane take two units.
    """
    return len(text.encode("utf-16-le")) // 2


def encode(secret: str, max_chunk_size: int = MAX_CHUNK_SIZE) -> list[str]:
    """Split a secret into bounded-size parts.

    Sizes are measured in UTF-16 code units (see :func:`utf16_length`), so
    a part never exceeds the store's capacity even for characters outside
    the Basic Multilingual Plane. Such a character is never split across
    two parts.

    A secret that fits in one entry (including the empty secret) yields a
    single part, stored under the plain entry name. Longer secrets are cut
    greedily, each part as full as the capacity allows. An exact multiple
    of ``max_chunk_size`` never produces an empty trailing part.

    Args:
        secret: Plaintext secret
        max_chunk_size: Capacity of one store entry, in UTF-16 code units

    Returns:
        Ordered list of parts whose concatenation equals ``secret``

    Raises:
        ValueError: If ``max_chunk_size`` is less than 1, or too small to
            hold a single character of ``secret``
    """
    if max_chunk_size < 1:
        raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")

    if utf16_length(secret) <= max_chunk_size:
        return [secret]

    parts: list[str] = []
    start = 0
    used = 0
    for position, char in enumerate(secret):
        width = 2 if ord(char) > 0xFFFF else 1
        if width > max_chunk_size:
            raise ValueError(f"max_chunk_size {max_chunk_size} cannot hold character at position {position}")
        if used + width > max_chunk_size:
            parts.append(secret[start:position])
            start = position
            used = 0
        used += width
    parts.append(secret[start:])
    return parts


def is_chunked(parts: list[str]) -> bool:
    """Whether an encoded secret needs chunk names rather than the plain name."""
    return len(parts) > 1


def reassemble(read_chunk: Callable[[int], str | None]) -> str | None:
    """Rebuild a chunked secret by pulling chunks until one is missing.

    Args:
        read_chunk: Returns the plaintext of chunk ``index``, or None when
            that chunk does not exist

    Returns:
        The concatenated secret, or None when chunk 0 does not exist
    """
    parts: list[str] = []
    index = 0
    while (part := read_chunk(index)) is not None:
        parts.append(part)
        index += 1

    if not parts:
        return None

    log.debug("chunks_reassembled", chunk_count=len(parts))
    return "".join(parts)


def strip_chunk_suffix(name: str) -> str:
    """Remove a trailing ``_ChunkNN`` from an entry name, if present."""
    return CHUNK_SUFFIX_PATTERN.sub("", name)


def split_entry_name(name: str, username: str) -> str:
    """Recover the resource from an entry name and its stored user.

    Entries not following the ``<resource>_<username>`` convention (created
    by other tools) are reported with the whole name as the resource.
    """
    base = strip_chunk_suffix(name)
    suffix = f"_{username}"
    if username and base.endswith(suffix) and len(base) > len(suffix):
        return base[: -len(suffix)]
    return base
