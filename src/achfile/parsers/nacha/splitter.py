"""
Record splitter for fixed-width ACH files.

Records may be terminated by DOS (\\r\\n) or Unix (\\n) new-lines, or not
terminated at all. New-lines inside a record are rejected. A SUB (\\x1a)
byte at end-of-file is ignored.
"""

import logging
from typing import BinaryIO, Iterator, Optional, Tuple

from achfile.core.exceptions import RecordLengthError, ShortRecordError
from achfile.parsers.nacha.records import RECORD_LENGTH

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024

SUB = b"\x1a"


def _drop_cr(data: bytes) -> bytes:
    """Drop a terminal \\r from the data."""
    if data.endswith(b"\r"):
        return data[:-1]
    return data


def _drop_sub(data: bytes) -> bytes:
    """Drop a terminal \\x1a from the data. Often used to mark EOF."""
    if data.endswith(SUB):
        return data[:-1]
    return data


def _scan(
    data: bytes,
    pos: int,
    at_eof: bool,
    record_length: int,
    record_number: int
) -> Tuple[int, Optional[bytes]]:
    """
    Find the next record in data[pos:].

    Returns (advance, record). (0, None) means more data is needed, or at
    end-of-file that the stream is exhausted.
    """
    remaining = len(data) - pos

    if at_eof and not _drop_sub(data[pos:]):
        return 0, None

    i = data.find(b"\n", pos)
    if i >= 0:
        line = _drop_cr(data[pos:i])
        if len(line) == record_length:
            return i + 1 - pos, line
        if not line and len(data) == i + 1:
            # Blank line, only allowed as the last thing in the stream
            return 0, None
        raise RecordLengthError(
            f"Invalid record length. A new-line was found at invalid location: {data[pos:i + 1]!r}",
            record_number=record_number,
            record=data[pos:i],
        )

    if remaining >= record_length:
        if not at_eof and (
            remaining == record_length
            or (remaining == record_length + 1 and data.endswith(b"\r"))
        ):
            # The record's terminator may still be on its way
            return 0, None
        return record_length, data[pos:pos + record_length]

    if at_eof:
        raise ShortRecordError(
            f"Invalid record length at end-of-file. Unprocessed data: {data[pos:]!r}",
            record_number=record_number,
            record=data[pos:],
        )

    return 0, None


def split_records(
    stream: BinaryIO,
    record_length: int = RECORD_LENGTH,
    chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Iterator[bytes]:
    """
    Lazily yield fixed-length records from a binary stream.

    The iterator is single-use: it consumes the stream as it goes.

    Args:
        stream: Binary stream with a read(size) method
        record_length: Length of each record (94 for NACHA)
        chunk_size: Bytes requested from the stream per read

    Yields:
        Records of exactly record_length bytes, without terminators

    Raises:
        RecordLengthError: A new-line was found inside a record
        ShortRecordError: Residual data shorter than a record at end-of-file
    """
    buffer = b""
    pos = 0
    at_eof = False
    emitted = 0

    while True:
        advance, record = _scan(buffer, pos, at_eof, record_length, emitted + 1)

        if record is not None:
            pos += advance
            emitted += 1
            yield record
            continue

        if at_eof:
            break

        chunk = stream.read(chunk_size)
        if not chunk:
            at_eof = True
        else:
            buffer = buffer[pos:] + chunk
            pos = 0

    logger.debug(f"Split {emitted} records")
