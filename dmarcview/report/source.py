"""
Loading DMARC report bytes.

Reports arrive as plain XML or wrapped in a ZIP or GZ archive.  These
helpers read a stream or file and unwrap the archive, mapping every
failure onto the decode error taxonomy.
"""

from __future__ import annotations

import gzip
import io
import logging
import os
import zipfile
import zlib
from typing import BinaryIO

from dmarcview.report.errors import InputUnreadable, MissingInput

logger = logging.getLogger(__name__)

_ZIP_MAGIC: bytes = b"PK\x03\x04"
_GZIP_MAGIC: bytes = b"\x1f\x8b"


def read_report(stream: BinaryIO | None) -> bytes:
    """Read the whole of *stream*.

    Raises:
        MissingInput: *stream* is None.
        InputUnreadable: The read failed or the stream is closed.
    """
    if stream is None:
        raise MissingInput()
    try:
        data = stream.read()
    except (OSError, ValueError) as exc:
        logger.warning("read_report: cannot read report stream: %s", exc)
        raise InputUnreadable(f"Cannot read report: {exc}") from exc
    if isinstance(data, str):
        data = data.encode("utf-8")
    return data


def open_report(path: str | os.PathLike[str] | None) -> bytes:
    """Read the report file at *path* and unwrap it if it is an archive.

    Raises:
        MissingInput: *path* is None or empty.
        InputUnreadable: The file is missing, unreadable or a corrupt archive.
    """
    if not path:
        raise MissingInput("No report path supplied")
    try:
        with open(path, "rb") as fh:
            data = read_report(fh)
    except (OSError, ValueError) as exc:
        logger.warning("open_report: cannot open %s: %s", path, exc)
        raise InputUnreadable(f"Cannot open {path}: {getattr(exc, 'strerror', None) or exc}") from exc
    return unwrap_report(os.fspath(path), data)


# ---------------------------------------------------------------------------
# Archive unwrapping
# ---------------------------------------------------------------------------


def unwrap_report(filename: str, data: bytes) -> bytes:
    """Return the raw XML bytes of a (possibly compressed) report.

    The extension of *filename* picks the format; for any other extension
    the content is sniffed and treated as XML when it is not an archive.

    Raises:
        InputUnreadable: The archive is corrupt or empty.
    """
    name = filename.lower()
    if name.endswith(".zip"):
        return _unzip(data)
    if name.endswith(".gz"):
        return _gunzip(data)
    if name.endswith(".xml"):
        return data
    if data.startswith(_ZIP_MAGIC):
        return _unzip(data)
    if data.startswith(_GZIP_MAGIC):
        return _gunzip(data)
    return data


def _gunzip(data: bytes) -> bytes:
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        logger.warning("GZ decompression failed: %s", exc)
        raise InputUnreadable(f"Corrupt GZ archive: {exc}") from exc


def _unzip(data: bytes) -> bytes:
    """Extract the first XML-like member of a ZIP archive."""
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            names = zf.namelist()
            for name in names:
                if name.lower().endswith((".xml", ".dmarc")):
                    return zf.read(name)
            # No recognisable member; take the first one
            if names:
                return zf.read(names[0])
    except (zipfile.BadZipFile, OSError, EOFError, zlib.error) as exc:
        logger.warning("ZIP extraction failed: %s", exc)
        raise InputUnreadable(f"Corrupt ZIP archive: {exc}") from exc
    raise InputUnreadable("ZIP archive is empty")
