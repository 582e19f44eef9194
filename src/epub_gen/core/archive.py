"""ZIP container assembly and output sinks.

The assembler writes into an OutputSink; the memory and file variants share
the same assembly code.
"""

import io
import logging
import os
import tempfile
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from epub_gen.core.errors import ArchiveWriteFailure, PathCollision

log = logging.getLogger(__name__)

MIMETYPE_PATH = "mimetype"
MIMETYPE = b"application/epub+zip"
CONTAINER_PATH = "META-INF/container.xml"

# Fixed entry timestamp (earliest date ZIP can store) for reproducible output
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
_FILE_MODE = 0o100644 << 16


class OutputSink(ABC):
    """Destination of an assembled archive."""

    @abstractmethod
    def open(self) -> BinaryIO:
        """Return the binary stream the archive is written into."""
        pass

    @abstractmethod
    def commit(self):
        """Finish after a successful write and return the result."""
        pass

    @abstractmethod
    def abort(self) -> None:
        """Discard everything written so far."""
        pass


class MemorySink(OutputSink):
    """Collects the archive in a growable in-memory buffer."""

    def __init__(self) -> None:
        self._buffer: io.BytesIO | None = None

    def open(self) -> BinaryIO:
        self._buffer = io.BytesIO()
        return self._buffer

    def commit(self) -> bytes:
        return self._buffer.getvalue()

    def abort(self) -> None:
        if self._buffer is not None:
            self._buffer.close()
            self._buffer = None


class FileSink(OutputSink):
    """Streams the archive to a file, replacing the destination atomically.

    Data goes to a hidden temporary file in the destination directory, which
    is renamed over the destination only on commit. A failed build therefore
    never leaves a partial archive at the destination path.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._handle: BinaryIO | None = None
        self._temp_path: Path | None = None

    def open(self) -> BinaryIO:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".part", dir=self.path.parent
            )
        except OSError as e:
            raise ArchiveWriteFailure(f"cannot open {self.path}: {e}") from e
        self._temp_path = Path(temp_name)
        self._handle = os.fdopen(fd, "w+b")
        return self._handle

    def commit(self) -> Path:
        try:
            self._handle.flush()
            os.fsync(self._handle.fileno())
            self._handle.close()
            os.chmod(self._temp_path, 0o644)
            os.replace(self._temp_path, self.path)
        except OSError as e:
            self.abort()
            raise ArchiveWriteFailure(f"cannot write {self.path}: {e}") from e
        self._handle = None
        self._temp_path = None
        return self.path

    def abort(self) -> None:
        if self._handle is not None and not self._handle.closed:
            self._handle.close()
        self._handle = None
        if self._temp_path is not None:
            try:
                self._temp_path.unlink(missing_ok=True)
            except OSError as e:
                log.warning("Could not remove temporary file %s: %s", self._temp_path, e)
            self._temp_path = None


class ArchiveAssembler:
    """Writes EPUB container entries into a sink.

    Usage:
        with ArchiveAssembler(MemorySink()) as assembler:
            assembler.add(...)
        data = assembler.result
    """

    def __init__(self, sink: OutputSink, compression_level: int = 9):
        self.sink = sink
        self.compression_level = compression_level
        self.result = None
        self._zip: zipfile.ZipFile | None = None
        self._paths: list[str] = []

    def __enter__(self) -> "ArchiveAssembler":
        stream = self.sink.open()
        try:
            self._zip = zipfile.ZipFile(stream, mode="w")
        except OSError as e:
            self.sink.abort()
            raise ArchiveWriteFailure(f"cannot start archive: {e}") from e
        try:
            self._write(MIMETYPE_PATH, MIMETYPE, zipfile.ZIP_STORED)
        except ArchiveWriteFailure:
            self._discard()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self._discard()
            return False
        try:
            self._zip.close()
        except (OSError, zipfile.LargeZipFile) as e:
            self._discard()
            raise ArchiveWriteFailure(f"cannot finish archive: {e}") from e
        self._zip = None
        self.result = self.sink.commit()
        log.debug("Archive complete: %d entries", len(self._paths))
        return False

    @property
    def paths(self) -> list[str]:
        """Entry paths in the order they were written."""
        return list(self._paths)

    def add(self, path: str, data: bytes) -> None:
        """Add a deflate-compressed entry."""
        if self._zip is None:
            raise ArchiveWriteFailure("archive is not open")
        self._write(path, data, zipfile.ZIP_DEFLATED)

    def _write(self, path: str, data: bytes, compress_type: int) -> None:
        if path in self._paths:
            raise PathCollision(f"archive entry {path!r} written twice")
        if not self._paths and path != MIMETYPE_PATH:
            raise ArchiveWriteFailure("mimetype must be the first archive entry")

        info = zipfile.ZipInfo(path, date_time=ZIP_EPOCH)
        info.compress_type = compress_type
        info.external_attr = _FILE_MODE
        info.create_system = 3
        try:
            if compress_type == zipfile.ZIP_STORED:
                self._zip.writestr(info, data)
            else:
                self._zip.writestr(info, data, compresslevel=self.compression_level)
        except (OSError, zipfile.LargeZipFile) as e:
            raise ArchiveWriteFailure(f"cannot write entry {path!r}: {e}") from e
        self._paths.append(path)

    def _discard(self) -> None:
        if self._zip is not None:
            try:
                self._zip.close()
            except (OSError, ValueError) as e:
                log.debug("Ignoring error while discarding archive: %s", e)
            self._zip = None
        self.sink.abort()
