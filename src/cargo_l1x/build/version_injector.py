"""Version record injection for LLVM IR files.

Appends the object format version and the expected runtime version as two
global i64 constants in the reserved ``_version`` section. The record is
always written at the end of the file so byte offsets of earlier content are
unchanged.
"""

import logging
from pathlib import Path
from typing import List

from ..config import PipelineConfig
from .errors import FilesystemError

logger = logging.getLogger(__name__)

VERSION_SECTION = "_version"


def version_record_lines(
    object_version: int = PipelineConfig.OBJECT_FILE_VERSION,
    runtime_version: int = PipelineConfig.EXPECTED_RUNTIME_VERSION,
) -> List[str]:
    """Return the declaration lines making up one Version Record."""
    return [
        f'@_OBJECT_VERSION = global i64 {object_version}, section "{VERSION_SECTION}", align 1\n',
        f'@_EXPECTED_RUNTIME_VERSION = global i64 {runtime_version}, section "{VERSION_SECTION}", align 1\n',
    ]


def append_version_record(versioned_file: Path) -> None:
    """Append the Version Record to an IR file in place.

    Args:
        versioned_file: Path to the (copied) IR file

    Raises:
        FilesystemError: If the file cannot be opened or written
    """
    try:
        f = open(versioned_file, "a+b")
    except OSError as e:
        raise FilesystemError("Failed to open versioned file", e)

    with f:
        try:
            record = "".join(version_record_lines()).encode("utf-8")
            # A record glued onto an unterminated last line would corrupt it
            if f.tell() > 0:
                f.seek(-1, 2)
                if f.read(1) != b"\n":
                    record = b"\n" + record
            f.write(record)
        except OSError as e:
            raise FilesystemError("Failed to write version info", e)

    logger.debug(f"Appended version record to {versioned_file}")
