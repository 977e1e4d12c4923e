"""Template Archive Utilities.

This module builds and extracts the zip archives that project templates are
distributed as. Template archives (bundled or fetched from GitHub) contain a
single top-level directory whose contents become the new project.
"""

import io
import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import Optional

logger = logging.getLogger(__name__)

# Template manifests are stored under this name so that cargo does not treat
# the template directory as part of the workspace
MANIFEST_TEMPLATE_NAME = "Cargo.toml.template"
MANIFEST_NAME = "Cargo.toml"

# Directories never packed into a template archive
IGNORED_DIRS = {"target"}


class ExtractionError(Exception):
    """Raised when archive extraction fails."""

    pass


def zip_directory(root, top_level_name: Optional[str] = None) -> bytes:
    """Pack a directory tree into an in-memory zip archive.

    The archive starts with a directory entry for ``top_level_name`` and every
    other entry is nested under it, matching the layout of GitHub branch
    archives.

    Args:
        root: A pathlib.Path or importlib.resources Traversable
        top_level_name: Name of the top-level directory (default: root.name)

    Returns:
        Zip archive bytes
    """
    top = top_level_name or root.name
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(f"{top}/", b"")
        _zip_folder(zf, root, top)
    return buffer.getvalue()


def _zip_folder(zf: zipfile.ZipFile, folder, prefix: str) -> None:
    for entry in sorted(folder.iterdir(), key=lambda e: e.name):
        arcname = f"{prefix}/{entry.name}"
        if entry.is_dir():
            if entry.name in IGNORED_DIRS or entry.name == "__pycache__":
                continue
            zf.writestr(f"{arcname}/", b"")
            _zip_folder(zf, entry, arcname)
            continue
        info = zipfile.ZipInfo(arcname)
        info.compress_type = zipfile.ZIP_DEFLATED
        info.external_attr = 0o644 << 16
        zf.writestr(info, entry.read_bytes())


class TemplateExtractor:
    """Extracts a template archive into a project directory."""

    def extract(self, archive: bytes, destination: Path) -> int:
        """Extract a template archive, dropping its top-level directory.

        ``Cargo.toml.template`` files are written as ``Cargo.toml``.

        Args:
            archive: Zip archive bytes
            destination: Existing directory to extract into

        Returns:
            Number of files written

        Raises:
            ExtractionError: If the archive is invalid or cannot be written
        """
        destination = Path(destination)
        try:
            with zipfile.ZipFile(io.BytesIO(archive)) as zf:
                return self._extract_members(zf, destination)
        except zipfile.BadZipFile as e:
            raise ExtractionError(f"Invalid template archive: {e}")
        except OSError as e:
            raise ExtractionError(f"Failed to write template files: {e}")

    def _extract_members(self, zf: zipfile.ZipFile, destination: Path) -> int:
        top_level: Optional[PurePosixPath] = None
        written = 0

        for info in zf.infolist():
            member = PurePosixPath(info.filename)
            if member.is_absolute() or ".." in member.parts:
                raise ExtractionError(f"Unsafe path in template archive: {info.filename}")

            if top_level is None and info.is_dir():
                top_level = member
                continue

            relative = member
            if top_level is not None:
                try:
                    relative = member.relative_to(top_level)
                except ValueError:
                    pass
            if not relative.parts:
                continue

            path = destination.joinpath(*relative.parts)
            if info.is_dir():
                path.mkdir(parents=True, exist_ok=True)
                continue

            path.parent.mkdir(parents=True, exist_ok=True)
            if path.name == MANIFEST_TEMPLATE_NAME:
                path = path.with_name(MANIFEST_NAME)

            with zf.open(info) as src, open(path, "wb") as dst:
                dst.write(src.read())
            written += 1
            logger.debug(f"Extracted {path}")

        return written
