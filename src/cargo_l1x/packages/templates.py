"""Contract project templates.

This module creates new contract projects from templates. The
``local_default`` template ships inside the package; the others are branch
archives of the public templates repository.

Usage:
    create_project("my_contract", "ft")
"""

import logging
import shutil
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Optional

from .archive_utils import TemplateExtractor, zip_directory
from .downloader import PackageDownloader

logger = logging.getLogger(__name__)

TEMPLATES_REPO_URL = "https://github.com/L1X-Foundation/cargo-l1x-templates"

BUNDLED_TEMPLATE_DIR = "default_template"


class CreateError(Exception):
    """Base class for project creation failures."""

    pass


class UnknownTemplateError(CreateError):
    """Raised for a template id that is not known."""

    def __init__(self, template_id: str):
        super().__init__(f"unknown template: {template_id}")
        self.template_id = template_id


class DirectoryAlreadyExistsError(CreateError):
    """Raised when the project directory already exists."""

    def __init__(self, path: Path):
        super().__init__(f"A directory with this name already exists: {path}")
        self.path = path


class ScaffoldIOError(CreateError):
    """Raised when the project directory cannot be created."""

    pass


class Template(Enum):
    """Available project templates."""

    LOCAL_DEFAULT = "local_default"
    DEFAULT = "default"
    FT = "ft"
    NFT = "nft"

    @classmethod
    def from_id(cls, template_id: str) -> "Template":
        """Parse a template id.

        Raises:
            UnknownTemplateError: If the id is not a known template
        """
        for template in cls:
            if template.value == template_id:
                return template
        raise UnknownTemplateError(template_id)

    @property
    def is_bundled(self) -> bool:
        return self is Template.LOCAL_DEFAULT

    @property
    def url(self) -> Optional[str]:
        """Archive URL for remote templates (None for the bundled one)."""
        if self.is_bundled:
            return None
        return f"{TEMPLATES_REPO_URL}/archive/refs/heads/{self.value}.zip"

    def fetch_archive(
        self,
        downloader: Optional[PackageDownloader] = None,
        show_progress: bool = True,
    ) -> bytes:
        """Return the template as zip archive bytes.

        Raises:
            DownloadError: If a remote template cannot be downloaded
        """
        if self.is_bundled:
            return bundled_template_archive()
        downloader = downloader or PackageDownloader()
        return downloader.fetch(self.url, show_progress=show_progress)


def bundled_template_archive() -> bytes:
    """Zip the template directory shipped with the package."""
    root = resources.files("cargo_l1x.packages").joinpath(BUNDLED_TEMPLATE_DIR)
    return zip_directory(root, BUNDLED_TEMPLATE_DIR)


def create_project(
    name: str,
    template_id: str = Template.LOCAL_DEFAULT.value,
    parent_dir: Optional[Path] = None,
    downloader: Optional[PackageDownloader] = None,
    show_progress: bool = True,
) -> Path:
    """Create a new contract project from a template.

    The template id and destination are validated before anything is written,
    and remote templates are downloaded before the project directory is
    created, so a failed request leaves the filesystem unchanged.

    Args:
        name: Project directory name (relative to parent_dir)
        template_id: Template id (local_default, default, ft, nft)
        parent_dir: Directory to create the project in (default: cwd)
        downloader: Downloader for remote templates
        show_progress: Whether to show download progress

    Returns:
        Path to the created project

    Raises:
        UnknownTemplateError: If template_id is not known
        DirectoryAlreadyExistsError: If the destination exists
        DownloadError: If a remote template cannot be downloaded
        ExtractionError: If the archive is invalid
        ScaffoldIOError: If the project directory cannot be created
    """
    template = Template.from_id(template_id)

    destination = Path(parent_dir or Path.cwd()) / name
    if destination.exists():
        raise DirectoryAlreadyExistsError(destination)

    archive = template.fetch_archive(downloader=downloader, show_progress=show_progress)

    try:
        destination.mkdir(parents=True)
    except OSError as e:
        raise ScaffoldIOError(f"Couldn't create a directory: {destination}: {e}")

    try:
        written = TemplateExtractor().extract(archive, destination)
    except Exception:
        # The directory was created above, so nothing of the user's is removed
        shutil.rmtree(destination, ignore_errors=True)
        raise

    logger.debug(f"Created {destination} from {template.value} ({written} files)")
    return destination
