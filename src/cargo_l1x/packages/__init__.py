"""Toolchain and template management for cargo-l1x.

This module locates external LLVM tools and materializes contract projects
from bundled or remote templates.
"""

from .archive_utils import ExtractionError, TemplateExtractor, zip_directory
from .downloader import DownloadError, PackageDownloader
from .templates import (
    CreateError,
    DirectoryAlreadyExistsError,
    ScaffoldIOError,
    Template,
    UnknownTemplateError,
    bundled_template_archive,
    create_project,
)
from .tool_locator import (
    ToolLocator,
    ToolNotFoundError,
    ToolReference,
    ToolResolutionError,
    UnsupportedToolVersionError,
)

__all__ = [
    "ToolLocator",
    "ToolReference",
    "ToolResolutionError",
    "ToolNotFoundError",
    "UnsupportedToolVersionError",
    "PackageDownloader",
    "DownloadError",
    "TemplateExtractor",
    "ExtractionError",
    "zip_directory",
    "Template",
    "CreateError",
    "UnknownTemplateError",
    "DirectoryAlreadyExistsError",
    "ScaffoldIOError",
    "bundled_template_archive",
    "create_project",
]
