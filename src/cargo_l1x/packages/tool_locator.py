"""LLVM Tool Locator.

This module resolves the executables used by the back half of the contract
build pipeline (``llc`` and ``llvm-strip``). LLVM installations are not
uniform: distributions ship versioned binaries (``llc-18``), Homebrew and
source builds ship bare names, and CI images often point at a toolchain via
an environment variable.

Resolution Order (first match wins):
    1. ``$LLVM_BIN_PATH/<name>`` if the override variable is set
    2. ``<name>-17``, ``<name>-18``, ``<name>-19`` on PATH, in that order
    3. ``<name>`` on PATH, accepted only if ``<name> --version`` reports a
       supported major version

Each step is a plain function from (tool name, environment snapshot) to an
optional path, so the chain can be inspected and tested in isolation.
"""

import logging
import os
import re
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from ..config import LLVM_BIN_PATH_ENV, PipelineConfig

logger = logging.getLogger(__name__)

ResolutionStrategy = Callable[[str, Mapping[str, str]], Optional[Path]]

_VERSION_PATTERN = re.compile(r"version (\d+)\.")


class ToolResolutionError(Exception):
    """Raised when a required toolchain executable cannot be resolved."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(message)
        self.tool_name = tool_name


class ToolNotFoundError(ToolResolutionError):
    """Raised when no candidate executable exists anywhere."""

    pass


class UnsupportedToolVersionError(ToolResolutionError):
    """Raised when the only candidate reports an unsupported version."""

    def __init__(self, tool_name: str, message: str, reported: str = ""):
        super().__init__(tool_name, message)
        self.reported = reported


@dataclass(frozen=True)
class ToolReference:
    """A resolved executable and the logical tool name it satisfies."""

    name: str
    path: Path
    source: str

    def __str__(self) -> str:
        return str(self.path)


def _executable_names(name: str) -> List[str]:
    if sys.platform == "win32":
        return [f"{name}.exe", name]
    return [name]


def find_in_directory(name: str, directory: Path) -> Optional[Path]:
    """Look for ``name`` directly inside ``directory``."""
    for candidate_name in _executable_names(name):
        candidate = Path(directory) / candidate_name
        if candidate.is_file():
            return candidate

    logger.debug(f"{name} not present in {directory}")
    return None


def find_in_override_dir(name: str, environ: Mapping[str, str]) -> Optional[Path]:
    """Look for ``name`` in the directory named by ``LLVM_BIN_PATH``."""
    override = environ.get(LLVM_BIN_PATH_ENV)
    if not override:
        return None
    return find_in_directory(name, Path(override))


def override_strategy(directory: Optional[Path]) -> ResolutionStrategy:
    """Build the override strategy.

    An explicit directory (e.g. ``PipelineConfig.llvm_bin_path``) takes the
    place of ``LLVM_BIN_PATH``; without one the environment snapshot is read.
    """
    if directory is None:
        return find_in_override_dir

    def find_in_configured_dir(name: str, environ: Mapping[str, str]) -> Optional[Path]:
        return find_in_directory(name, directory)

    return find_in_configured_dir


def search_path(name: str, environ: Mapping[str, str]) -> Optional[Path]:
    """Search the PATH of an environment snapshot for an executable."""
    found = shutil.which(name, path=environ.get("PATH", os.defpath))
    return Path(found) if found else None


def versioned_strategy(versions: Sequence[int]) -> ResolutionStrategy:
    """Build a strategy trying ``<name>-<major>`` for each supported major."""

    def find_versioned(name: str, environ: Mapping[str, str]) -> Optional[Path]:
        for major in versions:
            found = search_path(f"{name}-{major}", environ)
            if found is not None:
                return found
        return None

    return find_versioned


def parse_major_version(version_output: str) -> Optional[int]:
    """Extract the LLVM major version from ``--version`` output.

    Examples:
        >>> parse_major_version("Ubuntu LLVM version 18.1.3\\n  Optimized build.")
        18
    """
    match = _VERSION_PATTERN.search(version_output)
    if match is None:
        return None
    return int(match.group(1))


class ToolLocator:
    """Resolves LLVM executables against a fixed set of supported versions.

    Usage:
        locator = ToolLocator.from_config(PipelineConfig.from_environment())
        llc = locator.locate("llc")
        print(llc.path)
    """

    def __init__(
        self,
        supported_versions: Sequence[int] = PipelineConfig.SUPPORTED_LLVM_VERSIONS,
        environ: Optional[Mapping[str, str]] = None,
        llvm_bin_path: Optional[Path] = None,
    ):
        """Initialize the locator.

        Args:
            supported_versions: Accepted LLVM major versions, in search order
            environ: Environment snapshot (defaults to a copy of os.environ)
            llvm_bin_path: Override directory searched first (default: the
                LLVM_BIN_PATH entry of the environment snapshot)
        """
        self.supported_versions = tuple(supported_versions)
        self.environ = dict(os.environ if environ is None else environ)
        self.strategies: List[Tuple[str, ResolutionStrategy]] = [
            ("override", override_strategy(llvm_bin_path)),
            ("versioned", versioned_strategy(self.supported_versions)),
        ]

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "ToolLocator":
        return cls(
            supported_versions=config.SUPPORTED_LLVM_VERSIONS,
            environ=config.environ or None,
            llvm_bin_path=config.llvm_bin_path,
        )

    def locate(self, name: str) -> ToolReference:
        """Resolve a tool by logical name.

        Args:
            name: Executable base name (e.g., "llc", "llvm-strip")

        Returns:
            ToolReference for the first matching candidate

        Raises:
            ToolNotFoundError: If no candidate exists
            UnsupportedToolVersionError: If only an unsupported bare tool exists
        """
        for source, strategy in self.strategies:
            path = strategy(name, self.environ)
            if path is not None:
                logger.debug(f"Resolved {name} via {source}: {path}")
                return ToolReference(name=name, path=path, source=source)

        bare = search_path(name, self.environ)
        if bare is None:
            raise ToolNotFoundError(
                name,
                f"Could not find '{name}'. Install LLVM {self._versions_text()} "
                + f"or set {LLVM_BIN_PATH_ENV} to its bin directory",
            )

        self._verify_version(name, bare)
        logger.debug(f"Resolved {name} via bare name: {bare}")
        return ToolReference(name=name, path=bare, source="bare")

    def _verify_version(self, name: str, path: Path) -> None:
        try:
            result = subprocess.run(
                [str(path), "--version"],
                capture_output=True,
                text=True,
                env=self.environ,
            )
        except OSError as e:
            raise UnsupportedToolVersionError(
                name, f"Failed to query version of '{path}': {e}"
            )

        major = parse_major_version(result.stdout)
        if major is None:
            raise UnsupportedToolVersionError(
                name,
                f"Could not determine the version of '{path}'. "
                + f"Please ensure that {name} is LLVM {self._versions_text()}",
                reported=result.stdout.strip(),
            )

        if major not in self.supported_versions:
            raise UnsupportedToolVersionError(
                name,
                f"'{path}' is LLVM {major}, which is not supported. "
                + f"Please install {self._candidates_text(name)}",
                reported=result.stdout.strip(),
            )

    def _versions_text(self) -> str:
        return ", ".join(str(v) for v in self.supported_versions)

    def _candidates_text(self, name: str) -> str:
        return " or ".join(f"{name}-{v}" for v in self.supported_versions)
