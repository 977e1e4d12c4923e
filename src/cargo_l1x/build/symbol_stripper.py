"""Symbol stripping for eBPF object files."""

import logging
import subprocess
from pathlib import Path

from ..packages.tool_locator import ToolReference
from .errors import StripError, ToolRunError

logger = logging.getLogger(__name__)


class SymbolStripper:
    """Removes debug info and local symbols from an object file in place."""

    def __init__(self, llvm_strip: ToolReference):
        self.llvm_strip = llvm_strip

    def strip(self, object_file: Path) -> Path:
        """Strip an object file with ``llvm-strip -x``.

        Raises:
            ToolRunError: If llvm-strip cannot be launched
            StripError: If llvm-strip exits with a failure status
        """
        cmd = [str(self.llvm_strip.path), "-x", str(object_file)]
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ToolRunError(
                f"Failed to run llvm-strip ({self.llvm_strip.path}): {e}. "
                + "Please ensure that you have llvm-strip installed"
            )

        if result.returncode != 0:
            raise StripError(
                f"Failed to strip object file {Path(object_file).name}",
                diagnostics=result.stderr,
            )

        return Path(object_file)
