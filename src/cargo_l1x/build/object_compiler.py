"""eBPF Object Compiler.

This module drives ``llc`` to compile a versioned LLVM IR file into an eBPF
object file for the L1X virtual machine.

Design:
    - Every llc flag is fixed so that all objects target one runtime range
    - The llc executable comes from the ToolLocator (see packages.tool_locator)
    - llc's stderr is kept on the raised error for the CLI to print

Target profile (``llc -march=bpf -mcpu=help``):
    v3 enables JmpExt, Jmp32 and ALU32, all of which the runtime supports.
"""

import logging
import subprocess
from pathlib import Path
from typing import List

from ..config import PipelineConfig
from ..packages.tool_locator import ToolReference
from .errors import ObjectBuildError, ToolRunError

logger = logging.getLogger(__name__)


class ObjectCompiler:
    """Compiles versioned IR files to eBPF object files with llc."""

    LLC_FLAGS = [
        "-march=bpf",
        "-mcpu=v3",
        "-filetype=obj",
        "--nozero-initialized-in-bss",
        "--bpf-stack-size",
        str(PipelineConfig.EBPF_STACK_FRAME_SIZE),
    ]

    def __init__(self, llc: ToolReference):
        """Initialize object compiler.

        Args:
            llc: Resolved llc executable
        """
        self.llc = llc

    def build_command(self, input_file: Path, output_file: Path) -> List[str]:
        cmd = [str(self.llc.path)]
        cmd.extend(self.LLC_FLAGS)
        cmd.extend([str(input_file), "-o", str(output_file)])
        return cmd

    def compile(self, input_file: Path, output_file: Path) -> Path:
        """Compile an IR file to an object file.

        Args:
            input_file: Versioned IR file
            output_file: Destination object file

        Returns:
            Path to the object file

        Raises:
            ToolRunError: If llc cannot be launched
            ObjectBuildError: If llc exits with a failure status
        """
        cmd = self.build_command(input_file, output_file)
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ToolRunError(
                f"Failed to run llc command ({self.llc.path}): {e}. Please ensure "
                + "that your version of llc is > 17, or you have llc-17, 18 or 19 installed"
            )

        if result.returncode != 0:
            raise ObjectBuildError(
                f"Failed to build object file {Path(output_file).name}",
                diagnostics=result.stderr,
            )

        return Path(output_file)
