"""
Pipeline configuration for cargo-l1x.

This module holds the fixed parameters of the contract build pipeline and the
few values that may be supplied through the environment.

Fixed values (object format version, runtime version, eBPF stack size, target
triple, supported LLVM majors) are class-level constants: every object file
produced by one release of cargo-l1x must be loadable by the same runtime
version range, so they are never read from the environment.

Environment variables:
    LLVM_BIN_PATH      Directory containing 'llc' and 'llvm-strip'
    L1X_WASM_LLVMIR    Path or name of the wasm-to-LLVM-IR translator
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional


class PipelineConfigError(Exception):
    """Exception raised for invalid pipeline configuration."""

    pass


LLVM_BIN_PATH_ENV = "LLVM_BIN_PATH"
TRANSLATOR_ENV = "L1X_WASM_LLVMIR"

DEFAULT_TRANSLATOR = "l1x-wasm-llvmir"


@dataclass(frozen=True)
class PipelineConfig:
    """
    Configuration for a single pipeline invocation.

    Usage:
        config = PipelineConfig.from_environment()
        print(config.output_dir(Path("target")))  # target/l1x/release
    """

    # Object file layout version written into every versioned IR file
    OBJECT_FILE_VERSION = 1

    # Minimum runtime version able to load the produced object files
    EXPECTED_RUNTIME_VERSION = 3

    # Maximum eBPF stack frame size passed to llc
    EBPF_STACK_FRAME_SIZE = 8192

    # Upstream compilation target
    WASM_TARGET = "wasm32-unknown-unknown"

    # LLVM major versions whose llc/llvm-strip are known to work
    SUPPORTED_LLVM_VERSIONS = (17, 18, 19)

    # Subdirectory of the cargo target directory holding pipeline outputs
    OUTPUT_SUBDIR = Path("l1x") / "release"

    llvm_bin_path: Optional[Path] = None
    translator_command: str = DEFAULT_TRANSLATOR
    environ: Mapping[str, str] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_environment(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "PipelineConfig":
        """Build a configuration from an environment snapshot.

        Args:
            environ: Environment mapping (defaults to a copy of os.environ)

        Returns:
            PipelineConfig instance

        Raises:
            PipelineConfigError: If an override variable is set but empty
        """
        env = dict(os.environ if environ is None else environ)

        llvm_bin_path = None
        raw_bin_path = env.get(LLVM_BIN_PATH_ENV)
        if raw_bin_path is not None:
            if not raw_bin_path.strip():
                raise PipelineConfigError(f"{LLVM_BIN_PATH_ENV} is set but empty")
            llvm_bin_path = Path(raw_bin_path)

        translator = env.get(TRANSLATOR_ENV, DEFAULT_TRANSLATOR)
        if not translator.strip():
            raise PipelineConfigError(f"{TRANSLATOR_ENV} is set but empty")

        return cls(
            llvm_bin_path=llvm_bin_path,
            translator_command=translator,
            environ=env,
        )

    def output_dir(self, target_dir: Path) -> Path:
        """Directory receiving IR and object files for a cargo target dir."""
        return Path(target_dir) / self.OUTPUT_SUBDIR
