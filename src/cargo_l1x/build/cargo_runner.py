"""Cargo invocation for contract builds.

This module runs ``cargo build`` for the wasm target and reads cargo's JSON
message stream to find the produced wasm modules.

Design:
    - The first build streams cargo's human-readable output to the terminal
    - A second, identical invocation with ``--message-format json`` is a
      no-op rebuild whose stdout lists the produced artifacts
    - Both invocations share the same environment so cargo does not rebuild
"""

import json
import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from ..config import PipelineConfig
from .errors import CargoBuildError, TargetDirError, WasmBuildError

logger = logging.getLogger(__name__)

# Linker hint passed through RUSTFLAGS unless --no-strip is given
STRIP_RUSTFLAGS = "-C link-arg=-s"


def parse_artifact_messages(stdout: str) -> List[Path]:
    """Extract wasm module paths from cargo's JSON message stream.

    Lines that are not JSON (or not compiler-artifact messages) are ignored.

    Args:
        stdout: Captured stdout of ``cargo build --message-format json``

    Returns:
        Paths of produced .wasm files, in message order
    """
    modules: List[Path] = []
    for line in stdout.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(message, dict):
            continue
        if message.get("reason") != "compiler-artifact":
            continue
        filenames = message.get("filenames") or []
        if filenames and str(filenames[0]).endswith(".wasm"):
            modules.append(Path(filenames[0]))
    return modules


class CargoRunner:
    """Runs cargo for the wasm32 target."""

    def __init__(
        self,
        cargo: str = "cargo",
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize cargo runner.

        Args:
            cargo: Cargo executable
            environ: Base environment for cargo (defaults to os.environ)
        """
        self.cargo = cargo
        self.environ = dict(os.environ if environ is None else environ)

    def build_command(self, args: Sequence[str], json_messages: bool = False) -> List[str]:
        cmd = [self.cargo, "build", "--target", PipelineConfig.WASM_TARGET]
        cmd.extend(args)
        # avoid double --release
        if "--release" not in args:
            cmd.append("--release")
        if json_messages:
            cmd.extend(["--message-format", "json"])
        return cmd

    def build_env(self, no_strip: bool) -> Dict[str, str]:
        env = dict(self.environ)
        if not no_strip:
            env["RUSTFLAGS"] = STRIP_RUSTFLAGS
        return env

    def build(self, args: Sequence[str], no_strip: bool = False) -> None:
        """Run cargo build, streaming its output.

        Raises:
            CargoBuildError: If cargo cannot be executed
            WasmBuildError: If cargo reports a failure
        """
        cmd = self.build_command(args)
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, env=self.build_env(no_strip))
        except OSError as e:
            raise CargoBuildError(f"Failed to execute cargo: {e}")

        if result.returncode != 0:
            raise WasmBuildError("Failed to build wasm")

    def collect_modules(self, args: Sequence[str], no_strip: bool = False) -> List[Path]:
        """Re-run cargo with JSON messages and return the produced wasm modules.

        Raises:
            CargoBuildError: If cargo cannot be executed
            WasmBuildError: If cargo reports a failure
        """
        cmd = self.build_command(args, json_messages=True)
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                env=self.build_env(no_strip),
            )
        except OSError as e:
            raise CargoBuildError(f"Failed to execute cargo: {e}")

        if result.returncode != 0:
            error = WasmBuildError("Failed to build wasm")
            error.diagnostics = result.stderr
            raise error

        modules = parse_artifact_messages(result.stdout)
        logger.debug(f"cargo produced {len(modules)} wasm module(s)")
        return modules

    def target_directory(self, args: Sequence[str] = ()) -> Path:
        """Ask cargo for the workspace target directory.

        A ``--manifest-path`` in ``args`` is honoured so that library callers
        building another crate get that crate's target directory.

        Raises:
            TargetDirError: If cargo metadata fails or has no target directory
        """
        cmd = [self.cargo, "metadata", "--format-version", "1", "--no-deps"]
        manifest_path = _find_manifest_path(args)
        if manifest_path:
            cmd.extend(["--manifest-path", manifest_path])

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, env=self.environ
            )
        except OSError as e:
            raise TargetDirError(f"Failed to execute cargo metadata: {e}")

        if result.returncode != 0:
            error = TargetDirError("cargo metadata failed")
            error.diagnostics = result.stderr
            raise error

        try:
            metadata = json.loads(result.stdout)
            return Path(metadata["target_directory"])
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise TargetDirError(f"Invalid target directory in cargo metadata: {e}")


def _find_manifest_path(args: Sequence[str]) -> Optional[str]:
    for i, arg in enumerate(args):
        if arg == "--manifest-path" and i + 1 < len(args):
            return args[i + 1]
        if arg.startswith("--manifest-path="):
            return arg.split("=", 1)[1]
    return None
