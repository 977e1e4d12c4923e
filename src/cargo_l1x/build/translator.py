"""Wasm to LLVM IR translation.

Translation is done by an external tool taking two arguments, the input wasm
module and the output ``.ll`` file. The orchestrator only depends on the
``Translator`` call signature, so tests and embedders can swap in any
callable with the same shape.
"""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Callable, List

from ..config import PipelineConfig
from .errors import TranslationError

logger = logging.getLogger(__name__)

Translator = Callable[[Path, Path], None]


class CommandTranslator:
    """Runs the configured translator executable.

    Usage:
        translate = CommandTranslator("l1x-wasm-llvmir")
        translate(Path("contract.wasm"), Path("contract.ll"))
    """

    def __init__(self, command: str):
        """Initialize the translator.

        Args:
            command: Executable name or path, optionally followed by extra
                arguments (split with shell rules)
        """
        self.command: List[str] = shlex.split(command)

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "CommandTranslator":
        return cls(config.translator_command)

    def __call__(self, wasm_file: Path, ll_file: Path) -> None:
        cmd = self.command + [str(wasm_file), str(ll_file)]
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise TranslationError(
                f"Could not build ll file: failed to run '{self.command[0]}': {e}"
            )

        if result.returncode != 0:
            raise TranslationError(
                f"Could not build ll file from {Path(wasm_file).name}",
                diagnostics=result.stderr,
            )

        if not Path(ll_file).exists():
            raise TranslationError(
                f"Could not build ll file: translator did not create {ll_file}"
            )
