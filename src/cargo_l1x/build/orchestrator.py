"""
Build orchestration for L1X contracts.

This module coordinates the contract build, from running cargo to producing
stripped eBPF object files:
- Compile the crate to wasm (cargo, wasm32-unknown-unknown, release)
- Collect produced wasm modules from cargo's JSON messages
- Translate each module to LLVM IR (<name>.ll)
- Copy to <name>.versioned.ll and append the version record
- Patch host-specific malformed section names
- Compile to an eBPF object (<name>.o) with llc
- Strip debug info and local symbols with llvm-strip (unless --no-strip)

A failing stage stops the remaining stages of that module only. Files from
completed stages are left in place for inspection, and the next module is
still processed; all failures are reported in the BuildResult.
"""

import logging
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from ..config import PipelineConfig
from ..packages.tool_locator import ToolLocator
from .cargo_runner import CargoRunner
from .compat_patcher import apply_compat_patches
from .errors import BuildError, FilesystemError, ModuleStageError, TranslationError
from .object_compiler import ObjectCompiler
from .symbol_stripper import SymbolStripper
from .translator import CommandTranslator, Translator
from .version_injector import append_version_record

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ModuleArtifacts:
    """Files produced for one module. Stages that did not run leave None."""

    module: Path
    raw_ir: Optional[Path] = None
    versioned_ir: Optional[Path] = None
    object_file: Optional[Path] = None
    stripped: bool = False


@dataclass
class BuildResult:
    """Result of a complete build operation."""

    success: bool
    modules: List[ModuleArtifacts]
    failures: List[ModuleStageError] = field(default_factory=list)
    build_time: float = 0.0
    message: str = ""


def ir_paths(raw_ir: Path) -> Tuple[Path, Path]:
    """Return (versioned IR, object file) paths derived from a raw IR path."""
    raw_ir = Path(raw_ir)
    return raw_ir.with_suffix(".versioned.ll"), raw_ir.with_suffix(".o")


def _run_stage(module: Path, stage: str, action: Callable[[], T]) -> T:
    logger.debug(f"{module.name}: {stage}")
    try:
        return action()
    except ModuleStageError:
        raise
    except (BuildError, OSError) as e:
        raise ModuleStageError(module, stage, e) from e


def _copy_file(source: Path, destination: Path) -> None:
    try:
        shutil.copyfile(source, destination)
    except OSError as e:
        raise FilesystemError("Failed to copy source file", e)


class BuildOrchestrator:
    """
    Orchestrates the contract build for one cargo invocation.

    Example usage:
        orchestrator = BuildOrchestrator()
        target_dir = orchestrator.cargo.target_directory()
        result = orchestrator.build(["--features", "x"], target_dir)
        for failure in result.failures:
            print(failure)
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        cargo: Optional[CargoRunner] = None,
        translator: Optional[Translator] = None,
        locator: Optional[ToolLocator] = None,
        verbose: bool = False,
    ):
        """
        Initialize build orchestrator.

        Args:
            config: Pipeline configuration (default: from the environment)
            cargo: Cargo runner (default: runs 'cargo' with the config environment)
            translator: Wasm to IR translator (default: CommandTranslator)
            locator: Tool locator for llc/llvm-strip
            verbose: Enable verbose output
        """
        self.config = config or PipelineConfig.from_environment()
        self.cargo = cargo or CargoRunner(environ=self.config.environ or None)
        self.translator = translator or CommandTranslator.from_config(self.config)
        self.locator = locator or ToolLocator.from_config(self.config)
        self.verbose = verbose

    def build(
        self,
        cargo_args: Sequence[str],
        target_dir: Path,
        no_strip: bool = False,
    ) -> BuildResult:
        """
        Execute the complete build.

        Args:
            cargo_args: Extra arguments passed through to cargo build
            target_dir: Cargo target directory
            no_strip: Keep debug info and symbols in the object files

        Returns:
            BuildResult with per-module artifacts and failures

        Raises:
            CargoBuildError: If cargo cannot be executed
            WasmBuildError: If the wasm build fails
            FilesystemError: If the output directory cannot be created
            ToolResolutionError: If llc or llvm-strip cannot be resolved
        """
        start_time = time.time()
        cargo_args = list(cargo_args)

        if self.verbose:
            print("[1/3] Building wasm modules...")
        self.cargo.build(cargo_args, no_strip=no_strip)

        output_dir = self.config.output_dir(target_dir)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError("Could not create target directory", e)

        modules = self.cargo.collect_modules(cargo_args, no_strip=no_strip)
        if not modules:
            return BuildResult(
                success=True,
                modules=[],
                build_time=time.time() - start_time,
                message="cargo produced no wasm modules",
            )

        if self.verbose:
            print("[2/3] Resolving LLVM tools...")
        compiler, stripper = self.resolve_tools(no_strip)

        if self.verbose:
            print(f"[3/3] Processing {len(modules)} module(s)...")

        built: List[ModuleArtifacts] = []
        failures: List[ModuleStageError] = []
        for module in modules:
            artifacts = ModuleArtifacts(module=module)
            try:
                self.build_module(module, output_dir, compiler, stripper, artifacts)
            except ModuleStageError as e:
                logger.debug(f"Module {module.name} failed at stage {e.stage}")
                failures.append(e)
            else:
                print(
                    f"✅ Contract object file '{module.with_suffix('.o').name}' has been built"
                )
            built.append(artifacts)

        success = not failures
        message = (
            f"Built {len(modules)} contract(s)"
            if success
            else f"{len(failures)} of {len(modules)} contract(s) failed"
        )
        return BuildResult(
            success=success,
            modules=built,
            failures=failures,
            build_time=time.time() - start_time,
            message=message,
        )

    def resolve_tools(self, no_strip: bool) -> Tuple[ObjectCompiler, Optional[SymbolStripper]]:
        """Resolve llc and (unless no_strip) llvm-strip once for this build."""
        compiler = ObjectCompiler(self.locator.locate("llc"))
        stripper = None
        if not no_strip:
            stripper = SymbolStripper(self.locator.locate("llvm-strip"))
        return compiler, stripper

    def build_module(
        self,
        module: Path,
        output_dir: Path,
        compiler: ObjectCompiler,
        stripper: Optional[SymbolStripper],
        artifacts: Optional[ModuleArtifacts] = None,
    ) -> ModuleArtifacts:
        """Translate one wasm module and run it through the eBPF stages.

        Raises:
            ModuleStageError: If any stage fails
        """
        module = Path(module)
        artifacts = artifacts or ModuleArtifacts(module=module)

        raw_ir = Path(output_dir) / module.with_suffix(".ll").name
        _run_stage(module, "translate", lambda: self._translate(module, raw_ir))
        artifacts.raw_ir = raw_ir

        return build_ebpf(raw_ir, compiler, stripper, artifacts, module=module)

    def _translate(self, module: Path, raw_ir: Path) -> None:
        # Injected translators may raise anything; attribute it to the module
        try:
            self.translator(module, raw_ir)
        except (BuildError, OSError):
            raise
        except Exception as e:
            raise TranslationError(f"Could not build ll file: {e}") from e


def build_ebpf(
    raw_ir: Path,
    compiler: ObjectCompiler,
    stripper: Optional[SymbolStripper],
    artifacts: Optional[ModuleArtifacts] = None,
    module: Optional[Path] = None,
) -> ModuleArtifacts:
    """Run an existing raw IR file through copy, version, patch, compile and strip.

    Args:
        raw_ir: Raw IR file (left untouched)
        compiler: Object compiler with a resolved llc
        stripper: Symbol stripper, or None to keep symbols
        artifacts: Artifact record to fill in (created if omitted)
        module: Module the IR came from, used in error attribution

    Returns:
        ModuleArtifacts describing the produced files

    Raises:
        ModuleStageError: If any stage fails
    """
    raw_ir = Path(raw_ir)
    module = Path(module) if module is not None else raw_ir
    artifacts = artifacts or ModuleArtifacts(module=module, raw_ir=raw_ir)
    versioned_ir, object_file = ir_paths(raw_ir)

    _run_stage(module, "copy", lambda: _copy_file(raw_ir, versioned_ir))
    artifacts.versioned_ir = versioned_ir

    _run_stage(module, "version", lambda: append_version_record(versioned_ir))
    _run_stage(module, "patch", lambda: apply_compat_patches(versioned_ir))

    _run_stage(module, "compile", lambda: compiler.compile(versioned_ir, object_file))
    artifacts.object_file = object_file

    if stripper is not None:
        _run_stage(module, "strip", lambda: stripper.strip(object_file))
        artifacts.stripped = True

    return artifacts
