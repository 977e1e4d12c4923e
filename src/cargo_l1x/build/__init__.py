"""
Build pipeline components for cargo-l1x.

This module provides the contract build pipeline including:
- Cargo invocation and artifact discovery
- Wasm to LLVM IR translation
- Version record injection and host compatibility patches
- eBPF object compilation (llc) and symbol stripping (llvm-strip)
- Build orchestration
"""

from .cargo_runner import CargoRunner, parse_artifact_messages
from .compat_patcher import (
    COMPAT_SUBSTITUTIONS,
    apply_compat_patches,
    patch_ir_bytes,
    patch_ir_text,
)
from .errors import (
    BuildError,
    CargoBuildError,
    FilesystemError,
    ModuleStageError,
    ObjectBuildError,
    StripError,
    TargetDirError,
    ToolRunError,
    TranslationError,
    WasmBuildError,
)
from .object_compiler import ObjectCompiler
from .orchestrator import BuildOrchestrator, BuildResult, ModuleArtifacts, build_ebpf
from .symbol_stripper import SymbolStripper
from .translator import CommandTranslator, Translator
from .version_injector import append_version_record, version_record_lines

__all__ = [
    "BuildOrchestrator",
    "BuildResult",
    "ModuleArtifacts",
    "build_ebpf",
    "CargoRunner",
    "parse_artifact_messages",
    "CommandTranslator",
    "Translator",
    "ObjectCompiler",
    "SymbolStripper",
    "COMPAT_SUBSTITUTIONS",
    "apply_compat_patches",
    "patch_ir_bytes",
    "patch_ir_text",
    "append_version_record",
    "version_record_lines",
    "BuildError",
    "CargoBuildError",
    "FilesystemError",
    "ModuleStageError",
    "ObjectBuildError",
    "StripError",
    "TargetDirError",
    "ToolRunError",
    "TranslationError",
    "WasmBuildError",
]
