"""Build pipeline exceptions.

Every failure in the contract build pipeline is raised as a subclass of
BuildError so the CLI can report it uniformly. Errors coming from an external
tool keep the tool's captured stderr in ``diagnostics``.
"""

from pathlib import Path


class BuildError(Exception):
    """Base class for contract build failures."""

    diagnostics: str = ""


class TargetDirError(BuildError):
    """Raised when the cargo target directory cannot be determined."""

    pass


class CargoBuildError(BuildError):
    """Raised when cargo itself cannot be executed."""

    pass


class WasmBuildError(BuildError):
    """Raised when cargo exits with a failure status."""

    pass


class TranslationError(BuildError):
    """Raised when a wasm module cannot be translated to LLVM IR."""

    def __init__(self, message: str, diagnostics: str = ""):
        super().__init__(message)
        self.diagnostics = diagnostics


class FilesystemError(BuildError):
    """Raised when a filesystem operation fails.

    Args:
        intent: What the pipeline was trying to do (e.g., "Failed to copy source file")
        cause: The underlying OSError
    """

    def __init__(self, intent: str, cause: OSError):
        super().__init__(f"{intent}: {cause}")
        self.intent = intent
        self.cause = cause


class ToolRunError(BuildError):
    """Raised when a resolved tool cannot be launched."""

    pass


class ObjectBuildError(BuildError):
    """Raised when llc fails to produce an object file."""

    def __init__(self, message: str, diagnostics: str = ""):
        super().__init__(message)
        self.diagnostics = diagnostics


class StripError(BuildError):
    """Raised when llvm-strip fails on an object file."""

    def __init__(self, message: str, diagnostics: str = ""):
        super().__init__(message)
        self.diagnostics = diagnostics


class ModuleStageError(BuildError):
    """A stage failure attributed to one module.

    Args:
        module: Path of the module (wasm or raw IR) being processed
        stage: Pipeline stage that failed
        cause: The original error
    """

    def __init__(self, module: Path, stage: str, cause: Exception):
        super().__init__(f"{Path(module).name}: {stage} failed: {cause}")
        self.module = Path(module)
        self.stage = stage
        self.cause = cause
        self.diagnostics = getattr(cause, "diagnostics", "") or ""
