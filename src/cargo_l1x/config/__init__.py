"""Configuration modules for cargo-l1x."""

from .pipeline_config import (
    DEFAULT_TRANSLATOR,
    LLVM_BIN_PATH_ENV,
    TRANSLATOR_ENV,
    PipelineConfig,
    PipelineConfigError,
)

__all__ = [
    "PipelineConfig",
    "PipelineConfigError",
    "LLVM_BIN_PATH_ENV",
    "TRANSLATOR_ENV",
    "DEFAULT_TRANSLATOR",
]
