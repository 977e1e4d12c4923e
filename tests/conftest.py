"""Shared fixtures for cargo-l1x tests."""

import stat
import sys
from pathlib import Path

import pytest

SAMPLE_IR = """; ModuleID = 'l1x_contract'
source_filename = "l1x_contract"
target datalayout = "e-m:e-p:64:64-i64:64-i128:128-n32:64-S128"

@memory = global [65536 x i8] zeroinitializer, section ",_memory", align 1
@init_memory = global [16 x i8] c"hello contract\\00\\00", section ",_init_memory", align 1

define i64 @inc_counter() {
entry:
  ret i64 0
}
"""


@pytest.fixture
def fake_tool(tmp_path):
    """Factory creating executable shell scripts that print a version string.

    Usage:
        path = fake_tool("bin", "llc", "LLVM version 18.1.3")
    """
    if sys.platform == "win32":
        pytest.skip("fake tools are POSIX shell scripts")

    def _make(directory: str, name: str, version_output: str = "", exit_code: int = 0) -> Path:
        bin_dir = tmp_path / directory
        bin_dir.mkdir(parents=True, exist_ok=True)
        tool = bin_dir / name
        tool.write_text(f"#!/bin/sh\necho '{version_output}'\nexit {exit_code}\n")
        tool.chmod(tool.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return tool

    return _make


@pytest.fixture
def sample_ir(tmp_path):
    """A raw IR file with the macOS-style malformed section names."""
    path = tmp_path / "l1x_contract.ll"
    path.write_text(SAMPLE_IR)
    return path


@pytest.fixture
def sample_ir_text():
    return SAMPLE_IR
