"""Host platform compatibility patches for LLVM IR.

On macOS the wasm-to-IR translator emits a stray comma in front of some
section names (``section ",_memory"``), which llc rejects. Until the
translator is fixed, the versioned IR file is patched with exact string
replacements from a fixed table. Nothing else in the file is touched.

The table only ever maps a malformed token to its well-formed form, so
applying the patch twice gives the same result as applying it once.
"""

import logging
from pathlib import Path
from typing import Sequence, Tuple

from .errors import FilesystemError

logger = logging.getLogger(__name__)

# (malformed, well-formed)
COMPAT_SUBSTITUTIONS: Sequence[Tuple[str, str]] = (
    ('section ",_memory"', 'section "_memory"'),
    ('section ",_init_memory"', 'section "_init_memory"'),
)


def patch_ir_text(
    content: str, substitutions: Sequence[Tuple[str, str]] = COMPAT_SUBSTITUTIONS
) -> str:
    """Apply the substitution table to IR text."""
    for malformed, fixed in substitutions:
        content = content.replace(malformed, fixed)
    return content


def has_malformed_sections(
    content: str, substitutions: Sequence[Tuple[str, str]] = COMPAT_SUBSTITUTIONS
) -> bool:
    """Return True if IR text still contains a malformed section name."""
    return any(malformed in content for malformed, _ in substitutions)


def patch_ir_bytes(
    content: bytes, substitutions: Sequence[Tuple[str, str]] = COMPAT_SUBSTITUTIONS
) -> bytes:
    """Apply the substitution table to raw IR bytes. The bytes are never decoded."""
    for malformed, fixed in substitutions:
        content = content.replace(malformed.encode("ascii"), fixed.encode("ascii"))
    return content


def apply_compat_patches(versioned_file: Path) -> bool:
    """Rewrite known malformed section names in an IR file.

    Args:
        versioned_file: Path to the versioned IR file

    Returns:
        True if the file content changed

    Raises:
        FilesystemError: If the file cannot be read or written
    """
    try:
        content = Path(versioned_file).read_bytes()
    except OSError as e:
        raise FilesystemError("Failed to read version file", e)

    patched = patch_ir_bytes(content)

    try:
        Path(versioned_file).write_bytes(patched)
    except OSError as e:
        raise FilesystemError("Failed to write to version file", e)

    changed = patched != content
    if changed:
        logger.debug(f"Patched malformed section names in {versioned_file}")
    return changed
