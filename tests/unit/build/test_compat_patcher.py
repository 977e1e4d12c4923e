"""Unit tests for the host compatibility patcher."""

import pytest

from cargo_l1x.build.compat_patcher import (
    COMPAT_SUBSTITUTIONS,
    apply_compat_patches,
    has_malformed_sections,
    patch_ir_bytes,
    patch_ir_text,
)
from cargo_l1x.build.errors import FilesystemError


class TestPatchIrText:
    def test_fixes_memory_sections(self):
        text = 'global [1 x i8] zeroinitializer, section ",_memory", align 1'
        assert patch_ir_text(text) == 'global [1 x i8] zeroinitializer, section "_memory", align 1'

    def test_fixes_init_memory_sections(self):
        text = 'c"x", section ",_init_memory", align 1'
        assert patch_ir_text(text) == 'c"x", section "_init_memory", align 1'

    def test_leaves_other_sections(self):
        text = 'section ",_other", align 1\nsection "_version"\n'
        assert patch_ir_text(text) == text

    def test_idempotent(self, sample_ir):
        text = sample_ir.read_text()
        once = patch_ir_text(text)
        assert patch_ir_text(once) == once

    def test_table_only_maps_to_well_formed(self):
        for malformed, fixed in COMPAT_SUBSTITUTIONS:
            assert malformed != fixed
            assert not has_malformed_sections(fixed)


class TestApplyCompatPatches:
    def test_rewrites_file(self, sample_ir):
        assert apply_compat_patches(sample_ir) is True

        content = sample_ir.read_text()
        assert not has_malformed_sections(content)
        assert 'section "_memory"' in content
        assert 'section "_init_memory"' in content

    def test_other_bytes_preserved(self, sample_ir):
        original = sample_ir.read_bytes()

        apply_compat_patches(sample_ir)

        patched = sample_ir.read_bytes()
        assert patched == original.replace(b'",_memory"', b'"_memory"').replace(
            b'",_init_memory"', b'"_init_memory"'
        )

    def test_second_application_is_noop(self, sample_ir):
        apply_compat_patches(sample_ir)
        first = sample_ir.read_bytes()

        assert apply_compat_patches(sample_ir) is False
        assert sample_ir.read_bytes() == first

    def test_crlf_preserved(self, tmp_path):
        path = tmp_path / "crlf.ll"
        path.write_bytes(b'@m = global i8 0, section ",_memory"\r\n')

        apply_compat_patches(path)

        assert path.read_bytes() == b'@m = global i8 0, section "_memory"\r\n'

    def test_missing_file(self, tmp_path):
        with pytest.raises(FilesystemError, match="Failed to read version file"):
            apply_compat_patches(tmp_path / "missing.versioned.ll")

    def test_non_utf8_bytes_preserved(self, tmp_path):
        path = tmp_path / "binary.ll"
        path.write_bytes(b'@s = global [2 x i8] c"\xff\xfe", section ",_init_memory"\n')

        assert apply_compat_patches(path) is True

        assert path.read_bytes() == b'@s = global [2 x i8] c"\xff\xfe", section "_init_memory"\n'


class TestPatchIrBytes:
    def test_matches_text_patch(self, sample_ir_text):
        expected = patch_ir_text(sample_ir_text).encode("utf-8")
        assert patch_ir_bytes(sample_ir_text.encode("utf-8")) == expected

    def test_has_malformed_sections(self):
        assert has_malformed_sections('section ",_memory"')
        assert not has_malformed_sections('section "_memory"')
