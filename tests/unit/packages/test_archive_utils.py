"""Unit tests for template archive packing and extraction."""

import io
import zipfile

import pytest

from cargo_l1x.packages.archive_utils import (
    ExtractionError,
    TemplateExtractor,
    zip_directory,
)


def make_archive(entries) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return buffer.getvalue()


class TestZipDirectory:
    def test_nested_under_top_level(self, tmp_path):
        root = tmp_path / "tmpl"
        (root / "src").mkdir(parents=True)
        (root / "src" / "lib.rs").write_text("fn main() {}")
        (root / "Cargo.toml.template").write_text("[package]")

        with zipfile.ZipFile(io.BytesIO(zip_directory(root, "top"))) as zf:
            names = zf.namelist()

        assert names[0] == "top/"
        assert set(names) == {"top/", "top/Cargo.toml.template", "top/src/", "top/src/lib.rs"}

    def test_skips_build_output(self, tmp_path):
        root = tmp_path / "tmpl"
        (root / "target" / "release").mkdir(parents=True)
        (root / "target" / "release" / "big.wasm").write_bytes(b"\0asm")
        (root / "lib.rs").write_text("")

        with zipfile.ZipFile(io.BytesIO(zip_directory(root))) as zf:
            names = zf.namelist()

        assert names == ["tmpl/", "tmpl/lib.rs"]


class TestTemplateExtractor:
    def test_strips_top_level_and_renames_manifest(self, tmp_path):
        archive = make_archive(
            [
                ("repo-ft/", b""),
                ("repo-ft/Cargo.toml.template", b"[package]"),
                ("repo-ft/src/lib.rs", b"// lib"),
            ]
        )

        written = TemplateExtractor().extract(archive, tmp_path)

        assert written == 2
        assert (tmp_path / "Cargo.toml").read_bytes() == b"[package]"
        assert (tmp_path / "src" / "lib.rs").read_bytes() == b"// lib"
        assert not (tmp_path / "repo-ft").exists()

    def test_nested_manifest_template_renamed(self, tmp_path):
        archive = make_archive(
            [("t/", b""), ("t/member/Cargo.toml.template", b"[package]")]
        )

        TemplateExtractor().extract(archive, tmp_path)

        assert (tmp_path / "member" / "Cargo.toml").exists()

    def test_rejects_parent_traversal(self, tmp_path):
        archive = make_archive([("t/", b""), ("t/../../evil.rs", b"x")])

        with pytest.raises(ExtractionError, match="Unsafe path"):
            TemplateExtractor().extract(archive, tmp_path / "project")

    def test_invalid_archive(self, tmp_path):
        with pytest.raises(ExtractionError, match="Invalid template archive"):
            TemplateExtractor().extract(b"not a zip", tmp_path)

    def test_bundled_round_trip_layout(self, tmp_path):
        source = tmp_path / "source"
        (source / "src").mkdir(parents=True)
        (source / "Cargo.toml.template").write_text("[package]")
        (source / "src" / "lib.rs").write_text("// contract")
        destination = tmp_path / "project"
        destination.mkdir()

        TemplateExtractor().extract(zip_directory(source, "default_template"), destination)

        assert sorted(p.relative_to(destination).as_posix() for p in destination.rglob("*")) == [
            "Cargo.toml",
            "src",
            "src/lib.rs",
        ]
