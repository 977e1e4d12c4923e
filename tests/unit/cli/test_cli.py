"""Tests for the cargo-l1x command line."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cargo_l1x.build.errors import ModuleStageError, ObjectBuildError, WasmBuildError
from cargo_l1x.build.orchestrator import BuildResult, ModuleArtifacts
from cargo_l1x.cli import main
from cargo_l1x.packages import DirectoryAlreadyExistsError, ToolNotFoundError


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep the CLI from replacing pytest's log handlers."""
    with patch("cargo_l1x.cli.setup_logging"):
        yield


class TestCLIBuild:
    """Tests for the 'cargo l1x build' command."""

    @pytest.fixture
    def mock_orchestrator(self, tmp_path):
        with patch("cargo_l1x.cli.BuildOrchestrator") as mock_orch_class:
            mock_instance = MagicMock()
            mock_instance.cargo.target_directory.return_value = tmp_path / "target"
            mock_orch_class.return_value = mock_instance
            yield mock_instance

    @pytest.fixture
    def success_result(self, tmp_path):
        module = tmp_path / "target" / "wasm32-unknown-unknown" / "release" / "l1x_contract.wasm"
        return BuildResult(
            success=True,
            modules=[ModuleArtifacts(module=module, stripped=True)],
            build_time=1.5,
            message="Built 1 contract(s)",
        )

    def test_build_success(self, mock_orchestrator, success_result, capsys):
        mock_orchestrator.build.return_value = success_result

        with pytest.raises(SystemExit) as exc_info:
            main(["l1x", "build"])

        assert exc_info.value.code == 0
        assert "Compilation and processing completed" in capsys.readouterr().out
        mock_orchestrator.build.assert_called_once_with([], mock_orchestrator.cargo.target_directory.return_value, no_strip=False)

    def test_build_direct_invocation(self, mock_orchestrator, success_result):
        mock_orchestrator.build.return_value = success_result

        with pytest.raises(SystemExit) as exc_info:
            main(["build"])

        assert exc_info.value.code == 0

    def test_cargo_args_and_no_strip(self, mock_orchestrator, success_result):
        mock_orchestrator.build.return_value = success_result

        with pytest.raises(SystemExit):
            main(["l1x", "build", "--no-strip", "--features", "foo", "--locked"])

        args, kwargs = mock_orchestrator.build.call_args
        assert args[0] == ["--features", "foo", "--locked"]
        assert kwargs["no_strip"] is True
        mock_orchestrator.cargo.target_directory.assert_called_once_with(["--features", "foo", "--locked"])

    @pytest.mark.parametrize(
        "forbidden",
        [
            ["--target", "x86_64-unknown-linux-gnu"],
            ["--message-format=short"],
            ["--version"],
            ["--manifest-path", "other/Cargo.toml"],
            ["--profile", "dev"],
        ],
    )
    def test_forbidden_cargo_args(self, mock_orchestrator, forbidden, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["l1x", "build"] + forbidden)

        assert exc_info.value.code == 2
        assert "This argument cannot be changed" in capsys.readouterr().out
        mock_orchestrator.cargo.target_directory.assert_not_called()
        mock_orchestrator.build.assert_not_called()

    def test_module_failures_reported(self, mock_orchestrator, tmp_path, capsys):
        cause = ObjectBuildError("Failed to build object file a.o", diagnostics="llc: error: oops")
        failure = ModuleStageError(tmp_path / "a.wasm", "compile", cause)
        mock_orchestrator.build.return_value = BuildResult(
            success=False,
            modules=[ModuleArtifacts(module=tmp_path / "a.wasm")],
            failures=[failure],
            message="1 of 1 contract(s) failed",
        )

        with pytest.raises(SystemExit) as exc_info:
            main(["build"])

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "a.wasm: compile failed" in captured.out
        assert captured.out.index("llc: error: oops") < captured.out.index("a.wasm: compile failed")

    def test_wasm_build_failure(self, mock_orchestrator, capsys):
        mock_orchestrator.build.side_effect = WasmBuildError("Failed to build wasm")

        with pytest.raises(SystemExit) as exc_info:
            main(["build"])

        assert exc_info.value.code == 1
        assert "Failed to build wasm" in capsys.readouterr().out

    def test_missing_llc(self, mock_orchestrator, capsys):
        mock_orchestrator.build.side_effect = ToolNotFoundError("llc", "Could not find 'llc'")

        with pytest.raises(SystemExit) as exc_info:
            main(["build"])

        assert exc_info.value.code == 1
        assert "Could not resolve llc" in capsys.readouterr().out

    def test_keyboard_interrupt(self, mock_orchestrator):
        mock_orchestrator.build.side_effect = KeyboardInterrupt()

        with pytest.raises(SystemExit) as exc_info:
            main(["build"])

        assert exc_info.value.code == 130


class TestCLICreate:
    """Tests for the 'cargo l1x create' command."""

    def test_create_default_template(self, capsys):
        with patch("cargo_l1x.cli.create_project", return_value=Path("my_contract")) as mock_create:
            with pytest.raises(SystemExit) as exc_info:
                main(["l1x", "create", "my_contract"])

        assert exc_info.value.code == 0
        mock_create.assert_called_once_with("my_contract", "local_default")
        assert "generated from 'local_default' template" in capsys.readouterr().out

    def test_create_with_template(self):
        with patch("cargo_l1x.cli.create_project") as mock_create:
            with pytest.raises(SystemExit):
                main(["create", "token", "-t", "ft"])

        mock_create.assert_called_once_with("token", "ft")

    def test_create_existing_directory(self, capsys):
        error = DirectoryAlreadyExistsError(Path("my_contract"))
        with patch("cargo_l1x.cli.create_project", side_effect=error):
            with pytest.raises(SystemExit) as exc_info:
                main(["create", "my_contract"])

        assert exc_info.value.code == 1
        assert "already exists" in capsys.readouterr().out

    def test_create_real_project(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with pytest.raises(SystemExit) as exc_info:
            main(["l1x", "create", "counter"])

        assert exc_info.value.code == 0
        assert (tmp_path / "counter" / "Cargo.toml").is_file()
        assert (tmp_path / "counter" / "src" / "lib.rs").is_file()

    def test_create_rejects_extra_args(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["create", "counter", "--features", "x"])

        assert exc_info.value.code == 2


class TestCLIGeneral:
    def test_no_command_shows_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["l1x"])

        assert exc_info.value.code == 0
        assert "build" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "cargo-l1x 0.1.0" in capsys.readouterr().out
