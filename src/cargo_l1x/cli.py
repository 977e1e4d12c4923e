"""
Command-line interface for cargo-l1x.

This module provides the `cargo-l1x` CLI tool, usually run through cargo as
`cargo l1x`, for building and creating L1X contracts.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from cargo_l1x import __version__
from cargo_l1x.build import BuildError, BuildOrchestrator
from cargo_l1x.cli_utils import (
    FORBIDDEN_CARGO_ARGS,
    ArgumentError,
    CargoArgsValidator,
    ErrorFormatter,
    strip_cargo_subcommand,
)
from cargo_l1x.config import LLVM_BIN_PATH_ENV, TRANSLATOR_ENV, PipelineConfigError
from cargo_l1x.packages import (
    CreateError,
    DownloadError,
    ExtractionError,
    Template,
    ToolResolutionError,
    create_project,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    cargo_args: List[str] = field(default_factory=list)
    no_strip: bool = False
    verbose: bool = False


@dataclass
class CreateArgs:
    """Arguments for the create command."""

    name: str
    template: str = Template.LOCAL_DEFAULT.value
    verbose: bool = False


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger for CLI use."""
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.handlers.clear()
    logger.addHandler(handler)


def build_command(args: BuildArgs) -> None:
    """Build the contracts of the current cargo project.

    Examples:
        cargo l1x build                   # Build and strip
        cargo l1x build --no-strip        # Keep symbols for debugging
        cargo l1x build --features foo    # Extra flags go to cargo build
    """
    try:
        CargoArgsValidator.check_args_not_contains(args.cargo_args)

        orchestrator = BuildOrchestrator(verbose=args.verbose)
        target_dir = orchestrator.cargo.target_directory(args.cargo_args)

        print("Building contracts...")
        result = orchestrator.build(
            args.cargo_args, target_dir, no_strip=args.no_strip
        )

        if result.success:
            if args.verbose:
                print(f"{result.message} in {result.build_time:.2f}s")
            print("🎉 Compilation and processing completed!")
            sys.exit(0)

        for failure in result.failures:
            ErrorFormatter.print_diagnostics(failure.diagnostics)
            ErrorFormatter.print_error("Build failed!", str(failure))
        print(result.message)
        sys.exit(1)

    except ArgumentError as e:
        ErrorFormatter.print_error("Invalid argument", str(e))
        sys.exit(2)
    except BuildError as e:
        ErrorFormatter.print_diagnostics(e.diagnostics)
        ErrorFormatter.print_error("Build failed!", str(e))
        sys.exit(1)
    except ToolResolutionError as e:
        ErrorFormatter.print_error(f"Could not resolve {e.tool_name}", str(e))
        sys.exit(1)
    except PipelineConfigError as e:
        ErrorFormatter.print_error("Invalid configuration", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def create_command(args: CreateArgs) -> None:
    """Create a new contract project from a template.

    Examples:
        cargo l1x create my_contract              # Bundled template
        cargo l1x create my_token --template ft   # Fungible token template
    """
    try:
        create_project(args.name, args.template)
        print(f"🎉 The contract was generated from '{args.template}' template")
        sys.exit(0)

    except (CreateError, DownloadError, ExtractionError) as e:
        ErrorFormatter.print_error("Could not create contract", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargo l1x",
        description="Build and create L1X smart contracts",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"cargo-l1x {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output and debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Build command
    build_cmd_parser = subparsers.add_parser(
        "build",
        help="Build the contract",
        allow_abbrev=False,
        usage="cargo l1x build [OPTIONS] [CARGO_OPTIONS]",
        epilog=(
            "CARGO_OPTIONS are passed to `cargo build`, except "
            + ", ".join(FORBIDDEN_CARGO_ARGS)
            + f". Environment: {LLVM_BIN_PATH_ENV} is the 'bin' directory "
            + f"containing llc and llvm-strip; {TRANSLATOR_ENV} is the wasm to "
            + "LLVM IR translator."
        ),
    )
    build_cmd_parser.add_argument(
        "--no-strip",
        action="store_true",
        help="Do not strip debug information and symbols from the contract binary (useful for debugging)",
    )

    # Create command
    create_parser = subparsers.add_parser(
        "create",
        help="Create a new contract",
    )
    create_parser.add_argument(
        "name",
        help="The name of the contract to create",
    )
    create_parser.add_argument(
        "-t",
        "--template",
        default=Template.LOCAL_DEFAULT.value,
        help="The template to use when creating the contract "
        + f"({'/'.join(t.value for t in Template)}). Remote templates come from "
        + "https://github.com/L1X-Foundation/cargo-l1x-templates",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """cargo-l1x - build and create L1X contracts."""
    argv = strip_cargo_subcommand(sys.argv[1:] if argv is None else argv)

    parser = build_parser()
    parsed_args, extra_args = parser.parse_known_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    if extra_args and parsed_args.command != "build":
        parser.error(f"unrecognized arguments: {' '.join(extra_args)}")

    setup_logging(parsed_args.verbose)

    if parsed_args.command == "build":
        build_command(
            BuildArgs(
                cargo_args=extra_args,
                no_strip=parsed_args.no_strip,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "create":
        create_command(
            CreateArgs(
                name=parsed_args.name,
                template=parsed_args.template,
                verbose=parsed_args.verbose,
            )
        )


if __name__ == "__main__":
    main()
