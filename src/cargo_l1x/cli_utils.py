"""CLI utility functions for cargo-l1x.

This module provides common utilities used across CLI commands including:
- Cargo subcommand argument normalization
- Validation of pass-through cargo arguments
- Error handling and formatting
"""

import sys
from typing import List, Sequence

# cargo build flags that would break the pipeline's assumptions
FORBIDDEN_CARGO_ARGS = [
    "--target",
    "--message-format",
    "--version",
    "--manifest-path",
    "--profile",
]


class ArgumentError(Exception):
    """Raised when a pass-through argument is not allowed."""

    pass


def strip_cargo_subcommand(argv: Sequence[str]) -> List[str]:
    """Drop the subcommand name cargo inserts when running ``cargo l1x``.

    Cargo runs ``cargo-l1x l1x build ...``; invoked directly the tool sees
    ``cargo-l1x build ...``. Both normalize to ``["build", ...]``.
    """
    argv = list(argv)
    if argv and argv[0] == "l1x":
        return argv[1:]
    return argv


class CargoArgsValidator:
    """Validates arguments passed through to cargo build."""

    @staticmethod
    def check_args_not_contains(
        args: Sequence[str], exclude: Sequence[str] = FORBIDDEN_CARGO_ARGS
    ) -> None:
        """Reject any argument starting with one of the excluded flags.

        Raises:
            ArgumentError: If a forbidden flag is present
        """
        for arg in args:
            for flag in exclude:
                if arg.startswith(flag):
                    raise ArgumentError(f"This argument cannot be changed: {flag}")


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Build failed!")
            message: Error message details
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_warning(message: str) -> None:
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_diagnostics(diagnostics: str) -> None:
        """Print an external tool's captured stderr, if any, ahead of the error message."""
        if diagnostics and diagnostics.strip():
            print(diagnostics.rstrip())

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)
