"""ANSI colour helpers for console output."""

RESET = "\033[0m"
RED = "\033[31m"
GREEN = "\033[32m"
BLUE = "\033[34m"


def print_with_color(msg: str, color: str) -> str:
    """Return ``msg`` wrapped in the given ANSI colour code and a reset code."""
    return f"{color}{msg}{RESET}"