#!/usr/bin/env python3
"""Interactive setup script for the XO client.

Generates js/config.json and .env files based on user input.

Usage:
    python setup_config.py
"""
import json
import sys
from pathlib import Path

from xo_client.config import DEFAULT_HTTP_URL, DEFAULT_PUSH_URL, DEFAULT_REQUEST_TIMEOUT_SEC


def ask(prompt: str, default: str = "", required: bool = True) -> str:
    """Ask user for input with optional default value."""
    if default:
        display = f"{prompt} [{default}]: "
    else:
        display = f"{prompt}: "

    while True:
        value = input(display).strip()
        if not value and default:
            return default
        if value:
            return value
        if not required:
            return ""
        print("  This field is required. Please enter a value.")


def ask_yes_no(prompt: str, default: bool = False) -> bool:
    """Ask user for yes/no input."""
    default_str = "Y/n" if default else "y/N"
    while True:
        value = input(f"{prompt} [{default_str}]: ").strip().lower()
        if not value:
            return default
        if value in ("y", "yes"):
            return True
        if value in ("n", "no"):
            return False
        print("  Please enter 'y' or 'n'.")


def print_header(text: str) -> None:
    """Print a section header."""
    print(f"\n{'=' * 50}")
    print(f"  {text}")
    print('=' * 50)


def build_config(http_url: str, push_url: str, timeout: float, display_name: str) -> dict:
    return {
        "server": {
            "http_url": http_url,
            "push_url": push_url,
        },
        "client": {
            "request_timeout_sec": timeout,
            "display_name": display_name,
        },
    }


def build_env_lines(log_level: str) -> list:
    return [
        "# XO Client Environment Configuration",
        "# Generated by setup_config.py",
        "",
        "# Log level for diagnostics (protocol lines are always printed)",
        f"LOG_LEVEL={log_level}",
        "",
        "# Server overrides (take precedence over js/config.json)",
        "# XO_HTTP_URL=http://localhost:8080",
        "# XO_PUSH_URL=ws://localhost:8080/games",
        "# XO_REQUEST_TIMEOUT_SEC=10",
        "",
    ]


def main() -> int:
    """Run the interactive setup."""
    print("\n" + "=" * 50)
    print("  XO Client - Configuration Setup")
    print("=" * 50)
    print("\nPress Enter to accept default values shown in [brackets].\n")

    config_path = Path("js/config.json")
    env_path = Path(".env")

    if config_path.exists():
        if not ask_yes_no("config.json already exists. Overwrite?", default=False):
            print("Setup cancelled.")
            return 0

    print_header("Game Server")
    http_url = ask("HTTP base URL", default=DEFAULT_HTTP_URL)
    push_url = ask("WebSocket URL", default=DEFAULT_PUSH_URL)
    timeout_text = ask("Request timeout in seconds", default=str(DEFAULT_REQUEST_TIMEOUT_SEC))
    try:
        timeout = float(timeout_text)
    except ValueError:
        print(f"  Invalid timeout '{timeout_text}', using {DEFAULT_REQUEST_TIMEOUT_SEC}")
        timeout = DEFAULT_REQUEST_TIMEOUT_SEC

    print_header("Player")
    display_name = ask("Your display name", required=False)
    log_level = ask("Log level (DEBUG, INFO, WARNING, ERROR)", default="WARNING").upper()

    Path("js").mkdir(exist_ok=True)
    with open(config_path, "w") as f:
        json.dump(build_config(http_url, push_url, timeout, display_name), f, indent=2)
        f.write("\n")
    print(f"\n  Created: {config_path}")

    with open(env_path, "w") as f:
        f.write("\n".join(build_env_lines(log_level)))
    print(f"  Created: {env_path}")

    print_header("Setup Complete!")
    print()
    print("  Next step:")
    print("     python run.py --play")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
