"""Client configuration - .env plus js/config.json, env vars win."""
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_HTTP_URL = "http://xo.t.javascript.ninja"
DEFAULT_PUSH_URL = "ws://xo.t.javascript.ninja/games"
DEFAULT_REQUEST_TIMEOUT_SEC = 10.0
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class ClientConfig:
    """Settings needed to reach the game server."""
    http_url: str = DEFAULT_HTTP_URL
    push_url: str = DEFAULT_PUSH_URL
    request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC
    display_name: str = ""
    log_level: str = DEFAULT_LOG_LEVEL


def load_env(env_path: Path) -> None:
    """Load KEY=VALUE lines into os.environ without overriding set values."""
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                os.environ.setdefault(key.strip(), value.strip())


def load_config(
    config_path: Optional[Path] = None,
    env_path: Optional[Path] = None,
) -> ClientConfig:
    """Build ClientConfig from defaults, config.json and the environment.

    Precedence (highest first): environment (including .env), config.json,
    built-in defaults.

    Raises:
        ValueError: If config.json is not valid JSON or a timeout is not
            a number.
    """
    if env_path is not None:
        load_env(env_path)

    data: dict = {}
    if config_path is not None and config_path.exists():
        with open(config_path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid config file {config_path}: {e}") from e

    server = data.get("server", {})
    client = data.get("client", {})
    timeout = os.environ.get(
        "XO_REQUEST_TIMEOUT_SEC",
        client.get("request_timeout_sec", DEFAULT_REQUEST_TIMEOUT_SEC),
    )
    try:
        timeout = float(timeout)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid request timeout: {timeout!r}") from e

    return ClientConfig(
        http_url=os.environ.get("XO_HTTP_URL", server.get("http_url", DEFAULT_HTTP_URL)),
        push_url=os.environ.get("XO_PUSH_URL", server.get("push_url", DEFAULT_PUSH_URL)),
        request_timeout_sec=timeout,
        display_name=client.get("display_name", ""),
        log_level=os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )
