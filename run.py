#!/usr/bin/env python3
"""XO client entry point.

Usage:
    python run.py --play                              # Play from the terminal
    python run.py --play --http-url http://host:8080  # Override server URLs
    python run.py --play --push-url ws://host:8080/games
"""
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

ROOT = Path(__file__).parent


def show_help():
    print("""
XO Client

Usage:
    python run.py --play                    # Play from the terminal

Options:
    --play              Connect to the server and read commands from stdin
    --http-url URL      Turn channel base URL (default from config)
    --push-url URL      Push channel WebSocket URL (default from config)
    --help, -h          Show this help message
""")


def _parse_option(args: list, flag: str):
    if flag in args:
        index = args.index(flag)
        if index + 1 < len(args):
            return args[index + 1]
        raise ValueError(f"Missing value for {flag}")
    return None


async def play(config) -> None:
    from xo_client.console import ConsolePresenter, read_commands
    from xo_client.router import EventRouter
    from xo_client.session.event_queue import EventQueue
    from xo_client.transport.push_channel import PushChannel
    from xo_client.transport.turn_channel import TurnChannel

    queue = EventQueue()
    presenter = ConsolePresenter()
    turn_channel = TurnChannel(config.http_url, request_timeout=config.request_timeout_sec)
    push_channel = PushChannel(config.push_url, queue)
    router = EventRouter(
        turn_channel=turn_channel,
        push_channel=push_channel,
        presenter=presenter,
        queue=queue,
    )

    presenter.show_lobby()
    push_task = asyncio.create_task(push_channel.run())
    router_task = asyncio.create_task(router.run())
    try:
        await read_commands(router.post_ui, presenter)
    finally:
        router_task.cancel()
        await push_channel.close()
        push_task.cancel()
        await asyncio.gather(router_task, push_task, return_exceptions=True)
        await router.close()
        await turn_channel.aclose()


def main():
    args = sys.argv[1:]
    if not args or "--help" in args or "-h" in args:
        show_help()
        return 0

    try:
        from xo_client.config import load_config

        config = load_config(ROOT / "js" / "config.json", ROOT / ".env")
        http_url = _parse_option(args, "--http-url")
        push_url = _parse_option(args, "--push-url")
        if http_url or push_url:
            config = replace(
                config,
                http_url=http_url or config.http_url,
                push_url=push_url or config.push_url,
            )

        logging.basicConfig(
            level=getattr(logging, config.log_level.upper(), logging.WARNING),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )

        if "--play" in args:
            if config.display_name:
                print(f"[XO] Playing as {config.display_name}")
            asyncio.run(play(config))
        return 0

    except ImportError as e:
        print(f"Error: {e}. Run: pip install -e .")
        return 1
    except KeyboardInterrupt:
        print("\n[XO] Stopped.")
        return 0
    except Exception as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
