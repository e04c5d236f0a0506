#!/usr/bin/env python3
"""
Command-line interface for easy-a2a.

Builds a one-step AI agent from the command line and prints its reply.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv
from openai import AsyncOpenAI

from . import __version__
from .builder import ai_agent_builder
from .config import get_default_model
from .protocol.types import Task, get_content


async def ask_command(args: argparse.Namespace) -> int:
    """Send one prompt to a freshly built agent."""
    client_options = {}
    if args.base_url:
        client_options["base_url"] = args.base_url

    agent = (
        ai_agent_builder(AsyncOpenAI(**client_options))
        .ai({
            "model": args.model or get_default_model(),
            "messages": [{"role": "system", "content": args.system}],
        })
        .create_agent(args.name)
    )

    result = await agent.send_message(args.prompt)
    if isinstance(result, Task):
        print(get_content(result.status.message) or "")
        return 0 if result.status.state.value == "completed" else 1

    print(get_content(result) or "")
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="easy-a2a",
        description="Build and run A2A agents on OpenAI-compatible APIs",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    ask_parser = subparsers.add_parser("ask", help="Send a single prompt to an AI agent")
    ask_parser.add_argument("prompt", help="Message to send")
    ask_parser.add_argument("--system", default="You are a helpful assistant.", help="System prompt")
    ask_parser.add_argument("--model", help="Model name (default: EASY_A2A_DEFAULT_MODEL or gpt-4o-mini)")
    ask_parser.add_argument("--base-url", help="OpenAI-compatible API base URL")
    ask_parser.add_argument("--name", default="Assistant", help="Agent name")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "ask":
        return asyncio.run(ask_command(args))

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
