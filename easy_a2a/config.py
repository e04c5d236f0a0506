"""
Environment-driven defaults for easy-a2a.

Values are read at call time so tests and applications can change the
environment (or a ``.env`` file loaded with python-dotenv) without reloading
modules.
"""

import os

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOOL_ROUNDS = 10
DEFAULT_CLIENT_TIMEOUT = 30.0


def get_default_model() -> str:
    """Model used when ``.ai()`` is given a bare system prompt."""
    return os.getenv("EASY_A2A_DEFAULT_MODEL", DEFAULT_MODEL)


def get_max_tool_rounds() -> int:
    """Maximum number of tool-calling rounds before a final answer is forced."""
    return int(os.getenv("EASY_A2A_MAX_TOOL_ROUNDS", str(DEFAULT_MAX_TOOL_ROUNDS)))


def get_client_timeout() -> float:
    """Default timeout in seconds for remote A2A clients."""
    return float(os.getenv("EASY_A2A_CLIENT_TIMEOUT", str(DEFAULT_CLIENT_TIMEOUT)))
