#!/usr/bin/env python3
"""
Entry point: obtain a GitHub token for the workflow and publish it as a step output.
"""

import asyncio
import logging
import os
import sys
import uuid

from .application_context import ApplicationContext
from .constants import GITHUB_OUTPUT_ENV
from .errors.handling import log_error
from .errors.internal import InternalError
from .logging_config import LoggerConfigurator

FAILURE_HINT = (
    "If you instead wish to use this action with a custom GitHub token or custom "
    "GitHub app, provide a `github_token` in the `uses` section of the app in "
    "your workflow yml file."
)


def set_output(name: str, value: str, output_file: str | None = None) -> None:
    """Write a step output using the runner's multiline file format.

    Falls back to logging a notice when no output file is configured (e.g.
    when run outside a workflow).
    """
    path = output_file or os.environ.get(GITHUB_OUTPUT_ENV)
    if not path:
        logging.info(f"ℹ️ {GITHUB_OUTPUT_ENV} not set; output '{name}' not written")
        return
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with open(path, "a", encoding="utf-8") as fh:
        fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


async def setup_github_token(context: ApplicationContext | None = None) -> str:
    """Obtain a token through the token manager and publish it.

    Args:
        context: Existing application context; one is created (and closed)
            when omitted.

    Returns:
        The access token.

    Raises:
        SystemExit: With status 1 when the token cannot be obtained.
    """
    owned = context is None
    ctx = context or await ApplicationContext.create()
    try:
        token = await ctx.get_token()
        logging.info("✅ GitHub token successfully obtained")
        set_output("GITHUB_TOKEN", token)
        return token
    except InternalError as e:
        log_error("Failed to setup GitHub token", e)
        logging.error(f"Failed to setup GitHub token: {e}.\n\n{FAILURE_HINT}")
        sys.exit(1)
    finally:
        if owned:
            await ctx.shutdown()


def run() -> None:
    """Synchronous entry point for the application."""
    LoggerConfigurator().configure()
    try:
        asyncio.run(setup_github_token())
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    run()
