"""Error handling decorators for CLI commands."""

from __future__ import annotations

import os
import signal
import sys
from functools import wraps

import click

from rowpick.core.errors import RowPickError
from rowpick.utils.logging import get_logger

logger = get_logger(__name__)

# Piping the generated SQL into head must not end in a BrokenPipeError
if hasattr(signal, "SIGPIPE"):
    signal.signal(signal.SIGPIPE, signal.SIG_DFL)


def _fail(message: str) -> None:
    click.echo(f"❌ {message}", err=True)
    raise click.Abort()


def handle_errors(f):
    """Turn a failed cherry-pick into one ``❌`` line on stderr and exit status 1.

    ``RowPickError`` messages already name the table, column and value
    involved, so they are printed as is; their ``details`` go to the debug
    log. Commands render their whole output before printing it, so nothing
    reaches stdout for a failed run.

    Example:
        @click.command()
        @handle_errors
        def my_command():
            pass
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except click.Abort:
            raise
        except BrokenPipeError:
            sys.stdout = open(os.devnull, "w")
            sys.exit(0)
        except RowPickError as e:
            logger.debug(f"{type(e).__name__} details: {e.details}")
            _fail(e.message)
        except OSError as e:
            _fail(f"{type(e).__name__}: {e}")
        except Exception as e:
            logger.exception("Unexpected error in command")
            _fail(f"Unexpected error: {e}")

    return wrapper
