"""Error handling shared by the CLI commands"""

import functools
import sys
from typing import Callable, NoReturn, Optional

import click

from stegascan.core.exceptions import StegaScanError
from stegascan.core.error_handler import explain_error, ErrorContext
from stegascan.cli.ui import print_error


def exit_with_explanation(error: StegaScanError, context: ErrorContext, debug: bool = False) -> NoReturn:
    """Print guidance for a known failure and exit with status 1"""
    explain_error(error, context, show_traceback=debug)
    sys.exit(1)


def handle_errors(operation_name: Optional[str] = None):
    """
    Turn analysis failures into explained exit codes

    Known errors exit 1 with guidance, Ctrl-C exits 130. Anything else
    exits 1 with a one-line message unless --debug is set.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            ctx = click.get_current_context()
            config = ctx.obj.get('config') if ctx.obj else None
            debug = config.debug if config else False

            error_context = ErrorContext(
                operation=operation_name or ctx.command_path,
                input_file=kwargs.get('input_file'),
                output_file=kwargs.get('output'),
                extra_info={"Visuals": kwargs['visuals_dir']} if kwargs.get('visuals_dir') else None,
            )

            try:
                return func(*args, **kwargs)
            except StegaScanError as e:
                exit_with_explanation(e, error_context, debug)
            except KeyboardInterrupt:
                print_error("Scan cancelled by user")
                sys.exit(130)
            except Exception as e:
                if debug:
                    raise
                print_error(f"Unexpected error during {error_context.operation}: {e}")
                print_error("Use --debug for full traceback")
                sys.exit(1)

        return wrapper
    return decorator
