"""
Fatal error reporting and process exit codes.

Every unrecoverable condition funnels through :func:`error` so that all
failures share the ``ERROR:`` prefix on stderr and a well-defined exit code:

    - ``EXIT_CONFIG_ERROR`` (1): missing or invalid input, raised before any
      network activity.
    - ``EXIT_DELIVERY_ERROR`` (2): the webhook could not be reached or
      answered with a non-2xx status.
"""

import sys
from typing import NoReturn

EXIT_CONFIG_ERROR = 1
EXIT_DELIVERY_ERROR = 2


def error(message: str, *, code: int = EXIT_CONFIG_ERROR) -> NoReturn:
    """
    Print an error message to stderr and terminate the process.

    Args:
        message:
            Human-readable error description. The string is prefixed with
            ``"ERROR: "`` when printed.
        code:
            Process exit status code. Defaults to ``EXIT_CONFIG_ERROR``.

    Raises:
        SystemExit: Always raised to terminate the script with the given code.
    """
    print(f"ERROR: {message}", file=sys.stderr)
    raise SystemExit(code)

