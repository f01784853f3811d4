"""pathtree CLI: copy, move, delete, list and watch directory trees."""

from ._helpers import main  # noqa: F401 (entry point)

# Import command modules to register Click commands with the main group.
from . import _basic, _cp, _watch  # noqa: F401
