"""Base exception for uccmake.

Every component defines its own exception next to the code that raises it;
they all derive from UccMakeError so the CLI can tell expected failures from
bugs.
"""


class UccMakeError(Exception):
    """Base class for all expected uccmake failures."""
    pass
