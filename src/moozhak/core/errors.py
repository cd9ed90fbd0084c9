# src/moozhak/core/errors.py


class MoozhakError(Exception):
    """Base application error for moozhak.

    Raised for predictable, user-facing failures that the CLI reports
    without a traceback.
    """

    pass


class CommandRegistryError(MoozhakError):
    """A command name or alias is registered twice."""

    pass
