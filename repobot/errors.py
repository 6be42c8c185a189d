"""Errors shared by the actions."""


class InputValidationError(Exception):
    """Raised when a required action input or payload field is missing.

    Fatal: aborts the whole invocation.
    """

    pass
