from enum import IntEnum


class ActionResult(IntEnum):
    """Outcome of a custom action; the value doubles as the runner's exit code."""
    SUCCESS = 0
    FAILURE = 1
