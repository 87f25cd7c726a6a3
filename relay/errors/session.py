"""Session lifecycle exceptions."""


class SessionClosedError(Exception):
    """Raised when work is requested for a session whose downstream is gone.

    Late reconnect attempts hit this after teardown; it ends the attempt
    without side effects.
    """


__all__ = ["SessionClosedError"]
