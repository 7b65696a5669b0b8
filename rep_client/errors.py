# rep_client/errors.py


class RepTrackerError(Exception):
    """Base class for recoverable tracking errors (skip the tick / reject config)."""


class DegenerateGeometryError(RepTrackerError, ValueError):
    """Two or more of the three points coincide, so there is no angle."""


class MissingJointError(RepTrackerError, KeyError):
    def __init__(self, missing):
        self.missing = tuple(sorted(missing))
        super().__init__(f"missing joints: {', '.join(self.missing)}")

    def __str__(self):
        return self.args[0]


class InvalidConfigurationError(RepTrackerError, ValueError):
    """Phase thresholds leave no room for a transition band."""


class SessionNotRunningError(RepTrackerError):
    """A tick arrived before start() or after stop()."""
