class TimelapseError(Exception):
    """Base class for failures that abort a capture or stitch stage."""


class InvalidParameters(TimelapseError):
    pass


class CameraError(TimelapseError):
    pass


class FrameWriteError(TimelapseError):
    pass


class StitchError(TimelapseError):
    pass
