"""Exceptions used by mandelbrot_mpi
"""


class MandelbrotError(Exception):
    """ Generic mandelbrot_mpi error. """
    pass


class CommunicationFailure(MandelbrotError):
    """ Broadcast or gather failed at the transport level.

    Fatal to the participant that sees it.  Collective calls need group-wide
    agreement, so the participant leaves its loop instead of retrying.
    """
    pass


class InvalidViewport(MandelbrotError, ValueError):
    """ Non-finite or inverted bounds, or a non-positive resolution. """
    pass


class RenderInProgress(MandelbrotError):
    """ Viewport mutation attempted while the coordinator is not idle. """
    pass
