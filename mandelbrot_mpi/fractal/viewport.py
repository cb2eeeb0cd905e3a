"""Complex plane bounding box and pixel resolution of a render.

Viewports are immutable: navigation returns a new Viewport and the
coordinator swaps its reference while idle.
"""

import math
from collections import namedtuple

from mandelbrot_mpi import config
from mandelbrot_mpi.mandelbrot_exceptions import InvalidViewport


class Viewport(namedtuple('Viewport',
                          ['width', 'height', 'x_min', 'x_max',
                           'y_min', 'y_max'])):
    """Pixel resolution plus [x_min, x_max] x [y_min, y_max]

    The field order is the order of the broadcast record.
    """

    __slots__ = ()

    @property
    def bounds(self):
        return (self.x_min, self.x_max, self.y_min, self.y_max)

    @property
    def resolution(self):
        return (self.width, self.height)


def default_viewport():
    return Viewport(config.default_width, config.default_height,
                    config.default_x_min, config.default_x_max,
                    config.default_y_min, config.default_y_max)


def _is_integral(value):
    if isinstance(value, bool):
        return False
    try:
        return int(value) == value
    except (TypeError, ValueError, OverflowError):
        return False


def validate_viewport(viewport):
    """Return viewport with exact int and float fields, or raise
    InvalidViewport.
    """

    try:
        width, height, x_min, x_max, y_min, y_max = viewport
    except (TypeError, ValueError):
        raise InvalidViewport('Expected 6 viewport fields, got %r'
                              % (viewport,))

    for name, value in (('width', width), ('height', height)):
        if not _is_integral(value):
            raise InvalidViewport('%s must be an integer, got %r'
                                  % (name, value))
        if value <= 0:
            raise InvalidViewport('%s must be positive, got %r'
                                  % (name, value))

    try:
        bounds = [float(b) for b in (x_min, x_max, y_min, y_max)]
    except (TypeError, ValueError):
        raise InvalidViewport('Bounds must be numbers, got %r'
                              % ((x_min, x_max, y_min, y_max),))
    if not all(math.isfinite(b) for b in bounds):
        raise InvalidViewport('Bounds must be finite, got %r' % (bounds,))
    if not bounds[0] < bounds[1]:
        raise InvalidViewport('x_min %g must be less than x_max %g'
                              % (bounds[0], bounds[1]))
    if not bounds[2] < bounds[3]:
        raise InvalidViewport('y_min %g must be less than y_max %g'
                              % (bounds[2], bounds[3]))

    return Viewport(int(width), int(height), *bounds)


def make_viewport(bounds, resolution):
    """Build a validated Viewport from (x_min, x_max, y_min, y_max) and
    (width, height).
    """

    (width, height) = resolution
    return validate_viewport((width, height) + tuple(bounds))


def pan(viewport, dx_steps=0, dy_steps=0, pan_fraction=config.pan_fraction):
    """Shift the bounds by whole pan steps.

    One step is pan_fraction of the real range on both axes, so panning
    keeps the same speed vertically and horizontally.  Positive dy moves
    towards larger imaginary values.
    """

    step = pan_fraction * (viewport.x_max - viewport.x_min)
    dx = dx_steps * step
    dy = dy_steps * step

    return validate_viewport(viewport._replace(x_min=viewport.x_min + dx,
                                               x_max=viewport.x_max + dx,
                                               y_min=viewport.y_min + dy,
                                               y_max=viewport.y_max + dy))


def zoom(viewport, factor):
    """Scale both ranges by factor about the centre (factor < 1 zooms in)."""

    if not (math.isfinite(factor) and factor > 0):
        raise InvalidViewport('Zoom factor must be positive, got %r' % factor)

    x_center = (viewport.x_min + viewport.x_max) / 2
    y_center = (viewport.y_min + viewport.y_max) / 2
    x_range = (viewport.x_max - viewport.x_min) * factor
    y_range = (viewport.y_max - viewport.y_min) * factor

    return validate_viewport(viewport._replace(x_min=x_center - x_range / 2,
                                               x_max=x_center + x_range / 2,
                                               y_min=y_center - y_range / 2,
                                               y_max=y_center + y_range / 2))


def resize(viewport, width, height):
    """Change the pixel resolution, keeping the bounds."""

    return validate_viewport(viewport._replace(width=width, height=height))
