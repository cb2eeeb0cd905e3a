"""Escape-time evaluation and colouring of Mandelbrot set pixels.

Two evaluators are provided.  evaluate() works on one pixel with plain
floats and is the reference.  compute_rows() evaluates a block of rows with
numpy and is what participants run.  Both perform the same float64
operations in the same order, so a boundary row evaluated by two different
participants, or by either evaluator, comes out bit-for-bit identical.

Pixel (x, y) of a width x height render maps to

    c = (x_min + x*(x_max - x_min)/width, y_min + y*(y_max - y_min)/height)

i.e. the bounds are treated as half open, which tiles seamlessly across
row ranges.
"""

import colorsys

import numpy as num

from mandelbrot_mpi import config
from mandelbrot_mpi.parallel.partition import RowRange


def pixel_to_complex(x, y, viewport):
    """Real and imaginary parts of the point sampled by pixel (x, y)."""

    cr = viewport.x_min + x * (viewport.x_max - viewport.x_min) / viewport.width
    ci = viewport.y_min + y * (viewport.y_max - viewport.y_min) / viewport.height
    return cr, ci


def escape_time(cr, ci, max_iter=config.max_iterations):
    """Number of iterations of z <- z**2 + c, from z = 0, while |z|**2 <= 4.

    Returns max_iter for points that never leave the disc.
    """

    zr = 0.0
    zi = 0.0
    n = 0
    while zr*zr + zi*zi <= config.escape_radius_squared and n < max_iter:
        zr, zi = zr*zr - zi*zi + cr, 2.0*zr*zi + ci
        n += 1

    return n


def iteration_color(n, max_iter=config.max_iterations):
    """Packed 0xRRGGBB colour of an iteration count.

    Bounded points are black; everything else gets a fully saturated hue
    starting at config.hue_offset.
    """

    if n == max_iter:
        return config.black

    hue = (config.hue_offset + n / max_iter) % 1.0
    r, g, b = colorsys.hsv_to_rgb(hue, 1.0, 1.0)

    return (_channel(r) << 16) | (_channel(g) << 8) | _channel(b)


def _channel(value):
    # Round half up to 8 bits
    return int(value * 255.0 + 0.5)


def color_palette(max_iter=config.max_iterations):
    """Colours of every iteration count 0..max_iter, as a lookup table."""

    _check_max_iter(max_iter)
    return num.array([iteration_color(n, max_iter) for n in range(max_iter + 1)],
                     dtype=config.pixel_dtype)


def evaluate(x, y, viewport, max_iter=config.max_iterations):
    """Return (iteration count, packed colour) of pixel (x, y)."""

    _check_max_iter(max_iter)
    cr, ci = pixel_to_complex(x, y, viewport)
    n = escape_time(cr, ci, max_iter)

    return n, iteration_color(n, max_iter)


def iteration_counts(viewport, row_range, max_iter=config.max_iterations):
    """Escape times of the rows in row_range as a (rows, width) int array."""

    _check_max_iter(max_iter)

    width = viewport.width
    xs = num.arange(width, dtype=num.float64)
    ys = num.arange(row_range.start, row_range.stop, dtype=num.float64)

    # Same operation order as pixel_to_complex
    cr_row = viewport.x_min + xs * (viewport.x_max - viewport.x_min) / width
    ci_col = viewport.y_min + ys * (viewport.y_max - viewport.y_min) / viewport.height

    shape = (len(ys), width)
    cr = num.broadcast_to(cr_row[num.newaxis, :], shape).ravel()
    ci = num.broadcast_to(ci_col[:, num.newaxis], shape).ravel()

    counts = num.zeros(cr.size, dtype=num.int64)

    # Only points still inside the disc are carried from one iteration to
    # the next; live holds their flat indices.
    live = num.arange(cr.size)
    zr = num.zeros(cr.size)
    zi = num.zeros(cr.size)
    for _ in range(max_iter):
        inside = zr*zr + zi*zi <= config.escape_radius_squared
        if not inside.all():
            live = live[inside]
            zr = zr[inside]
            zi = zi[inside]
            cr = cr[inside]
            ci = ci[inside]
        if live.size == 0:
            break

        zr, zi = zr*zr - zi*zi + cr, 2.0*zr*zi + ci
        counts[live] += 1

    return counts.reshape(shape)


def compute_rows(viewport, row_range, max_iter=config.max_iterations,
                 palette=None, block_pixels=config.block_pixels):
    """Packed colours of the rows in row_range, flat and row-major.

    The result has len(row_range) * viewport.width entries, which may be
    zero.  Rows are evaluated in blocks of about block_pixels pixels, so
    the working arrays stay small whatever the image size.
    """

    _check_max_iter(max_iter)
    if palette is None:
        palette = color_palette(max_iter)

    width = viewport.width
    rows_per_block = max(1, block_pixels // width)

    pixels = num.empty((row_range.stop - row_range.start) * width, dtype=config.pixel_dtype)
    for start in range(row_range.start, row_range.stop, rows_per_block):
        stop = min(start + rows_per_block, row_range.stop)
        counts = iteration_counts(viewport, RowRange(start, stop), max_iter)

        offset = (start - row_range.start) * width
        pixels[offset:offset + counts.size] = palette[counts.ravel()]

    return pixels


def _check_max_iter(max_iter):
    if (isinstance(max_iter, bool)
            or not isinstance(max_iter, (int, num.integer)) or max_iter < 1):
        raise ValueError('max_iter must be a positive integer, got %r'
                         % (max_iter,))
