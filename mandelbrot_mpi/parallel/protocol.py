"""Wire protocol between the coordinator and the workers.

A render is two collective calls:

1. The root broadcasts a float64 record of config.record_length fields,
   [width, height, x_min, x_max, y_min, y_max].  A record whose first
   field is negative is the shutdown sentinel and the rest of it is
   ignored.

2. Every participant evaluates its own rows and takes part in a variable
   length gather of packed uint32 pixels onto the root.

Row ranges, counts and displacements are never sent.  Each participant
derives all of them from the broadcast height and the group size through
mandelbrot_mpi.parallel.partition.
"""

import numpy as num

from mandelbrot_mpi import config
from mandelbrot_mpi.fractal.escape_time import compute_rows
from mandelbrot_mpi.fractal.viewport import validate_viewport
from mandelbrot_mpi.parallel.partition import partition, gather_layout
import mandelbrot_mpi.utilities.log as log


def empty_record():
    return num.zeros(config.record_length, dtype=config.record_dtype)


def encode_viewport(viewport):
    viewport = validate_viewport(viewport)
    return num.array(viewport, dtype=config.record_dtype)


def decode_viewport(record):
    """Viewport carried by a broadcast record.

    Raises ValueError for the shutdown sentinel, which carries none.
    """

    if is_shutdown_record(record):
        raise ValueError('Shutdown record carries no viewport')

    width, height = int(record[0]), int(record[1])
    return validate_viewport((width, height) +
                             tuple(float(v) for v in record[2:]))


def shutdown_record():
    record = empty_record()
    record[0] = config.shutdown_value
    return record


def is_shutdown_record(record):
    return record[0] < 0


def broadcast_viewport(channel, viewport):
    """Root side of the parameter broadcast.  Returns the record sent."""

    record = encode_viewport(viewport)
    channel.broadcast(record)
    return record


def broadcast_shutdown(channel):
    """Root side of the shutdown broadcast."""

    record = shutdown_record()
    channel.broadcast(record)
    return record


def receive_viewport(channel):
    """Worker side of the parameter broadcast.

    Returns the broadcast Viewport, or None for the shutdown sentinel.
    """

    record = empty_record()
    channel.broadcast(record)

    if is_shutdown_record(record):
        return None
    return decode_viewport(record)


def render_partition(channel, viewport, max_iter=config.max_iterations,
                     palette=None):
    """Evaluate this participant's rows and gather them onto the root.

    Called by every participant after the broadcast.  Returns the assembled
    (height, width) image on the root and None elsewhere.
    """

    row_range = partition(viewport.height, channel.size, channel.rank)
    local_pixels = compute_rows(viewport, row_range, max_iter, palette)

    counts, displacements = gather_layout(viewport.height, viewport.width,
                                          channel.size)
    assert local_pixels.size == counts[channel.rank]

    log.debug('Rows [%d, %d) of %dx%d: %d pixels at offset %d'
              % (row_range.start, row_range.stop, viewport.width,
                 viewport.height, local_pixels.size,
                 displacements[channel.rank]))

    if channel.rank == channel.root:
        recvbuf = num.empty(viewport.width * viewport.height,
                            dtype=config.pixel_dtype)
    else:
        recvbuf = None

    channel.gatherv(local_pixels, recvbuf, counts, displacements)

    if recvbuf is None:
        return None
    return recvbuf.reshape((viewport.height, viewport.width))
