"""Render loop of the non-root participants."""

from mandelbrot_mpi import config
from mandelbrot_mpi.fractal.escape_time import color_palette
from mandelbrot_mpi.mandelbrot_exceptions import CommunicationFailure
from mandelbrot_mpi.parallel.protocol import receive_viewport, render_partition
import mandelbrot_mpi.utilities.log as log


def run_worker(channel, max_iter=config.max_iterations):
    """Serve render broadcasts until the shutdown sentinel arrives.

    Each broadcast viewport is answered with this participant's rows in the
    following gather.  Returns the number of renders served.  A
    CommunicationFailure is logged and re-raised: the group can no longer
    agree on the next collective call, so there is nothing to retry.
    """

    assert channel.rank != channel.root, 'The root runs the coordinator'

    palette = color_palette(max_iter)
    renders = 0

    log.info('Worker %d of %d waiting for render parameters'
             % (channel.rank, channel.size))

    while True:
        try:
            viewport = receive_viewport(channel)
            if viewport is None:
                log.info('Worker %d received shutdown signal after %d '
                         'renders' % (channel.rank, renders))
                return renders

            render_partition(channel, viewport, max_iter, palette)
        except CommunicationFailure as e:
            log.critical('Worker %d leaving render loop: %s'
                         % (channel.rank, e))
            raise

        renders += 1
