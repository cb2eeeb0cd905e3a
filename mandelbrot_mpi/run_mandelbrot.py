"""Run the distributed Mandelbrot renderer.

Under MPI every rank runs this module; rank 0 becomes the coordinator
(window, --nongui render or --test benchmark) and the other ranks serve
renders until the coordinator shuts them down:

    mpiexec -np 4 mandelbrot_mpi
    mpiexec -np 4 mandelbrot_mpi --nongui -o mandelbrot.png

With --threads N the same protocol runs between N threads of one process.
"""

import sys
import threading

from mandelbrot_mpi.fractal.viewport import default_viewport, resize
from mandelbrot_mpi.parallel.channel import LocalGroup, MPIChannel
from mandelbrot_mpi.parallel.coordinator import RenderCoordinator
from mandelbrot_mpi.parallel.worker import run_worker
from mandelbrot_mpi.utilities.argparsing import parse_standard_args
import mandelbrot_mpi.utilities.log as log


def run_coordinator(channel, args):
    """Root side of a run, according to the command line flags."""

    viewport = resize(default_viewport(), args.width, args.height)
    coordinator = RenderCoordinator(channel, viewport, args.max_iter)

    if args.test:
        from mandelbrot_mpi.benchmark import run_performance_tests
        run_performance_tests(coordinator, args.sizes, args.csv,
                              verbose=args.verbose)
        coordinator.request_shutdown()
        coordinator.run()
    elif args.nongui:
        image = coordinator.render_once()
        if args.output is not None:
            from mandelbrot_mpi.display.image_io import save_image
            save_image(image, args.output, verbose=args.verbose)
        coordinator.request_shutdown()
        coordinator.run()
    else:
        from mandelbrot_mpi.display.viewer import MandelbrotViewer
        coordinator.start()
        MandelbrotViewer(coordinator).show()
        coordinator.request_shutdown()
        coordinator.join()

    if coordinator.failure is not None:
        raise coordinator.failure

    return coordinator


def run_participant(channel, args):
    if channel.rank == channel.root:
        return run_coordinator(channel, args)
    return run_worker(channel, args.max_iter)


def run_mpi(args):
    from mandelbrot_mpi.utilities import parallel_abstraction as pypar

    channel = MPIChannel()
    log.set_rank(channel.rank, channel.size)
    log.info('Processor %d of %d on node %s'
             % (channel.rank, channel.size, pypar.get_processor_name()))

    if channel.size > 1:
        # An uncaught exception on one rank must not leave the others
        # blocked in a collective call
        def except_hook(exctype, value, tb):
            log.log_exception_hook(exctype, value, tb)
            pypar.global_except_hook(exctype, value, tb)
        sys.excepthook = except_hook

    run_participant(channel, args)

    pypar.finalize()


def run_threaded(args):
    """All participants as threads; the root stays on the calling thread."""

    group = LocalGroup(args.threads)
    errors = []

    def participant(channel):
        try:
            run_participant(channel, args)
        except BaseException as e:
            errors.append(e)
            group.abort()
            raise

    workers = [threading.Thread(target=participant, args=(channel,),
                                name='worker-%d' % channel.rank)
               for channel in group.channels()
               if channel.rank != group.root]
    for thread in workers:
        thread.start()

    try:
        run_participant(group.channel(group.root), args)
    except BaseException:
        group.abort()
        raise
    finally:
        for thread in workers:
            thread.join()

    if errors:
        raise errors[0]


def main(argv=None):
    args = parse_standard_args(argv)

    if args.verbose:
        log.console_logging_level = log.INFO

    if args.threads:
        run_threaded(args)
    else:
        run_mpi(args)

    return 0


if __name__ == '__main__':
    sys.exit(main())
