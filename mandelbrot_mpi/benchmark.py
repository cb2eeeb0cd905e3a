"""Benchmark of distributed renders

Renders square images of increasing size through a coordinator and
records the wall clock time of each render in a CSV file with columns
width,height,distributed (milliseconds).
"""

import csv
import time

from mandelbrot_mpi import config
import mandelbrot_mpi.utilities.log as log


def benchmark_sizes(start=config.benchmark_start_size,
                    stop=config.benchmark_max_size,
                    step=config.benchmark_step):
    return list(range(start, stop + 1, step))


def run_performance_tests(coordinator, sizes=None,
                          csv_file=config.benchmark_csv_file,
                          verbose=False):
    """Time one render per size and write the results to csv_file.

    The coordinator must be idle and its render loop not running; renders
    are issued with render_once.  Returns a list of (width, height, ms).
    """

    if sizes is None:
        sizes = benchmark_sizes()

    viewport = coordinator.viewport
    results = []

    with open(csv_file, 'w', newline='') as fid:
        writer = csv.writer(fid)
        writer.writerow(['width', 'height', 'distributed'])

        for size in sizes:
            start_time = time.time()
            coordinator.render_once(viewport._replace(width=size, height=size))
            render_time = int(round((time.time() - start_time) * 1000))

            msg = 'Test render %dx%d completed in %d ms' % (size, size,
                                                            render_time)
            if verbose:
                log.critical(msg)
            else:
                log.info(msg)
            log.timingInfo('render_%d, %d' % (size, render_time))

            writer.writerow([size, size, render_time])
            results.append((size, size, render_time))

    log.resource_usage()
    log.info('Performance tests complete. Results saved to %s' % csv_file)

    return results
