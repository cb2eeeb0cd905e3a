"""Command line of the renderer"""

from mandelbrot_mpi import config


def create_standard_parser():
    """ Creates a standard argument parser"""

    import argparse
    parser = argparse.ArgumentParser(
        description='Distributed Mandelbrot renderer. Launch with e.g. '
                    'mpiexec -np 4 mandelbrot_mpi')

    parser.add_argument('--nongui', action='store_true',
                        help='render once without a window, then shut down')

    parser.add_argument('--test', action='store_true',
                        help='run the performance tests, then shut down')

    parser.add_argument('--width', type=int, default=config.default_width,
                        help='image width in pixels')

    parser.add_argument('--height', type=int, default=config.default_height,
                        help='image height in pixels')

    parser.add_argument('--max-iter', dest='max_iter', type=int,
                        default=config.max_iterations,
                        help='escape-time iteration cap')

    parser.add_argument('-o', '--output', type=str, default=None,
                        help='image file written by --nongui')

    parser.add_argument('--csv', type=str, default=config.benchmark_csv_file,
                        help='results file written by --test')

    parser.add_argument('--sizes', type=int, nargs='+', default=None,
                        help='image sizes rendered by --test')

    parser.add_argument('--threads', type=int, default=0,
                        help='run this many participants as threads of '
                             'one process instead of over MPI')

    parser.add_argument('-v', '--verbose', nargs='?', type=bool, const=True,
                        default=False, help='turn on verbosity')

    return parser


def parse_standard_args(argv=None):
    """ Parse the command line, argv defaults to sys.argv[1:]
    """

    parser = create_standard_parser()
    args = parser.parse_args(argv)

    if args.threads < 0:
        parser.error('--threads must not be negative')

    return args
