""" mandelbrot_mpi renders the Mandelbrot set across the participants of an
    MPI job.  Rows of the image are split between the participants, each one
    evaluates its own rows and the coordinator on rank 0 gathers them into
    the final image.

    This is the public API of mandelbrot_mpi:

    >>> import mandelbrot_mpi

    It isolates the user from the layout of the subpackages.
"""

__version__ = '1.0.0'

# --------------------------------
# Viewport and evaluation
# --------------------------------
from mandelbrot_mpi.fractal.viewport import Viewport, default_viewport
from mandelbrot_mpi.fractal.viewport import validate_viewport, make_viewport
from mandelbrot_mpi.fractal.escape_time import evaluate, compute_rows

# --------------------------------
# Distributed rendering
# --------------------------------
from mandelbrot_mpi.parallel.partition import RowRange, partition
from mandelbrot_mpi.parallel.partition import partition_table, gather_layout
from mandelbrot_mpi.parallel.channel import MPIChannel, LocalGroup
from mandelbrot_mpi.parallel.coordinator import RenderCoordinator, RenderState
from mandelbrot_mpi.parallel.coordinator import render_cycle
from mandelbrot_mpi.parallel.worker import run_worker

# --------------------------------
# Errors
# --------------------------------
from mandelbrot_mpi.mandelbrot_exceptions import MandelbrotError
from mandelbrot_mpi.mandelbrot_exceptions import CommunicationFailure
from mandelbrot_mpi.mandelbrot_exceptions import InvalidViewport
from mandelbrot_mpi.mandelbrot_exceptions import RenderInProgress
