""" Abstract parallel interface over mpi4py

    Wraps the handful of MPI calls the renderer needs: rank and size
    enquiry, the root broadcast of the render record and the variable
    length gather of pixel rows.  Importing this module initialises MPI.
"""

import sys

import numpy as np
from mpi4py import MPI
from mpi4py.util.dtlib import from_numpy_dtype


comm = MPI.COMM_WORLD
get_processor_name = MPI.Get_processor_name
finalize = MPI.Finalize

# Raised by mpi4py for transport level errors
MPIException = MPI.Exception


def size():
    return comm.size


def rank():
    return comm.rank


def broadcast(buffer, root):
    """ In-place broadcast of a numpy array from root to every rank

    Every rank must pass an array of identical shape and dtype.
    """
    comm.Bcast([buffer, from_numpy_dtype(buffer.dtype)], root=root)
    return buffer


def gatherv(sendbuf, recvbuf, counts, displacements, root):
    """ Gather variable length numpy contributions onto root

    counts and displacements are in elements, indexed by rank.  recvbuf is
    only used on root and may be None elsewhere.
    """
    sendbuf = np.ascontiguousarray(sendbuf)
    datatype = from_numpy_dtype(sendbuf.dtype)
    if comm.rank == root:
        recvmsg = [recvbuf, [int(c) for c in counts],
                   [int(d) for d in displacements], datatype]
    else:
        recvmsg = None
    comm.Gatherv([sendbuf, datatype], recvmsg, root=root)
    return recvbuf


# Global error handler
#
# Taken from https://github.com/chainer/chainermn/issues/236
def global_except_hook(exctype, value, traceback):
    try:
        sys.stderr.write("\n*****************************************************\n")
        sys.stderr.write("Uncaught exception was detected on rank {}. \n".format(
            comm.Get_rank()))
        from traceback import print_exception
        print_exception(exctype, value, traceback)
        sys.stderr.write("*****************************************************\n\n\n")
        sys.stderr.write("\n")
        sys.stderr.write("Calling MPI_Abort() to shut down MPI processes...\n")
        sys.stderr.flush()
    finally:
        try:
            comm.Abort(1)
        except Exception as e:
            sys.stderr.write("*****************************************************\n")
            sys.stderr.write("Sorry, we failed to stop MPI, this process will hang.\n")
            sys.stderr.write("*****************************************************\n")
            sys.stderr.flush()
            raise e
