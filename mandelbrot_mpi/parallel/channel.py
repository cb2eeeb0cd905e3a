"""Collective channels: broadcast from the root, variable length gather onto
the root.

A channel has attributes rank, size and root and the two methods

    broadcast(buffer)                                  in place, every rank
    gatherv(sendbuf, recvbuf, counts, displacements)   recvbuf used on root

Both block until every participant of the group has made the same call.
Transport errors surface as CommunicationFailure.

MPIChannel runs over mpi4py, one participant per process.  LocalGroup runs
all participants as threads of one process, which is how the test suite
and the --threads mode drive the protocol without an MPI launcher.
"""

import threading

import numpy as num

from mandelbrot_mpi import config
from mandelbrot_mpi.mandelbrot_exceptions import CommunicationFailure


class MPIChannel(object):
    """Channel over MPI.COMM_WORLD."""

    def __init__(self, root=config.root_rank):

        # Importing the abstraction initialises MPI
        from mandelbrot_mpi.utilities import parallel_abstraction as pypar

        self._pypar = pypar
        self.rank = pypar.rank()
        self.size = pypar.size()
        self.root = root

    def broadcast(self, buffer):
        try:
            self._pypar.broadcast(buffer, self.root)
        except self._pypar.MPIException as e:
            raise CommunicationFailure('Broadcast failed on P%d: %s'
                                       % (self.rank, e)) from e
        return buffer

    def gatherv(self, sendbuf, recvbuf, counts, displacements):
        try:
            self._pypar.gatherv(sendbuf, recvbuf, counts, displacements,
                                self.root)
        except self._pypar.MPIException as e:
            raise CommunicationFailure('Gather failed on P%d: %s'
                                       % (self.rank, e)) from e
        return recvbuf

    def __repr__(self):
        return 'MPIChannel(rank=%d, size=%d, root=%d)' % (self.rank,
                                                          self.size,
                                                          self.root)


class LocalGroup(object):
    """A fixed group of participants living in threads of one process.

    Collective calls rendezvous on a shared barrier.  Every call passes the
    barrier twice: once after the contributions are posted and once after
    they have been consumed, so a slot is never overwritten while another
    participant still reads it.

    abort() breaks the barrier; every participant blocked in, or later
    entering, a collective call then gets CommunicationFailure.
    """

    def __init__(self, size, root=config.root_rank, timeout=None):

        if size < 1:
            raise ValueError('Group size must be positive, got %d' % size)
        if not 0 <= root < size:
            raise ValueError('Root %d outside [0, %d)' % (root, size))

        self.size = size
        self.root = root
        self._barrier = threading.Barrier(size, timeout=timeout)
        self._slots = [None] * size

    def channel(self, rank):
        if not 0 <= rank < self.size:
            raise ValueError('Rank %d outside [0, %d)' % (rank, self.size))
        return LocalChannel(self, rank)

    def channels(self):
        return [self.channel(rank) for rank in range(self.size)]

    def abort(self):
        self._barrier.abort()

    def _wait(self, rank, operation):
        try:
            self._barrier.wait()
        except threading.BrokenBarrierError:
            raise CommunicationFailure('%s failed on P%d: group aborted'
                                       % (operation, rank))


class LocalChannel(object):
    """One participant's view of a LocalGroup."""

    def __init__(self, group, rank):
        self._group = group
        self.rank = rank
        self.size = group.size
        self.root = group.root

    def broadcast(self, buffer):
        group = self._group

        if self.rank == self.root:
            group._slots[self.root] = num.array(buffer, copy=True)
        group._wait(self.rank, 'Broadcast')

        if self.rank != self.root:
            sent = group._slots[self.root]
            if sent.shape != buffer.shape or sent.dtype != buffer.dtype:
                group.abort()
                raise CommunicationFailure(
                    'Broadcast failed on P%d: expected %s %s, root sent %s %s'
                    % (self.rank, buffer.shape, buffer.dtype,
                       sent.shape, sent.dtype))
            buffer[...] = sent
        group._wait(self.rank, 'Broadcast')

        return buffer

    def gatherv(self, sendbuf, recvbuf, counts, displacements):
        group = self._group

        group._slots[self.rank] = num.array(sendbuf, copy=True).ravel()
        group._wait(self.rank, 'Gather')

        if self.rank == self.root:
            for i in range(self.size):
                contribution = group._slots[i]
                if contribution.size != counts[i]:
                    group.abort()
                    raise CommunicationFailure(
                        'Gather failed on P%d: P%d sent %d elements, '
                        'expected %d' % (self.rank, i, contribution.size,
                                         counts[i]))
                start = displacements[i]
                recvbuf[start:start + counts[i]] = contribution
        group._wait(self.rank, 'Gather')

        return recvbuf

    def __repr__(self):
        return 'LocalChannel(rank=%d, size=%d, root=%d)' % (self.rank,
                                                            self.size,
                                                            self.root)
