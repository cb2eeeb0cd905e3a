#!/usr/bin/env python


import threading
import unittest
import numpy as num

from mandelbrot_mpi.mandelbrot_exceptions import CommunicationFailure
from mandelbrot_mpi.fractal.viewport import Viewport
from mandelbrot_mpi.parallel.channel import LocalGroup
from mandelbrot_mpi.parallel.protocol import broadcast_viewport
from mandelbrot_mpi.parallel.protocol import broadcast_shutdown
from mandelbrot_mpi.parallel.protocol import render_partition
from mandelbrot_mpi.parallel.worker import run_worker

timeout = 10


class Worker_thread(threading.Thread):

    def __init__(self, channel, max_iter=250):
        threading.Thread.__init__(self)
        self.channel = channel
        self.max_iter = max_iter
        self.renders = None
        self.error = None

    def run(self):
        try:
            self.renders = run_worker(self.channel, self.max_iter)
        except Exception as e:
            self.error = e


class Test_Worker(unittest.TestCase):
    def setUp(self):
        self.viewport = Viewport(6, 5, -2.0, 1.0, -1.2, 1.2)

    def tearDown(self):
        pass

    def test_serves_renders_until_sentinel(self):

        group = LocalGroup(3, timeout=timeout)
        root = group.channel(0)
        workers = [Worker_thread(group.channel(rank)) for rank in (1, 2)]
        for worker in workers:
            worker.start()

        images = []
        for viewport in [self.viewport,
                         self.viewport._replace(width=3, height=8)]:
            broadcast_viewport(root, viewport)
            images.append(render_partition(root, viewport, 250))
        broadcast_shutdown(root)

        for worker in workers:
            worker.join(timeout)
            assert not worker.is_alive()
            assert worker.error is None
            assert worker.renders == 2

        assert images[0].shape == (5, 6)
        assert images[1].shape == (8, 3)

    def test_immediate_shutdown(self):

        group = LocalGroup(2, timeout=timeout)
        worker = Worker_thread(group.channel(1))
        worker.start()

        broadcast_shutdown(group.channel(0))

        worker.join(timeout)
        assert worker.renders == 0

    def test_leaves_loop_on_communication_failure(self):

        group = LocalGroup(2, timeout=timeout)
        worker = Worker_thread(group.channel(1))
        worker.start()

        # Root goes away without ever broadcasting
        group.abort()

        worker.join(timeout)
        assert not worker.is_alive()
        assert isinstance(worker.error, CommunicationFailure)

    def test_max_iter_must_agree(self):
        """Participants using the same cap produce the same rows as the
        root would on its own
        """

        group = LocalGroup(2, timeout=timeout)
        worker = Worker_thread(group.channel(1), max_iter=40)
        worker.start()

        root = group.channel(0)
        broadcast_viewport(root, self.viewport)
        image = render_partition(root, self.viewport, 40)
        broadcast_shutdown(root)
        worker.join(timeout)

        single = LocalGroup(1).channel(0)
        broadcast_viewport(single, self.viewport)
        reference = render_partition(single, self.viewport, 40)

        assert num.array_equal(image, reference)

    def test_not_on_root(self):

        self.assertRaises(AssertionError, run_worker,
                          LocalGroup(2).channel(0))


#-------------------------------------------------------------

if __name__ == "__main__":
    unittest.main()
