#!/usr/bin/env python


import threading
import unittest
import numpy as num

from mandelbrot_mpi import config
from mandelbrot_mpi.mandelbrot_exceptions import CommunicationFailure
from mandelbrot_mpi.mandelbrot_exceptions import InvalidViewport
from mandelbrot_mpi.fractal.viewport import Viewport
from mandelbrot_mpi.fractal.escape_time import compute_rows
from mandelbrot_mpi.parallel.channel import LocalGroup
from mandelbrot_mpi.parallel.partition import RowRange, gather_layout
from mandelbrot_mpi.parallel.protocol import encode_viewport, decode_viewport
from mandelbrot_mpi.parallel.protocol import shutdown_record, is_shutdown_record
from mandelbrot_mpi.parallel.protocol import broadcast_viewport
from mandelbrot_mpi.parallel.protocol import broadcast_shutdown
from mandelbrot_mpi.parallel.protocol import receive_viewport
from mandelbrot_mpi.parallel.protocol import render_partition


def run_group(size, target, timeout=10):
    """Run target(channel) on every participant of a LocalGroup.

    Returns (results by rank, exceptions by rank).
    """

    group = LocalGroup(size, timeout=timeout)
    results = [None] * size
    errors = [None] * size

    def runner(channel):
        try:
            results[channel.rank] = target(channel)
        except Exception as e:
            errors[channel.rank] = e
            group.abort()

    threads = [threading.Thread(target=runner, args=(channel,))
               for channel in group.channels()]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(3 * timeout)
        assert not thread.is_alive()

    return results, errors


class Test_Protocol(unittest.TestCase):
    def setUp(self):
        self.viewport = Viewport(4, 4, -2.0, 1.0, -1.2, 1.2)

    def tearDown(self):
        pass

    def test_record_layout(self):

        record = encode_viewport(self.viewport)

        assert record.dtype == config.record_dtype
        assert record.shape == (config.record_length,)
        assert num.allclose(record, [4, 4, -2.0, 1.0, -1.2, 1.2])
        assert decode_viewport(record) == self.viewport
        assert not is_shutdown_record(record)

    def test_invalid_viewport_never_encoded(self):

        self.assertRaises(InvalidViewport, encode_viewport,
                          Viewport(4, 4, 1.0, -2.0, -1.2, 1.2))

    def test_shutdown_record(self):

        record = shutdown_record()

        assert record.shape == (config.record_length,)
        assert record[0] == config.shutdown_value
        assert is_shutdown_record(record)

        # Only the first field matters
        record = encode_viewport(self.viewport)
        record[0] = -5.0
        assert is_shutdown_record(record)

    def test_shutdown_record_has_no_viewport(self):

        try:
            decode_viewport(shutdown_record())
        except InvalidViewport:
            self.fail('Sentinel reported as a bad viewport')
        except ValueError:
            pass
        else:
            self.fail('Sentinel decoded as a viewport')

    def test_broadcast_reaches_everyone(self):

        def target(channel):
            if channel.rank == channel.root:
                broadcast_viewport(channel, self.viewport)
                return self.viewport
            return receive_viewport(channel)

        results, errors = run_group(3, target)

        assert errors == [None, None, None]
        assert results == [self.viewport] * 3

    def test_sentinel_received_as_none(self):

        def target(channel):
            if channel.rank == channel.root:
                return broadcast_shutdown(channel)
            return receive_viewport(channel)

        results, errors = run_group(3, target)

        assert errors == [None, None, None]
        assert is_shutdown_record(results[0])
        assert results[1] is None and results[2] is None

    def test_gatherv_orders_by_rank(self):

        counts = num.array([3, 0, 2, 1])
        displacements = num.array([0, 3, 3, 5])

        def target(channel):
            sendbuf = num.full(counts[channel.rank], 10 + channel.rank,
                               dtype=config.pixel_dtype)
            recvbuf = None
            if channel.rank == channel.root:
                recvbuf = num.zeros(6, dtype=config.pixel_dtype)
            return channel.gatherv(sendbuf, recvbuf, counts, displacements)

        results, errors = run_group(4, target)

        assert errors == [None] * 4
        assert list(results[0]) == [10, 10, 10, 12, 12, 13]
        assert results[1] is None

    def test_gatherv_size_mismatch_fails_whole_group(self):

        counts = num.array([2, 2])
        displacements = num.array([0, 2])

        def target(channel):
            sendbuf = num.zeros(2 + channel.rank, dtype=config.pixel_dtype)
            recvbuf = None
            if channel.rank == channel.root:
                recvbuf = num.zeros(4, dtype=config.pixel_dtype)
            return channel.gatherv(sendbuf, recvbuf, counts, displacements)

        results, errors = run_group(2, target)

        assert isinstance(errors[0], CommunicationFailure)
        assert isinstance(errors[1], CommunicationFailure)

    def test_broadcast_shape_mismatch(self):

        def target(channel):
            if channel.rank == channel.root:
                return channel.broadcast(num.zeros(6))
            return channel.broadcast(num.zeros(5))

        results, errors = run_group(2, target)

        assert isinstance(errors[1], CommunicationFailure)

    def test_abort_fails_pending_calls(self):

        group = LocalGroup(2)
        channel = group.channel(1)
        group.abort()

        self.assertRaises(CommunicationFailure, channel.broadcast,
                          num.zeros(6))

    def test_render_partition_assembles_on_root(self):

        def target(channel):
            if channel.rank == channel.root:
                broadcast_viewport(channel, self.viewport)
                viewport = self.viewport
            else:
                viewport = receive_viewport(channel)
            return render_partition(channel, viewport, 250)

        for size in (1, 2, 3, 6):
            results, errors = run_group(size, target)

            assert errors == [None] * size
            image = results[0]
            assert image.shape == (4, 4)
            assert image.dtype == config.pixel_dtype
            assert num.array_equal(image.ravel(),
                                   compute_rows(self.viewport,
                                                RowRange(0, 4), 250))
            for rank in range(1, size):
                assert results[rank] is None

    def test_every_participant_derives_the_same_layout(self):

        seen = [None] * 3

        def target(channel):
            seen[channel.rank] = gather_layout(7, 5, channel.size)

        run_group(3, target)

        for counts, displacements in seen[1:]:
            assert num.array_equal(counts, seen[0][0])
            assert num.array_equal(displacements, seen[0][1])


#-------------------------------------------------------------

if __name__ == "__main__":
    unittest.main()
