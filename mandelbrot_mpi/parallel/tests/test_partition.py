#!/usr/bin/env python


import unittest
import numpy as num

from mandelbrot_mpi.parallel.partition import RowRange, partition
from mandelbrot_mpi.parallel.partition import partition_table, gather_layout


class Test_Partition(unittest.TestCase):
    def setUp(self):
        pass

    def tearDown(self):
        pass

    def test_cover_without_gaps_or_overlaps(self):
        """Ranges tile [0, total_rows) in participant order
        """

        for total_rows in range(0, 40):
            for participant_count in range(1, 12):
                table = partition_table(total_rows, participant_count)

                assert len(table) == participant_count
                assert table[0].start == 0
                assert table[-1].stop == total_rows
                for prev, nxt in zip(table[:-1], table[1:]):
                    assert prev.stop == nxt.start

                rows = [row for r in table for row in r.rows()]
                assert rows == list(range(total_rows))

    def test_sizes_differ_by_at_most_one(self):

        for total_rows in range(0, 40):
            for participant_count in range(1, 12):
                sizes = [len(r) for r in partition_table(total_rows,
                                                         participant_count)]
                assert max(sizes) - min(sizes) <= 1
                assert sum(sizes) == total_rows

                # The larger ranges come first
                assert sizes == sorted(sizes, reverse=True)

    def test_own_range_agrees_with_table(self):
        """A participant computing its own range sees what the root
        precomputed for it
        """

        for total_rows in (0, 1, 5, 17, 600, 1001):
            for participant_count in range(1, 10):
                table = partition_table(total_rows, participant_count)
                for i in range(participant_count):
                    assert partition(total_rows, participant_count, i) == table[i]

    def test_closed_form_start(self):

        # 10 rows over 4: base 2, remainder 2
        assert partition(10, 4, 0) == RowRange(0, 3)
        assert partition(10, 4, 1) == RowRange(3, 6)
        assert partition(10, 4, 2) == RowRange(6, 8)
        assert partition(10, 4, 3) == RowRange(8, 10)

    def test_four_rows_two_participants(self):

        assert partition(4, 2, 0) == RowRange(0, 2)
        assert partition(4, 2, 1) == RowRange(2, 4)

    def test_more_participants_than_rows(self):

        table = partition_table(3, 5)

        assert table == [RowRange(0, 1), RowRange(1, 2), RowRange(2, 3),
                         RowRange(3, 3), RowRange(3, 3)]
        assert len(table[3]) == 0
        assert list(table[4].rows()) == []

    def test_no_rows(self):

        for r in partition_table(0, 4):
            assert r == RowRange(0, 0)

    def test_invalid_arguments(self):

        self.assertRaises(ValueError, partition, -1, 2, 0)
        self.assertRaises(ValueError, partition, 10, 0, 0)
        self.assertRaises(ValueError, partition, 10, 2, 2)
        self.assertRaises(ValueError, partition, 10, 2, -1)

    def test_gather_layout(self):

        counts, displacements = gather_layout(10, 7, 4)

        assert num.allclose(counts, [21, 21, 14, 14])
        assert num.allclose(displacements, [0, 21, 42, 56])
        assert counts.sum() == 70

    def test_gather_layout_matches_row_offsets(self):

        for total_rows in (0, 3, 13, 64):
            for participant_count in (1, 2, 3, 7, 70):
                counts, displacements = gather_layout(total_rows, 5,
                                                      participant_count)
                table = partition_table(total_rows, participant_count)
                for i, r in enumerate(table):
                    assert counts[i] == len(r) * 5
                    assert displacements[i] == r.start * 5

    def test_gather_layout_single_participant(self):

        counts, displacements = gather_layout(6, 4, 1)

        assert list(counts) == [24]
        assert list(displacements) == [0]


#-------------------------------------------------------------

if __name__ == "__main__":
    unittest.main()
