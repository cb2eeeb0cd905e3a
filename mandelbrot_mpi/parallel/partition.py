"""Row partitioning of an image between participants.

Every participant derives its own rows, and the coordinator derives the
gather layout, from (total_rows, participant_count) alone.  Nothing here is
ever transmitted, so all of it must be pure integer arithmetic that gives
the same answer on every rank.
"""

from collections import namedtuple

import numpy as num


class RowRange(namedtuple('RowRange', ['start', 'stop'])):
    """Half open range of image rows [start, stop)."""

    __slots__ = ()

    def __len__(self):
        return self.stop - self.start

    def rows(self):
        return range(self.start, self.stop)


def partition(total_rows, participant_count, participant_index):
    """Return the RowRange owned by participant_index.

    The first total_rows % participant_count participants get one extra
    row.  Participants beyond total_rows get an empty range.
    """

    if total_rows < 0:
        raise ValueError('total_rows must be non-negative, got %d' % total_rows)
    if participant_count < 1:
        raise ValueError('participant_count must be positive, got %d'
                         % participant_count)
    if not 0 <= participant_index < participant_count:
        raise ValueError('participant_index %d outside [0, %d)'
                         % (participant_index, participant_count))

    base = total_rows // participant_count
    remainder = total_rows % participant_count

    start = participant_index * base + min(participant_index, remainder)
    stop = start + base + (1 if participant_index < remainder else 0)

    return RowRange(start, stop)


def partition_table(total_rows, participant_count):
    """RowRanges of all participants, indexed by participant."""

    return [partition(total_rows, participant_count, i)
            for i in range(participant_count)]


def gather_layout(total_rows, row_width, participant_count):
    """Element counts and displacements of a variable length gather.

    Each participant contributes len(range) * row_width pixels, placed at
    the sum of the contributions of all lower indexed participants.
    """

    table = partition_table(total_rows, participant_count)

    counts = num.array([len(r) * row_width for r in table], dtype=num.int64)
    displacements = num.zeros(participant_count, dtype=num.int64)
    displacements[1:] = num.cumsum(counts[:-1])

    return counts, displacements
