"""Row partitioning, collective protocol, worker loop and render coordinator.

Nothing in this package initialises MPI on import; MPIChannel does so when
it is created.
"""
