"""Module where global mandelbrot_mpi parameters and default values are set
"""

import os

import numpy as num


################################################################################
# Default view
################################################################################

default_width = 800                 # Pixels
default_height = 600
default_x_min = -2.0                # Real axis
default_x_max = 1.0
default_y_min = -1.2                # Imaginary axis
default_y_max = 1.2


################################################################################
# Escape-time iteration
################################################################################

max_iterations = 250                # Iteration cap; points reaching it are black
escape_radius_squared = 4.0         # |z|**2 bound, compared with <=
hue_offset = 0.7                    # hue = hue_offset + n/max_iterations (mod 1)
black = 0x000000
block_pixels = 65536                # Pixels evaluated together by compute_rows


################################################################################
# Navigation
################################################################################

zoom_factor = 0.8                   # Range multiplier for one zoom-in step
pan_fraction = 0.1                  # Fraction of the real range moved per pan step


################################################################################
# Collective protocol
################################################################################

root_rank = 0                       # The coordinator
record_length = 6                   # [width, height, x_min, x_max, y_min, y_max]
shutdown_value = -1.0               # First field of the shutdown sentinel
record_dtype = num.float64
pixel_dtype = num.uint32            # Packed 0x00RRGGBB


################################################################################
# Files, logging and display
################################################################################

default_datadir = '.'
log_filename = os.path.join(default_datadir, 'mandelbrot_mpi.log')
default_image_filename = 'mandelbrot.png'
display_refresh_interval = 50       # Milliseconds between canvas refreshes
window_title = 'Mandelbrot-MPI (rank 0)'


################################################################################
# Performance harness
################################################################################

benchmark_start_size = 1000
benchmark_max_size = 10000
benchmark_step = 1000
benchmark_csv_file = 'mandelbrot_mpi_results.csv'
