"""Conversion and export of rendered images."""

import os

import numpy as num

from mandelbrot_mpi import config
import mandelbrot_mpi.utilities.log as log


def unpack_rgb(image):
    """(height, width) packed 0xRRGGBB pixels -> (height, width, 3) uint8."""

    image = num.asarray(image, dtype=config.pixel_dtype)

    rgb = num.empty(image.shape + (3,), dtype=num.uint8)
    rgb[..., 0] = (image >> 16) & 0xFF
    rgb[..., 1] = (image >> 8) & 0xFF
    rgb[..., 2] = image & 0xFF

    return rgb


def default_image_path(datadir=config.default_datadir):
    (root, ext) = os.path.splitext(config.default_image_filename)
    return os.path.join(datadir, '%s_%s%s' % (root, log.TimeStamp(), ext))


def save_image(image, path=None, verbose=False):
    """Write a packed image to path (format from the extension).

    Returns the path written.
    """

    from matplotlib import image as mpimg

    if image is None:
        raise ValueError('No image has been rendered yet')

    if path is None:
        path = default_image_path()

    mpimg.imsave(path, unpack_rgb(image))

    if verbose:
        log.critical('Image saved to %s' % path)
    else:
        log.info('Image saved to %s' % path)

    return path
