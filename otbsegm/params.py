# -*- coding: utf-8 -*-

"""Checks and normalization of the segmentation parameters.

Nothing here touches the filesystem: every function either returns the
values to put in a command descriptor or raises before anything is staged.
"""

import numbers
import os

import numpy as np
from osgeo import gdal

from otbsegm.errors import InvalidInputKind, ParameterRangeError
from otbsegm.raster import Raster

MODES = ('vector', 'raster')


def input_kind(obj, name='image'):
    """Returns 'path' if the given image can be handed to the toolbox as is,
    or 'memory' if it must be written to a file first.

    >>> input_kind('image.tif')
    'path'
    >>> input_kind(3)
    Traceback (most recent call last):
    ...
    otbsegm.errors.InvalidInputKind: <image> in invalid format: expected a path, a Raster or a gdal.Dataset, got int

    :param obj: the image or mask
    :param name: name of the argument, used in the error message
    :type name: str
    :rtype: str
    """
    if isinstance(obj, (str, os.PathLike, Raster)):
        return 'path'
    if isinstance(obj, gdal.Dataset):
        return 'memory'
    raise InvalidInputKind(name, obj)


def check_mode(mode):
    if mode not in MODES:
        raise ParameterRangeError(
            "<mode> must be one of {}, got {!r}".format(
                ', '.join(repr(m) for m in MODES), mode))


def round_int(value, name):
    """Rounds the given number to the nearest integer (halves to even)"""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ParameterRangeError(
            "<{}> must be a number, got {!r}".format(name, value))
    return int(round(value))


def bool_flag(value, name):
    """Returns the lowercase string form of a boolean, as the toolbox wants

    >>> bool_flag(True, 'vector_stitch')
    'true'
    """
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return value.lower()
    if isinstance(value, (bool, np.bool_)):
        return 'true' if value else 'false'
    raise ParameterRangeError(
        "<{}> must be a boolean, got {!r}".format(name, value))


def normalize_meanshift(spatialr, ranger, thresh, maxiter, minsize):
    return {'spatialr': round_int(spatialr, 'spatialr'),
            'ranger': ranger,
            'thres': thresh,
            'maxiter': maxiter,
            'minsize': minsize}


def normalize_watershed(thresh, level):
    if isinstance(level, bool) or not isinstance(level, numbers.Real) \
            or not 0 <= level <= 1:
        raise ParameterRangeError(
            "<level> must be a number between 0 and 1, got {!r}".format(
                level))
    return {'threshold': thresh,
            'level': level}


def normalize_mprofiles(size, start, step, sigma):
    return {'size': size,
            'start': start,
            'sigma': sigma,
            'step': step}


def normalize_cc(expr):
    if not isinstance(expr, str) or not expr.strip():
        raise ParameterRangeError(
            "<expr> must be a non-empty expression, got {!r}".format(expr))
    return {'expr': expr}


def normalize_lsms(spatialr, ranger, minsize, tilesize, ram):
    return {'spatialr': spatialr,
            'ranger': ranger,
            'minsize': minsize,
            'tilesizex': tilesize,
            'tilesizey': tilesize,
            'ram': ram}


def normalize_vector_options(neighbor, stitch, minsize, simplify, tilesize,
                             round_sizes=True):
    """Returns the 'mode.vector' options, keyed by their short name.

    :param round_sizes: whether minsize and tilesize are rounded to integers
    :type round_sizes: bool
    :rtype: dict
    """
    if round_sizes:
        minsize = round_int(minsize, 'vector_minsize')
        tilesize = round_int(tilesize, 'vector_tilesize')
    return {'neighbor': bool_flag(neighbor, 'vector_neighbor'),
            'stitch': bool_flag(stitch, 'vector_stitch'),
            'minsize': minsize,
            'tilesize': tilesize,
            'simplify': simplify}
