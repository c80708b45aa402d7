# -*- coding: utf-8 -*-

import functools
import os

from osgeo import gdal, osr

from otbsegm.tempfiles import discard


def srs_of(image):
    """Returns the projection of a ``Raster``, a gdal.Dataset or a raster
    path, or None when it has none.

    :rtype: osr.SpatialReference
    """
    if hasattr(image, 'srs'):
        return image.srs
    if hasattr(image, 'GetProjection'):
        wkt = image.GetProjection()
    else:
        ds = gdal.Open(os.fspath(image), gdal.GA_ReadOnly)
        wkt = ds.GetProjection()
        ds = None
    if not wkt:
        return None
    srs = osr.SpatialReference(wkt)
    srs.SetAxisMappingStrategy(osr.OAMS_TRADITIONAL_GIS_ORDER)
    return srs


def fix_missing_proj(function):
    """Gives the projection of the input image to a raster result which has
    none. Vector results are returned untouched.

    The result is removed when its projection cannot be written."""
    @functools.wraps(function)
    def wrapper(image, *args, **kw):
        result = function(image, *args, **kw)
        if getattr(result, 'set_projection', None) is None \
                or result.srs is not None:
            return result
        srs = srs_of(image)
        if srs is not None:
            try:
                result.set_projection(srs)
            except RuntimeError:
                discard(result.filename)
                raise
        return result
    return wrapper
