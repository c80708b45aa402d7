# -*- coding: utf-8 -*-

"""
Segmentation of an image with the Orfeo Toolbox.

Each function takes an image (a path, a ``Raster`` or an in-memory
gdal.Dataset) and a connection returned by ``link_otb``, runs one toolbox
application and returns:

* in 'vector' mode, a ``Vector`` of polygons, one per segment. The image is
  processed tile by tile, which allows to segment very large images;
* in 'raster' mode, a ``Raster`` with one band of labels. All the 'vector_*'
  arguments and the mask are ignored.

>>> otb = link_otb()                                    # doctest: +SKIP
>>> segments = segm_meanshift('image.tif', otb, ranger=50)  # doctest: +SKIP
>>> len(segments)                                       # doctest: +SKIP
1289

In-memory images and masks are written to temporary files, which are removed
once the segmentation is over. The output is written to the temporary folder
too, and is removed with them when the segmentation fails.
"""

import logging
import os

from otbsegm import command
from otbsegm import params
from otbsegm.errors import ExternalToolError
from otbsegm.fix_proj_decorator import fix_missing_proj
from otbsegm.raster import Raster
from otbsegm.tempfiles import TempFiles, stray_artifacts, temp_filename
from otbsegm.vector import Vector

logger = logging.getLogger(__name__)

SEGMENTATION_LABEL_FIELD = 'DN'
LSMS_LABEL_FIELD = 'label'


def _run(otb, descriptor, cwd=None):
    logger.info("Running %s (%s mode)", descriptor.application,
                descriptor.mode)
    out_path = otb.invoke(descriptor, cwd=cwd)
    if not os.path.exists(out_path):
        raise ExternalToolError(descriptor.application,
                                "no output written to '{}'".format(out_path))
    return out_path


def _read_result(out_path, mode, label_field):
    if mode == 'vector':
        return Vector(out_path, label_field=label_field)
    return Raster(out_path)


def _check_inputs(image, mode, mask=None):
    params.input_kind(image, 'image')
    if mask is not None:
        params.input_kind(mask, 'mask')
    params.check_mode(mode)


def _segment(filter_name, image, otb, filter_params, mode, vector_options,
             mask):
    with TempFiles() as staged:
        image_path = staged.stage(image, 'image')
        if mode == 'vector':
            mask_path = staged.stage(mask, 'mask') \
                if mask is not None \
                else None
            out_path = staged.track(temp_filename('.shp'))
        else:
            mask_path = None
            out_path = staged.track(temp_filename('.tif'))
        descriptor = command.build_segmentation(filter_name, image_path,
                                                filter_params, mode, out_path,
                                                vector_options=vector_options,
                                                mask_path=mask_path)
        _run(otb, descriptor)
        result = _read_result(out_path, mode, SEGMENTATION_LABEL_FIELD)
        staged.keep(out_path)
        return result


@fix_missing_proj
def segm_meanshift(image, otb, spatialr=5, ranger=15, thresh=0.1,
                   maxiter=100, minsize=100, mode='vector',
                   vector_neighbor=False, vector_stitch=True,
                   vector_minsize=1, vector_simplify=0.1,
                   vector_tilesize=1024, mask=None):
    """Segments an image with the mean-shift algorithm.

    Each pixel is moved, in the joint spatial/spectral space, towards the
    densest area of its neighborhood until it converges. Pixels converging to
    the same mode make up a segment.

    :param image: image to segment
    :type image: str, os.PathLike, Raster or gdal.Dataset
    :param otb: connection to the toolbox, see ``link_otb``
    :type otb: OtbLink
    :param spatialr: spatial radius of the neighborhood, in pixels. Rounded
                     to an integer
    :type spatialr: int
    :param ranger: range radius, in radiometry unit, in the multispectral
                   space
    :type ranger: float
    :param thresh: algorithm iterative scheme will stop if mean-shift vector
                   is below this threshold or if iteration number reached
                   maximum number of iterations
    :type thresh: float
    :param maxiter: maximum number of iterations
    :type maxiter: int
    :param minsize: minimum size of a region, in pixels. Smaller regions are
                    merged into the closest one
    :type minsize: int
    :param mode: 'vector' or 'raster'
    :type mode: str
    :param vector_neighbor: if False a 4-neighborhood connectivity is used,
                            if True an 8-neighborhood one
    :type vector_neighbor: bool
    :param vector_stitch: if True, stitch the polygons crossing tiles
    :type vector_stitch: bool
    :param vector_minsize: objects smaller than this size, in pixels, are
                           ignored during vectorization
    :type vector_minsize: int
    :param vector_simplify: tolerance, in pixels, used to simplify the
                            polygons
    :type vector_simplify: float
    :param vector_tilesize: size of the tiles, in pixels
    :type vector_tilesize: int
    :param mask: only the pixels where the mask is strictly positive are
                 segmented
    :type mask: str, os.PathLike, Raster or gdal.Dataset
    :returns: ``Vector`` in 'vector' mode, ``Raster`` in 'raster' mode
    """
    _check_inputs(image, mode, mask)
    filter_params = params.normalize_meanshift(spatialr, ranger, thresh,
                                               maxiter, minsize)
    vector_options = params.normalize_vector_options(
        vector_neighbor, vector_stitch, vector_minsize, vector_simplify,
        vector_tilesize)
    return _segment('meanshift', image, otb, filter_params, mode,
                    vector_options, mask)


@fix_missing_proj
def segm_watershed(image, otb, thresh=0.01, level=0.1, mode='vector',
                   vector_neighbor=False, vector_stitch=True,
                   vector_minsize=1, vector_simplify=0.1,
                   vector_tilesize=1024, mask=None):
    """Segments an image with the watershed algorithm, applied on the
    gradient magnitude of the image.

    :param thresh: depth threshold, as a fraction of the maximum depth
    :type thresh: float
    :param level: flood level used to generate the merge tree, between 0 and
                  1
    :type level: float

    See ``segm_meanshift`` for the other parameters.

    :raises ParameterRangeError: if level is not between 0 and 1
    """
    _check_inputs(image, mode, mask)
    filter_params = params.normalize_watershed(thresh, level)
    vector_options = params.normalize_vector_options(
        vector_neighbor, vector_stitch, vector_minsize, vector_simplify,
        vector_tilesize)
    return _segment('watershed', image, otb, filter_params, mode,
                    vector_options, mask)


@fix_missing_proj
def segm_mprofiles(image, otb, size=5, start=1, step=1, sigma=1,
                   mode='vector', vector_neighbor=False, vector_stitch=True,
                   vector_minsize=1, vector_simplify=0.1,
                   vector_tilesize=1024, mask=None):
    """Segments an image with morphological profiles: the image is opened and
    closed with structuring elements of increasing size, and each pixel is
    labeled after the size giving the largest derivative.

    :param size: number of structuring elements (profile size)
    :type size: int
    :param start: initial radius of the structuring element, in pixels
    :type start: int
    :param step: radius step of the structuring element, in pixels
    :type step: int
    :param sigma: profiles values under this threshold are ignored
    :type sigma: float

    See ``segm_meanshift`` for the other parameters.
    """
    _check_inputs(image, mode, mask)
    filter_params = params.normalize_mprofiles(size, start, step, sigma)
    vector_options = params.normalize_vector_options(
        vector_neighbor, vector_stitch, vector_minsize, vector_simplify,
        vector_tilesize, round_sizes=False)
    return _segment('mprofiles', image, otb, filter_params, mode,
                    vector_options, mask)


@fix_missing_proj
def segm_cc(image, otb, expr='distance > 10', mode='vector',
            vector_neighbor=False, vector_stitch=True, vector_minsize=1,
            vector_simplify=0.1, vector_tilesize=1024, mask=None):
    """Segments an image with connected components: neighboring pixels
    meeting the given condition are grouped into the same segment.

    :param expr: connection condition, written as a mathematical expression.
                 Available variables are 'p(i)b(i)', 'intensity_p(i)' and
                 'distance', (i) being replaced by the wanted index (eg.
                 'intensity_p2 > 0.5')
    :type expr: str

    See ``segm_meanshift`` for the other parameters.
    """
    _check_inputs(image, mode, mask)
    filter_params = params.normalize_cc(expr)
    vector_options = params.normalize_vector_options(
        vector_neighbor, vector_stitch, vector_minsize, vector_simplify,
        vector_tilesize)
    return _segment('cc', image, otb, filter_params, mode, vector_options,
                    mask)


@fix_missing_proj
def segm_lsms(image, otb, spatialr=5, ranger=15, minsize=100, tilesize=500,
              mode='vector', ram=256, workdir=None):
    """Segments an image with the large-scale mean-shift algorithm, which
    smooths, segments, merges small regions and (in 'vector' mode)
    vectorizes the image tile by tile.

    The toolbox leaves intermediate files in its working directory. Those
    which appear during the run are removed afterwards, and those which were
    there before are kept. Do not run several large-scale segmentations at
    the same time in the same working directory: one may remove the files of
    another.

    :param spatialr: spatial radius of the neighborhood, in pixels
    :type spatialr: int
    :param ranger: range radius, in radiometry unit, in the multispectral
                   space
    :type ranger: float
    :param minsize: minimum size of a region, in pixels
    :type minsize: int
    :param tilesize: size of the tiles along both axes, in pixels
    :type tilesize: int
    :param mode: 'vector' or 'raster'
    :type mode: str
    :param ram: memory available for processing, in MB
    :type ram: int
    :param workdir: working directory of the toolbox (default: the current
                    one)
    :type workdir: str

    See ``segm_meanshift`` for the other parameters.
    """
    _check_inputs(image, mode)
    lsms_params = params.normalize_lsms(spatialr, ranger, minsize, tilesize,
                                        ram)
    directory = os.fspath(workdir) if workdir is not None else os.getcwd()

    with TempFiles() as staged:
        image_path = staged.stage(image, 'image')
        out_path = staged.track(
            temp_filename('.shp' if mode == 'vector' else '.tif'))
        descriptor = command.build_lsms(image_path, lsms_params, mode,
                                        out_path)
        with stray_artifacts(directory, keep=[out_path]):
            _run(otb, descriptor, cwd=directory)
        result = _read_result(out_path, mode, LSMS_LABEL_FIELD)
        staged.keep(out_path)
        return result
