# -*- coding: utf-8 -*-

"""Command descriptors: the parameters handed to an Orfeo Toolbox
application, keyed by the toolbox's own parameter names.

==========  ===================  =========  =====================================
Algorithm   Application          Filter     Parameters
==========  ===================  =========  =====================================
meanshift   Segmentation         meanshift  spatialr, ranger, thres, maxiter,
                                            minsize
watershed   Segmentation         watershed  threshold, level
mprofiles   Segmentation         mprofiles  size, start, sigma, step
cc          Segmentation         cc         expr
lsms        LargeScaleMeanShift             spatialr, ranger, minsize, tilesizex,
                                            tilesizey, ram
==========  ===================  =========  =====================================
"""

import logging
from collections import OrderedDict
from collections.abc import Mapping

logger = logging.getLogger(__name__)

SEGMENTATION = 'Segmentation'
LSMS = 'LargeScaleMeanShift'

FILTER_KEYS = {'meanshift': ('spatialr', 'ranger', 'thres', 'maxiter',
                             'minsize'),
               'watershed': ('threshold', 'level'),
               'mprofiles': ('size', 'start', 'sigma', 'step'),
               'cc': ('expr',)}

VECTOR_KEYS = ('neighbor', 'stitch', 'minsize', 'tilesize', 'simplify')

LSMS_KEYS = ('spatialr', 'ranger', 'minsize', 'tilesizex', 'tilesizey', 'ram')


def _expected_keys(application, params):
    """Returns the (required, optional) key sets of a descriptor"""
    mode = params.get('mode')
    if mode not in ('vector', 'raster'):
        raise ValueError("Unknown mode: {!r}".format(mode))
    required = ['in', 'mode', 'mode.{}.out'.format(mode)]
    optional = []
    if application == SEGMENTATION:
        filter_name = params.get('filter')
        if filter_name not in FILTER_KEYS:
            raise ValueError("Unknown filter: {!r}".format(filter_name))
        required.append('filter')
        required.extend('filter.{}.{}'.format(filter_name, key)
                        for key in FILTER_KEYS[filter_name])
        if mode == 'vector':
            required.extend('mode.vector.' + key for key in VECTOR_KEYS)
            optional.append('mode.vector.inmask')
    elif application == LSMS:
        required.extend(LSMS_KEYS)
    else:
        raise ValueError("Unknown application: {!r}".format(application))
    return set(required), set(optional)


class CommandDescriptor(Mapping):
    """Read-only, ordered mapping of the parameters of one application run.

    The set of keys is checked at construction: a missing or an unexpected
    key raises ValueError.
    """

    def __init__(self, application, params):
        params = OrderedDict(params)
        required, optional = _expected_keys(application, params)
        missing = required - set(params)
        unknown = set(params) - required - optional
        if missing or unknown:
            raise ValueError(
                "Invalid parameters for {}: missing {}, unknown {}".format(
                    application, sorted(missing), sorted(unknown)))
        self.application = application
        self._params = params

    def __getitem__(self, key):
        return self._params[key]

    def __iter__(self):
        return iter(self._params)

    def __len__(self):
        return len(self._params)

    def __repr__(self):
        return 'CommandDescriptor({!r}, {!r})'.format(
            self.application, dict(self._params))

    @property
    def mode(self):
        return self._params['mode']

    @property
    def output(self):
        """Path of the file the application writes"""
        return self._params['mode.{}.out'.format(self.mode)]

    def arguments(self):
        """Returns the command line arguments of the application, eg.
        ['-in', 'image.tif', '-filter', 'meanshift', ...]"""
        args = []
        for key, value in self._params.items():
            args.extend(['-' + key, str(value)])
        return args


def build_segmentation(filter_name, image_path, params, mode, out_path,
                       vector_options=None, mask_path=None):
    """Returns the descriptor of a run of the Segmentation application.

    :param filter_name: one of 'meanshift', 'watershed', 'mprofiles', 'cc'
    :type filter_name: str
    :param image_path: path of the image to segment
    :type image_path: str
    :param params: filter parameters, keyed by their short name (eg.
                   'spatialr')
    :type params: dict
    :param mode: 'vector' or 'raster'
    :type mode: str
    :param out_path: path of the output file
    :type out_path: str
    :param vector_options: 'mode.vector' options keyed by their short name,
                           ignored in raster mode
    :type vector_options: dict
    :param mask_path: path of the mask, ignored in raster mode
    :type mask_path: str
    :rtype: CommandDescriptor
    """
    cmd = OrderedDict()
    cmd['in'] = image_path
    cmd['filter'] = filter_name
    for key in FILTER_KEYS.get(filter_name, ()):
        if key in params:
            cmd['filter.{}.{}'.format(filter_name, key)] = params[key]
    cmd['mode'] = mode
    if mode == 'vector':
        vector_options = vector_options or {}
        cmd['mode.vector.out'] = out_path
        if mask_path is not None:
            cmd['mode.vector.inmask'] = mask_path
        for key in VECTOR_KEYS:
            if key in vector_options:
                cmd['mode.vector.' + key] = vector_options[key]
    else:
        cmd['mode.raster.out'] = out_path

    descriptor = CommandDescriptor(SEGMENTATION, cmd)
    logger.debug("Built %r", descriptor)
    return descriptor


def build_lsms(image_path, params, mode, out_path):
    """Returns the descriptor of a run of the LargeScaleMeanShift application.

    :param params: spatialr, ranger, minsize, tilesizex, tilesizey, ram
    :type params: dict
    :rtype: CommandDescriptor
    """
    cmd = OrderedDict()
    cmd['in'] = image_path
    for key in LSMS_KEYS:
        if key in params:
            cmd[key] = params[key]
    cmd['mode'] = mode
    cmd['mode.{}.out'.format(mode)] = out_path

    descriptor = CommandDescriptor(LSMS, cmd)
    logger.debug("Built %r", descriptor)
    return descriptor
