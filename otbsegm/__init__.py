# -*- coding: utf-8 -*-

"""Segmentation of remote sensing images with the Orfeo Toolbox."""

from otbsegm.errors import (OtbSegmError, InvalidInputKind,
                            ParameterRangeError, ExternalToolError,
                            FilesystemError)
from otbsegm.raster import Raster, write_file, array_to_dataset
from otbsegm.vector import Vector
from otbsegm.otb import (OtbLink, OtbApplicationLink, OtbCliLink,
                         link_otb)
from otbsegm.segmentation import (segm_meanshift, segm_watershed,
                                  segm_mprofiles, segm_cc, segm_lsms)

__version__ = '0.1.0'
