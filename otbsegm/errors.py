# -*- coding: utf-8 -*-

"""Exceptions raised by the segmentation functions."""


class OtbSegmError(Exception):
    """Base class of all the errors raised by `otbsegm`"""


class InvalidInputKind(OtbSegmError, TypeError):
    """The image or mask is neither a path nor an in-memory raster"""

    def __init__(self, name, value):
        self.name = name
        self.value = value
        super(InvalidInputKind, self).__init__(
            "<{}> in invalid format: expected a path, a Raster or a "
            "gdal.Dataset, got {}".format(name, type(value).__name__))


class ParameterRangeError(OtbSegmError, ValueError):
    """A parameter is outside of its documented range"""


class ExternalToolError(OtbSegmError, RuntimeError):
    """The Orfeo Toolbox application failed.

    The `diagnostic` attribute holds whatever the toolbox reported.
    """

    def __init__(self, application, diagnostic):
        self.application = application
        self.diagnostic = diagnostic
        super(ExternalToolError, self).__init__(
            "Orfeo Toolbox application '{}' failed: {}".format(
                application, diagnostic))


class FilesystemError(OtbSegmError, OSError):
    """A temporary file could not be written or removed"""
