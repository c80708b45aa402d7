# -*- coding: utf-8 -*-

try:
    from osgeo import gdal, ogr
except ImportError as e:
    raise ImportError(
        str(e) + "\n\nPlease install GDAL.")

import os
from collections import namedtuple


GenericDriverExt = namedtuple('GenericDriverExt',
                              ['extension', 'gdal_name', 'gdal_driver'])


class DriverExt(GenericDriverExt):
    """Class to map gdal.Driver instance with raster filename extensions"""

    drivername_map = {'.tif': 'GTiff',
                      '.tiff': 'GTiff',
                      '.img': 'HFA',
                      '.vrt': 'VRT'}

    __slots__ = ()

    @staticmethod
    def _get_driver(name):
        return gdal.GetDriverByName(name)

    def __new__(cls, extension=None, gdal_driver=None):
        if extension is not None:
            try:
                driver = cls._get_driver(cls.drivername_map[extension.lower()])
            except KeyError:
                raise NotImplementedError(
                    "No driver has been mapped to extension: '{}'".format(
                        extension))
            if driver is None:
                raise NotImplementedError(
                    "Driver '{}' is not available in this GDAL build".format(
                        cls.drivername_map[extension.lower()]))
            return super(DriverExt, cls).__new__(cls,
                                                 extension,
                                                 driver.ShortName
                                                 if hasattr(driver,
                                                            'ShortName')
                                                 else driver.GetName(),
                                                 driver)
        elif gdal_driver:
            short_name = gdal_driver.ShortName \
                if hasattr(gdal_driver, 'ShortName') \
                else gdal_driver.GetName()
            extension_map = {}
            for k, v in cls.drivername_map.items():
                extension_map.setdefault(v, k)
            try:
                extension = extension_map[short_name]
            except KeyError:
                raise NotImplementedError(
                    "No extension has been mapped to driver: '{}'".format(
                        short_name))
            return super(DriverExt, cls).__new__(cls,
                                                 extension,
                                                 short_name,
                                                 gdal_driver)
        raise ValueError("Either an extension or a driver must be given")

    @classmethod
    def from_filename(cls, filename):
        """Returns the `DriverExt` matching the extension of the given file"""
        return cls(extension=_splitext(filename))


class VectorDriverExt(DriverExt):
    """Class to map ogr.Driver instance with vector filename extensions"""

    drivername_map = {'.shp': 'ESRI Shapefile',
                      '.gpkg': 'GPKG',
                      '.geojson': 'GeoJSON',
                      '.sqlite': 'SQLite'}

    __slots__ = ()

    @staticmethod
    def _get_driver(name):
        return ogr.GetDriverByName(name)


def _splitext(filename):
    return os.path.splitext(os.fspath(filename))[1]
