# -*- coding: utf-8 -*-

"""
A ``Raster`` instance represents a raster read from a file.

>>> raster = Raster('tests/data/RGB.byte.tif')      # doctest: +SKIP

It has some attributes:

>>> raster.filename                                 # doctest: +SKIP
'tests/data/RGB.byte.tif'
>>> raster.meta['width']                            # doctest: +SKIP
791

Segmentations in raster mode return a ``Raster`` of labels, and in-memory
images are built with ``array_to_dataset``.

Functions and methods
=====================
"""

try:
    from osgeo import osr, gdal
    gdal.UseExceptions()
except ImportError as e:
    raise ImportError(
        str(e) + "\n\nPlease install GDAL.")
try:
    import numpy as np
except ImportError as e:
    raise ImportError(
        str(e) + "\n\nPlease install NumPy.")

import os

from otbsegm import dtype as data_type
from otbsegm.driver_ext import DriverExt


def _srs_from_wkt(wkt):
    """Returns an osr.SpatialReference from a WKT string, or None if empty"""
    if not wkt:
        return None
    srs = osr.SpatialReference(wkt)
    srs.SetAxisMappingStrategy(osr.OAMS_TRADITIONAL_GIS_ORDER)
    return srs


def dataset_extent(ds):
    """Returns the (xmin, xmax, ymin, ymax) extent of a gdal.Dataset, in the
    same order as ``ogr.Layer.GetExtent``.

    :param ds: the dataset
    :type ds: gdal.Dataset
    :rtype: 4-tuple of floats
    """
    transform = ds.GetGeoTransform()
    xs, ys = [], []
    for (x, y) in [(0, 0), (0, ds.RasterYSize), (ds.RasterXSize, 0),
                   (ds.RasterXSize, ds.RasterYSize)]:
        xs.append(transform[0] + x * transform[1] + y * transform[2])
        ys.append(transform[3] + x * transform[4] + y * transform[5])
    return (min(xs), max(xs), min(ys), max(ys))


def write_file(out_filename, overwrite=False, drivername=None, dtype=None,
               array=None, width=None, height=None, depth=None, srs=None,
               transform=None, xoffset=0, yoffset=0):
    """Writes a NumPy array to an image file.

    If there is no array (array is None), the function simply create an empty
    image file of given size (width, height, depth). In other words, if array is
    None, width, height and depth must be specified.

    If array is not None, then all other parameters are optional: if the file
    exists, array will be written into the file. If the file does not exists, a
    new file will be created with same size and type than the array.

    :param out_filename: path to the output file
    :type out_filename: str
    :param overwrite: if True, overwrite file if exists. False by default.
    :type overwrite: bool
    :param drivername: name of the driver to use. None means that the driver
                       is guessed from the file extension
    :type drivername: str
    :param dtype: datatype to use for the output file. None means that the
                  type of the array is used
    :type dtype: RasterDataType
    :param array: the NumPy array to save, (height, width) or
                  (height, width, depth)
    :type array: np.ndarray
    :param width: horizontal size of the image to be created
    :type width: int
    :param height: vertical size of the image to be created
    :type width: int
    :param depth: number of bands of the image to be created
    :type depth: int
    :param srs: projection to write in the output file metadata
    :type srs: osr.SpatialReference
    :param transform: geo-transformation to use for the output file
    :type transform: 6-tuple of floats
    :param xoffset: horizontal offset. First index from which to write the array
                    in the output file if the array is smaller (default: 0)
    :type xoffset: int
    :param yoffset: Vertical offset. First index from which to write the array
                    in the output file if the array is smaller (default: 0)
    :type yoffset: int
    :returns: the ``Raster`` instance corresponding to the output file
    """
    out_filename = os.fspath(out_filename)
    if drivername is None:
        drivername = DriverExt.from_filename(out_filename).gdal_name

    if not overwrite and os.path.exists(out_filename):
        out_ds = gdal.Open(out_filename, gdal.GA_Update)
    else:
        driver = gdal.GetDriverByName(drivername)
        out_ds = _create(driver, out_filename, array, dtype, width, height,
                         depth)

    _fill(out_ds, array, srs, transform, xoffset, yoffset)
    out_ds = None
    return Raster(out_filename)


def array_to_dataset(array, srs=None, transform=None, dtype=None):
    """Returns an in-memory gdal.Dataset holding the given NumPy array.

    The dataset lives only as long as a reference to it is kept. It is
    accepted everywhere an image is expected.

    :param array: the NumPy array, (height, width) or (height, width, depth)
    :type array: np.ndarray
    :param srs: projection of the dataset
    :type srs: osr.SpatialReference
    :param transform: geo-transformation of the dataset
    :type transform: 6-tuple of floats
    :param dtype: datatype of the dataset (default: the array's)
    :type dtype: RasterDataType
    :rtype: gdal.Dataset
    """
    driver = gdal.GetDriverByName('MEM')
    ds = _create(driver, '', array, dtype, None, None, None)
    _fill(ds, array, srs, transform, 0, 0)
    return ds


def _create(driver, filename, array, dtype, width, height, depth):
    xsize, ysize = (width, height) \
        if width and height \
        else (array.shape[1], array.shape[0])
    try:
        number_bands = depth if depth else array.shape[2]
    except IndexError:
        number_bands = 1
    datatype = dtype \
        if dtype \
        else data_type.RasterDataType(numpy_dtype=array.dtype)
    return driver.Create(filename, xsize, ysize, number_bands,
                         datatype.gdal_dtype)


def _fill(ds, array, srs, transform, xoffset, yoffset):
    if srs:
        ds.SetProjection(srs.ExportToWkt())
    if transform:
        ds.SetGeoTransform(transform)

    # Save array if there is an array to save
    if array is None:
        return
    if array.ndim == 2:
        band = ds.GetRasterBand(1)
        band.WriteArray(array, xoff=xoffset, yoff=yoffset)
        band.FlushCache()
    else:
        for i in range(array.shape[2]):
            band = ds.GetRasterBand(i+1)
            band.WriteArray(array[:, :, i], xoff=xoffset, yoff=yoffset)
            band.FlushCache()


class Raster():
    """Represents a raster image that was read from a file.

    The whole raster *is not* loaded into memory. Instead this class records
    useful information about the raster (number and size of bands, projection,
    extent) and provide methods to read its values or save it elsewhere.
    """

    def __init__(self, filename):
        """Create a new raster object read from a file.

        :param filename: path of the image to read
        :type filename: str or os.PathLike
        """
        self.filename = os.fspath(filename)

        # Read information from image
        ds = gdal.Open(self.filename, gdal.GA_ReadOnly)
        self.meta = {}
        self.meta['driver'] = ds.GetDriver()            # gdal.Driver object
        self.meta['width'] = ds.RasterXSize             # int
        self.meta['height'] = ds.RasterYSize            # int
        self.meta['count'] = ds.RasterCount             # int
        self.meta['dtype'] = data_type.RasterDataType(
            gdal_dtype=ds.GetRasterBand(1).DataType)    # RasterDataType object
        self.meta['nodata_value'] = \
            ds.GetRasterBand(1).GetNoDataValue()       # float
        self.meta['transform'] = ds.GetGeoTransform(    # tuple
            can_return_null=True)
        self.meta['extent'] = dataset_extent(ds)        # tuple

        # Read spatial reference as a osr.SpatialReference object or None
        # if there is no srs in metadata
        self.meta['srs'] = _srs_from_wkt(ds.GetProjection())

        # Close file
        ds = None

    def __repr__(self):
        return "Raster('{}')".format(self.filename)

    @property
    def srs(self):
        """Projection of the raster, as an osr.SpatialReference or None"""
        return self.meta['srs']

    @srs.setter
    def srs(self, srs):
        self.set_projection(srs)

    @property
    def extent(self):
        """(xmin, xmax, ymin, ymax) extent of the raster"""
        return self.meta['extent']

    def array(self, idx_band=None):
        """Returns the NumPy array corresponding to the raster.

        If the idx_band parameter is specified, then returns the NumPy array
        corresponding only to the band in the raster which has the given index.

        :param idx_band: index of a band in the raster (starts at 1)
        :type idx_band: int
        :rtype: numpy.ndarray
        """
        ds = gdal.Open(self.filename, gdal.GA_ReadOnly)
        if idx_band is not None or self.meta['count'] == 1:
            array = ds.GetRasterBand(idx_band or 1).ReadAsArray()
        else:
            array = np.dstack([ds.GetRasterBand(i + 1).ReadAsArray()
                               for i in range(self.meta['count'])])
        ds = None
        return array

    def labels(self):
        """Returns the sorted distinct values of the first band, ie. the
        segment labels of a labeled raster.

        :rtype: numpy.ndarray
        """
        return np.unique(self.array(1))

    def set_projection(self, srs):
        """Writes the given projection into the raster's metadata.

        :param srs: projection to set
        :type srs: osgeo.osr.SpatialReference
        """
        ds = gdal.Open(self.filename, gdal.GA_Update)
        ds.SetProjection(srs.ExportToWkt())
        ds = None
        self.meta['srs'] = srs

    def save(self, out_filename, overwrite=False):
        """Copies the raster into the given file, whose format is guessed from
        its extension.

        :param out_filename: path to the output file
        :type out_filename: str
        :param overwrite: if True, replace an existing file
        :type overwrite: bool
        :returns: the ``Raster`` instance corresponding to the output file
        """
        out_filename = os.fspath(out_filename)
        if os.path.exists(out_filename) and not overwrite:
            raise IOError("File already exists: '{}'".format(out_filename))
        driver = DriverExt.from_filename(out_filename).gdal_driver
        ds = gdal.Open(self.filename, gdal.GA_ReadOnly)
        out_ds = driver.CreateCopy(out_filename, ds)
        out_ds = None
        ds = None
        return Raster(out_filename)
