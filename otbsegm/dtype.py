# -*- coding: utf-8 -*-

try:
    from osgeo import gdal
except ImportError as e:
    raise ImportError(
        str(e) + "\n\nPlease install GDAL.")
try:
    import numpy as np
except ImportError as e:
    raise ImportError(
        str(e) + "\n\nPlease install NumPy.")


class DataType(object):
    """Abstract class for a data type (int16, int32, float32, etc.), stored
    on the instance as a GDAL data type"""

    data_type_match = {}

    def _normalize(self, value):
        return value

    def __set__(self, instance, value):
        try:
            instance._gdal_dtype = self.data_type_match[self._normalize(value)]
        except KeyError:
            raise NotImplementedError(
                "Unsupported raster data type: '{}'".format(value))

    def __get__(self, instance, owner):
        if instance is None:
            return self
        revert_match = {v: k for k, v in self.data_type_match.items()}
        return revert_match[instance._gdal_dtype]


class LStrDataType(DataType):
    """Represent a data type given in lower string format (eg. 'int16', 'int32',
    'float32', etc.)"""

    data_type_match = {'uint8': gdal.GDT_Byte,
                       'uint16': gdal.GDT_UInt16,
                       'uint32': gdal.GDT_UInt32,
                       'int16': gdal.GDT_Int16,
                       'int32': gdal.GDT_Int32,
                       'float32': gdal.GDT_Float32,
                       'float64': gdal.GDT_Float64}


class UStrDataType(DataType):
    """Represent a data type given in GDAL string format (eg. 'Byte', 'Int16',
    'Float32', etc.)"""

    data_type_match = {'Byte': gdal.GDT_Byte,
                       'UInt16': gdal.GDT_UInt16,
                       'UInt32': gdal.GDT_UInt32,
                       'Int16': gdal.GDT_Int16,
                       'Int32': gdal.GDT_Int32,
                       'Float32': gdal.GDT_Float32,
                       'Float64': gdal.GDT_Float64}


class NumpyDataType(DataType):
    """Represent a data type for Numpy (eg. np.int16, np.int32, np.float32,
    etc.)"""

    data_type_match = {np.uint8: gdal.GDT_Byte,
                       np.uint16: gdal.GDT_UInt16,
                       np.uint32: gdal.GDT_UInt32,
                       np.int16: gdal.GDT_Int16,
                       np.int32: gdal.GDT_Int32,
                       np.float32: gdal.GDT_Float32,
                       np.float64: gdal.GDT_Float64}

    def _normalize(self, value):
        # accepts np.dtype('int16') as well as np.int16
        return np.dtype(value).type


class GdalDataType(DataType):
    """Represent a data type for gdal (eg. gdal.GDT_Int16, gdal.GDT_Int32,
    gdal.GDT_Float32, etc.)"""

    def __set__(self, instance, value):
        if value not in UStrDataType.data_type_match.values():
            raise NotImplementedError(
                "Unsupported raster data type: '{}'".format(value))
        instance._gdal_dtype = value

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return instance._gdal_dtype


class RasterDataType(object):
    """The usable class to manage raster data types

    >>> RasterDataType(lstr_dtype='int16').ustr_dtype
    'Int16'
    """

    lstr_dtype = LStrDataType()
    ustr_dtype = UStrDataType()
    numpy_dtype = NumpyDataType()
    gdal_dtype = GdalDataType()

    def __init__(self,
                 lstr_dtype=None,
                 ustr_dtype=None,
                 numpy_dtype=None,
                 gdal_dtype=None):
        if lstr_dtype:
            self.lstr_dtype = lstr_dtype
        elif ustr_dtype:
            self.ustr_dtype = ustr_dtype
        elif numpy_dtype is not None:
            self.numpy_dtype = numpy_dtype
        elif gdal_dtype:
            self.gdal_dtype = gdal_dtype
        else:
            raise ValueError("A data type must be given")

    def __eq__(self, other):
        return isinstance(other, RasterDataType) \
            and self.gdal_dtype == other.gdal_dtype

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.gdal_dtype)

    def __repr__(self):
        return 'RasterDataType({!r})'.format(self.ustr_dtype)
