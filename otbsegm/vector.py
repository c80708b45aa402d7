# -*- coding: utf-8 -*-

"""
A ``Vector`` instance represents a vector layer read from a file, typically
the polygons written by a segmentation in vector mode.
"""

try:
    from osgeo import ogr
    ogr.UseExceptions()
except ImportError as e:
    raise ImportError(
        str(e) + "\n\nPlease install GDAL.")

import os

from otbsegm.driver_ext import VectorDriverExt

DEFAULT_LABEL_FIELD = 'DN'


class Vector():
    """Represents the first layer of a vector file.

    Like ``Raster``, the features are not loaded into memory: the file is
    opened each time they are needed.
    """

    def __init__(self, filename, label_field=DEFAULT_LABEL_FIELD):
        """Create a new vector object read from a file.

        :param filename: path of the vector file to read
        :type filename: str or os.PathLike
        :param label_field: name of the field holding the segment labels
        :type label_field: str
        """
        self.filename = os.fspath(filename)
        self.label_field = label_field

        ds = ogr.Open(self.filename)
        layer = ds.GetLayer(0)
        defn = layer.GetLayerDefn()
        self.meta = {}
        self.meta['driver'] = ds.GetDriver().GetName()
        self.meta['layer_name'] = layer.GetName()
        self.meta['count'] = layer.GetFeatureCount()
        self.meta['geom_type'] = layer.GetGeomType()
        self.meta['fields'] = [defn.GetFieldDefn(i).GetName()
                               for i in range(defn.GetFieldCount())]
        self.meta['extent'] = layer.GetExtent() \
            if self.meta['count'] \
            else None
        srs = layer.GetSpatialRef()
        self.meta['srs'] = srs.Clone() if srs is not None else None
        layer = None
        ds = None

    def __repr__(self):
        return "Vector('{}')".format(self.filename)

    def __len__(self):
        return self.meta['count']

    @property
    def srs(self):
        """Projection of the layer, as an osr.SpatialReference or None"""
        return self.meta['srs']

    @property
    def extent(self):
        """(xmin, xmax, ymin, ymax) extent of the layer, None if empty"""
        return self.meta['extent']

    def features(self):
        """Yields a (label, geometry WKT) pair for each feature of the layer"""
        ds = ogr.Open(self.filename)
        layer = ds.GetLayer(0)
        for feature in layer:
            geometry = feature.GetGeometryRef()
            yield (feature.GetField(self.label_field)
                   if self.label_field in self.meta['fields'] else None,
                   geometry.ExportToWkt() if geometry is not None else None)
        layer = None
        ds = None

    def labels(self):
        """Returns the sorted distinct segment labels of the layer"""
        return sorted(set(label for label, _ in self.features()))

    def save(self, out_filename, overwrite=False):
        """Copies the layer into the given file, whose format is guessed from
        its extension.

        :param out_filename: path to the output file
        :type out_filename: str
        :param overwrite: if True, replace an existing file
        :type overwrite: bool
        :returns: the ``Vector`` instance corresponding to the output file
        """
        out_filename = os.fspath(out_filename)
        driver = VectorDriverExt.from_filename(out_filename).gdal_driver
        if os.path.exists(out_filename):
            if not overwrite:
                raise IOError("File already exists: '{}'".format(out_filename))
            driver.DeleteDataSource(out_filename)
        ds = ogr.Open(self.filename)
        out_ds = driver.CopyDataSource(ds, out_filename)
        out_ds = None
        ds = None
        return Vector(out_filename, label_field=self.label_field)

