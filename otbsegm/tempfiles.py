# -*- coding: utf-8 -*-

"""Temporary files of a segmentation: staged inputs, outputs and the stray
files the large-scale mean-shift leaves in its working directory."""

import glob
import logging
import os
import uuid
from contextlib import contextmanager

from otbsegm.config import load_settings
from otbsegm.driver_ext import DriverExt
from otbsegm.errors import FilesystemError
from otbsegm.params import input_kind

logger = logging.getLogger(__name__)

PREFIX = 'otbsegm_'

# files written by OGR beside a shapefile
SIDECARS = {'.shp': ('.shx', '.dbf', '.prj', '.cpg', '.qix')}


def temp_filename(suffix='', dir=None):
    """Returns a new absolute path in the temporary folder. The file is not
    created.

    :param suffix: extension of the file, eg. '.tif'
    :type suffix: str
    :param dir: folder of the file (default: the configured one)
    :type dir: str
    :rtype: str
    """
    directory = dir if dir is not None else load_settings().tmpdir
    return os.path.join(os.path.abspath(directory),
                        PREFIX + uuid.uuid4().hex + suffix)


def _companions(filename):
    root, ext = os.path.splitext(filename)
    # written by GDAL when statistics are computed
    companions = [filename + '.aux.xml']
    companions.extend(root + sidecar
                      for sidecar in SIDECARS.get(ext.lower(), ()))
    return companions


def _remove(filename, missing_ok=False):
    """Removes a file and the files GDAL/OGR wrote beside it"""
    try:
        os.remove(filename)
    except FileNotFoundError:
        if not missing_ok:
            raise
    for companion in _companions(filename):
        if os.path.exists(companion):
            os.remove(companion)


def discard(filename):
    """Removes an output file and its companions, only logging failures"""
    try:
        _remove(filename, missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove '%s': %s", filename, e)


class TempFiles(object):
    """Stages the in-memory images of a segmentation into temporary files,
    and removes them when the ``with`` block is left, whatever happened.

    Outputs registered with ``track`` are removed too, unless ``keep`` was
    called for them. Paths given by the caller are never copied nor removed.
    """

    def __init__(self, dir=None):
        self.dir = dir
        self.filenames = []
        self.outputs = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        try:
            self.release()
        except FilesystemError:
            if exc_type is None:
                raise
            logger.exception("Could not remove temporary files")
        return False

    def stage(self, image, name='image', suffix='.tif'):
        """Returns an absolute path to the given image, writing it into a new
        temporary file if it is an in-memory gdal.Dataset.

        :param image: path, ``Raster`` or gdal.Dataset
        :param name: name of the argument, used in error messages
        :type name: str
        :param suffix: extension of the staged file
        :type suffix: str
        :rtype: str
        """
        if input_kind(image, name) == 'path':
            return os.path.abspath(getattr(image, 'filename', None)
                                   or os.fspath(image))

        filename = temp_filename(suffix, self.dir)
        driver = DriverExt.from_filename(filename).gdal_driver
        try:
            out_ds = driver.CreateCopy(filename, image)
            out_ds.FlushCache()
            out_ds = None
        except RuntimeError as e:
            raise FilesystemError(
                "Could not write <{}> to '{}': {}".format(name, filename, e))
        self.filenames.append(filename)
        logger.debug("Staged <%s> into '%s'", name, filename)
        return filename

    def track(self, filename):
        """Registers a file about to be written by the toolbox. It may never
        be written, or only partially.

        :returns: the given filename
        """
        self.outputs.append(filename)
        return filename

    def keep(self, filename):
        """Gives up the removal of a tracked file"""
        self.outputs.remove(filename)

    def release(self):
        """Removes every staged file and every tracked output"""
        failed = []
        for filenames, missing_ok in ((self.filenames, False),
                                      (self.outputs, True)):
            while filenames:
                filename = filenames.pop()
                try:
                    _remove(filename, missing_ok)
                except OSError as e:
                    failed.append('{} ({})'.format(filename, e))
        if failed:
            raise FilesystemError(
                "Could not remove temporary files: {}".format(
                    ', '.join(failed)))


def snapshot_artifacts(pattern, directory):
    """Returns the set of the paths matching the given pattern in a folder"""
    return set(glob.glob(os.path.join(glob.escape(directory), pattern)))


@contextmanager
def stray_artifacts(directory, pattern=None, keep=()):
    """Removes, at the end of the ``with`` block, the files matching the
    pattern which appeared in the folder during the block.

    Files that were already there are kept, and so are the given files and
    the files sharing their name up to the extension (eg. the '.dbf' of a
    kept '.shp'). Removal is best effort: a file which cannot be removed is
    only logged. Two blocks watching the same folder at the same time may
    remove each other's files.

    :param directory: folder to watch
    :type directory: str
    :param pattern: glob pattern (default: the configured one)
    :type pattern: str
    :param keep: paths never to remove
    :type keep: list of str
    """
    pattern = pattern if pattern is not None else load_settings().stray_pattern
    kept = set(os.path.splitext(os.path.abspath(os.fspath(filename)))[0]
               for filename in keep)
    before = snapshot_artifacts(pattern, directory)
    try:
        yield before
    finally:
        for filename in sorted(snapshot_artifacts(pattern, directory)
                               - before):
            if os.path.splitext(os.path.abspath(filename))[0] in kept:
                continue
            try:
                os.remove(filename)
                logger.debug("Removed stray file '%s'", filename)
            except OSError as e:
                logger.warning("Could not remove stray file '%s': %s",
                               filename, e)
