# -*- coding: utf-8 -*-

import unittest
import tempfile
import shutil
import os

import numpy as np

from otbsegm import array_to_dataset, Raster
from otbsegm.errors import FilesystemError, InvalidInputKind
from otbsegm.tempfiles import (TempFiles, temp_filename, snapshot_artifacts,
                               stray_artifacts, discard)

from fake_otb import make_image


def touch(filename):
    with open(filename, 'w'):
        pass


class TestTempFiles(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.image = make_image(os.path.join(self.tmpdir, 'image.tif'))
        self.dataset = array_to_dataset(
            self.image.array(), srs=self.image.srs,
            transform=self.image.meta['transform'])

    def test_temp_filename_should_be_new_and_unique(self):
        names = set(temp_filename('.shp', self.tmpdir) for _ in range(100))
        self.assertEqual(len(names), 100)
        for name in names:
            self.assertEqual(os.path.dirname(name), self.tmpdir)
            self.assertTrue(os.path.basename(name).startswith('otbsegm_'))
            self.assertTrue(name.endswith('.shp'))
            self.assertFalse(os.path.exists(name))

    def test_temp_filename_should_be_absolute(self):
        previous = os.getcwd()
        os.chdir(os.path.dirname(self.tmpdir))
        self.addCleanup(os.chdir, previous)
        name = temp_filename('.tif', os.path.basename(self.tmpdir))
        self.assertTrue(os.path.isabs(name))
        self.assertEqual(os.path.realpath(os.path.dirname(name)),
                         os.path.realpath(self.tmpdir))
        with TempFiles(self.tmpdir) as staged:
            path = staged.stage(os.path.relpath(self.image.filename))
        self.assertTrue(os.path.isabs(path))
        self.assertEqual(os.path.realpath(path),
                         os.path.realpath(self.image.filename))

    def test_tracked_output_should_be_removed_with_its_sidecars(self):
        with self.assertRaises(KeyError):
            with TempFiles(self.tmpdir) as staged:
                shp = staged.track(temp_filename('.shp', self.tmpdir))
                for ext in ('.shx', '.dbf', '.prj'):
                    touch(os.path.splitext(shp)[0] + ext)
                raise KeyError('boom')
        self.assertEqual(os.listdir(self.tmpdir), ['image.tif'])

    def test_tracked_output_may_never_be_written(self):
        with TempFiles(self.tmpdir) as staged:
            staged.track(temp_filename('.tif', self.tmpdir))
        self.assertEqual(staged.outputs, [])

    def test_kept_output_should_stay(self):
        with TempFiles(self.tmpdir) as staged:
            tif = staged.track(temp_filename('.tif', self.tmpdir))
            touch(tif)
            staged.keep(tif)
        self.assertTrue(os.path.exists(tif))

    def test_discard_should_remove_shapefile_sidecars(self):
        shp = os.path.join(self.tmpdir, 'segments.shp')
        for ext in ('.shp', '.shx', '.dbf', '.prj', '.cpg'):
            touch(os.path.join(self.tmpdir, 'segments' + ext))
        touch(os.path.join(self.tmpdir, 'segments_FINAL.tif'))
        discard(shp)
        self.assertEqual(sorted(os.listdir(self.tmpdir)),
                         ['image.tif', 'segments_FINAL.tif'])

    def test_paths_should_be_returned_unchanged(self):
        with TempFiles(self.tmpdir) as staged:
            self.assertEqual(staged.stage(self.image.filename),
                             self.image.filename)
            self.assertEqual(staged.stage(self.image), self.image.filename)
            self.assertEqual(staged.filenames, [])
        self.assertTrue(os.path.exists(self.image.filename))

    def test_dataset_should_be_written_then_removed(self):
        with TempFiles(self.tmpdir) as staged:
            filename = staged.stage(self.dataset)
            self.assertTrue(filename.endswith('.tif'))
            raster = Raster(filename)
            self.assertEqual(raster.extent, self.image.extent)
            self.assertEqual(raster.meta['count'], 3)
            self.assertTrue(np.array_equal(raster.array(),
                                           self.image.array()))
        self.assertFalse(os.path.exists(filename))

    def test_dataset_should_be_removed_on_error(self):
        with self.assertRaises(KeyError):
            with TempFiles(self.tmpdir) as staged:
                filename = staged.stage(self.dataset)
                raise KeyError('boom')
        self.assertFalse(os.path.exists(filename))

    def test_invalid_input_should_raise(self):
        with TempFiles(self.tmpdir) as staged:
            self.assertRaises(InvalidInputKind, staged.stage, 12, 'mask')

    def test_failed_removal_should_raise(self):
        with self.assertRaises(FilesystemError):
            with TempFiles(self.tmpdir) as staged:
                os.remove(staged.stage(self.dataset))

    def test_failed_removal_should_not_hide_the_first_error(self):
        with self.assertRaises(KeyError):
            with TempFiles(self.tmpdir) as staged:
                os.remove(staged.stage(self.dataset))
                raise KeyError('boom')

    def test_failed_write_should_raise(self):
        missing = os.path.join(self.tmpdir, 'missing', 'folder')
        with TempFiles(missing) as staged:
            self.assertRaises(FilesystemError, staged.stage, self.dataset)
            self.assertEqual(staged.filenames, [])

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)


class TestStrayArtifacts(unittest.TestCase):

    pattern = 'otbsegm_*FINAL.tif'

    def setUp(self):
        self.workdir = tempfile.mkdtemp()
        touch(os.path.join(self.workdir, 'otbsegm_a_FINAL.tif'))
        touch(os.path.join(self.workdir, 'a_FINAL.tif'))

    def test_snapshot(self):
        self.assertEqual(snapshot_artifacts(self.pattern, self.workdir),
                         {os.path.join(self.workdir, 'otbsegm_a_FINAL.tif')})

    def test_only_new_matching_files_should_be_removed(self):
        with stray_artifacts(self.workdir, self.pattern) as before:
            self.assertEqual(len(before), 1)
            touch(os.path.join(self.workdir, 'otbsegm_b_FINAL.tif'))
            touch(os.path.join(self.workdir, 'b_FINAL.tif'))
        self.assertEqual(sorted(os.listdir(self.workdir)),
                         ['a_FINAL.tif', 'b_FINAL.tif',
                          'otbsegm_a_FINAL.tif'])

    def test_new_files_should_be_removed_on_error(self):
        with self.assertRaises(KeyError):
            with stray_artifacts(self.workdir, self.pattern):
                touch(os.path.join(self.workdir, 'otbsegm_b_FINAL.tif'))
                raise KeyError('boom')
        self.assertFalse(os.path.exists(
            os.path.join(self.workdir, 'otbsegm_b_FINAL.tif')))

    def test_kept_files_should_not_be_removed(self):
        out = os.path.join(self.workdir, 'otbsegm_out.shp')
        with stray_artifacts(self.workdir, 'otbsegm_*', keep=[out]):
            for name in ('otbsegm_out.shp', 'otbsegm_out.dbf',
                         'otbsegm_out_FINAL.tif'):
                touch(os.path.join(self.workdir, name))
        self.assertEqual(sorted(os.listdir(self.workdir)),
                         ['a_FINAL.tif', 'otbsegm_a_FINAL.tif',
                          'otbsegm_out.dbf', 'otbsegm_out.shp'])

    def test_failed_removal_should_only_be_logged(self):
        stray = os.path.join(self.workdir, 'otbsegm_b_FINAL.tif')
        with self.assertLogs('otbsegm.tempfiles', level='WARNING') as logs:
            with stray_artifacts(self.workdir, self.pattern):
                # a folder cannot be removed by os.remove
                os.mkdir(stray)
        self.assertTrue(os.path.isdir(stray))
        self.assertIn('otbsegm_b_FINAL.tif', logs.output[0])

    def tearDown(self):
        shutil.rmtree(self.workdir, ignore_errors=True)


if __name__ == '__main__':
    unittest.main()
