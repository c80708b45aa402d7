# -*- coding: utf-8 -*-

import unittest
from unittest import mock
import tempfile
import shutil
import os

from otbsegm import Raster, Vector
from otbsegm.cli import build_parser, main

from fake_otb import FakeOtbLink, make_image


class TestParser(unittest.TestCase):

    def test_defaults(self):
        args = build_parser().parse_args(
            ['meanshift', 'image.tif', '-out', 'out.shp'])
        self.assertEqual(args.algorithm, 'meanshift')
        self.assertEqual(args.mode, 'vector')
        self.assertEqual(args.backend, 'application')
        self.assertEqual((args.spatialr, args.ranger, args.maxiter),
                         (5, 15, 100))
        self.assertIs(args.vector_stitch, True)

    def test_booleans(self):
        args = build_parser().parse_args(
            ['cc', 'image.tif', '-out', 'out.shp', '--vector_neighbor',
             'yes', '--vector_stitch', 'false'])
        self.assertIs(args.vector_neighbor, True)
        self.assertIs(args.vector_stitch, False)

    def test_algorithm_is_required(self):
        with mock.patch('sys.stderr'):
            self.assertRaises(SystemExit, build_parser().parse_args, [])


class TestMain(unittest.TestCase):

    def setUp(self):
        self.folder = tempfile.mkdtemp()
        env = mock.patch.dict(os.environ, {'OTBSEGM_TMPDIR': self.folder})
        env.start()
        self.addCleanup(env.stop)
        self.image = make_image(os.path.join(self.folder, 'image.tif'))
        self.otb = FakeOtbLink()

    def test_raster_mode_should_save_labels(self):
        out = os.path.join(self.folder, 'labels.tif')
        with mock.patch('sys.stdout'):
            saved = main(['watershed', self.image.filename, '-out', out,
                          '--mode', 'raster', '--level', '0.2'],
                         otb=self.otb)
        self.assertIsInstance(saved, Raster)
        self.assertEqual(saved.extent, self.image.extent)
        descriptor = self.otb.descriptors[-1]
        self.assertEqual(descriptor['filter'], 'watershed')
        self.assertEqual(descriptor['filter.watershed.level'], 0.2)

    def test_vector_mode_should_save_polygons(self):
        out = os.path.join(self.folder, 'segments.gpkg')
        with mock.patch('sys.stdout'):
            saved = main(['lsms', self.image.filename, '-out', out,
                          '--tilesize', '256', '-d', self.folder],
                         otb=self.otb)
        self.assertIsInstance(saved, Vector)
        self.assertEqual(len(saved), 2)
        self.assertEqual(self.otb.descriptors[-1]['tilesizey'], 256)

    def test_existing_output_should_not_be_replaced(self):
        out = os.path.join(self.folder, 'labels.tif')
        args = ['meanshift', self.image.filename, '-out', out, '--mode',
                'raster']
        with mock.patch('sys.stdout'):
            main(args, otb=self.otb)
            self.assertRaises(IOError, main, args, otb=self.otb)
            main(args + ['--overwrite'], otb=self.otb)

    def tearDown(self):
        shutil.rmtree(self.folder, ignore_errors=True)


if __name__ == '__main__':
    unittest.main()
