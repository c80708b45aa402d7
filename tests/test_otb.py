# -*- coding: utf-8 -*-

import unittest
from unittest import mock
import tempfile
import shutil
import sys
import os

from otbsegm import command
from otbsegm.config import load_settings
from otbsegm.errors import ExternalToolError, ParameterRangeError
from otbsegm.otb import (OtbApplicationLink, OtbCliLink, find_launchers,
                         link_otb)

from fake_otb import write_launcher


def _descriptor(out='out.tif'):
    return command.build_segmentation(
        'watershed', 'in.tif', {'threshold': 0.01, 'level': 0.1}, 'raster',
        out)


@unittest.skipIf(sys.platform.startswith('win'), "needs a POSIX shell")
class TestOtbCliLink(unittest.TestCase):

    def setUp(self):
        self.folder = tempfile.mkdtemp()
        self.bin = os.path.join(self.folder, 'bin')
        os.mkdir(self.bin)

    def test_should_pass_arguments_and_return_output(self):
        args_file = os.path.join(self.folder, 'args.txt')
        write_launcher(self.bin, 'Segmentation',
                        'echo "$@" > {}\n'.format(args_file))
        link = OtbCliLink(self.bin)
        self.assertEqual(link.invoke(_descriptor()), 'out.tif')
        with open(args_file) as f:
            self.assertEqual(
                f.read().strip(),
                '-in in.tif -filter watershed -filter.watershed.threshold '
                '0.01 -filter.watershed.level 0.1 -mode raster '
                '-mode.raster.out out.tif')

    def test_should_run_in_given_directory(self):
        write_launcher(self.bin, 'Segmentation', 'pwd > cwd.txt\n')
        OtbCliLink(self.bin).invoke(_descriptor(), cwd=self.folder)
        self.assertTrue(os.path.exists(os.path.join(self.folder, 'cwd.txt')))

    def test_failure_should_raise_with_tool_output(self):
        write_launcher(self.bin, 'Segmentation',
                        'echo "ERROR: invalid image" >&2\nexit 1\n')
        with self.assertRaises(ExternalToolError) as cm:
            OtbCliLink(self.bin).invoke(_descriptor())
        self.assertEqual(cm.exception.application, 'Segmentation')
        self.assertIn('invalid image', cm.exception.diagnostic)

    def test_missing_launcher_should_raise(self):
        self.assertRaises(ExternalToolError,
                          OtbCliLink(self.folder).invoke, _descriptor())

    def test_launchers_should_be_found_in_bin_subfolder(self):
        write_launcher(self.bin, 'Segmentation', 'exit 0\n')
        settings = load_settings({})
        self.assertEqual(find_launchers(self.folder, settings), self.bin)
        link = link_otb(self.folder, backend='cli', settings=settings)
        self.assertIsInstance(link, OtbCliLink)
        self.assertEqual(link.bin_path, self.bin)

    def test_launchers_should_be_found_in_configured_folder(self):
        write_launcher(self.bin, 'Segmentation', 'exit 0\n')
        settings = load_settings({'OTB_BIN_PATH': self.bin})
        self.assertEqual(find_launchers(None, settings), self.bin)

    def test_no_launcher_should_raise(self):
        with mock.patch('shutil.which', return_value=None):
            self.assertRaises(ExternalToolError, find_launchers,
                              self.folder, load_settings({}))

    def tearDown(self):
        shutil.rmtree(self.folder, ignore_errors=True)


class FakeApplication(object):

    def __init__(self, error=None):
        self.params = {}
        self.error = error
        self.executed = False

    def SetParameterString(self, key, value):
        self.params[key] = value

    def ExecuteAndWriteOutput(self):
        if self.error:
            raise RuntimeError(self.error)
        self.executed = True


class TestOtbApplicationLink(unittest.TestCase):

    def setUp(self):
        self.app = FakeApplication()
        self.module = mock.Mock()
        self.module.Registry.CreateApplication.return_value = self.app
        modules = mock.patch.dict(sys.modules,
                                  {'otbApplication': self.module})
        modules.start()
        self.addCleanup(modules.stop)
        environ = mock.patch.dict(os.environ, clear=True)
        environ.start()
        self.addCleanup(environ.stop)

    def test_should_set_every_parameter_as_string(self):
        link = OtbApplicationLink(load_settings({}))
        self.assertEqual(link.invoke(_descriptor()), 'out.tif')
        self.module.Registry.CreateApplication.assert_called_once_with(
            'Segmentation')
        self.assertTrue(self.app.executed)
        self.assertEqual(self.app.params['filter.watershed.level'], '0.1')
        self.assertEqual(self.app.params['mode'], 'raster')

    def test_should_set_application_path_when_unset(self):
        OtbApplicationLink(load_settings({'OTB_APPLICATION_PATH': '/otb'}))
        self.assertEqual(os.environ['OTB_APPLICATION_PATH'], '/otb')
        self.assertEqual(os.environ['ITK_AUTOLOAD_PATH'], '/otb')

    def test_failure_should_raise_external_tool_error(self):
        self.module.Registry.CreateApplication.return_value = \
            FakeApplication(error='itk::ERROR: no such file')
        link = OtbApplicationLink(load_settings({}))
        with self.assertRaises(ExternalToolError) as cm:
            link.invoke(_descriptor())
        self.assertIn('no such file', cm.exception.diagnostic)

    def test_missing_application_should_raise(self):
        self.module.Registry.CreateApplication.return_value = None
        link = OtbApplicationLink(load_settings({}))
        self.assertRaises(ExternalToolError, link.invoke, _descriptor())

    def test_link_otb_should_use_applications_of_search_location(self):
        folder = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, folder)
        applications = os.path.join(folder, 'lib', 'otb', 'applications')
        os.makedirs(applications)
        link = link_otb(folder, settings=load_settings({}))
        self.assertIsInstance(link, OtbApplicationLink)
        self.assertEqual(link.settings.application_path, applications)

    def test_missing_bindings_should_raise_import_error(self):
        with mock.patch.dict(sys.modules, {'otbApplication': None}):
            with self.assertRaises(ImportError) as cm:
                OtbApplicationLink(load_settings({}))
        self.assertIn('PYTHONPATH', str(cm.exception))


class TestLinkOtb(unittest.TestCase):

    def test_unknown_backend_should_raise(self):
        self.assertRaises(ParameterRangeError, link_otb, backend='grpc')


if __name__ == '__main__':
    unittest.main()
