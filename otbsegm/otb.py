# -*- coding: utf-8 -*-

"""Connections to the Orfeo Toolbox.

A connection is any object with an ``invoke(descriptor, cwd=None)`` method
that runs the application of a ``CommandDescriptor``, blocks until it ends
and returns the path of the written output. Two are provided:

* ``OtbApplicationLink`` uses the ``otbApplication`` Python bindings;
* ``OtbCliLink`` runs the ``otbcli_*`` launchers in a subprocess.

``link_otb`` builds one of them.
"""

import logging
import os
import shutil
import subprocess
import sys
from contextlib import contextmanager

from otbsegm.config import load_settings
from otbsegm.errors import ExternalToolError, ParameterRangeError

logger = logging.getLogger(__name__)

LAUNCHER_PREFIX = 'otbcli_'


@contextmanager
def _working_directory(cwd):
    if cwd is None or os.path.abspath(cwd) == os.getcwd():
        yield
        return
    previous = os.getcwd()
    os.chdir(cwd)
    try:
        yield
    finally:
        os.chdir(previous)


class OtbLink(object):
    """Abstract connection to the Orfeo Toolbox"""

    def invoke(self, descriptor, cwd=None):
        """Runs the application described by the given descriptor.

        :param descriptor: the application and its parameters
        :type descriptor: CommandDescriptor
        :param cwd: working directory of the run (default: the current one)
        :type cwd: str
        :returns: path of the output file
        :rtype: str
        """
        raise NotImplementedError


class OtbApplicationLink(OtbLink):
    """Runs the applications through the ``otbApplication`` module.

    The working directory of a run is the process one: a run with another
    ``cwd`` changes it for its duration, which is not thread-safe.
    """

    def __init__(self, settings=None):
        self.settings = settings if settings is not None else load_settings()
        os.environ.setdefault('OTB_APPLICATION_PATH',
                              self.settings.application_path)
        os.environ.setdefault('ITK_AUTOLOAD_PATH',
                              self.settings.application_path)
        try:
            import otbApplication
        except ImportError as e:
            raise ImportError(
                str(e)
                + "\n\nPlease install Orfeo Toolbox if it isn't installed yet."
                "\n\nAlso, add the otbApplication module path "
                "(usually something like '/usr/lib/otb/python') "
                "to the PYTHONPATH environment variable.")
        self._otb = otbApplication

    def __repr__(self):
        return 'OtbApplicationLink({!r})'.format(
            self.settings.application_path)

    def invoke(self, descriptor, cwd=None):
        app = self._otb.Registry.CreateApplication(descriptor.application)
        if app is None:
            raise ExternalToolError(
                descriptor.application,
                "unable to create the application. Please set the "
                "OTB_APPLICATION_PATH environment variable to the Orfeo "
                "Toolbox applications folder path (usually something like "
                "'/usr/lib/otb/applications')")
        try:
            for key, value in descriptor.items():
                app.SetParameterString(key, str(value))
            with _working_directory(cwd):
                app.ExecuteAndWriteOutput()
        except RuntimeError as e:
            raise ExternalToolError(descriptor.application, str(e))
        finally:
            app = None
        return descriptor.output


class OtbCliLink(OtbLink):
    """Runs the applications with the ``otbcli_<Application>`` launchers of
    the given folder."""

    def __init__(self, bin_path):
        self.bin_path = bin_path

    def __repr__(self):
        return 'OtbCliLink({!r})'.format(self.bin_path)

    def launcher(self, application):
        name = LAUNCHER_PREFIX + application
        if sys.platform.startswith('win'):
            name += '.bat'
        return os.path.join(self.bin_path, name)

    def invoke(self, descriptor, cwd=None):
        args = [self.launcher(descriptor.application)] \
            + descriptor.arguments()
        try:
            output = subprocess.check_output(args, stderr=subprocess.STDOUT,
                                             cwd=cwd)
        except subprocess.CalledProcessError as e:
            raise ExternalToolError(descriptor.application,
                                    e.output.decode('utf-8', 'replace'))
        except OSError as e:
            raise ExternalToolError(descriptor.application, str(e))
        logger.debug(output.decode('utf-8', 'replace'))
        return descriptor.output


def find_launchers(search_location=None, settings=None):
    """Returns the folder holding the ``otbcli_*`` launchers, looking in the
    given location, its 'bin' subfolder, the configured binary path and
    finally the PATH.

    :rtype: str
    """
    settings = settings if settings is not None else load_settings()
    candidates = []
    if search_location is not None:
        search_location = os.fspath(search_location)
        candidates.extend([search_location,
                           os.path.join(search_location, 'bin')])
    if settings.bin_path:
        candidates.append(settings.bin_path)
    for folder in candidates:
        if os.path.isfile(OtbCliLink(folder).launcher('Segmentation')):
            return folder
    found = shutil.which(LAUNCHER_PREFIX + 'Segmentation')
    if found is not None:
        return os.path.dirname(found)
    raise ExternalToolError(
        'Segmentation',
        "no Orfeo Toolbox launcher found in {}".format(
            candidates + ['PATH']))


def link_otb(search_location=None, backend='application', settings=None):
    """Returns a connection to the Orfeo Toolbox.

    :param search_location: installation folder of the toolbox, where the
                            launchers (cli backend) or the applications
                            (application backend) are looked for
    :type search_location: str
    :param backend: 'application' (Python bindings) or 'cli' (launchers)
    :type backend: str
    :param settings: settings to use (default: read from the environment)
    :type settings: Settings
    :rtype: OtbLink
    """
    if backend == 'application':
        settings = settings if settings is not None else load_settings()
        if search_location is not None:
            applications = os.path.join(os.fspath(search_location), 'lib',
                                        'otb', 'applications')
            if os.path.isdir(applications):
                settings = settings._replace(application_path=applications)
        return OtbApplicationLink(settings)
    if backend == 'cli':
        return OtbCliLink(find_launchers(search_location, settings))
    raise ParameterRangeError(
        "<backend> must be 'application' or 'cli', got {!r}".format(backend))
