# -*- coding: utf-8 -*-

"""Settings read from the environment.

=====================  =======================================  ==========================
Setting                Environment variable                     Default
=====================  =======================================  ==========================
application_path       OTB_APPLICATION_PATH, ITK_AUTOLOAD_PATH  /usr/lib/otb/applications
bin_path               OTB_BIN_PATH                             None
tmpdir                 OTBSEGM_TMPDIR                           system temp folder
stray_pattern          OTBSEGM_STRAY_PATTERN                    otbsegm_*FINAL.tif
=====================  =======================================  ==========================
"""

import os
from collections import namedtuple
from tempfile import gettempdir

DEFAULT_APPLICATION_PATH = '/usr/lib/otb/applications'
DEFAULT_STRAY_PATTERN = 'otbsegm_*FINAL.tif'

Settings = namedtuple('Settings', ['application_path', 'bin_path', 'tmpdir',
                                   'stray_pattern'])


def load_settings(environ=None):
    """Returns the `Settings` found in the given environment mapping
    (default: ``os.environ``).

    :param environ: mapping of environment variables
    :type environ: dict
    :rtype: Settings
    """
    env = os.environ if environ is None else environ
    application_path = env.get('OTB_APPLICATION_PATH') \
        or env.get('ITK_AUTOLOAD_PATH') \
        or DEFAULT_APPLICATION_PATH
    return Settings(application_path=application_path,
                    bin_path=env.get('OTB_BIN_PATH') or None,
                    tmpdir=env.get('OTBSEGM_TMPDIR') or gettempdir(),
                    stray_pattern=env.get('OTBSEGM_STRAY_PATTERN')
                    or DEFAULT_STRAY_PATTERN)
