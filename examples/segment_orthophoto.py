#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Segments an orthophoto with every algorithm, in vector mode."""

import sys

from otbsegm import (link_otb, segm_meanshift, segm_watershed,
                     segm_mprofiles, segm_lsms)

IMG = sys.argv[1] if len(sys.argv) > 1 else 'orthophoto.tif'


def main():
    otb = link_otb()
    results = {
        'meanshift': segm_meanshift(IMG, otb, spatialr=10, ranger=50,
                                    maxiter=2, minsize=10),
        'watershed': segm_watershed(IMG, otb, thresh=.1, level=.2),
        'mprofiles': segm_mprofiles(IMG, otb, size=5, start=3, step=20,
                                    sigma=1),
        'lsms': segm_lsms(IMG, otb, spatialr=5, ranger=25, minsize=10),
    }
    for name, segments in results.items():
        segments.save('/tmp/{}_segments.shp'.format(name), overwrite=True)
        print("{}: {} segments".format(name, len(segments)))


if __name__ == '__main__':
    main()
