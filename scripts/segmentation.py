# -*- coding: utf-8 -*-
"""
Segment an image with the Orfeo Toolbox, eg.

    python segmentation.py meanshift image.tif -out segments.shp --spatialr 10
"""

if __name__ == "__main__":
    """
    """
    from otbsegm.cli import main

    main()
