# -*- coding: utf-8 -*-

"""Command line front-end: ``otbsegm <algorithm> image -out file [options]``"""

import argparse
import logging

from otbsegm.otb import link_otb
from otbsegm import segmentation


def _bool(value):
    if value.lower() in ('true', 'yes', '1'):
        return True
    if value.lower() in ('false', 'no', '0'):
        return False
    raise argparse.ArgumentTypeError(
        "Boolean value expected, got '{}'".format(value))


def _add_vector_arguments(parser):
    parser.add_argument("--mask", "-m", help="Path of a mask: only pixels " +
                        "whose mask is strictly positive are segmented")
    parser.add_argument("--vector_neighbor", type=_bool, default=False,
                        help="8-neighborhood connectivity if true, " +
                        "4-neighborhood if false (default: false)")
    parser.add_argument("--vector_stitch", type=_bool, default=True,
                        help="Stitch the polygons crossing tiles " +
                        "(default: true)")
    parser.add_argument("--vector_minsize", type=int, default=1,
                        help="Objects smaller than this size (in pixels) " +
                        "are ignored (default value is 1)")
    parser.add_argument("--vector_simplify", type=float, default=0.1,
                        help="Simplification tolerance of the polygons, in " +
                        "pixels (default value is 0.1)")
    parser.add_argument("--vector_tilesize", type=int, default=1024,
                        help="Size of the tiles, in pixels (default value " +
                        "is 1024)")


def build_parser():
    parser = argparse.ArgumentParser(description="Segment an image with " +
                                     "the Orfeo Toolbox and save the " +
                                     "segments as a vector or a raster file.")
    parser.add_argument("--otb", help="Installation folder of the Orfeo " +
                        "Toolbox")
    parser.add_argument("--backend", choices=['application', 'cli'],
                        default='application', help="Run the toolbox " +
                        "through its Python bindings or its launchers " +
                        "(default: application)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Print the details of the run")
    subparsers = parser.add_subparsers(dest="algorithm")
    subparsers.required = True

    def add_algorithm(name, help):
        sub = subparsers.add_parser(name, help=help)
        sub.add_argument("image", help="Path of the image to segment")
        sub.add_argument("-out", "--out_file", required=True,
                         help="Path of the output file (eg. '.shp' in " +
                         "vector mode, '.tif' in raster mode)")
        sub.add_argument("--mode", choices=['vector', 'raster'],
                         default='vector', help="Output a vector file or " +
                         "a labeled raster (default: vector)")
        sub.add_argument("--overwrite", action="store_true",
                         help="Replace the output file if it exists")
        return sub

    meanshift = add_algorithm("meanshift", "Mean-shift segmentation")
    meanshift.add_argument("--spatialr", "-spr", type=int, default=5,
                           help="Spatial radius of the neighborhood " +
                           "(default value is 5)")
    meanshift.add_argument("--ranger", "-rg", type=float, default=15,
                           help="Range radius, in radiometry unit " +
                           "(default value is 15)")
    meanshift.add_argument("--thresh", "-th", type=float, default=0.1,
                           help="Mean shift vector threshold (default " +
                           "value is 0.1)")
    meanshift.add_argument("--maxiter", "-max", type=int, default=100,
                           help="Maximum number of iterations (default " +
                           "value is 100)")
    meanshift.add_argument("--minsize", "-ms", type=int, default=100,
                           help="Minimum size of a region (default value " +
                           "is 100)")
    _add_vector_arguments(meanshift)

    watershed = add_algorithm("watershed", "Watershed segmentation")
    watershed.add_argument("--thresh", "-th", type=float, default=0.01,
                           help="Depth threshold (default value is 0.01)")
    watershed.add_argument("--level", "-l", type=float, default=0.1,
                           help="Flood level, between 0 and 1 (default " +
                           "value is 0.1)")
    _add_vector_arguments(watershed)

    mprofiles = add_algorithm("mprofiles", "Morphological profiles " +
                              "segmentation")
    mprofiles.add_argument("--size", type=int, default=5,
                           help="Profile size (default value is 5)")
    mprofiles.add_argument("--start", type=int, default=1,
                           help="Initial radius of the structuring element " +
                           "(default value is 1)")
    mprofiles.add_argument("--step", type=int, default=1,
                           help="Radius step (default value is 1)")
    mprofiles.add_argument("--sigma", type=float, default=1,
                           help="Threshold of the profiles (default value " +
                           "is 1)")
    _add_vector_arguments(mprofiles)

    cc = add_algorithm("cc", "Connected components segmentation")
    cc.add_argument("--expr", default="distance > 10",
                    help="Connection condition (default: 'distance > 10')")
    _add_vector_arguments(cc)

    lsms = add_algorithm("lsms", "Large-scale mean-shift segmentation")
    lsms.add_argument("--spatialr", "-spr", type=int, default=5,
                      help="Spatial radius of the neighborhood (default " +
                      "value is 5)")
    lsms.add_argument("--ranger", "-rg", type=float, default=15,
                      help="Range radius, in radiometry unit (default " +
                      "value is 15)")
    lsms.add_argument("--minsize", "-ms", type=int, default=100,
                      help="Minimum size of a region (default value is 100)")
    lsms.add_argument("--tilesize", "-t", type=int, default=500,
                      help="Size of the tiles (default value is 500)")
    lsms.add_argument("--ram", type=int, default=256,
                      help="Available memory, in MB (default value is 256)")
    lsms.add_argument("-d", "--dir", dest="workdir",
                      help="Working directory of the toolbox")
    return parser


_COMMON = ('otb', 'backend', 'verbose', 'algorithm', 'image', 'out_file',
           'overwrite')

_FUNCTIONS = {'meanshift': segmentation.segm_meanshift,
              'watershed': segmentation.segm_watershed,
              'mprofiles': segmentation.segm_mprofiles,
              'cc': segmentation.segm_cc,
              'lsms': segmentation.segm_lsms}


def main(argv=None, otb=None):
    """Runs the command line. Returns the saved ``Vector`` or ``Raster``.

    :param argv: arguments (default: sys.argv)
    :type argv: list of str
    :param otb: connection to use instead of the one built from '--otb' and
                '--backend'
    :type otb: OtbLink
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s:%(name)s:%(message)s')
    if otb is None:
        otb = link_otb(args.otb, backend=args.backend)

    kw = {k: v for k, v in vars(args).items() if k not in _COMMON}
    result = _FUNCTIONS[args.algorithm](args.image, otb, **kw)
    saved = result.save(args.out_file, overwrite=args.overwrite)
    print("{} segmentation has been realized succesfully: {}".format(
        args.algorithm, saved.filename))
    return saved
