"""Argument parsing functionality for nugetcheck."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="nugetcheck",
        description=(
            "nugetcheck - validate that a locked NuGet package set is a coherent dependency closure"
        ),
        add_help=True,
    )

    parser.add_argument("-s", "--source",
                        dest="SOURCE",
                        help=f"NuGet package source URL (default: {Constants.DEFAULT_SOURCE})",
                        action="store",
                        type=str)
    parser.add_argument("-m", "--manifest",
                        dest="MANIFEST",
                        help=f"Manifest to validate: packages.config or a PackageReference project file (default: {Constants.DEFAULT_MANIFEST})",
                        action="store",
                        type=str)
    parser.add_argument("-r", "--root",
                        dest="ROOTS",
                        help="Root package id(s); repeatable and/or comma-separated",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or CSV)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=Constants.EXPORT_FORMATS)

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--tree",
                        dest="TREE",
                        help="Print the dependency tree before the report.",
                        action="store_true")
    parser.add_argument("--error-on-redundant",
                        dest="ERROR_ON_REDUNDANT",
                        help="Exit with a non-zero status code if redundant packages are present.",
                        action="store_true")
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not print the report to the console.",
                        action="store_true")

    return parser.parse_args(argv)
