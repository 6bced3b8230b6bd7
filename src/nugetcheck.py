"""nugetcheck - validate a locked NuGet package set against its package source.

    Returns:
        int: Exit code
"""
import logging
import sys

from args import parse_args
from cli_config import resolve_settings
from constants import ExitCodes
from common.errors import ConfigError, ManifestParseError, RegistryError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from registry.nuget import NuGetRegistry
from report import export, print_report
from validation import ErrorKind, validate_manifest

logger = logging.getLogger(__name__)

BLOCKING_KINDS = (
    ErrorKind.PACKAGE_NOT_FOUND,
    ErrorKind.MISSING_DEPENDENCY,
    ErrorKind.INCOMPATIBLE,
)


def exit_code_for(errors, error_on_redundant=False) -> int:
    """Nonzero when any finding other than REDUNDANT exists (or REDUNDANT too, if asked)."""
    kinds = BLOCKING_KINDS + ((ErrorKind.REDUNDANT,) if error_on_redundant else ())
    if any(errors.has(kind) for kind in kinds):
        return ExitCodes.VALIDATION_ERRORS.value
    return ExitCodes.SUCCESS.value


def run(args) -> int:
    """Execute one validation run and return the process exit code."""
    try:
        settings = resolve_settings(args)
    except ConfigError as exc:
        logger.error("%s", exc)
        return ExitCodes.FILE_ERROR.value

    logger.info("Validating %s against %s", settings.manifest, settings.source)
    if settings.roots:
        logger.info("Root packages: %s", ", ".join(settings.roots))

    try:
        result = validate_manifest(settings.manifest, NuGetRegistry(settings.source), settings.roots)
    except ManifestParseError as exc:
        logger.error("%s", exc)
        return ExitCodes.FILE_ERROR.value
    except RegistryError as exc:
        logger.error("Package source error: %s", exc)
        return ExitCodes.CONNECTION_ERROR.value

    if getattr(args, "TREE", False):
        print("\n".join(result.tree.trace_lines()))
        print()

    if not getattr(args, "QUIET", False):
        print_report(result.errors.grouped())

    output = getattr(args, "OUTPUT", None)
    if output:
        try:
            export(result.errors.ordered(), output, getattr(args, "OUTPUT_FORMAT", None))
        except OSError as exc:
            logger.error("Couldn't write output file %s: %s", output, exc)
            return ExitCodes.FILE_ERROR.value

    code = exit_code_for(result.errors, getattr(args, "ERROR_ON_REDUNDANT", False))
    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="run",
                outcome="findings" if len(result.errors) else "clean",
                exit_code=code,
            ),
        )
    logger.info("Completed.")
    return code


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
