"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    VALIDATION_ERRORS = 3


class ExportFormats(Enum):
    """Formats supported when exporting findings to a file."""

    JSON = "json"
    CSV = "csv"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    DEFAULT_SOURCE = "https://api.nuget.org/v3/index.json"
    DEFAULT_MANIFEST = "packages.config"
    V3_INDEX_PATH = "/v3/index.json"
    V2_API_PATH = "/api/v2"
    REGISTRATION_TYPES = [
        "RegistrationsBaseUrl/3.6.0",
        "RegistrationsBaseUrl/3.4.0",
        "RegistrationsBaseUrl",
    ]

    PROJECT_FILE_SUFFIXES = (".csproj", ".vbproj", ".fsproj", ".props")

    ENV_SOURCE = "NUGETCHECK_SOURCE"
    ENV_MANIFEST = "NUGETCHECK_MANIFEST"
    ENV_ROOTS = "NUGETCHECK_ROOTS"
    ENV_LOG_LEVEL = "NUGETCHECK_LOG_LEVEL"
    CONFIG_SECTION = "nugetcheck"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    TREE_INDENT = "   "
    EXPORT_FORMATS = [ExportFormats.JSON.value, ExportFormats.CSV.value]

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300
