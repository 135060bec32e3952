"""
Error types raised while assembling a Wine build.

Every failure is fatal: library code raises one of these and the CLI
turns it into an error message and exit status 1.
"""


class WineBuildError(Exception):
    """Base class for all build failures."""
    pass


class MissingToolError(WineBuildError):
    """A required host utility is not installed."""
    pass


class ResolutionError(WineBuildError):
    """Release metadata could not be fetched or no unique asset matched."""
    pass


class FetchError(WineBuildError):
    """A download failed."""
    pass


class ExtractionError(WineBuildError):
    """An archive could not be extracted or lacked an expected payload."""
    pass


class PackagingError(WineBuildError):
    """The final archive could not be written."""
    pass


class AssemblyError(WineBuildError):
    """Files could not be moved, merged or removed inside the working tree."""
    pass
