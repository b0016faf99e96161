"""
Standard exit codes and error types for tagbuild commands.

Following Unix/POSIX conventions for command-line tools.
"""

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
REPOSITORY_ERROR = 64    # Repository missing, HEAD/status/log/tree unreadable
NO_VERSION_TAG = 65      # No semver tag reachable from HEAD
NOT_AT_TAG = 66          # HEAD is not exactly the nearest tag
CONFIG_ERROR = 67        # Configuration file error
ARCHIVE_ERROR = 68       # Archive entry could not be written
PACKAGE_ERROR = 69       # Unsupported package format or architecture
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class RepositoryError(CommandError):
    """Raised when the repository or one of its objects cannot be read."""
    def __init__(self, message: str):
        super().__init__(message, REPOSITORY_ERROR)


class GitCommandError(RepositoryError):
    """Raised when a git invocation fails, times out or cannot start."""
    def __init__(self, command, returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        detail = self.stderr or f"exit status {returncode}"
        super().__init__(f"{' '.join(self.command)}: {detail}")


class NoVersionTagError(CommandError):
    """Raised when no semver tag is reachable from the described commit."""
    def __init__(self, message: str = "no semver tags found"):
        super().__init__(message, NO_VERSION_TAG)


class TagNotAtHeadError(CommandError):
    """Raised when an exact-release artifact is requested past a tag."""
    def __init__(self, tag_name: str):
        super().__init__(f"tag {tag_name} must also be HEAD", NOT_AT_TAG)
        self.tag_name = tag_name


class TreeListingError(RepositoryError):
    """Raised when the tag tree could not be read and listing is strict."""


class ArchiveError(CommandError):
    """Raised when an archive cannot be written."""
    def __init__(self, message: str):
        super().__init__(message, ARCHIVE_ERROR)


class ArchiveEntryError(ArchiveError):
    """Raised when a single archive entry cannot be added."""
    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path


class PackageError(CommandError):
    """Raised for unsupported package formats or architectures."""
    def __init__(self, message: str):
        super().__init__(message, PACKAGE_ERROR)


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    if isinstance(exc, KeyboardInterrupt):
        return INTERRUPTED
    return GENERAL_ERROR

