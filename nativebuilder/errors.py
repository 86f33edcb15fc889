class BuildError(Exception):
    """Base exception for nativebuilder errors."""

    exit_code = 1


class UnsupportedPlatformError(BuildError):
    """The host operating system is not one we can build on."""


class OSReleaseError(BuildError):
    """The OS release descriptor could not be read."""


class CommandError(BuildError):
    """An external command exited with a non-zero status."""

    def __init__(self, command, returncode, stdout="", stderr=""):
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        super().__init__(f"Command failed (Exit Code: {returncode}): {' '.join(self.command)}")

    @property
    def exit_code(self):
        return self.returncode if self.returncode > 0 else 1


class ArchiveError(BuildError):
    """A source archive is missing, unreadable or unsafe to extract."""


class ArtifactMissingError(BuildError):
    """Install reported success but an expected artifact is absent."""


class DownloadError(BuildError):
    """A source archive could not be downloaded."""


class UnknownLibraryError(BuildError):
    """No recipe is known for the requested library."""


class ConfigError(BuildError):
    """nativebuilder.toml holds an invalid value."""
