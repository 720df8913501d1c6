"""
Error taxonomy for the installer
Each fatal error carries the process exit code reported by the CLI
"""

from typing import Optional

from asinstaller.models import PackageOperation, SupportDecision


class InstallerError(Exception):
    """Base class for all installer errors"""
    exit_code = 1


class EnvironmentUnavailable(InstallerError):
    """OS identity could not be read"""
    exit_code = 1


class UnsupportedPlatform(InstallerError):
    """No support matrix rule matches the host"""
    exit_code = 1

    def __init__(self, message: str, decision: Optional[SupportDecision] = None):
        super().__init__(message)
        self.decision = decision


class RepositoryError(InstallerError):
    """A package manager step failed"""
    exit_code = 4

    def __init__(self, operation: PackageOperation, detail: str = ""):
        super().__init__(f"Package manager step failed: {operation.describe()}")
        self.operation = operation
        self.detail = detail


class OptionalFeatureError(InstallerError):
    """DCO path failure; always recovered inside the DCO installer"""
    exit_code = 0

    def __init__(self, message: str, operation: Optional[PackageOperation] = None,
                 detail: str = ""):
        super().__init__(message)
        self.operation = operation
        self.detail = detail


class InstallationCancelled(InstallerError):
    """The user declined the installation before anything was changed"""
    exit_code = 0
