import re
import shlex
import shutil
import subprocess
from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence, Tuple

from asinstaller.config import InstallerConfig
from asinstaller.logger import LoggerManager, get_logger
from asinstaller.models import RepositorySpec

CHANNEL_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]*$')
PACKAGE_URL_PATTERN = re.compile(r'^https?://[A-Za-z0-9._~:/%+-]+\.rpm$')


def validate_channel_name(channel: str) -> bool:
    """Validate a repository channel name before passing it to a command"""
    return bool(channel) and len(channel) <= 200 and bool(CHANNEL_PATTERN.match(channel))


class PackageManagerAdapter(ABC):
    """Abstract base class for package manager adapters

    Mutating calls return (success, message) and never raise; the installer
    decides what a failure means.
    """

    executable = ""

    def __init__(self, config: Optional[InstallerConfig] = None,
                 logger: Optional[LoggerManager] = None):
        self.config = config or InstallerConfig()
        self._logger = logger

    @property
    def logger(self) -> LoggerManager:
        if self._logger is None:
            self._logger = get_logger()
        return self._logger

    def is_available(self) -> bool:
        """Check if this package manager is installed on the system"""
        return shutil.which(self.executable) is not None

    @abstractmethod
    def validate_package_name(self, package_name: str) -> bool:
        """
        Check a package name against the naming rules of this package manager

        Args:
            package_name: Name to check

        Returns:
            True if the name is safe to pass to the package manager
        """
        pass

    @abstractmethod
    def refresh_cache(self) -> Tuple[bool, str]:
        """
        Refresh repository metadata

        Returns:
            Tuple of (success: bool, message: str)
        """
        pass

    @abstractmethod
    def install_packages(self, package_names: Sequence[str]) -> Tuple[bool, str]:
        """
        Install one or more packages in a single transaction

        Args:
            package_names: Names (or, for RPM, package URLs) to install

        Returns:
            Tuple of (success: bool, message: str)
        """
        pass

    @abstractmethod
    def remove_package(self, package_name: str) -> Tuple[bool, str]:
        """
        Remove a package

        Returns:
            Tuple of (success: bool, message: str)
        """
        pass

    @abstractmethod
    def query_installed(self, package_name: str) -> bool:
        """
        Check whether a package is installed

        Returns:
            True if installed, False otherwise
        """
        pass

    @abstractmethod
    def enable_channel(self, channel: str) -> Tuple[bool, str]:
        """
        Enable an additional repository channel

        Returns:
            Tuple of (success: bool, message: str)
        """
        pass

    @abstractmethod
    def register_repository(self, repository: RepositorySpec) -> Tuple[bool, str]:
        """
        Make a package repository known to the package manager

        Args:
            repository: Repository to register

        Returns:
            Tuple of (success: bool, message: str)
        """
        pass

    def _invalid_names(self, package_names: Sequence[str]) -> Sequence[str]:
        return [name for name in package_names if not self.validate_package_name(name)]

    def _run(self, argv: Sequence[str], timeout: int,
             env: Optional[Dict[str, str]] = None) -> Tuple[bool, str]:
        """Run a package manager command, turning every failure into (False, message)"""
        command = ' '.join(shlex.quote(a) for a in argv)
        self.logger.log_debug(f"CMD {command}")

        try:
            result = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                timeout=timeout,
                env=env
            )
        except subprocess.TimeoutExpired:
            return False, f"{command} timed out after {timeout}s"
        except OSError as e:
            return False, f"{command} could not be started: {e}"

        if result.stdout:
            self.logger.log_debug(f"STDOUT {result.stdout.strip()}")
        if result.stderr:
            self.logger.log_debug(f"STDERR {result.stderr.strip()}")

        if result.returncode == 0:
            return True, result.stdout
        error_msg = result.stderr if result.stderr else result.stdout
        return False, f"{command} exited with {result.returncode}: {error_msg.strip()}"
