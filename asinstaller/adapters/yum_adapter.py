import re
from typing import Sequence, Tuple

from asinstaller.adapters.base import (PACKAGE_URL_PATTERN, PackageManagerAdapter,
                                       validate_channel_name)
from asinstaller.models import RepositorySpec

RPM_NAME_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9+._-]*$')
# Red Hat subscription channels (e.g. rhel-7-server-optional-rpms)
SUBSCRIPTION_CHANNEL_SUFFIX = "-rpms"


class YumAdapter(PackageManagerAdapter):
    """Adapter for YUM/DNF; dnf-based hosts ship a yum compatible command"""

    executable = "yum"

    def validate_package_name(self, package_name: str) -> bool:
        """RPM names, or an http(s) URL to an .rpm file"""
        if not package_name or len(package_name) > 500:
            return False
        if package_name.startswith(('http://', 'https://')):
            return bool(PACKAGE_URL_PATTERN.match(package_name))
        return len(package_name) <= 200 and bool(RPM_NAME_PATTERN.match(package_name))

    def refresh_cache(self) -> Tuple[bool, str]:
        """List repositories, which refreshes metadata and proves they are reachable"""
        return self._run(['yum', 'repolist'], timeout=self.config.install_timeout)

    def install_packages(self, package_names: Sequence[str]) -> Tuple[bool, str]:
        if not package_names:
            return True, "Nothing to install"
        invalid = self._invalid_names(package_names)
        if invalid:
            return False, f"Invalid package name: {', '.join(invalid)}"
        return self._run(['yum', '-y', 'install', *package_names], timeout=self.config.install_timeout)

    def remove_package(self, package_name: str) -> Tuple[bool, str]:
        if not self.validate_package_name(package_name):
            return False, f"Invalid package name: {package_name}"
        return self._run(['yum', '-y', 'remove', package_name], timeout=self.config.install_timeout)

    def query_installed(self, package_name: str) -> bool:
        if not self.validate_package_name(package_name):
            return False
        success, _ = self._run(['rpm', '-q', package_name], timeout=self.config.query_timeout)
        return success

    def enable_channel(self, channel: str) -> Tuple[bool, str]:
        """Enable a subscription channel or a local repository definition"""
        if not validate_channel_name(channel):
            return False, f"Invalid channel name: {channel}"

        if channel.endswith(SUBSCRIPTION_CHANNEL_SUFFIX):
            argv = ['subscription-manager', 'repos', '--enable', channel]
        else:
            argv = ['yum', 'config-manager', '--set-enabled', channel]
        return self._run(argv, timeout=self.config.install_timeout)

    def register_repository(self, repository: RepositorySpec) -> Tuple[bool, str]:
        """Install the repository descriptor RPM"""
        return self.install_packages([repository.url])
