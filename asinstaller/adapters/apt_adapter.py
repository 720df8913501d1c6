import os
import re
from pathlib import Path
from typing import Sequence, Tuple

import requests

from asinstaller.adapters.base import PackageManagerAdapter
from asinstaller.models import RepositorySpec

DEB_NAME_PATTERN = re.compile(r'^[a-z0-9][a-z0-9+.-]*$')


def sources_entry(repository: RepositorySpec, keyring_path: str) -> str:
    """Render the one-line APT sources entry for a signed repository"""
    options = [f"signed-by={keyring_path}"]
    if repository.arch:
        options.insert(0, f"arch={repository.arch}")
    return f"deb [{' '.join(options)}] {repository.url} {repository.suite} {repository.component}\n"


class AptAdapter(PackageManagerAdapter):
    """Adapter for the APT package manager"""

    executable = "apt-get"

    def validate_package_name(self, package_name: str) -> bool:
        """Debian names: lowercase letters, digits, '+', '-' and '.'; start alphanumeric"""
        if not package_name or len(package_name) > 200:
            return False
        return bool(DEB_NAME_PATTERN.match(package_name))

    def _noninteractive_env(self):
        return dict(os.environ, DEBIAN_FRONTEND="noninteractive")

    def refresh_cache(self) -> Tuple[bool, str]:
        """Update APT package cache"""
        return self._run(['apt-get', 'update'], timeout=self.config.install_timeout)

    def install_packages(self, package_names: Sequence[str]) -> Tuple[bool, str]:
        """Install packages with apt-get, never asking questions"""
        if not package_names:
            return True, "Nothing to install"
        invalid = self._invalid_names(package_names)
        if invalid:
            return False, f"Invalid package name: {', '.join(invalid)}"

        return self._run(
            ['apt-get', '-y', 'install', *package_names],
            timeout=self.config.install_timeout,
            env=self._noninteractive_env()
        )

    def remove_package(self, package_name: str) -> Tuple[bool, str]:
        if not self.validate_package_name(package_name):
            return False, f"Invalid package name: {package_name}"
        return self._run(
            ['apt-get', '-y', 'remove', package_name],
            timeout=self.config.install_timeout,
            env=self._noninteractive_env()
        )

    def query_installed(self, package_name: str) -> bool:
        """Check dpkg status; packages with only config files left do not count"""
        if not self.validate_package_name(package_name):
            return False
        success, output = self._run(['dpkg', '-s', package_name], timeout=self.config.query_timeout)
        return success and 'Status: install ok installed' in output

    def enable_channel(self, channel: str) -> Tuple[bool, str]:
        return False, f"APT has no repository channels (requested {channel})"

    def register_repository(self, repository: RepositorySpec) -> Tuple[bool, str]:
        """Fetch the signing key and write the sources entry

        Both files are overwritten, so registering the same repository again
        leaves a single entry.
        """
        if not repository.key_url or not repository.suite:
            return False, f"Repository {repository.url} needs a key URL and a suite"

        self.logger.log_info(f"Fetching repository key from {repository.key_url}")
        try:
            response = requests.get(repository.key_url, timeout=self.config.network_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            return False, f"Failed to fetch repository key: {e}"

        keyring = Path(self.config.keyring_path)
        sources = Path(self.config.sources_path)
        try:
            keyring.parent.mkdir(parents=True, exist_ok=True)
            keyring.write_bytes(response.content)
            sources.parent.mkdir(parents=True, exist_ok=True)
            sources.write_text(sources_entry(repository, str(keyring)), encoding='utf-8')
        except OSError as e:
            return False, f"Failed to write repository configuration: {e}"

        return True, f"Registered {repository.url} {repository.suite} in {sources}"
