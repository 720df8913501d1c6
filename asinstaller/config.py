"""
Installer configuration
Static URLs, paths and package names, with a few environment overrides
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Tuple

REPO_HOST = "as-repository.openvpn.net"


@dataclass(frozen=True)
class InstallerConfig:
    """Everything the installer needs to know that is not probed from the host"""
    product_package: str = "openvpn-as"
    legacy_repo_package: str = "openvpn-as-yum"
    deb_dco_package: str = "openvpn-dco-dkms"
    rpm_dco_package: str = "kmod-ovpn-dco"
    deb_prerequisites: Tuple[str, ...] = ("ca-certificates", "wget", "net-tools", "gnupg")

    repo_base_url: str = f"https://{REPO_HOST}"
    keyring_path: str = "/etc/apt/keyrings/as-repository.asc"
    sources_path: str = "/etc/apt/sources.list.d/openvpn-as-repo.list"
    epel_release_url: str = "https://dl.fedoraproject.org/pub/epel/epel-release-latest-{release}.noarch.rpm"
    dco_doc_url: str = "https://openvpn.net/vpn-server-resources/openvpn-dco-access-server/"

    os_release_path: str = "/etc/os-release"
    log_dir: str = "/var/log/openvpn-as-installer"
    log_file: str = "install.log"

    query_timeout: int = 30
    install_timeout: int = 900
    network_timeout: int = 15

    def deb_repo_url(self) -> str:
        """APT repository serving every supported Debian and Ubuntu codename"""
        return f"{self.repo_base_url}/as/debian"

    def key_url(self) -> str:
        """Public key signing the APT repository"""
        return f"{self.repo_base_url}/as-repo-public.asc"

    def rpm_repo_url(self, dist: str, release: str) -> str:
        """URL of the repository descriptor RPM for a (DIST, RELEASE) pair"""
        return f"{self.repo_base_url}/as-repo-{dist}{release}.rpm"


def load_config(environ: Optional[Mapping[str, str]] = None) -> InstallerConfig:
    """Build the configuration, applying ASINSTALLER_* environment overrides"""
    env = os.environ if environ is None else environ
    config = InstallerConfig()

    overrides = {}
    if env.get("ASINSTALLER_LOG_DIR"):
        overrides['log_dir'] = env["ASINSTALLER_LOG_DIR"]
    if env.get("ASINSTALLER_OS_RELEASE"):
        overrides['os_release_path'] = env["ASINSTALLER_OS_RELEASE"]
    if env.get("ASINSTALLER_REPO_BASE_URL"):
        overrides['repo_base_url'] = env["ASINSTALLER_REPO_BASE_URL"].rstrip('/')

    return replace(config, **overrides) if overrides else config
