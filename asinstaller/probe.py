"""
Environment prober
Reads /etc/os-release and the machine architecture
"""

import platform
from typing import Dict, Optional

from asinstaller.errors import EnvironmentUnavailable
from asinstaller.models import Arch, Environment

OS_RELEASE_PATH = "/etc/os-release"

ARCH_MAP = {
    'x86_64': Arch.AMD64,
    'aarch64': Arch.ARM64,
}


def parse_os_release(content: str) -> Dict[str, str]:
    """Parse the KEY=value lines of an os-release file

    Comments and blank lines are skipped; surrounding single or double
    quotes are stripped from values.
    """
    fields = {}
    for line in content.split('\n'):
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]
        fields[key.strip()] = value
    return fields


def normalize_arch(machine: str) -> Arch:
    """Map a raw machine string (uname -m) to a canonical tag"""
    return ARCH_MAP.get(machine.strip(), Arch.UNSUPPORTED)


def probe(os_release_path: str = OS_RELEASE_PATH,
          machine: Optional[str] = None,
          kernel_release: Optional[str] = None) -> Environment:
    """Capture the host Environment

    Args:
        os_release_path: os-release file to read
        machine: Raw architecture, defaults to platform.machine()
        kernel_release: Running kernel, defaults to platform.release()

    Raises:
        EnvironmentUnavailable: the os-release file is missing, unreadable
            or has no ID
    """
    try:
        with open(os_release_path, 'r', encoding='utf-8') as f:
            fields = parse_os_release(f.read())
    except (OSError, UnicodeDecodeError) as e:
        raise EnvironmentUnavailable(f"Cannot detect the OS/distribution: {e}") from e

    os_id = fields.get('ID', '').lower()
    if not os_id:
        raise EnvironmentUnavailable(f"No ID in {os_release_path}")

    return Environment(
        os_id=os_id,
        version_id=fields.get('VERSION_ID', ''),
        version_codename=fields.get('VERSION_CODENAME', ''),
        pretty_name=fields.get('PRETTY_NAME') or fields.get('NAME') or os_id,
        arch=normalize_arch(machine if machine is not None else platform.machine()),
        kernel_release=kernel_release if kernel_release is not None else platform.release(),
    )
