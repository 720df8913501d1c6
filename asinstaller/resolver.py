"""
Support matrix resolver
Maps a probed Environment to the installation strategy for that host
"""

from typing import Optional

from asinstaller.config import InstallerConfig
from asinstaller.errors import UnsupportedPlatform
from asinstaller.logger import LoggerManager
from asinstaller.models import Arch, Environment, Family, SupportDecision

DEBIAN_IDS = ("ubuntu", "debian")
DEBIAN_CODENAMES = ("buster", "bullseye", "bookworm", "focal", "jammy", "noble")
# DCO is offered on every supported codename except the oldest one
OLDEST_DEBIAN_CODENAME = "buster"

RHEL_IDS = ("rhel", "centos", "rocky", "almalinux", "ol", "amzn")
RHEL_CLONES = ("rocky", "almalinux", "ol")
RHEL7_CHANNELS = ("rhel-7-server-optional-rpms", "rhel-server-rhscl-7-rpms")
CENTOS7_SCL_PACKAGE = "centos-release-scl-rh"

CLONE_ADVISORY = (
    "This Linux OS is a RHEL clone that is not officially supported. "
    "It should be compatible with the RHEL repository, but there is no "
    "guarantee that it will work as expected."
)


def evaluate(env: Environment, config: Optional[InstallerConfig] = None) -> SupportDecision:
    """Evaluate the support matrix without raising

    Rules are checked in a fixed precedence: architecture first, then the
    Debian family, then the RHEL family.
    """
    config = config or InstallerConfig()

    if env.arch is Arch.UNSUPPORTED:
        return SupportDecision.unsupported(f"architecture is not supported on {env.pretty_name}")

    if env.arch is Arch.ARM64 and env.os_id != "ubuntu":
        return SupportDecision.unsupported(f"arm64 is only supported on Ubuntu, not {env.os_id}")

    if env.os_id in DEBIAN_IDS:
        return _evaluate_debian(env, config)

    if env.os_id in RHEL_IDS:
        return _evaluate_rhel(env, config)

    return SupportDecision.unsupported(f"distribution '{env.os_id}' is not supported")


def _evaluate_debian(env: Environment, config: InstallerConfig) -> SupportDecision:
    codename = env.version_codename
    if codename not in DEBIAN_CODENAMES:
        return SupportDecision.unsupported(
            f"{env.os_id} release '{codename or env.version_id}' is not supported"
        )

    return SupportDecision(
        supported=True,
        family=Family.DEBIAN,
        variant=codename,
        package_repo_url=config.deb_repo_url(),
        dco_eligible=codename != OLDEST_DEBIAN_CODENAME,
    )


def _evaluate_rhel(env: Environment, config: InstallerConfig) -> SupportDecision:
    major = env.major_version
    os_id = env.os_id
    is_clone = os_id in RHEL_CLONES

    extra_channels = ()
    prerequisites = ()
    dco_eligible = False

    if major == "7" and os_id == "rhel":
        variant, dist = "centos7", "centos"
        extra_channels = RHEL7_CHANNELS
    elif major == "7" and os_id == "centos":
        variant, dist = "centos7", "centos"
        prerequisites = (CENTOS7_SCL_PACKAGE,)
    elif major in ("8", "9"):
        variant, dist = f"rhel{major}", "rhel"
        dco_eligible = True
    elif os_id == "amzn" and major == "2":
        variant, dist = "amzn2", "amzn"
    else:
        return SupportDecision.unsupported(
            f"{os_id} version '{env.version_id}' is not supported"
        )

    return SupportDecision(
        supported=True,
        family=Family.RHEL,
        variant=variant,
        package_repo_url=config.rpm_repo_url(dist, major),
        dist=dist,
        release=major,
        extra_channels=extra_channels,
        prerequisite_packages=prerequisites,
        is_clone=is_clone,
        dco_eligible=dco_eligible,
    )


def resolve(env: Environment, config: Optional[InstallerConfig] = None,
            logger: Optional[LoggerManager] = None) -> SupportDecision:
    """Resolve the installation strategy for env

    Raises:
        UnsupportedPlatform: no support matrix rule matches
    """
    # Clones get the advisory before their version is checked
    if logger and env.os_id in RHEL_CLONES and env.arch is Arch.AMD64:
        logger.log_warning(CLONE_ADVISORY)

    decision = evaluate(env, config)

    if logger:
        logger.log_decision(decision)

    if not decision.supported:
        raise UnsupportedPlatform(
            f"This {env.pretty_name} {env.arch.value} distribution is not officially supported "
            f"({decision.reason}). Installation aborted",
            decision,
        )

    return decision
