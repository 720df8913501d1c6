"""
Optional Data Channel Offload (DCO) installer
Best effort: every failure is logged as a warning and the run carries on
"""

from typing import List, Optional

from asinstaller.adapters.base import PackageManagerAdapter
from asinstaller.config import InstallerConfig
from asinstaller.errors import OptionalFeatureError
from asinstaller.installer import execute_plan
from asinstaller.logger import LoggerManager, get_logger
from asinstaller.models import (DcoOutcome, DcoState, Environment, Family, InstallPlan,
                                PackageOperation, SupportDecision)
from asinstaller.prompt import UserPrompt

# Extra channel needed for DCO build dependencies on RHEL clones, by major version
CLONE_BUILD_CHANNELS = {
    "8": "powertools",
    "9": "crb",
}
CLONE_EPEL_IDS = ("rocky", "almalinux")


def header_packages(family: Family, kernel_release: str) -> List[str]:
    """Packages providing headers for the running kernel"""
    if family is Family.DEBIAN:
        return [f"linux-headers-{kernel_release}"]
    return [f"kernel-headers-{kernel_release}", f"kernel-devel-{kernel_release}"]


def build_feature_plan(decision: SupportDecision, env: Environment,
                       config: Optional[InstallerConfig] = None) -> InstallPlan:
    """Operations installing the DCO module once headers are present; none are fatal"""
    config = config or InstallerConfig()
    plan = InstallPlan(decision.family, description="DCO module")

    if decision.family is Family.DEBIAN:
        plan.add(PackageOperation.refresh(fatal=False))
        plan.add(PackageOperation.install(config.deb_dco_package, fatal=False))
        return plan

    if env.os_id in CLONE_EPEL_IDS:
        channel = CLONE_BUILD_CHANNELS.get(decision.release)
        if channel:
            plan.add(PackageOperation.enable_channel(channel, fatal=False))
        plan.add(PackageOperation.install("epel-release", fatal=False))
    elif env.os_id == "rhel":
        epel_url = config.epel_release_url.format(release=decision.release)
        plan.add(PackageOperation.install(epel_url, fatal=False))

    plan.add(PackageOperation.install(config.rpm_dco_package, fatal=False))
    return plan


class DcoInstaller:
    """Offers and installs the DCO kernel module"""

    def __init__(self, adapter: PackageManagerAdapter, prompt: UserPrompt,
                 config: Optional[InstallerConfig] = None,
                 logger: Optional[LoggerManager] = None):
        self.adapter = adapter
        self.prompt = prompt
        self.config = config or InstallerConfig()
        self.logger = logger or get_logger()

    def offer_message(self, env: Environment) -> str:
        return (
            "Access Server 2.12 and newer supports OpenVPN Data Channel Offload (DCO).\n"
            "You can benefit from performance improvements when you enable DCO "
            "for your VPN server and clients.\n\n"
            f"Your running kernel version is '{env.kernel_release}'\n\n"
            "DCO needs Linux kernel headers to be installed.\n"
            "If the Linux kernel headers are not present, they will be installed automatically.\n\n"
            "Would you like to install OpenVPN Data Channel Offload?"
        )

    def run(self, decision: SupportDecision, env: Environment) -> DcoOutcome:
        """Walk the DCO state machine; never raises"""
        outcome = DcoOutcome()

        if not decision.supported or not decision.dco_eligible:
            self.logger.log_debug(f"DCO not offered for {decision.variant or env.os_id}")
            return outcome

        outcome.state = DcoState.PROMPTED
        if not self.prompt.confirm(self.offer_message(env)):
            outcome.state = DcoState.DECLINED
            self.logger.log_info("DCO installation declined")
            return outcome

        outcome.attempted = True
        outcome.state = DcoState.HEADERS_CHECKING
        try:
            self._ensure_headers(decision, env)
        except OptionalFeatureError as e:
            outcome.state = DcoState.HEADERS_INSTALL_FAILED
            outcome.message = str(e)
            self.logger.log_warning(
                "The kernel headers could not be located and installed. "
                "For further guidance, please refer to our online documentation "
                f"or contact our support team: {self.config.dco_doc_url}. "
                "DCO can not be installed. Skipped."
            )
            return outcome

        outcome.headers_available = True
        outcome.state = DcoState.HEADERS_FOUND
        self.logger.log_info(
            "Linux kernel headers are installed. Proceeding with DCO installation. "
            "If newer kernel versions are available, DCO installation could fail."
        )

        try:
            execute_plan(self.adapter, build_feature_plan(decision, env, self.config), self.logger)
        except OptionalFeatureError as e:
            outcome.state = DcoState.FEATURE_SKIPPED
            outcome.message = f"{e}: {e.detail}" if e.detail else str(e)
            self.logger.log_warning(
                f"DCO could not be installed ({e}). Access Server works without it; "
                f"see {self.config.dco_doc_url}"
            )
            return outcome

        outcome.installed = True
        outcome.state = DcoState.FEATURE_INSTALLED
        self.logger.log_success("DCO module installed")
        return outcome

    def _ensure_headers(self, decision: SupportDecision, env: Environment):
        """Install headers for the running kernel unless they are already there

        Raises:
            OptionalFeatureError: headers are missing and could not be installed
        """
        packages = header_packages(decision.family, env.kernel_release)
        if self.adapter.query_installed(packages[0]):
            self.logger.log_info(f"{packages[0]} already installed")
            return

        plan = InstallPlan(decision.family, description="kernel headers")
        if decision.family is Family.DEBIAN:
            plan.add(PackageOperation.refresh(fatal=False))
        plan.add(PackageOperation.install(*packages, fatal=False))
        execute_plan(self.adapter, plan, self.logger)
