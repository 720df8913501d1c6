"""
Package installer
Builds the ordered package manager operations for a resolved platform and
runs them, stopping at the first failure
"""

from typing import Optional, Tuple

from asinstaller.adapters.base import PackageManagerAdapter
from asinstaller.config import InstallerConfig
from asinstaller.errors import InstallationCancelled, OptionalFeatureError, RepositoryError
from asinstaller.logger import LoggerManager, get_logger
from asinstaller.models import (Environment, Family, InstallPlan, OperationKind,
                                PackageOperation, RepositorySpec, SupportDecision)
from asinstaller.prompt import UserPrompt


def build_plan(decision: SupportDecision, env: Environment,
               config: Optional[InstallerConfig] = None) -> InstallPlan:
    """Build the main installation plan for a supported platform"""
    config = config or InstallerConfig()

    if decision.family is Family.DEBIAN:
        return _build_debian_plan(decision, env, config)
    if decision.family is Family.RHEL:
        return _build_rhel_plan(decision, config)
    raise ValueError(f"Cannot plan an installation for an unsupported platform: {decision.reason}")


def _build_debian_plan(decision: SupportDecision, env: Environment,
                       config: InstallerConfig) -> InstallPlan:
    repository = RepositorySpec(
        url=decision.package_repo_url,
        key_url=config.key_url(),
        suite=env.version_codename,
        arch=env.arch.value,
    )
    plan = InstallPlan(Family.DEBIAN, description=f"APT install on {decision.variant}")
    plan.add(PackageOperation.refresh())
    plan.add(PackageOperation.install(*config.deb_prerequisites))
    plan.add(PackageOperation.register(repository))
    plan.add(PackageOperation.refresh())
    plan.add(PackageOperation.install(config.product_package))
    return plan


def _build_rhel_plan(decision: SupportDecision, config: InstallerConfig) -> InstallPlan:
    plan = InstallPlan(Family.RHEL, description=f"YUM install for {decision.variant}")
    plan.add(PackageOperation.refresh())
    for channel in decision.extra_channels:
        plan.add(PackageOperation.enable_channel(channel))
    if decision.prerequisite_packages:
        plan.add(PackageOperation.install(*decision.prerequisite_packages))
    plan.add(PackageOperation.remove(config.legacy_repo_package))
    plan.add(PackageOperation.register(RepositorySpec(url=decision.package_repo_url)))
    plan.add(PackageOperation.install(config.product_package))
    return plan


def execute_operation(adapter: PackageManagerAdapter, operation: PackageOperation) -> Tuple[bool, str]:
    """Dispatch one operation to the package manager"""
    if operation.kind is OperationKind.REFRESH_CACHE:
        return adapter.refresh_cache()
    if operation.kind is OperationKind.INSTALL_PACKAGES:
        return adapter.install_packages(list(operation.packages))
    if operation.kind is OperationKind.REMOVE_PACKAGE:
        return adapter.remove_package(operation.packages[0])
    if operation.kind is OperationKind.ENABLE_REPO_CHANNEL:
        return adapter.enable_channel(operation.channel)
    if operation.kind is OperationKind.REGISTER_REPO:
        return adapter.register_repository(operation.repository)
    raise ValueError(f"Unknown operation kind: {operation.kind}")


def execute_plan(adapter: PackageManagerAdapter, plan: InstallPlan, logger: LoggerManager):
    """Run every operation in order, stopping at the first failure

    Raises:
        RepositoryError: a fatal operation failed
        OptionalFeatureError: a non-fatal operation failed
    """
    for operation in plan:
        logger.log_operation_attempt(operation)
        success, message = execute_operation(adapter, operation)

        if not success:
            logger.log_operation_failure(operation, message)
            if operation.fatal_on_failure:
                raise RepositoryError(operation, message)
            raise OptionalFeatureError(f"Could not {operation.describe()}", operation, message)

        logger.log_operation_success(operation, message)


class PackageInstaller:
    """Installs the product package for a resolved platform"""

    def __init__(self, adapter: PackageManagerAdapter, prompt: UserPrompt,
                 config: Optional[InstallerConfig] = None,
                 logger: Optional[LoggerManager] = None):
        self.adapter = adapter
        self.prompt = prompt
        self.config = config or InstallerConfig()
        self.logger = logger or get_logger()

    def confirmation_message(self, env: Environment) -> str:
        return (
            "If you're ready to install OpenVPN Access Server, you can continue below.\n\n"
            f"Detected Linux distribution: {env.pretty_name} {env.arch.value}\n"
            "Do you want to proceed with the installation?"
        )

    def install(self, decision: SupportDecision, env: Environment) -> InstallPlan:
        """Ask once, then run the whole plan

        Raises:
            InstallationCancelled: the user said no; nothing was changed
            RepositoryError: a package manager step failed
        """
        plan = build_plan(decision, env, self.config)

        if not self.prompt.confirm(self.confirmation_message(env)):
            self.logger.log_info("Installation declined by the user")
            raise InstallationCancelled("Installation aborted.")

        self.logger.log_info(f"Running plan: {plan.description} ({len(plan)} steps)")
        execute_plan(self.adapter, plan, self.logger)
        self.logger.log_success(f"Installed {self.config.product_package}")
        return plan
