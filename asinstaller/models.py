from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple


class Arch(Enum):
    """Canonical CPU architecture tags"""
    AMD64 = "amd64"
    ARM64 = "arm64"
    UNSUPPORTED = "unsupported"


class Family(Enum):
    """Package manager ecosystem a distribution belongs to"""
    DEBIAN = "debian"
    RHEL = "rhel"
    NONE = "none"


@dataclass(frozen=True)
class Environment:
    """Host identity captured once at startup"""
    os_id: str
    version_id: str
    version_codename: str
    pretty_name: str
    arch: Arch
    kernel_release: str

    @property
    def major_version(self) -> str:
        """VERSION_ID without its minor part ("7.9" -> "7")"""
        return self.version_id.split('.', 1)[0]


@dataclass(frozen=True)
class SupportDecision:
    """Outcome of checking an Environment against the support matrix"""
    supported: bool
    family: Family
    variant: str = ""
    package_repo_url: str = ""
    dist: str = ""
    release: str = ""
    extra_channels: Tuple[str, ...] = ()
    prerequisite_packages: Tuple[str, ...] = ()
    is_clone: bool = False
    dco_eligible: bool = False
    reason: str = ""

    def __post_init__(self):
        if self.supported == (self.family is Family.NONE):
            raise ValueError(
                f"Inconsistent decision: supported={self.supported} family={self.family.value}"
            )

    @classmethod
    def unsupported(cls, reason: str) -> "SupportDecision":
        return cls(supported=False, family=Family.NONE, reason=reason)


class OperationKind(Enum):
    REFRESH_CACHE = "refresh_cache"
    INSTALL_PACKAGES = "install_packages"
    REGISTER_REPO = "register_repo"
    ENABLE_REPO_CHANNEL = "enable_repo_channel"
    REMOVE_PACKAGE = "remove_package"


@dataclass(frozen=True)
class RepositorySpec:
    """A package repository to register with the package manager

    For APT this is a signed sources entry; for YUM the url points at a
    repository descriptor RPM and key_url is unused.
    """
    url: str
    key_url: Optional[str] = None
    suite: Optional[str] = None
    arch: Optional[str] = None
    component: str = "main"


@dataclass(frozen=True)
class PackageOperation:
    """A single package manager step in an InstallPlan"""
    kind: OperationKind
    packages: Tuple[str, ...] = ()
    repository: Optional[RepositorySpec] = None
    channel: Optional[str] = None
    fatal_on_failure: bool = True

    def describe(self) -> str:
        if self.kind is OperationKind.REFRESH_CACHE:
            return "refresh package cache"
        if self.kind is OperationKind.INSTALL_PACKAGES:
            return f"install {' '.join(self.packages)}"
        if self.kind is OperationKind.REMOVE_PACKAGE:
            return f"remove {' '.join(self.packages)}"
        if self.kind is OperationKind.ENABLE_REPO_CHANNEL:
            return f"enable channel {self.channel}"
        return f"register repository {self.repository.url if self.repository else ''}"

    @classmethod
    def refresh(cls, fatal: bool = True) -> "PackageOperation":
        return cls(OperationKind.REFRESH_CACHE, fatal_on_failure=fatal)

    @classmethod
    def install(cls, *packages: str, fatal: bool = True) -> "PackageOperation":
        return cls(OperationKind.INSTALL_PACKAGES, packages=tuple(packages), fatal_on_failure=fatal)

    @classmethod
    def remove(cls, package: str, fatal: bool = True) -> "PackageOperation":
        return cls(OperationKind.REMOVE_PACKAGE, packages=(package,), fatal_on_failure=fatal)

    @classmethod
    def enable_channel(cls, channel: str, fatal: bool = True) -> "PackageOperation":
        return cls(OperationKind.ENABLE_REPO_CHANNEL, channel=channel, fatal_on_failure=fatal)

    @classmethod
    def register(cls, repository: RepositorySpec, fatal: bool = True) -> "PackageOperation":
        return cls(OperationKind.REGISTER_REPO, repository=repository, fatal_on_failure=fatal)


@dataclass
class InstallPlan:
    """Ordered package manager operations, built and consumed within one run"""
    family: Family
    operations: List[PackageOperation] = field(default_factory=list)
    description: str = ""

    def add(self, operation: PackageOperation) -> "InstallPlan":
        self.operations.append(operation)
        return self

    def __iter__(self) -> Iterator[PackageOperation]:
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    def kinds(self) -> List[OperationKind]:
        return [op.kind for op in self.operations]


class DcoState(Enum):
    NOT_OFFERED = "not_offered"
    PROMPTED = "prompted"
    DECLINED = "declined"
    HEADERS_CHECKING = "headers_checking"
    HEADERS_FOUND = "headers_found"
    HEADERS_INSTALL_FAILED = "headers_install_failed"
    FEATURE_INSTALLED = "feature_installed"
    FEATURE_SKIPPED = "feature_skipped"


@dataclass
class DcoOutcome:
    """What happened on the optional DCO path; never fails the run"""
    attempted: bool = False
    headers_available: bool = False
    installed: bool = False
    state: DcoState = DcoState.NOT_OFFERED
    message: Optional[str] = None


@dataclass
class InstallReport:
    """Summary of a successful run"""
    environment: Environment
    decision: SupportDecision
    dco: DcoOutcome
