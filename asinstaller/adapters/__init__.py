from asinstaller.adapters.base import PackageManagerAdapter
from asinstaller.adapters.apt_adapter import AptAdapter
from asinstaller.adapters.yum_adapter import YumAdapter
from asinstaller.models import Family, SupportDecision


def adapter_for(decision: SupportDecision, config=None, logger=None) -> PackageManagerAdapter:
    """Get the package manager adapter for a resolved platform"""
    if decision.family is Family.DEBIAN:
        return AptAdapter(config=config, logger=logger)
    if decision.family is Family.RHEL:
        return YumAdapter(config=config, logger=logger)
    raise ValueError(f"No package manager for family {decision.family.value}")


__all__ = ['PackageManagerAdapter', 'AptAdapter', 'YumAdapter', 'adapter_for']
