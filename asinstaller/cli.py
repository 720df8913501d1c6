#!/usr/bin/env python3
import argparse
import sys
from typing import Optional

from asinstaller import __version__
from asinstaller.adapters import adapter_for
from asinstaller.config import InstallerConfig, load_config
from asinstaller.dco import DcoInstaller
from asinstaller.errors import (EnvironmentUnavailable, InstallationCancelled, RepositoryError,
                                UnsupportedPlatform)
from asinstaller.installer import PackageInstaller
from asinstaller.logger import LoggerManager, get_logger
from asinstaller.models import InstallReport
from asinstaller.probe import probe
from asinstaller.prompt import ConsolePrompt, UserPrompt
from asinstaller.resolver import resolve

EXIT_SUCCESS = 0
EXIT_UNSUPPORTED = 1
EXIT_REPOSITORY_ERROR = 4

WELCOME = """

Welcome to the OpenVPN Access Server Installation!


WARNING: Please verify if there are any available security
and kernel updates for your operating system. We recommend
installing and applying these updates before proceeding.
"""


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Install OpenVPN Access Server on this Linux host',
        prog='openvpn-as-install'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(argv)


def run(config: InstallerConfig, prompt: UserPrompt, logger: LoggerManager,
        adapter=None) -> InstallReport:
    """Probe, resolve, install and offer DCO

    Raises:
        EnvironmentUnavailable, UnsupportedPlatform, RepositoryError,
        InstallationCancelled
    """
    env = probe(config.os_release_path)
    logger.log_environment(env)

    decision = resolve(env, config, logger)
    adapter = adapter or adapter_for(decision, config=config, logger=logger)
    if not adapter.is_available():
        raise EnvironmentUnavailable(
            f"{env.pretty_name} reports a {decision.family.value} system but "
            f"{adapter.executable} was not found. Installation aborted"
        )

    PackageInstaller(adapter, prompt, config, logger).install(decision, env)
    dco = DcoInstaller(adapter, prompt, config, logger).run(decision, env)

    return InstallReport(environment=env, decision=decision, dco=dco)


def main(argv=None, prompt: Optional[UserPrompt] = None):
    """Main entry point"""
    parse_args(argv)
    config = load_config()
    logger = get_logger(config.log_dir)

    print(WELCOME)

    try:
        report = run(config, prompt or ConsolePrompt(), logger)
    except InstallationCancelled as e:
        print(str(e), file=sys.stderr)
        return EXIT_SUCCESS
    except (EnvironmentUnavailable, UnsupportedPlatform) as e:
        logger.log_error(str(e))
        return EXIT_UNSUPPORTED
    except RepositoryError as e:
        logger.log_error(f"{e} ({e.detail})")
        print("\nSorry, your system's package manager reported a problem without "
              "specifying the cause.\n"
              "Please consult our online documentation or contact the support team "
              "for assistance.\n\n"
              f"The installation has to be interrupted. Details: {logger.get_log_file_path()}",
              file=sys.stderr)
        return EXIT_REPOSITORY_ERROR

    if report.dco.attempted and not report.dco.installed:
        print(f"DCO was skipped: {report.dco.message}", file=sys.stderr)
    print("\nNew installation successful!")
    return EXIT_SUCCESS


if __name__ == '__main__':
    sys.exit(main())
