import pytest

from asinstaller.adapters.base import PackageManagerAdapter
from asinstaller.config import InstallerConfig
from asinstaller.logger import LoggerManager
from asinstaller.models import Arch, Environment
from asinstaller.prompt import UserPrompt


class FakeAdapter(PackageManagerAdapter):
    """Package manager double recording every call

    fail maps a method name, or (method name, argument), to the error message
    the call should report.
    """

    executable = "fake"

    def __init__(self, installed=(), fail=None, available=True, **kwargs):
        super().__init__(**kwargs)
        self.available = available
        self.calls = []
        self.installed = set(installed)
        self.fail = dict(fail or {})

    def _result(self, method, arg=None):
        self.calls.append((method, arg))
        for key in ((method, arg), method):
            if key in self.fail:
                return False, self.fail[key]
        return True, "ok"

    def is_available(self):
        return self.available

    def validate_package_name(self, package_name):
        return True

    def refresh_cache(self):
        return self._result('refresh_cache')

    def install_packages(self, package_names):
        result = self._result('install_packages', tuple(package_names))
        if result[0]:
            self.installed.update(package_names)
        return result

    def remove_package(self, package_name):
        return self._result('remove_package', package_name)

    def query_installed(self, package_name):
        self.calls.append(('query_installed', package_name))
        return package_name in self.installed

    def enable_channel(self, channel):
        return self._result('enable_channel', channel)

    def register_repository(self, repository):
        return self._result('register_repository', repository.url)

    def methods(self):
        return [method for method, _ in self.calls]


class AutoConfirmPrompt(UserPrompt):
    """Give the same answer to every question, remembering what was asked"""

    def __init__(self, answer=True):
        self.answer = answer
        self.messages = []

    def confirm(self, message):
        self.messages.append(message)
        return self.answer


def make_env(os_id="ubuntu", version_id="22.04", codename="jammy",
             arch=Arch.AMD64, kernel="5.15.0-91-generic", pretty_name=None):
    return Environment(
        os_id=os_id,
        version_id=version_id,
        version_codename=codename,
        pretty_name=pretty_name or f"{os_id} {version_id}",
        arch=arch,
        kernel_release=kernel,
    )


@pytest.fixture
def logger(tmp_path):
    return LoggerManager(log_dir=str(tmp_path / "logs"))


@pytest.fixture
def config(tmp_path):
    return InstallerConfig(
        keyring_path=str(tmp_path / "keyrings" / "as-repository.asc"),
        sources_path=str(tmp_path / "sources.list.d" / "openvpn-as-repo.list"),
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def fake_adapter(logger):
    return FakeAdapter(logger=logger)
