"""
Tests for the optional DCO installer
"""

import pytest

from asinstaller.dco import DcoInstaller, build_feature_plan, header_packages
from asinstaller.models import DcoState, Family, OperationKind
from asinstaller.resolver import evaluate
from conftest import AutoConfirmPrompt, FakeAdapter, make_env

KERNEL = "5.15.0-91-generic"


def run_dco(adapter, env, answer, config, logger):
    installer = DcoInstaller(adapter, AutoConfirmPrompt(answer), config, logger)
    return installer.run(evaluate(env, config), env)


class TestEligibility:

    @pytest.mark.unit
    def test_not_offered_on_buster(self, fake_adapter, config, logger):
        prompt = AutoConfirmPrompt(True)
        env = make_env(os_id="debian", version_id="10", codename="buster")

        outcome = DcoInstaller(fake_adapter, prompt, config, logger).run(evaluate(env), env)

        assert outcome.state is DcoState.NOT_OFFERED
        assert outcome.attempted is False
        assert prompt.messages == []
        assert fake_adapter.calls == []

    @pytest.mark.unit
    @pytest.mark.parametrize("os_id,version_id", [("rhel", "7.9"), ("centos", "7"), ("amzn", "2")])
    def test_not_offered_on_legacy_rpm_platforms(self, fake_adapter, config, logger, os_id, version_id):
        env = make_env(os_id=os_id, version_id=version_id, codename="")
        outcome = run_dco(fake_adapter, env, True, config, logger)

        assert outcome.state is DcoState.NOT_OFFERED
        assert fake_adapter.calls == []


class TestDecline:

    @pytest.mark.unit
    def test_decline_makes_no_package_calls(self, fake_adapter, config, logger):
        env = make_env(os_id="ubuntu", codename="jammy", kernel=KERNEL)
        outcome = run_dco(fake_adapter, env, False, config, logger)

        assert outcome.state is DcoState.DECLINED
        assert outcome.attempted is False
        assert outcome.installed is False
        assert fake_adapter.calls == []

    @pytest.mark.unit
    def test_offer_mentions_running_kernel(self, fake_adapter, config, logger):
        prompt = AutoConfirmPrompt(False)
        env = make_env(os_id="ubuntu", codename="jammy", kernel=KERNEL)

        DcoInstaller(fake_adapter, prompt, config, logger).run(evaluate(env), env)

        assert KERNEL in prompt.messages[0]


class TestHeaders:

    @pytest.mark.unit
    def test_header_package_names(self):
        assert header_packages(Family.DEBIAN, KERNEL) == [f"linux-headers-{KERNEL}"]
        assert header_packages(Family.RHEL, "5.14.0-362.el9.x86_64") == [
            "kernel-headers-5.14.0-362.el9.x86_64",
            "kernel-devel-5.14.0-362.el9.x86_64",
        ]

    @pytest.mark.unit
    def test_headers_present_skip_install(self, config, logger):
        adapter = FakeAdapter(installed={f"linux-headers-{KERNEL}"}, logger=logger)
        env = make_env(os_id="ubuntu", codename="noble", kernel=KERNEL)

        outcome = run_dco(adapter, env, True, config, logger)

        assert outcome.state is DcoState.FEATURE_INSTALLED
        assert adapter.calls == [
            ('query_installed', f"linux-headers-{KERNEL}"),
            ('refresh_cache', None),
            ('install_packages', ("openvpn-dco-dkms",)),
        ]

    @pytest.mark.unit
    def test_missing_headers_are_installed(self, fake_adapter, config, logger):
        env = make_env(os_id="debian", version_id="12", codename="bookworm", kernel=KERNEL)

        outcome = run_dco(fake_adapter, env, True, config, logger)

        assert outcome.headers_available is True
        assert outcome.installed is True
        assert ('install_packages', (f"linux-headers-{KERNEL}",)) in fake_adapter.calls

    @pytest.mark.unit
    def test_headers_install_failure_is_contained(self, config, logger):
        headers = (f"linux-headers-{KERNEL}",)
        adapter = FakeAdapter(fail={('install_packages', headers): "Unable to locate package"},
                              logger=logger)
        env = make_env(os_id="ubuntu", codename="jammy", kernel=KERNEL)

        outcome = run_dco(adapter, env, True, config, logger)

        assert outcome.state is DcoState.HEADERS_INSTALL_FAILED
        assert outcome.attempted is True
        assert outcome.headers_available is False
        assert outcome.installed is False
        assert ('install_packages', ("openvpn-dco-dkms",)) not in adapter.calls
        log = logger.read_log_file()
        assert "WARNING" in log
        assert config.dco_doc_url in log

    @pytest.mark.unit
    def test_rpm_headers_install_both_packages(self, fake_adapter, config, logger):
        kernel = "4.18.0-513.el8.x86_64"
        env = make_env(os_id="rhel", version_id="8.9", codename="", kernel=kernel)

        run_dco(fake_adapter, env, True, config, logger)

        assert fake_adapter.calls[0] == ('query_installed', f"kernel-headers-{kernel}")
        assert fake_adapter.calls[1] == (
            'install_packages', (f"kernel-headers-{kernel}", f"kernel-devel-{kernel}")
        )


class TestFeaturePlan:

    @pytest.mark.unit
    def test_every_step_is_optional(self, config):
        for env in (make_env(os_id="ubuntu", codename="jammy"),
                    make_env(os_id="rocky", version_id="9.3", codename=""),
                    make_env(os_id="rhel", version_id="8.9", codename="")):
            plan = build_feature_plan(evaluate(env, config), env, config)
            assert len(plan) > 0
            assert not any(op.fatal_on_failure for op in plan)

    @pytest.mark.unit
    @pytest.mark.parametrize("os_id,version_id,channel", [
        ("rocky", "8.9", "powertools"),
        ("almalinux", "8.9", "powertools"),
        ("rocky", "9.3", "crb"),
        ("almalinux", "9.3", "crb"),
    ])
    def test_clone_enables_build_channel_and_epel(self, config, os_id, version_id, channel):
        env = make_env(os_id=os_id, version_id=version_id, codename="")
        plan = build_feature_plan(evaluate(env, config), env, config)

        assert plan.kinds() == [
            OperationKind.ENABLE_REPO_CHANNEL,
            OperationKind.INSTALL_PACKAGES,
            OperationKind.INSTALL_PACKAGES,
        ]
        assert plan.operations[0].channel == channel
        assert plan.operations[1].packages == ("epel-release",)
        assert plan.operations[2].packages == ("kmod-ovpn-dco",)

    @pytest.mark.unit
    def test_rhel_installs_epel_from_fedora(self, config):
        env = make_env(os_id="rhel", version_id="9.3", codename="")
        plan = build_feature_plan(evaluate(env, config), env, config)

        assert plan.operations[0].packages == (
            "https://dl.fedoraproject.org/pub/epel/epel-release-latest-9.noarch.rpm",
        )
        assert plan.operations[1].packages == ("kmod-ovpn-dco",)

    @pytest.mark.unit
    def test_oracle_linux_installs_module_directly(self, config):
        env = make_env(os_id="ol", version_id="8.9", codename="")
        plan = build_feature_plan(evaluate(env, config), env, config)

        assert plan.kinds() == [OperationKind.INSTALL_PACKAGES]
        assert plan.operations[0].packages == ("kmod-ovpn-dco",)


class TestFeatureFailure:

    @pytest.mark.unit
    def test_module_install_failure_is_contained(self, config, logger):
        adapter = FakeAdapter(installed={f"linux-headers-{KERNEL}"},
                              fail={('install_packages', ("openvpn-dco-dkms",)): "dkms build failed"},
                              logger=logger)
        env = make_env(os_id="ubuntu", codename="jammy", kernel=KERNEL)

        outcome = run_dco(adapter, env, True, config, logger)

        assert outcome.state is DcoState.FEATURE_SKIPPED
        assert outcome.headers_available is True
        assert outcome.installed is False
        assert "dkms build failed" in outcome.message

    @pytest.mark.unit
    def test_channel_failure_skips_module(self, config, logger):
        kernel = "5.14.0-362.el9.x86_64"
        adapter = FakeAdapter(installed={f"kernel-headers-{kernel}"},
                              fail={'enable_channel': "Error: No matching repo to modify: crb"},
                              logger=logger)
        env = make_env(os_id="almalinux", version_id="9.3", codename="", kernel=kernel)

        outcome = run_dco(adapter, env, True, config, logger)

        assert outcome.state is DcoState.FEATURE_SKIPPED
        assert 'install_packages' not in adapter.methods()
