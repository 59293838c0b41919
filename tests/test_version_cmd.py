"""
Tests for the version command orchestration.
"""

import io
from unittest.mock import MagicMock, patch

import pytest

from jxl.config import Config
from jxl.confirm import BatchConfirmer
from jxl.errors import ResolutionError, VerificationError
from jxl.osinfo import DegradedResult
from jxl.render import VersionTable, strip_control_for_width
from jxl.upgrade_check import UpgradeOutcome
from jxl.version import SemanticVersion
from jxl.version_cmd import OS_ROW, RunContext, normalize_versions, packages_to_verify, run_version


def make_collector(packages: dict):
    def collector(namespace, helm_tls):
        table = VersionTable()
        for name, version in packages.items():
            table.add_row(name, version)
        return dict(packages), table
    return collector


def make_resolver(latest: str = "1.2.0") -> MagicMock:
    resolver = MagicMock()
    resolver.latest_tool_version.return_value = SemanticVersion.parse(latest)
    return resolver


def interactive(answer: bool) -> MagicMock:
    confirmer = MagicMock()
    confirmer.interactive = True
    confirmer.confirm.return_value = answer
    return confirmer


@pytest.fixture(autouse=True)
def running_version():
    with patch("jxl.__version__", "1.2.0"):
        yield


def run(context, packages=None, resolver=None, os_result=None, confirmer=None, upgrader=None, logger=None):
    out = io.StringIO()
    resolver = resolver or make_resolver()
    outcome = run_version(
        context,
        Config(),
        collector=make_collector(packages if packages is not None else {"jx": "2.1.155", "foo": "1.0.0"}),
        os_reporter=lambda: os_result or DegradedResult(value="Ubuntu 22.04"),
        resolver_factory=lambda ns: resolver,
        confirmer=confirmer,
        upgrader=upgrader or MagicMock(),
        logger=logger or MagicMock(),
        out=out,
    )
    return outcome, strip_control_for_width(out.getvalue())


class TestNormalizeVersions:

    def test_replaces_ecosystem_entry(self):
        packages = {"jx": "2.1.155", "helm": "3.12.0"}
        table = VersionTable()
        table.add_row("jx", "2.1.155")
        table.add_row("helm", "3.12.0")
        normalize_versions(packages, table, "1.2.0")
        assert packages == {"helm": "3.12.0", "jxl": "1.2.0"}
        assert strip_control_for_width(table.get_row("jxl")[1]) == "1.2.0"
        assert table.names() == ["jxl", "helm"]

    def test_without_ecosystem_entry(self):
        packages = {"helm": "3.12.0"}
        table = VersionTable()
        table.add_row("helm", "3.12.0")
        normalize_versions(packages, table, "1.2.0")
        assert list(packages).count("jxl") == 1
        assert table.names() == ["helm", "jxl"]

    def test_uses_running_version(self):
        packages: dict = {}
        normalize_versions(packages, VersionTable())
        assert packages == {"jxl": "1.2.0"}

    def test_packages_to_verify(self):
        packages = {"foo": "1.0.0", "kubernetesCluster": "my-cluster", "jxl": "1.2.0"}
        assert packages_to_verify(packages) == {"foo": "1.0.0"}


class TestRunVersion:

    def test_table_rendered_with_self_and_os(self):
        outcome, output = run(RunContext(namespace="jx", no_verify=True))
        assert outcome is None
        lines = output.splitlines()
        assert lines[1].split() == ["jxl", "1.2.0"]
        assert "jx " not in output
        assert OS_ROW in output and "Ubuntu 22.04" in output

    def test_os_failure_is_warning(self):
        logger = MagicMock()
        _, output = run(
            RunContext(namespace="jx", no_verify=True),
            os_result=DegradedResult(warning="lsb_release not found"),
            logger=logger,
        )
        assert OS_ROW not in output
        assert "lsb_release not found" in logger.warning.call_args[0][0]

    def test_no_verify_skips_resolution(self):
        resolver = make_resolver("9.9.9")
        factory = MagicMock(return_value=resolver)
        run_version(
            RunContext(namespace="jx", no_verify=True),
            collector=make_collector({"foo": "1.0.0"}),
            os_reporter=lambda: DegradedResult(value="Linux"),
            resolver_factory=factory,
            logger=MagicMock(),
            out=io.StringIO(),
        )
        factory.assert_not_called()
        resolver.verify_packages.assert_not_called()

    def test_cluster_entry_excluded_from_verification(self):
        resolver = make_resolver("1.2.0")
        run(RunContext(namespace="jx", batch_mode=True),
            packages={"foo": "1.0.0", "kubernetesCluster": "my-cluster"}, resolver=resolver)
        resolver.verify_packages.assert_called_once_with({"foo": "1.0.0"})

    def test_up_to_date_verifies(self):
        resolver = make_resolver("1.2.0")
        confirmer = interactive(True)
        logger = MagicMock()
        outcome, _ = run(RunContext(namespace="jx"), resolver=resolver, confirmer=confirmer, logger=logger)
        assert outcome is UpgradeOutcome.UP_TO_DATE
        confirmer.confirm.assert_not_called()
        logger.warning.assert_not_called()
        resolver.verify_packages.assert_called_once_with({"foo": "1.0.0"})

    def test_batch_outdated_warns_and_verifies(self):
        resolver = make_resolver("1.3.0")
        upgrader = MagicMock()
        logger = MagicMock()
        outcome, _ = run(RunContext(namespace="jx", batch_mode=True), resolver=resolver,
                         upgrader=upgrader, logger=logger)
        assert outcome is UpgradeOutcome.WARNED_BATCH
        logger.warning.assert_called_once()
        assert "1.3.0" in logger.warning.call_args[0][0]
        upgrader.assert_not_called()
        resolver.verify_packages.assert_called_once()

    def test_batch_mode_overrides_interactive_confirmer(self):
        confirmer = interactive(True)
        outcome, _ = run(RunContext(namespace="jx", batch_mode=True), resolver=make_resolver("1.3.0"),
                         confirmer=confirmer)
        assert outcome is UpgradeOutcome.WARNED_BATCH
        confirmer.confirm.assert_not_called()

    def test_declined_verifies(self):
        resolver = make_resolver("1.3.0")
        upgrader = MagicMock()
        outcome, _ = run(RunContext(namespace="jx"), resolver=resolver,
                         confirmer=interactive(False), upgrader=upgrader)
        assert outcome is UpgradeOutcome.PROMPTED_DECLINED
        upgrader.assert_not_called()
        resolver.verify_packages.assert_called_once_with({"foo": "1.0.0"})

    def test_accepted_upgrades_and_stops(self):
        resolver = make_resolver("1.3.0")
        upgrader = MagicMock()
        outcome, _ = run(RunContext(namespace="jx"), resolver=resolver,
                         confirmer=interactive(True), upgrader=upgrader)
        assert outcome is UpgradeOutcome.PROMPTED_ACCEPTED
        upgrader.assert_called_once_with("1.3.0", True)
        resolver.verify_packages.assert_not_called()

    def test_no_version_check_still_verifies_without_self(self):
        resolver = make_resolver("9.9.9")
        outcome, _ = run(RunContext(namespace="jx", no_version_check=True), resolver=resolver,
                         confirmer=interactive(True))
        assert outcome is UpgradeOutcome.VERSION_CHECK_SKIPPED
        resolver.latest_tool_version.assert_not_called()
        resolver.verify_packages.assert_called_once_with({"foo": "1.0.0"})

    def test_verification_error_after_render(self):
        resolver = make_resolver("1.2.0")
        resolver.verify_packages.side_effect = VerificationError(["package foo is on version 1.0.0"])
        out = io.StringIO()
        with pytest.raises(VerificationError):
            run_version(
                RunContext(namespace="jx", batch_mode=True),
                collector=make_collector({"foo": "1.0.0"}),
                os_reporter=lambda: DegradedResult(value="Linux"),
                resolver_factory=lambda ns: resolver,
                logger=MagicMock(),
                out=out,
            )
        assert "foo" in out.getvalue()

    def test_resolution_error_aborts(self):
        def factory(ns):
            raise ResolutionError("stream unreachable")
        with pytest.raises(ResolutionError):
            run_version(
                RunContext(namespace="jx", batch_mode=True),
                collector=make_collector({"foo": "1.0.0"}),
                os_reporter=lambda: DegradedResult(value="Linux"),
                resolver_factory=factory,
                logger=MagicMock(),
                out=io.StringIO(),
            )

    def test_namespace_passed_to_factory(self):
        factory = MagicMock(return_value=make_resolver())
        run_version(
            RunContext(namespace="jx-staging", batch_mode=True),
            collector=make_collector({"foo": "1.0.0"}),
            os_reporter=lambda: DegradedResult(value="Linux"),
            resolver_factory=factory,
            logger=MagicMock(),
            out=io.StringIO(),
        )
        factory.assert_called_once_with("jx-staging")

    @patch("jxl.version_cmd.get_package_versions")
    def test_default_collector_uses_configured_timeout(self, mock_collect):
        mock_collect.return_value = ({"foo": "1.0.0"}, VersionTable())
        run_version(
            RunContext(namespace="jx-staging", no_verify=True, helm_tls=True),
            Config(timeout_seconds=12),
            os_reporter=lambda: DegradedResult(value="Linux"),
            logger=MagicMock(),
            out=io.StringIO(),
        )
        mock_collect.assert_called_once_with("jx-staging", True, timeout=12)
