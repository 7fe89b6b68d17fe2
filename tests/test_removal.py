"""
Tests for removal planning and execution.
"""

from pathlib import Path

import pytest

from relinker.adapters.mock import (
    MockDirectoryLister,
    MockFileRemover,
    MockLibraryBuilder,
    MockPackageInstaller,
    MockPackageSearch,
)
from relinker.core.data.requirements import DEFAULT_REQUIREMENTS
from relinker.core.models.record import ResolutionRecord
from relinker.core.models.removal import RemovalPlan, RemovalScope
from relinker.core.persistence.record_file import save_record
from relinker.core.services.package_resolver import PackageCandidateResolver
from relinker.core.use_cases.remove import execute_removal, parse_scope, plan_removal

SEARCH = {
    "libgnustep-base": ["libgnustep-base1.28"],
    "libobjc": ["libobjc4"],
    "libgnutls": ["libgnutls30"],
    "libgcrypt": ["libgcrypt20"],
    "libffi": ["libffi8"],
    "libicu": ["libicu70"],
    "libdispatch": ["libdispatch0"],
}


@pytest.fixture
def binary(tmp_path: Path) -> Path:
    path = tmp_path / "blockheads_server171"
    path.write_bytes(b"\x7fELF")
    return path


@pytest.fixture
def builder() -> MockLibraryBuilder:
    lister = MockDirectoryLister({"/usr/local/lib": ["libdispatch.so", "libdispatch.so.1"]})
    return MockLibraryBuilder(lister=lister)


def _plan(binary, installed, builder=None, record_path=None):
    return plan_removal(
        binary,
        DEFAULT_REQUIREMENTS,
        resolver=PackageCandidateResolver(MockPackageSearch(SEARCH)),
        installer=MockPackageInstaller(installed),
        builder=builder,
        record_path=record_path,
    )


# ── Scope parsing ───────────────────────────────────────────────────


class TestParseScope:
    @pytest.mark.parametrize("raw", ["everything", "EVERYTHING", " everything ", "1"])
    def test_everything(self, raw):
        assert parse_scope(raw) is RemovalScope.EVERYTHING

    @pytest.mark.parametrize(
        "raw", ["binary", "binary-only", "Binary Only", "blockheads", "blockheads  server", "2"],
    )
    def test_binary_only(self, raw):
        assert parse_scope(raw) is RemovalScope.BINARY_ONLY

    def test_empty_defaults_to_binary_only(self):
        assert parse_scope("") is RemovalScope.BINARY_ONLY
        assert parse_scope(None) is RemovalScope.BINARY_ONLY

    def test_unknown(self):
        assert parse_scope("some of it") is None


# ── Planning ────────────────────────────────────────────────────────


class TestPlanRemoval:
    def test_recompute_keeps_installed_and_dedupes(self, binary):
        plan = _plan(binary, {"libgnutls30", "libicu70", "libffi8"})

        assert plan.binary_present
        assert not plan.recorded
        assert plan.installed_packages == ["libgnutls30", "libffi8", "libicu70"]

    def test_builder_package_split_out(self, binary, builder):
        plan = _plan(binary, {"libdispatch0", "libffi8"}, builder)

        assert plan.builder_library == "libdispatch.so"
        assert plan.builder_package == "libdispatch0"
        assert "libdispatch0" not in plan.installed_packages
        assert plan.builder_files == ["/usr/local/lib/libdispatch.so", "/usr/local/lib/libdispatch.so.1"]

    def test_record_preferred_over_recompute(self, binary, tmp_path):
        record_path = tmp_path / "record.json"
        save_record(ResolutionRecord(binary=str(binary), packages={"libffi.so": "libffi7"}), record_path)

        plan = _plan(binary, {"libffi7", "libffi8", "libgnutls30"}, record_path=record_path)

        assert plan.recorded
        assert plan.installed_packages == ["libffi7"]

    def test_record_lists_built_library_files(self, binary, builder, tmp_path):
        record_path = tmp_path / "record.json"
        save_record(ResolutionRecord(binary=str(binary), built=["libdispatch.so"]), record_path)

        plan = _plan(binary, set(), builder, record_path=record_path)

        assert plan.builder_files == ["/usr/local/lib/libdispatch.so", "/usr/local/lib/libdispatch.so.1"]

    def test_record_without_build_leaves_library_files(self, binary, builder, tmp_path):
        record_path = tmp_path / "record.json"
        save_record(ResolutionRecord(binary=str(binary), packages={"libffi.so": "libffi8"}), record_path)

        plan = _plan(binary, {"libffi8"}, builder, record_path=record_path)

        assert plan.builder_library == "libdispatch.so"
        assert plan.builder_files == []

    def test_corrupt_record_falls_back(self, binary, tmp_path):
        record_path = tmp_path / "record.json"
        record_path.write_text("{not json")
        plan = _plan(binary, {"libffi8"}, record_path=record_path)
        assert not plan.recorded
        assert plan.installed_packages == ["libffi8"]

    def test_missing_binary(self, tmp_path):
        plan = _plan(tmp_path / "gone", set())
        assert not plan.binary_present

    def test_describe(self, binary):
        plan = RemovalPlan(binary=str(binary), builder_library="libdispatch.so", installed_packages=["a", "b"])
        assert plan.describe(RemovalScope.EVERYTHING).endswith("libdispatch, a, b")
        assert "a, b" not in plan.describe(RemovalScope.BINARY_ONLY)


# ── Execution ───────────────────────────────────────────────────────


class TestExecuteRemoval:
    def _plan(self):
        return RemovalPlan(
            binary="/srv/server",
            binary_present=True,
            installed_packages=["libgnutls30", "libffi8"],
            builder_library="libdispatch.so",
            builder_package="libdispatch0",
            builder_files=["/usr/local/lib/libdispatch.so"],
        )

    def test_declined_touches_nothing(self, tmp_path):
        record_path = tmp_path / "record.json"
        record_path.write_text("{}")
        installer = MockPackageInstaller({"libgnutls30", "libffi8", "libdispatch0"})
        remover = MockFileRemover()

        outcome = execute_removal(
            self._plan(), RemovalScope.EVERYTHING, False,
            installer=installer, remover=remover, record_path=record_path,
        )

        assert not outcome.performed
        assert outcome.steps == []
        assert installer.removals == []
        assert remover.removed == []
        assert record_path.exists()

    def test_binary_only_never_removes_packages(self):
        installer = MockPackageInstaller({"libgnutls30", "libffi8", "libdispatch0"})
        remover = MockFileRemover()
        builder = MockLibraryBuilder()

        outcome = execute_removal(
            self._plan(), RemovalScope.BINARY_ONLY, True,
            installer=installer, remover=remover, builder=builder,
        )

        assert outcome.performed
        assert installer.removals == []
        assert remover.removed == ["/srv/server", "/usr/local/lib/libdispatch.so"]
        assert builder.cache_refreshes == 1

    def test_everything(self, tmp_path):
        record_path = tmp_path / "record.json"
        record_path.write_text("{}")
        installer = MockPackageInstaller({"libgnutls30", "libffi8", "libdispatch0"})
        remover = MockFileRemover()

        outcome = execute_removal(
            self._plan(), RemovalScope.EVERYTHING, True,
            installer=installer, remover=remover, record_path=record_path,
        )

        assert installer.removals == ["libdispatch0", "libgnutls30 libffi8"]
        assert installer.installed == set()
        assert "/srv/server" in remover.removed
        assert not outcome.failed_steps
        assert not record_path.exists()

    def test_binary_only_keeps_record(self, tmp_path):
        record_path = tmp_path / "record.json"
        record_path.write_text("{}")

        outcome = execute_removal(
            self._plan(), RemovalScope.BINARY_ONLY, True,
            installer=MockPackageInstaller(), remover=MockFileRemover(), record_path=record_path,
        )

        assert not outcome.failed_steps
        assert record_path.exists()

    def test_failed_everything_keeps_record(self, tmp_path):
        record_path = tmp_path / "record.json"
        record_path.write_text("{}")
        installer = MockPackageInstaller({"libgnutls30", "libffi8"}, failing_remove={"libgnutls30"})

        outcome = execute_removal(
            self._plan(), RemovalScope.EVERYTHING, True,
            installer=installer, remover=MockFileRemover(), record_path=record_path,
        )

        assert outcome.failed_steps
        assert record_path.exists()

    def test_steps_are_best_effort(self):
        installer = MockPackageInstaller(failing_remove={"libdispatch0"})
        remover = MockFileRemover(fail=True)

        outcome = execute_removal(
            self._plan(), RemovalScope.EVERYTHING, True,
            installer=installer, remover=remover,
        )

        assert len(outcome.failed_steps) == 3
        assert installer.removals == ["libdispatch0", "libgnutls30 libffi8"]

    def test_remover_exception_becomes_failed_step(self):
        def explode(path):
            raise OSError("read-only filesystem")

        outcome = execute_removal(
            self._plan(), RemovalScope.BINARY_ONLY, True,
            installer=MockPackageInstaller(),
            remover=MockFileRemover(on_remove=explode),
        )
        assert outcome.failed_steps
        assert "read-only filesystem" in outcome.failed_steps[0].error

    def test_absent_binary_is_skip(self):
        plan = self._plan()
        plan.binary_present = False
        remover = MockFileRemover()
        outcome = execute_removal(
            plan, RemovalScope.BINARY_ONLY, True,
            installer=MockPackageInstaller(), remover=remover,
        )
        assert outcome.steps[0].status == "skipped"
        assert "/srv/server" not in remover.removed
