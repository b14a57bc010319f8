"""
Diagnostic Service Tests (pytest compatible)

Run with:
    pytest tests/test_service.py -v
"""

import threading
import time

import pytest

from diagnostics import run_all_diagnostics
from diagnostics.core.errors import DuplicateDiagnosticError
from diagnostics.core.runner import DiagnosticRunner
from diagnostics.core.scope import CancelScope
from diagnostics.core.service import DiagnosticService, diagnostic, get_service


# =============================================================================
# Helpers
# =============================================================================

def assert_successful(result):
    assert result.error == ""
    assert result.details is not None
    assert result.details["test"] == result.name
    assert result.timestamp is not None
    assert result.timestamp.tzinfo is not None
    assert result.id


# =============================================================================
# Register and Run
# =============================================================================

class TestRegisterAndRun:

    def test_run_all_six(self, six_registered):
        """Six diagnostics across three categories produce six clean results."""
        results = six_registered.run()

        assert len(results) == 6
        for result in results:
            assert_successful(result)
            assert result.category
            assert result.description

    def test_duplicate_registration_rejected(self, six_registered, make_sleeper):
        """Re-registering (Red, A) fails and leaves the registry unchanged."""
        with pytest.raises(DuplicateDiagnosticError) as excinfo:
            six_registered.register(
                "TestDiagnosticA",
                "Duplicate",
                "TestCategoryRed",
                make_sleeper("TestDiagnosticA", 0.01),
            )

        assert "TestDiagnosticA" in str(excinfo.value)
        assert "TestCategoryRed" in str(excinfo.value)
        assert excinfo.value.name == "TestDiagnosticA"
        assert excinfo.value.category == "TestCategoryRed"
        assert six_registered.total() == 6
        assert len(six_registered.run()) == 6

    def test_same_name_in_other_category_allowed(self, six_registered, make_sleeper):
        six_registered.register("TestDiagnosticA", "Same name", "TestCategoryBlue",
                                make_sleeper("TestDiagnosticA", 0.01))

        assert six_registered.total() == 7
        assert len(six_registered.run_category("TestCategoryBlue")) == 3

    def test_names_are_not_normalized(self, service, make_sleeper):
        service.register("probe", "lower", "Cat", make_sleeper("probe", 0))
        service.register("Probe", "upper", "Cat", make_sleeper("Probe", 0))
        service.register("probe", "other bucket", "cat", make_sleeper("probe", 0))

        assert service.total() == 3

    def test_list_matches_registrations(self, six_registered, six_diagnostics):
        """list() returns exactly the registered (name, description, category) triples."""
        listed = sorted(
            six_registered.diagnostics(),
            key=lambda d: f"{d.category}/{d.name}",
        )
        expected = sorted(six_diagnostics, key=lambda d: f"{d[2]}/{d[0]}")

        assert len(listed) == len(expected)
        for diag, (name, description, category, _) in zip(listed, expected):
            assert (diag.name, diag.description, diag.category) == (name, description, category)

    def test_empty_service(self, service):
        assert service.total() == 0
        assert service.run() == []
        assert service.diagnostics() == []

    def test_results_have_unique_ids(self, six_registered):
        ids = [r.id for r in six_registered.run()] + [r.id for r in six_registered.run()]
        assert len(ids) == len(set(ids))


# =============================================================================
# Unregister
# =============================================================================

class TestUnregister:

    def test_unregister_then_run(self, six_registered):
        assert six_registered.unregister("TestDiagnosticA", "TestCategoryRed") is True
        assert six_registered.unregister("TestDiagnosticA", "TestCategoryRed") is False
        assert six_registered.unregister("TestDiagnosticB", "does-not-exist") is False

        results = six_registered.run()

        assert len(results) == 5
        assert all(r.name != "TestDiagnosticA" for r in results)

    def test_unregister_whole_category(self, six_registered):
        assert six_registered.unregister("TestDiagnosticA", "TestCategoryRed")
        assert six_registered.unregister("TestDiagnosticB", "TestCategoryRed")

        assert six_registered.run_category("TestCategoryRed") == []
        assert len(six_registered.run_category("TestCategoryBlue")) == 2
        assert "TestCategoryRed" not in six_registered.registry.categories()

    def test_register_unregister_reversible(self, service, make_sleeper):
        service.register("x", "x", "c", make_sleeper("x", 0))
        before = service.total()

        assert service.unregister("x", "c")
        assert service.total() == before - 1

        # the pair can be registered again once removed
        service.register("x", "x", "c", make_sleeper("x", 0))
        assert service.total() == before


# =============================================================================
# Run Category / Run One
# =============================================================================

class TestLookups:

    def test_run_category(self, six_registered):
        results = six_registered.run_category("TestCategoryGreen")

        assert sorted(r.name for r in results) == ["TestDiagnosticE", "TestDiagnosticF"]
        for result in results:
            assert_successful(result)

    def test_run_unknown_category_is_empty(self, six_registered):
        assert six_registered.run_category("missing") == []

    def test_run_diagnostic(self, six_registered):
        result = six_registered.run_diagnostic("TestCategoryGreen", "TestDiagnosticF")

        assert result is not None
        assert result.name == "TestDiagnosticF"
        assert_successful(result)

    def test_run_diagnostic_missing(self, six_registered):
        assert six_registered.run_diagnostic("TestCategoryGreen", "missing") is None
        assert six_registered.run_diagnostic("missing", "TestDiagnosticF") is None


# =============================================================================
# Timeouts and Isolation
# =============================================================================

class TestTimeouts:

    def test_default_deadline_surfaces_as_error(self, service, make_sleeper):
        """A diagnostic running past the 5s default deadline reports an error; others are unaffected."""
        service.register("TestDiagnosticTimeout", "Runs for longer than 5 seconds...",
                         "TestCategoryGreen", make_sleeper("TestDiagnosticTimeout", 6.0))
        service.register("A", "fast", "TestCategoryRed", make_sleeper("A", 0.05))
        service.register("B", "fast", "TestCategoryRed", make_sleeper("B", 0.05))
        service.register("C", "fast", "TestCategoryBlue", make_sleeper("C", 0.05))

        start = time.monotonic()
        results = service.run()
        elapsed = time.monotonic() - start

        assert len(results) == 4
        failed = [r for r in results if r.error]
        assert len(failed) == 1
        assert failed[0].name == "TestDiagnosticTimeout"
        assert failed[0].error == "deadline exceeded"
        assert failed[0].details is None
        for result in results:
            if result is not failed[0]:
                assert_successful(result)
        assert elapsed < 6.0

    def test_short_deadline(self, fast_service, make_sleeper):
        fast_service.register("slow", "slow", "c", make_sleeper("slow", 2.0))
        result = fast_service.run_diagnostic("c", "slow")

        assert result.error == "deadline exceeded"
        assert result.details is None

    def test_failure_isolated(self, service, make_sleeper):
        def broken(scope):
            raise RuntimeError("backend unreachable")

        service.register("broken", "always fails", "c", broken)
        service.register("ok", "works", "c", make_sleeper("ok", 0.01))

        results = {r.name: r for r in service.run()}

        assert results["broken"].error == "backend unreachable"
        assert results["broken"].details is None
        assert_successful(results["ok"])


# =============================================================================
# Cancellation
# =============================================================================

class TestCancellation:

    def test_caller_cancel_reaches_every_diagnostic(self, service, make_sleeper):
        for i in range(8):
            service.register(f"d{i}", "slow", "c", make_sleeper(f"d{i}", 3.0))

        scope = CancelScope.background()
        threading.Timer(0.1, scope.cancel).start()

        start = time.monotonic()
        results = service.run(scope)
        elapsed = time.monotonic() - start

        # queued diagnostics still start and report the cancellation
        assert len(results) == 8
        assert all(r.error == "scope cancelled" for r in results)
        assert elapsed < 2.0

    def test_already_cancelled_scope(self, six_registered):
        scope = CancelScope.background()
        scope.cancel()

        results = six_registered.run(scope)

        assert len(results) == 6
        assert all(r.error for r in results)

    def test_registration_during_run(self, service, make_sleeper):
        """A run does not block registration; the new entry is seen by the next run."""
        started = threading.Event()

        def slow(scope):
            started.set()
            scope.sleep(0.3)
            return {}

        service.register("slow", "slow", "c", slow)
        worker = threading.Thread(target=service.run)
        worker.start()
        assert started.wait(2.0)

        service.register("late", "late", "c", make_sleeper("late", 0))
        assert service.total() == 2
        worker.join()

        assert {r.name for r in service.run()} == {"slow", "late"}

    def test_diagnostic_may_touch_registry(self, service):
        def self_aware(scope):
            return {"total": service.total()}

        service.register("self_aware", "reads the registry", "c", self_aware)

        result = service.run_diagnostic("c", "self_aware")
        assert result.details == {"total": 1}


# =============================================================================
# Configuration and Global Service
# =============================================================================

class TestConstruction:

    def test_default_runner_settings(self, service):
        assert service.runner.max_workers == 5
        assert service.runner.timeout_seconds == 5.0

    def test_config_builds_runner(self):
        from diagnostics.core.config import DiagnosticsConfig

        service = DiagnosticService(config=DiagnosticsConfig(max_workers=2, timeout_seconds=1.5))

        assert service.runner.max_workers == 2
        assert service.runner.timeout_seconds == 1.5

    def test_explicit_runner_wins(self):
        runner = DiagnosticRunner(max_workers=3)
        assert DiagnosticService(runner=runner).runner is runner

    def test_get_service_is_singleton(self):
        assert get_service() is get_service()

    def test_run_all_diagnostics_uses_global_service(self, monkeypatch):
        fresh = DiagnosticService()
        monkeypatch.setattr("diagnostics.core.service._global_service", fresh)
        fresh.register("one", "first", "global", lambda scope: {"n": 1})
        fresh.register("two", "second", "global", lambda scope: None)

        results = run_all_diagnostics()

        assert sorted(r.name for r in results) == ["one", "two"]
        assert all(not r.failed for r in results)

    def test_decorator_registers(self, service):
        @diagnostic("decorated", "Registered by decorator", "deco", service=service)
        def decorated(scope):
            return {"ok": True}

        assert decorated(None) == {"ok": True}
        result = service.run_diagnostic("deco", "decorated")
        assert result.details == {"ok": True}
