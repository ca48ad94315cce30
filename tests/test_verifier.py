from datetime import datetime, timezone
from pathlib import Path

import pytest

from paam_studio.model.loader import load_paam
from paam_studio.verifier.framework import (
    COMPILATION_TARGETS,
    FrameworkAgnosticismVerifier,
    business_logic_preserved,
    calculate_complexity,
    compare_business_logic,
    simulate_compilation,
)

FIXTURES = Path(__file__).parent / "fixtures"

GENERATED_AT = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _todo():
    return load_paam(FIXTURES / "todo_app.json")


class TestVerify:
    def test_sweeps_every_target(self):
        outcome = FrameworkAgnosticismVerifier().verify(_todo(), GENERATED_AT)
        assert len(outcome.results) == 18
        assert [(r.platform, r.framework) for r in outcome.results] == list(COMPILATION_TARGETS)
        assert all(r.success for r in outcome.results)
        assert all(r.business_logic_preserved for r in outcome.results)

    def test_successful_result_details(self):
        outcome = FrameworkAgnosticismVerifier().verify(_todo(), GENERATED_AT)
        react = outcome.results[0]
        assert react.platform == "web-react"
        assert react.output["framework"] == "react"
        assert react.output["entities"][0]["frameworkSpecific"]["stateManagement"] == "context"
        assert react.performance.output_size > 0
        assert react.validation.syntax is True
        assert react.error is None

    def test_platform_without_tables_gets_empty_values(self):
        outcome = FrameworkAgnosticismVerifier().verify(_todo(), GENERATED_AT)
        redis = outcome.results[-1]
        assert redis.platform == "database-redis"
        assert redis.output["entities"][0]["frameworkSpecific"] == {}
        assert redis.output["components"]["frameworkComponents"] == []
        assert "framework" not in redis.output

    def test_failing_target_does_not_stop_sweep(self):
        def compile_step(document, platform, framework):
            if platform == "mobile-ios-swift":
                raise RuntimeError("boom")
            return simulate_compilation(document, platform, framework)

        outcome = FrameworkAgnosticismVerifier(compile_step=compile_step).verify(_todo(), GENERATED_AT)
        assert len(outcome.results) == 18
        failed = [r for r in outcome.results if not r.success]
        assert len(failed) == 1
        assert failed[0].platform == "mobile-ios-swift"
        assert failed[0].error == "boom"
        assert failed[0].business_logic_preserved is False
        assert failed[0].output is None
        assert "1 of 18 targets failed to compile" in outcome.report

    def test_dropped_entities_are_not_preserved(self):
        def compile_step(document, platform, framework):
            output = simulate_compilation(document, platform, framework)
            output["entities"] = []
            return output

        outcome = FrameworkAgnosticismVerifier(compile_step=compile_step).verify(_todo(), GENERATED_AT)
        assert all(r.success for r in outcome.results)
        assert not any(r.business_logic_preserved for r in outcome.results)

    def test_verification_lists_supported_frameworks(self):
        outcome = FrameworkAgnosticismVerifier().verify(_todo(), GENERATED_AT)
        assert outcome.verification["web"]["svelte"] is True
        assert outcome.verification["database"]["nosql"]["redis"] is True

    def test_metrics_are_fixed(self):
        outcome = FrameworkAgnosticismVerifier().verify(_todo(), GENERATED_AT)
        assert outcome.metrics.natural_language_to_spec.confidence == 0.95
        assert outcome.metrics.spec_to_code.completeness == 0.94
        assert outcome.metrics.cross_platform.feature_parity == 0.93


class TestReport:
    def test_sections(self):
        report = FrameworkAgnosticismVerifier().verify(_todo(), GENERATED_AT).report
        assert report.startswith("PAAM Framework Agnosticism Verification Report")
        assert "Project: Todo App" in report
        assert "Version: 1.0.0" in report
        assert f"Generated: {GENERATED_AT.isoformat()}" in report
        assert "- Total Targets: 18" in report
        assert "- Successful Compilations: 18" in report
        assert "- Success Rate: 100.0%" in report
        assert "- Business Logic Preservation: 100.0%" in report
        assert "- Natural Language → Spec: 95% confidence, 92% integrity" in report
        assert "- Syntax Validation: 18/18" in report
        assert "✅ PAAM specification demonstrates true framework agnosticism" in report
        assert report.endswith("Report generated by PAAM Framework Agnosticism Verifier v1.0")


class TestBusinessLogic:
    def test_extra_keys_in_output_are_fine(self):
        assert compare_business_logic({"a": 1}, {"a": 1, "b": 2})

    def test_missing_key_fails(self):
        assert not compare_business_logic({"a": 1, "b": 2}, {"a": 1})

    def test_list_length_must_match(self):
        assert not compare_business_logic([1, 2], [1])
        assert compare_business_logic([{"id": "x"}], [{"id": "x", "extra": True}])

    def test_scalar_mismatch(self):
        assert not compare_business_logic("a", "b")
        assert not compare_business_logic({"a": 1}, [1])

    def test_scalar_types_must_match(self):
        assert not compare_business_logic(True, 1)
        assert not compare_business_logic({"required": 1}, {"required": True})
        assert not compare_business_logic(0, False)
        assert compare_business_logic({"required": True}, {"required": True})

    def test_absent_sections_are_skipped(self):
        assert business_logic_preserved({"entities": []}, {"entities": []})
        assert business_logic_preserved({"metadata": {}}, {})

    def test_section_missing_from_output(self):
        assert not business_logic_preserved({"entities": [], "flows": []}, {"entities": []})

    def test_requirements_and_rules_carried_through(self):
        document = {
            "entities": [],
            "flows": [],
            "requirements": {"functional": ["sign up"]},
            "businessRules": [{"id": "r1"}],
        }
        output = simulate_compilation(document, "backend-go", "go")
        assert output["requirements"] == document["requirements"]
        assert output["businessRules"] == document["businessRules"]
        assert business_logic_preserved(document, output)


class TestComplexity:
    def test_single_line_json(self):
        # json.dumps output is one line, so complexity is tokens / 1000 rounded
        assert calculate_complexity({}) == 0
        assert calculate_complexity({"words": " ".join(["w"] * 2000)}) == 2


class TestSupportQueries:
    @pytest.mark.parametrize("platform, framework, expected", [
        ("web", "react", True),
        ("web", "ember", False),
        ("backend", "go", True),
        ("mobile", "ios", False),
        ("desktop", "qt", False),
    ])
    def test_is_framework_supported(self, platform, framework, expected):
        assert FrameworkAgnosticismVerifier().is_framework_supported(platform, framework) is expected

    def test_targets_for_platform(self):
        verifier = FrameworkAgnosticismVerifier()
        assert verifier.get_compilation_targets_for_platform("web") == ["react", "vue", "angular", "svelte"]
        assert verifier.get_compilation_targets_for_platform("mobile") == ["ios", "android"]
        assert verifier.get_compilation_targets_for_platform("database") == ["sql", "nosql"]
        assert verifier.get_compilation_targets_for_platform("desktop") == []

    def test_supported_frameworks_is_a_copy(self):
        verifier = FrameworkAgnosticismVerifier()
        verifier.get_supported_frameworks()["web"]["react"] = False
        assert verifier.is_framework_supported("web", "react")
