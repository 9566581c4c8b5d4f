"""
Unit tests for the rule registry and the audit engine.

Tests cover:
- Registry integrity (unique IDs, known severities, ordering)
- Reference scenarios over hand-built snapshots
- Exclusion and severity filters
- Deterministic, ordered output
- End-to-end audits of complete configurations
- Logging and metrics of an audit run
"""

import logging
from unittest.mock import patch

import pytest

from gateway_audit.audit import RULES, audit, evaluate, list_rules, rule_sort_key
from gateway_audit.audit.engine import coerce_severities
from gateway_audit.audit.registry import RULES_BY_ID
from gateway_audit.core.errors import ConfigurationError, ValidationError
from gateway_audit.domain.enums import ALL_SEVERITIES, Severity
from gateway_audit.gateway import namespaces as ns
from gateway_audit.snapshot import EndpointSnapshot, Snapshot, bits


def _ids(recommendations) -> list[str]:
    return [r.rule for r in recommendations]


class TestRegistry:
    """Tests for the immutable rule table."""

    @pytest.mark.anyio
    async def test_rule_ids_are_unique(self):
        ids = [rule.id for rule in RULES]
        assert len(ids) == len(set(ids))
        assert set(RULES_BY_ID) == set(ids)

    @pytest.mark.anyio
    async def test_every_rule_has_a_message_and_severity(self):
        for rule in RULES:
            assert rule.message
            assert "{" not in rule.message
            assert rule.severity in ALL_SEVERITIES

    @pytest.mark.anyio
    async def test_list_rules_is_sorted_numerically(self):
        ids = [rule.id for rule in list_rules()]
        assert ids == sorted(ids, key=rule_sort_key)
        assert ids.index("7.1.9") < ids.index("7.1.10")

    @pytest.mark.anyio
    async def test_rule_sort_key(self):
        assert sorted(["2.2.1", "2.1.10", "2.1", "2.1.3"], key=rule_sort_key) == [
            "2.1",
            "2.1.3",
            "2.1.10",
            "2.2.1",
        ]

    @pytest.mark.anyio
    async def test_timeout_messages_are_rendered(self):
        assert RULES_BY_ID["3.3.2"].message == "Ensure that your timeouts are below 5 seconds."
        assert RULES_BY_ID["3.3.4"].severity == Severity.CRITICAL

    @pytest.mark.anyio
    async def test_rules_are_frozen(self):
        with pytest.raises(AttributeError):
            RULES[0].severity = Severity.LOW


class TestScenarios:
    """Reference scenarios over hand-built snapshots."""

    @pytest.mark.anyio
    async def test_all_default_snapshot(self):
        """Test that a bare service reports missing protections but not disabled TLS."""
        ids = _ids(evaluate(Snapshot(flags=[0], endpoints=[EndpointSnapshot()])))

        for expected in ("2.1.2", "2.2.2", "3.1.2", "3.1.3", "5.2.1"):
            assert expected in ids
        assert "2.1.3" not in ids

    @pytest.mark.anyio
    async def test_tls_present_but_disabled(self):
        ids = _ids(evaluate(Snapshot(flags=[1 << bits.SERVICE_HAS_TLS])))
        assert "2.1.3" in ids
        assert "2.1.2" not in ids

    @pytest.mark.anyio
    async def test_forty_second_timeout(self):
        endpoint = EndpointSnapshot(flags=[2, 0, 0, 40_000, 0, 0])
        ids = _ids(evaluate(Snapshot(flags=[0], endpoints=[endpoint])))

        assert "3.3.2" in ids
        assert "3.3.3" in ids
        assert "3.3.4" not in ids

    @pytest.mark.anyio
    async def test_two_telemetry_namespaces(self):
        two = Snapshot(flags=[0], components={ns.METRICS: [], ns.NEWRELIC: []})
        one = Snapshot(flags=[0], components={ns.METRICS: []})
        assert "4.1.3" in _ids(evaluate(two))
        assert "4.1.3" not in _ids(evaluate(one))

    @pytest.mark.anyio
    async def test_opentelemetry_only_configuration(self):
        result = audit(
            {
                "version": 3,
                "extra_config": {
                    "telemetry/opentelemetry": {
                        "exporters": {
                            "otlp": [{"name": "collector", "host": "otel"}],
                            "prometheus": [{"name": "local"}],
                        }
                    }
                },
                "endpoints": [{"endpoint": "/ping"}],
            }
        )
        ids = _ids(result.recommendations)

        assert "4.1.1" in ids
        assert "4.1.3" in ids
        assert "4.2.1" not in ids


class TestFilters:
    """Tests for exclusion and severity filters."""

    @pytest.mark.anyio
    async def test_exclusion_removes_only_named_rules(self):
        snapshot = Snapshot(flags=[0], endpoints=[EndpointSnapshot()])
        full = _ids(evaluate(snapshot))
        filtered = _ids(evaluate(snapshot, exclude=["2.1.2", "5.2.1"]))
        assert filtered == [i for i in full if i not in ("2.1.2", "5.2.1")]

    @pytest.mark.anyio
    async def test_exclusion_is_exact_match(self):
        snapshot = Snapshot(flags=[0])
        assert _ids(evaluate(snapshot, exclude=["2.1"])) == _ids(evaluate(snapshot))

    @pytest.mark.anyio
    async def test_severity_filter(self):
        recommendations = evaluate(Snapshot(flags=[0]), levels=[Severity.HIGH])
        assert recommendations
        assert {r.severity for r in recommendations} == {Severity.HIGH}

    @pytest.mark.anyio
    async def test_severity_names_are_case_insensitive(self):
        assert coerce_severities(["critical", " High "]) == {Severity.CRITICAL, Severity.HIGH}

    @pytest.mark.anyio
    async def test_unknown_severity_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            evaluate(Snapshot(), levels=["URGENT"])
        assert exc_info.value.details["level"] == "URGENT"
        assert exc_info.value.__suppress_context__

    @pytest.mark.anyio
    async def test_empty_severity_filter_reports_nothing(self):
        assert evaluate(Snapshot(flags=[0]), levels=[]) == []


class TestDeterminism:
    """Tests for ordering and repeatability."""

    @pytest.mark.anyio
    async def test_output_is_sorted_by_rule_id(self, legacy_config):
        ids = _ids(audit(legacy_config).recommendations)
        assert ids == sorted(ids, key=rule_sort_key)

    @pytest.mark.anyio
    async def test_same_input_same_output(self, legacy_config):
        assert audit(legacy_config) == audit(legacy_config)


class TestAudit:
    """End-to-end audits of complete configurations."""

    @pytest.mark.anyio
    async def test_hardened_configuration_is_clean(self, hardened_config):
        result = audit(hardened_config)
        assert result.recommendations == []
        assert len(result.stats.endpoints) == 1

    @pytest.mark.anyio
    async def test_minimal_configuration(self, minimal_config):
        assert _ids(audit(minimal_config).recommendations) == [
            "1.2.1",
            "2.1.2",
            "2.1.7",
            "2.2.1",
            "2.2.2",
            "3.1.1",
            "3.1.2",
            "3.1.3",
            "4.1.1",
            "4.2.1",
            "4.3.1",
            "5.2.1",
            "5.2.2",
        ]

    @pytest.mark.anyio
    async def test_legacy_configuration(self, legacy_config):
        assert _ids(audit(legacy_config).recommendations) == [
            "1.1.1",
            "1.2.1",
            "2.1.1",
            "2.1.3",
            "2.1.7",
            "2.1.8",
            "2.1.9",
            "2.2.1",
            "2.2.2",
            "2.2.3",
            "2.2.4",
            "3.1.1",
            "3.1.2",
            "3.1.3",
            "3.3.1",
            "3.3.2",
            "3.3.3",
            "4.1.3",
            "4.3.1",
            "5.1.2",
            "5.1.3",
            "5.1.7",
            "5.2.2",
            "5.2.3",
            "7.1.3",
            "7.1.4",
            "7.1.7",
            "7.2.1",
            "7.2.3",
            "7.3.1",
        ]

    @pytest.mark.anyio
    async def test_medium_debug_example(self):
        result = audit({"version": 3, "debug_endpoint": True}, levels=["medium"])
        assert _ids(result.recommendations)[:3] == ["2.2.1", "3.1.1", "3.1.2"]
        assert "5.1.2" in _ids(result.recommendations)

    @pytest.mark.anyio
    async def test_structurally_invalid_configuration(self):
        with pytest.raises(ConfigurationError):
            audit({"endpoints": "nope"})

    @pytest.mark.anyio
    async def test_bad_filter_is_rejected_before_loading(self):
        with patch("gateway_audit.audit.engine.load_service_config") as mock_load:
            with pytest.raises(ValidationError):
                audit({}, levels=["nope"])
        mock_load.assert_not_called()


class TestAuditObservability:
    """Tests for audit logging and metrics."""

    @pytest.mark.anyio
    async def test_logs_summary(self, minimal_config, caplog):
        with caplog.at_level(logging.INFO, logger="gateway_audit.audit.engine"):
            audit(minimal_config)

        records = [r for r in caplog.records if r.name == "gateway_audit.audit.engine"]
        assert records
        assert records[-1].recommendation_count == 13
        assert records[-1].endpoint_count == 1
        assert records[-1].rule_count == len(RULES)

    @pytest.mark.anyio
    async def test_records_metrics(self, minimal_config):
        with patch("gateway_audit.audit.engine._record_audit_metrics") as mock_record:
            audit(minimal_config)
        status, _, count = mock_record.call_args.args
        assert status == "success"
        assert count == 13

    @pytest.mark.anyio
    async def test_records_error_metrics(self):
        with patch("gateway_audit.audit.engine._record_audit_metrics") as mock_record:
            with pytest.raises(ConfigurationError):
                audit("not json")
        assert mock_record.call_args.args[0] == "error"

    @pytest.mark.anyio
    async def test_metrics_failure_does_not_break_audit(self, minimal_config):
        with patch("gateway_audit.core.observability.metrics") as mock_metrics:
            mock_metrics.audit_runs_total.labels.side_effect = RuntimeError("boom")
            result = audit(minimal_config)
        assert result.recommendations
