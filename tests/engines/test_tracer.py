"""
Tests for the engine tracer decorator and input fingerprints.
"""

from decimal import Decimal

from payroll_engines.pay_period import PeriodType
from payroll_engines.tracer import compute_input_fingerprint, traced_engine


@traced_engine("sample", "2.0", fingerprint_fields=("amount", "period_type"))
def _sample_engine(amount, period_type, note=None):
    """Sample engine."""
    return amount * 2


class TestFingerprint:
    def test_deterministic(self):
        args = {"amount": Decimal("100"), "period_type": PeriodType.MID_MONTH}
        assert compute_input_fingerprint(("amount", "period_type"), args) == \
            compute_input_fingerprint(("amount", "period_type"), dict(args))

    def test_decimal_scale_ignored(self):
        a = compute_input_fingerprint(("amount",), {"amount": Decimal("100")})
        b = compute_input_fingerprint(("amount",), {"amount": Decimal("100.00")})
        assert a == b

    def test_enum_matches_value(self):
        a = compute_input_fingerprint(("p",), {"p": PeriodType.END_MONTH})
        b = compute_input_fingerprint(("p",), {"p": "END_MONTH"})
        assert a == b

    def test_missing_field_is_null(self):
        a = compute_input_fingerprint(("amount",), {})
        b = compute_input_fingerprint(("amount",), {"amount": None})
        assert a == b

    def test_different_inputs_differ(self):
        a = compute_input_fingerprint(("amount",), {"amount": Decimal("1")})
        b = compute_input_fingerprint(("amount",), {"amount": Decimal("2")})
        assert a != b
        assert len(a) == 16


class TestTracedEngine:
    def test_result_and_metadata_preserved(self):
        assert _sample_engine(Decimal("2"), PeriodType.MID_MONTH) == Decimal("4")
        assert _sample_engine.__name__ == "_sample_engine"
        assert _sample_engine.__doc__ == "Sample engine."

    def test_emits_trace(self, captured_logs):
        _sample_engine(Decimal("2"), PeriodType.MID_MONTH)

        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["engine_name"] == "sample"
        assert trace["engine_version"] == "2.0"
        assert trace["duration_ms"] >= 0

    def test_positional_and_keyword_calls_share_fingerprint(self, captured_logs):
        _sample_engine(Decimal("2"), PeriodType.MID_MONTH)
        _sample_engine(amount=Decimal("2"), period_type=PeriodType.MID_MONTH, note="x")

        fingerprints = [
            r["input_fingerprint"]
            for r in captured_logs()
            if r["message"] == "PAYROLL_ENGINE_TRACE"
        ]
        assert len(fingerprints) == 2
        assert fingerprints[0] == fingerprints[1]
