from __future__ import annotations

from venue_rules.schemas.rules import BufferTimeRule, QuotaRule, RuleSet
from venue_rules.services.buffer import evaluate_buffers
from venue_rules.services.quota import evaluate_quotas, quota_targets


def _quota(**kwargs):
    data = {"target": "individuals", "quota_type": "time", "value": "4h", "period": "day", "affected_spaces": ["Studio A"]}
    data.update(kwargs)
    return QuotaRule.model_validate(data)


class TestQuotaTargets:
    def test_individuals_always(self):
        assert quota_targets(_quota(), [])

    def test_tagged_targets_need_a_tag(self):
        rule = _quota(target="individuals_with_tags", tags=["Students"])
        assert quota_targets(rule, ["Students"])
        assert not quota_targets(rule, ["Staff"])
        assert not quota_targets(_quota(target="group_with_tag", tags=["Band"]), [])

    def test_no_tags_target_needs_anonymous(self):
        rule = _quota(target="individuals_with_no_tags")
        assert quota_targets(rule, [])
        assert quota_targets(rule, ["Anonymous"])
        assert not quota_targets(rule, ["Staff"])


class TestEvaluateQuotas:
    def test_duration_over_limit(self, make_request):
        rules = RuleSet(quota_rules=[_quota(explanation="Four hours a day")])
        result = evaluate_quotas(rules, make_request(space="Studio A"), 5)
        assert not result.allowed
        assert result.error_reason == "Booking duration (5h) exceeds quota limit of 4h per day"
        assert result.violated_rule == "Four hours a day"

    def test_duration_at_limit_passes(self, make_request):
        rules = RuleSet(quota_rules=[_quota()])
        assert evaluate_quotas(rules, make_request(space="Studio A"), 4).allowed

    def test_other_space_is_skipped(self, make_request):
        rules = RuleSet(quota_rules=[_quota()])
        assert evaluate_quotas(rules, make_request(space="Studio B"), 8).allowed

    def test_untargeted_user_is_skipped(self, make_request):
        rules = RuleSet(quota_rules=[_quota(target="individuals_with_tags", tags=["Students"])])
        assert evaluate_quotas(rules, make_request(space="Studio A", tags=["Staff"]), 8).allowed

    def test_composite_limit(self, make_request):
        rules = RuleSet(quota_rules=[_quota(value="1h30min", period="week")])
        result = evaluate_quotas(rules, make_request(space="Studio A"), 2)
        assert result.error_reason == "Booking duration (2h) exceeds quota limit of 1.5h per week"

    def test_count_quota_is_not_enforced(self, make_request, trace):
        rules = RuleSet(quota_rules=[_quota(quota_type="count", value=1)])
        assert evaluate_quotas(rules, make_request(space="Studio A"), 8, trace).allowed
        assert trace.messages() == ["Count quota not enforced by simulation"]


class TestBuffers:
    def test_always_allows(self, make_request, trace):
        rules = RuleSet(buffer_time_rules=[BufferTimeRule(spaces=["Court 1"], buffer_duration="15min")])
        assert evaluate_buffers(rules, make_request(space="Court 1"), trace).allowed
        assert trace.for_step("buffer_time")[0].data == {"buffer_duration": "15min"}
