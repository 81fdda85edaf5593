from __future__ import annotations

from venue_rules.schemas.rules import RuleSet
from venue_rules.services.rule_normalizer import lint_rule_set, normalize_rule_set, simulation_options


class TestNormalizeRuleSet:
    def test_time_fields_and_setup_guide(self):
        rules, guide = normalize_rule_set(
            {
                "pricing_rules": [{"space": ["Court 1"], "time_range": "6am to 4pm", "rate": {"amount": 20, "unit": "per_hour"}}],
                "booking_window_rules": [],
            }
        )
        rule = rules.pricing_rules[0]
        assert rule.model_extra["from_time"] == "06:00"
        assert rule.model_extra["to_time"] == "16:00"
        assert [s.step_key for s in guide] == ["pricing_rules"]
        assert guide[0].title == "Step: Pricing Rules"
        assert guide[0].rule_blocks[0]["from_time"] == "06:00"

    def test_existing_times_are_kept(self):
        rules, _ = normalize_rule_set(
            {"pricing_rules": [{"time_range": "09:00-17:00", "from_time": "08:00", "to_time": "18:00"}]}
        )
        assert rules.pricing_rules[0].model_extra["from_time"] == "08:00"

    def test_wrapped_payload_and_aliases(self):
        rules, guide = normalize_rule_set(
            {
                "parsed_rule_blocks": {
                    "booking_condition_rules": [{"space": "Court 1", "rules": []}],
                    "space_sharing_rules": [{"from": "Studio A", "to": "Studio B"}],
                    "quota_rules": None,
                },
                "setup_guide": [{"step_key": "space_sharing", "title": "Link studios", "instruction": "Pick both"}],
                "summary": "Studios share a room",
            }
        )
        assert rules.booking_conditions[0].space == ["Court 1"]
        assert rules.space_sharing[0].from_space == "Studio A"
        assert rules.quota_rules == []
        assert rules.summary == "Studios share a room"
        assert [s.step_key for s in guide] == ["space_sharing", "booking_conditions"]
        assert guide[0].title == "Link studios"

    def test_input_is_not_mutated(self):
        raw = {"pricing_rules": [{"time_range": "9am-5pm"}]}
        normalize_rule_set(raw)
        assert "from_time" not in raw["pricing_rules"][0]


class TestSimulationOptions:
    def test_collects_tags_and_spaces(self, sales_rules):
        rules = sales_rules.model_copy(
            update={
                "pricing_rules": RuleSet.model_validate(
                    {"pricing_rules": [{"space": ["Desk 2"], "condition_type": "user_tags", "operator": "contains_any_of", "value": ["Partners"]}]}
                ).pricing_rules
            }
        )
        options = simulation_options(rules)
        assert options.tags == ["Anonymous", "Partners", "Sales Team"]
        assert options.spaces == ["Desk 2", "Desk 1"]

    def test_empty_rule_set(self):
        options = simulation_options(RuleSet())
        assert options.tags == ["Anonymous"]
        assert options.spaces == []


class TestLint:
    def test_reports_corrections_and_unenforced_rules(self):
        rules = RuleSet.model_validate(
            {
                "booking_conditions": [
                    {"space": ["Court 1"], "rules": [
                        {"condition_type": "duration", "operator": "is_less_than", "value": "2h"},
                        {"condition_type": "duration", "operator": "is_greater_than", "value": "4h"},
                    ]}
                ],
                "booking_window_rules": [
                    {"constraint": "more_than", "value": 12, "unit": "hours", "spaces": ["Court 1"]},
                    {"constraint": "less_than", "value": 2, "unit": "weeks", "spaces": ["Court 1"]},
                ],
                "quota_rules": [{"quota_type": "count", "value": 2, "affected_spaces": ["Court 1"]}],
                "space_sharing": [{"from": "Court 1", "to": "Court 2"}],
            }
        )
        warnings = lint_rule_set(rules)
        assert [(w.family, w.level) for w in warnings] == [
            ("booking_conditions", "warning"),
            ("booking_conditions", "warning"),
            ("booking_window_rules", "warning"),
            ("booking_window_rules", "info"),
            ("quota_rules", "info"),
            ("space_sharing", "info"),
        ]
        assert "is_greater_than_or_equal_to 2h" in warnings[0].message

    def test_allow_list_gate_is_flagged(self):
        rules = RuleSet.model_validate(
            {"booking_conditions": [{"space": ["Court 1"], "rules": [
                {"condition_type": "user_tags", "operator": "contains_any_of", "value": ["Staff"]}
            ]}]}
        )
        assert [w.level for w in lint_rule_set(rules)] == ["info"]

    def test_long_upper_bound_is_noted(self, sales_rules):
        warnings = lint_rule_set(sales_rules)
        assert [(w.index, w.level) for w in warnings] == [(0, "info")]

    def test_clean_rule_set(self):
        rules = RuleSet.model_validate(
            {"booking_window_rules": [{"constraint": "less_than", "value": 3, "unit": "days", "spaces": ["Desk 1"]}]}
        )
        assert lint_rule_set(rules) == []
