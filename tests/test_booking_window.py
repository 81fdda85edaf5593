from __future__ import annotations

from datetime import date, timedelta

import pytest

from venue_rules.schemas.rules import BookingWindowRule, RuleSet
from venue_rules.services.booking_window import (
    NO_APPLICABLE_MESSAGE,
    NO_RULES_MESSAGE,
    evaluate_booking_window,
    rule_hours,
    sort_by_priority,
)


def _window(constraint="less_than", value=3, unit="days", scope="all_users", tags=(), spaces=("Desk 1",), explanation=""):
    return BookingWindowRule(
        user_scope=scope,
        tags=list(tags),
        constraint=constraint,
        value=value,
        unit=unit,
        spaces=list(spaces),
        explanation=explanation,
    )


class TestHelpers:
    def test_sort_by_priority_is_stable(self):
        rules = [
            _window(scope="all_users", explanation="a"),
            _window(scope="users_with_no_tags", explanation="b"),
            _window(scope="users_with_tags", explanation="c"),
            _window(scope="all_users", explanation="d"),
            _window(scope="users_with_tags", explanation="e"),
        ]
        assert [r.explanation for r in sort_by_priority(rules)] == ["c", "e", "b", "a", "d"]

    @pytest.mark.parametrize("value,unit,hours", [(48, "hours", 48), (2, "days", 48), (1, "weeks", 168), (1, "day", 24)])
    def test_rule_hours(self, value, unit, hours):
        assert rule_hours(_window(value=value, unit=unit)) == hours


class TestBoundaries:
    def test_less_than_rejects_exactly_at_limit(self, make_request, now):
        rules = RuleSet(booking_window_rules=[_window("less_than", 3, "days")])
        assert not evaluate_booking_window(rules, make_request(days_ahead=3), now).allowed
        assert evaluate_booking_window(rules, make_request(days_ahead=2), now).allowed

    def test_more_than_rejects_exactly_at_limit(self, make_request, now):
        rules = RuleSet(booking_window_rules=[_window("more_than", 3, "days")])
        assert not evaluate_booking_window(rules, make_request(days_ahead=3), now).allowed
        assert evaluate_booking_window(rules, make_request(days_ahead=4), now).allowed

    def test_more_than_in_hours(self, make_request, now):
        rules = RuleSet(booking_window_rules=[_window("more_than", 24, "hours")])
        request = make_request(date=now + timedelta(hours=12))
        result = evaluate_booking_window(rules, request, now)
        assert not result.allowed
        assert "must book more than 24 hours in advance" in result.error_reason

    def test_bare_date_is_measured_from_midnight(self, make_request, now):
        # 3 calendar days ahead, but only 62 hours from a 10:00 evaluation
        rules = RuleSet(booking_window_rules=[_window("less_than", 3, "days")])
        assert evaluate_booking_window(rules, make_request(date=date(2025, 6, 5)), now).allowed


class TestScopes:
    def test_sales_team_uses_their_own_window(self, sales_rules, make_request, now):
        result = evaluate_booking_window(sales_rules, make_request(tags=["Sales Team"], days_ahead=5), now)
        assert result.allowed
        assert "users tagged Sales Team" in result.error_reason
        assert "30-day" in result.error_reason
        assert "Sales Team can book up to 30 days ahead" in result.error_reason

    def test_untagged_user_falls_back_to_general_rule(self, sales_rules, make_request, now):
        result = evaluate_booking_window(sales_rules, make_request(days_ahead=6), now)
        assert not result.allowed
        assert result.violated_rule == "Everyone else can book up to 3 days ahead"
        assert result.error_reason == (
            "Booking not allowed for all users: can only book less than 3 days in advance. "
            "You're trying to book 6 days ahead."
        )

    def test_sales_team_beyond_their_window(self, sales_rules, make_request, now):
        result = evaluate_booking_window(sales_rules, make_request(tags=["Sales Team"], days_ahead=45), now)
        assert not result.allowed
        assert result.error_reason == (
            "Booking not allowed for users tagged Sales Team: can only book less than 30 days in advance. "
            "You're trying to book 45 days ahead."
        )

    def test_tagged_rule_takes_priority_over_general(self, make_request, now):
        rules = RuleSet(
            booking_window_rules=[
                _window("less_than", 3, "days", explanation="general"),
                _window("less_than", 14, "days", scope="users_with_tags", tags=["Staff"], explanation="staff"),
            ]
        )
        result = evaluate_booking_window(rules, make_request(tags=["Staff"], days_ahead=10), now)
        assert result.allowed
        assert "staff" in result.error_reason
        assert "general" not in result.error_reason

    def test_no_tags_scope_applies_to_anonymous(self, make_request, now):
        rules = RuleSet(
            booking_window_rules=[
                _window("less_than", 1, "days", scope="users_with_no_tags", explanation="guests"),
                _window("less_than", 7, "days", explanation="everyone"),
            ]
        )
        assert not evaluate_booking_window(rules, make_request(tags=["Anonymous"], days_ahead=2), now).allowed
        assert not evaluate_booking_window(rules, make_request(tags=[], days_ahead=2), now).allowed
        tagged = evaluate_booking_window(rules, make_request(tags=["Member"], days_ahead=2), now)
        assert tagged.allowed
        assert "everyone" in tagged.error_reason

    def test_unrelated_space_is_unrestricted(self, sales_rules, make_request, now):
        result = evaluate_booking_window(sales_rules, make_request(space="Desk 9", days_ahead=60), now)
        assert result.allowed
        assert result.error_reason == NO_APPLICABLE_MESSAGE


class TestDefaults:
    def test_no_rules(self, make_request, now):
        result = evaluate_booking_window(RuleSet(), make_request(days_ahead=400), now)
        assert result.allowed
        assert result.error_reason == NO_RULES_MESSAGE

    def test_evaluations_are_traced(self, sales_rules, make_request, now, trace):
        evaluate_booking_window(sales_rules, make_request(tags=["Sales Team"], days_ahead=5), now, trace)
        evaluated = [e for e in trace.for_step("booking_window") if e.message == "Window rule evaluated"]
        assert len(evaluated) == 1
        assert evaluated[0].data["violates"] is False
