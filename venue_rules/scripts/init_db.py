from __future__ import annotations

from sqlalchemy import select

from venue_rules.db.session import SessionLocal, init_db
from venue_rules.models.rule_template import RuleTemplate

DEFAULT_TEMPLATES = [
    {
        "name": "Sales desks",
        "category": "coworking",
        "description": "Sales Team books a month ahead, everybody else three days.",
        "prompt": "The Sales Team can book Desk 1 up to 30 days in advance. Everybody else can only book 3 days ahead.",
        "rules_json": {
            "booking_window_rules": [
                {
                    "user_scope": "users_with_tags",
                    "tags": ["Sales Team"],
                    "constraint": "less_than",
                    "value": 30,
                    "unit": "days",
                    "spaces": ["Desk 1"],
                    "explanation": "Sales Team can book up to 30 days ahead",
                },
                {
                    "user_scope": "all_users",
                    "constraint": "less_than",
                    "value": 3,
                    "unit": "days",
                    "spaces": ["Desk 1"],
                    "explanation": "Everyone else can book up to 3 days ahead",
                },
            ],
            "pricing_rules": [
                {
                    "space": ["Desk 1"],
                    "time_range": "08:00-18:00",
                    "days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
                    "rate": {"amount": 15, "unit": "per_hour"},
                    "explanation": "Standard desk rate",
                }
            ],
        },
    },
    {
        "name": "Tennis courts",
        "category": "sports",
        "description": "Members-only courts with hour-aligned 1-2 hour slots and peak pricing.",
        "prompt": (
            "Only Club Members and Coaches can book Court 1 and Court 2. Bookings must be between 1 and 2 hours "
            "and start on the hour. Courts cost $40/hour, members pay $25/hour."
        ),
        "rules_json": {
            "booking_conditions": [
                {
                    "space": ["Court 1", "Court 2"],
                    "time_range": "00:00-24:00",
                    "rules": [
                        {"condition_type": "user_tags", "operator": "contains_none_of", "value": ["Club Members", "Coaches"]},
                        {"condition_type": "duration", "operator": "is_less_than", "value": "1h"},
                        {"condition_type": "duration", "operator": "is_greater_than", "value": "2h"},
                        {"condition_type": "interval_start", "operator": "multiple_of", "value": "1h"},
                        {"condition_type": "interval_end", "operator": "multiple_of", "value": "1h"},
                    ],
                    "logic_operators": ["OR", "OR", "OR", "OR"],
                    "explanation": "Members only, 1-2 hour slots on the hour",
                }
            ],
            "pricing_rules": [
                {
                    "space": ["Court 1", "Court 2"],
                    "time_range": "06:00-22:00",
                    "days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
                    "rate": {"amount": 40, "unit": "per_hour"},
                    "explanation": "Standard court rate",
                },
                {
                    "space": ["Court 1", "Court 2"],
                    "time_range": "06:00-22:00",
                    "days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
                    "rate": {"amount": 25, "unit": "per_hour"},
                    "condition_type": "user_tags",
                    "operator": "contains_any_of",
                    "value": ["Club Members"],
                    "explanation": "Member rate",
                },
            ],
            "buffer_time_rules": [
                {"spaces": ["Court 1", "Court 2"], "buffer_duration": "15min", "explanation": "15-minute clean-up buffer"}
            ],
        },
    },
    {
        "name": "Recording studio",
        "category": "studio",
        "description": "Day rate, four hours per day quota and a shared control room.",
        "prompt": "Studio A costs $200 per day. Each person can use it at most 4 hours a day. If Studio A is booked, Studio B is unavailable.",
        "rules_json": {
            "pricing_rules": [
                {
                    "space": ["Studio A"],
                    "time_range": "09:00-21:00",
                    "days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
                    "rate": {"amount": 200, "unit": "per_day"},
                    "explanation": "Day rate",
                }
            ],
            "quota_rules": [
                {
                    "target": "individuals",
                    "quota_type": "time",
                    "value": "4h",
                    "period": "day",
                    "affected_spaces": ["Studio A"],
                    "explanation": "Four hours per person per day",
                }
            ],
            "space_sharing": [{"from": "Studio A", "to": "Studio B", "explanation": "Shared control room"}],
        },
    },
]


def main() -> int:
    init_db()

    db = SessionLocal()
    try:
        existing = set(db.execute(select(RuleTemplate.name)).scalars().all())
        for t in DEFAULT_TEMPLATES:
            if t["name"] not in existing:
                db.add(RuleTemplate(**t))
        db.commit()
    finally:
        db.close()

    print("DB initialized")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
