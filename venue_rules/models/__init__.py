# Import all models so that SQLAlchemy registers them for metadata.create_all
from venue_rules.models.rule_template import RuleTemplate

__all__ = [
    "RuleTemplate",
]
