"""Rule string parsing and check definition loading."""

from .check_loader import CheckLoader, CheckLoadError
from .rule_parser import (
    MalformedRuleError,
    NoRulesError,
    RuleParseError,
    normalize_path,
    parse_check_rules,
    parse_rule,
)

__all__ = [
    "CheckLoader",
    "CheckLoadError",
    "MalformedRuleError",
    "NoRulesError",
    "RuleParseError",
    "normalize_path",
    "parse_check_rules",
    "parse_rule",
]
