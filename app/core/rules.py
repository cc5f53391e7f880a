# app/core/rules.py

"""
Reason assignment and rule-set mutations.

A rule maps a search term to a category label. The rule whose search
term is the longest substring of a transaction's description plus
payee name wins; shorter, generic terms lose to longer, specific ones.
"""

from typing import Any, Iterable, Optional

from pydantic import ValidationError

from app.exceptions import RuleConflictError, RuleNotFoundError
from app.models.rule import ReasonMapping


# ============================================
# Matching
# ============================================

def find_best_rule(
    description: str,
    check_name: str,
    rules: Iterable[ReasonMapping],
) -> Optional[ReasonMapping]:
    """
    Pick the rule with the longest search term contained in the text.

    Matching is a case-insensitive substring test, not word based.
    Ties go to the rule seen first.
    """
    haystack = f"{description} {check_name}".upper()
    best: Optional[ReasonMapping] = None
    best_length = 0

    for rule in rules:
        if rule.search_term.upper() in haystack and len(rule.search_term) > best_length:
            best = rule
            best_length = len(rule.search_term)

    return best


def assign_reason(
    description: str,
    check_name: str,
    rules: Iterable[ReasonMapping],
) -> str:
    """Return the reason of the best matching rule, or "" when none match."""
    best = find_best_rule(description or "", check_name or "", rules)
    return best.reason if best else ""


# ============================================
# Rule-set mutations
# ============================================

def _same_term(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def add_rule(rules: list[ReasonMapping], rule: ReasonMapping) -> list[ReasonMapping]:
    """Return a new rule set with rule appended."""
    if any(_same_term(existing.search_term, rule.search_term) for existing in rules):
        raise RuleConflictError(rule.search_term)
    return [*rules, rule]


def update_rule(
    rules: list[ReasonMapping],
    original_search_term: str,
    rule: ReasonMapping,
) -> list[ReasonMapping]:
    """
    Return a new rule set with the rule for original_search_term replaced.

    Renaming is rejected when the new search term belongs to a different
    rule. Changing only the case of a rule's own term is allowed.
    """
    if not any(existing.search_term == original_search_term for existing in rules):
        raise RuleNotFoundError(original_search_term)

    if any(
        existing.search_term != original_search_term
        and _same_term(existing.search_term, rule.search_term)
        for existing in rules
    ):
        raise RuleConflictError(rule.search_term)

    return [
        rule if existing.search_term == original_search_term else existing
        for existing in rules
    ]


def delete_rule(rules: list[ReasonMapping], search_term: str) -> list[ReasonMapping]:
    """Return a new rule set without the rule for search_term (exact match)."""
    return [existing for existing in rules if existing.search_term != search_term]


def validate_rules(data: Any) -> Optional[list[ReasonMapping]]:
    """
    Parse stored rule data.

    Returns None when the data is not a list of objects with string
    searchTerm and reason, which callers treat as corrupt storage.
    """
    if not isinstance(data, list):
        return None

    rules = []
    for entry in data:
        if not isinstance(entry, dict):
            return None
        search_term = entry.get("searchTerm")
        reason = entry.get("reason")
        if not isinstance(search_term, str) or not isinstance(reason, str):
            return None
        try:
            rules.append(ReasonMapping(search_term=search_term, reason=reason))
        except ValidationError:
            return None

    return rules


def dump_rules(rules: Iterable[ReasonMapping]) -> list[dict]:
    """Serialize rules in the stored (camelCase) shape."""
    return [rule.model_dump(by_alias=True) for rule in rules]
