# app/data/default_rules.py

"""
Built-in matching rules.

Used whenever no rule set has been saved yet, or the saved one is
unreadable. Search terms are matched case-insensitively as substrings
of the description plus payee name.
"""

from app.models.rule import ReasonMapping

DEFAULT_RULES: list[ReasonMapping] = [
    ReasonMapping(search_term="AMAZON", reason="Office Supplies"),
    ReasonMapping(search_term="AMAZON PRIME", reason="Subscriptions"),
    ReasonMapping(search_term="STAPLES", reason="Office Supplies"),
    ReasonMapping(search_term="COSTCO", reason="Supplies"),
    ReasonMapping(search_term="HOME DEPOT", reason="Repairs & Maintenance"),
    ReasonMapping(search_term="LOWES", reason="Repairs & Maintenance"),
    ReasonMapping(search_term="SHELL", reason="Fuel"),
    ReasonMapping(search_term="CHEVRON", reason="Fuel"),
    ReasonMapping(search_term="EXXON", reason="Fuel"),
    ReasonMapping(search_term="COMCAST", reason="Utilities"),
    ReasonMapping(search_term="VERIZON", reason="Telephone"),
    ReasonMapping(search_term="AT&T", reason="Telephone"),
    ReasonMapping(search_term="ELECTRIC", reason="Utilities"),
    ReasonMapping(search_term="WATER", reason="Utilities"),
    ReasonMapping(search_term="INSURANCE", reason="Insurance"),
    ReasonMapping(search_term="STATE FARM", reason="Insurance"),
    ReasonMapping(search_term="IRS", reason="Taxes"),
    ReasonMapping(search_term="USATAXPYMT", reason="Taxes"),
    ReasonMapping(search_term="PAYROLL", reason="Payroll"),
    ReasonMapping(search_term="ADP", reason="Payroll"),
    ReasonMapping(search_term="RENT", reason="Rent"),
    ReasonMapping(search_term="SERVICE CHARGE", reason="Bank Fees"),
    ReasonMapping(search_term="OVERDRAFT", reason="Bank Fees"),
]


def default_rules() -> list[ReasonMapping]:
    """Fresh copy of the built-in rules."""
    return [rule.model_copy() for rule in DEFAULT_RULES]
