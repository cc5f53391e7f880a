# app/rule_store.py

"""
Matching rule persistence.

Every store exposes load/save; add, update, delete and reset are built
on top of them and enforce search-term uniqueness before anything is
written. A missing or unreadable rule set loads as the built-in defaults.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from app.core.rules import add_rule, delete_rule, dump_rules, update_rule, validate_rules
from app.data.default_rules import default_rules
from app.database import delete_matching_rules, get_matching_rules, save_matching_rules
from app.exceptions import RuleStorageError
from app.models import ReasonMapping

logger = logging.getLogger(__name__)


class RuleStore:
    """Base class: subclasses implement _read, _write and _clear."""

    def _read(self) -> Optional[Any]:
        raise NotImplementedError

    def _write(self, data: list[dict]) -> None:
        raise NotImplementedError

    def _clear(self) -> None:
        raise NotImplementedError

    # ============================================
    # Load / save
    # ============================================

    def load(self) -> list[ReasonMapping]:
        """
        Stored rules, or the defaults if storage is empty or corrupt.

        Raises RuleStorageError when storage can't be read, so a mutation
        never saves over rules it failed to load.
        """
        try:
            data = self._read()
        except ValueError:
            logger.warning("Stored matching rules are not valid JSON, falling back to defaults")
            return default_rules()

        if data is None:
            return default_rules()

        rules = validate_rules(data)
        if rules is None:
            logger.warning("Stored matching rules are corrupt, falling back to defaults")
            return default_rules()
        return rules

    def save(self, rules: list[ReasonMapping]) -> None:
        """Persist rules. Raises RuleStorageError if storage is unavailable."""
        self._write(dump_rules(rules))

    # ============================================
    # Mutations
    # ============================================

    def add(self, rule: ReasonMapping) -> list[ReasonMapping]:
        rules = add_rule(self.load(), rule)
        self.save(rules)
        return rules

    def update(self, original_search_term: str, rule: ReasonMapping) -> list[ReasonMapping]:
        rules = update_rule(self.load(), original_search_term, rule)
        self.save(rules)
        return rules

    def delete(self, search_term: str) -> list[ReasonMapping]:
        rules = delete_rule(self.load(), search_term)
        self.save(rules)
        return rules

    def reset(self) -> list[ReasonMapping]:
        """Drop saved rules so the defaults apply again."""
        self._clear()
        return default_rules()


class InMemoryRuleStore(RuleStore):
    """Keeps the rule document in memory. Used by tests."""

    def __init__(self, data: Optional[Any] = None):
        self.data = data

    def _read(self) -> Optional[Any]:
        return self.data

    def _write(self, data: list[dict]) -> None:
        self.data = data

    def _clear(self) -> None:
        self.data = None


class JsonFileRuleStore(RuleStore):
    """Stores the rule set as a single JSON document on disk."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> Optional[Any]:
        if not self.path.exists():
            return None
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Error reading matching rules from %s: %s", self.path, e)
            raise RuleStorageError("Failed to read matching rules") from e
        return json.loads(text)

    def _write(self, data: list[dict]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error("Error saving matching rules to %s: %s", self.path, e)
            raise RuleStorageError("Failed to save matching rules") from e

    def _clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise RuleStorageError("Failed to reset matching rules") from e


class SupabaseRuleStore(RuleStore):
    """Stores one rule document per user in the matching_rules table."""

    def __init__(self, user_id: str):
        self.user_id = user_id

    def _read(self) -> Optional[Any]:
        try:
            return get_matching_rules(self.user_id)
        except Exception as e:
            logger.error("Error reading matching rules for %s: %s", self.user_id, e)
            raise RuleStorageError("Failed to read matching rules") from e

    def _write(self, data: list[dict]) -> None:
        try:
            save_matching_rules(self.user_id, data)
        except Exception as e:
            logger.error("Error saving matching rules for %s: %s", self.user_id, e)
            raise RuleStorageError("Failed to save matching rules") from e

    def _clear(self) -> None:
        try:
            delete_matching_rules(self.user_id)
        except Exception as e:
            raise RuleStorageError("Failed to reset matching rules") from e
