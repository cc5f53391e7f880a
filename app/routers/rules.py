# app/routers/rules.py

"""
Matching rule management.

CRUD over the current user's rule set. Search terms are unique ignoring
case; conflicting changes are rejected and leave the rules untouched.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from app.dependencies import get_rule_store
from app.exceptions import RuleConflictError, RuleNotFoundError, RuleStorageError
from app.models import ReasonMapping
from app.rule_store import RuleStore

router = APIRouter()


class RulesResponse(BaseModel):
    success: bool
    rules: list[ReasonMapping]


def _storage_unavailable(e: RuleStorageError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get("", response_model=RulesResponse)
async def list_rules(store: RuleStore = Depends(get_rule_store)):
    """List matching rules (the defaults when none are saved)."""
    try:
        rules = store.load()
    except RuleStorageError as e:
        raise _storage_unavailable(e)

    return RulesResponse(success=True, rules=rules)


@router.post("", response_model=RulesResponse, status_code=status.HTTP_201_CREATED)
async def create_rule(rule: ReasonMapping, store: RuleStore = Depends(get_rule_store)):
    """Add a rule."""
    try:
        rules = store.add(rule)
    except RuleConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except RuleStorageError as e:
        raise _storage_unavailable(e)

    return RulesResponse(success=True, rules=rules)


@router.post("/reset", response_model=RulesResponse)
async def reset_rules(store: RuleStore = Depends(get_rule_store)):
    """Forget saved rules and go back to the defaults."""
    try:
        rules = store.reset()
    except RuleStorageError as e:
        raise _storage_unavailable(e)

    return RulesResponse(success=True, rules=rules)


@router.put("/{search_term:path}", response_model=RulesResponse)
async def update_rule(
    search_term: str,
    rule: ReasonMapping,
    store: RuleStore = Depends(get_rule_store),
):
    """Replace the rule currently stored under search_term."""
    try:
        rules = store.update(search_term, rule)
    except RuleNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except RuleConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except RuleStorageError as e:
        raise _storage_unavailable(e)

    return RulesResponse(success=True, rules=rules)


@router.delete("/{search_term:path}", response_model=RulesResponse)
async def delete_rule(search_term: str, store: RuleStore = Depends(get_rule_store)):
    """Delete a rule by exact search term. Deleting a missing rule is a no-op."""
    try:
        rules = store.delete(search_term)
    except RuleStorageError as e:
        raise _storage_unavailable(e)

    return RulesResponse(success=True, rules=rules)
