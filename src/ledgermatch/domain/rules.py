"""User-defined reconciliation rules.

A rule singles out bank transactions by description text, amount and
transaction type. Patterns hold alternatives separated by ``|``; a
transaction satisfies a pattern when it satisfies any alternative, and a
rule when it satisfies every pattern the rule sets.

Amount alternatives compare the transaction's absolute amount:

    =1500     equal to 1500
    >1000     greater than 1000
    <200      less than 200
    150       the plain amount contains the digits "150"

Rules never write matches. ``RulesService.preview_matches`` shows which
pending pairs the active rules would propose, in priority order, without
touching the four auto-reconciliation passes.
"""

import re
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Optional

from ledgermatch.database.base import Database
from ledgermatch.domain import errors
from ledgermatch.domain.entities import (
    AccountingEntry,
    BankTransaction,
    DateRange,
    ReconciliationRule,
    TransactionType,
)
from ledgermatch.domain.errors import NotFoundError, ValidationError
from ledgermatch.domain.ledger_reader import LedgerReader
from ledgermatch.domain.scoring import score_candidate
from ledgermatch.domain.settings import ReconciliationSettingsService
from ledgermatch.logger import get_logger
from ledgermatch.utils.normalization import absolute_amount

logger = get_logger(__name__)

DEFAULT_RULE_PRIORITY = 100
PATTERN_SEPARATOR = "|"
AMOUNT_OPERATORS = ("=", ">", "<")

_PLAIN_AMOUNT = re.compile(r"^\d+(\.\d+)?$")


@dataclass(frozen=True)
class RuleCandidate:
    """A pending pair proposed by a rule, with its confidence score."""

    rule: ReconciliationRule
    transaction: BankTransaction
    entry: AccountingEntry
    confidence: int


def split_pattern(pattern: Optional[str]) -> list[str]:
    """Split a ``|`` separated pattern into its non-blank alternatives."""
    if not pattern:
        return []
    return [part.strip() for part in pattern.split(PATTERN_SEPARATOR) if part.strip()]


def plain_amount(amount: Decimal) -> str:
    """Absolute amount without trailing zeros, e.g. ``1500`` or ``99.5``."""
    return format(absolute_amount(amount).normalize(), "f")


def _amount_bound(text: str) -> Decimal:
    try:
        bound = Decimal(text.strip())
    except InvalidOperation:
        raise ValidationError(f"Invalid amount in rule pattern: '{text}'")
    if not bound.is_finite():
        raise ValidationError(f"Invalid amount in rule pattern: '{text}'")
    return bound


def amount_condition_matches(condition: str, amount: Decimal) -> bool:
    """Check one amount alternative against a transaction amount."""
    magnitude = absolute_amount(amount)
    operator = condition[0]
    if operator == "=":
        return magnitude == _amount_bound(condition[1:])
    if operator == ">":
        return magnitude > _amount_bound(condition[1:])
    if operator == "<":
        return magnitude < _amount_bound(condition[1:])
    return condition in plain_amount(amount)


def matches_by_rule(transaction: BankTransaction, rule: ReconciliationRule) -> bool:
    """Whether a bank transaction meets every criterion the rule sets."""
    descriptions = split_pattern(rule.description_pattern)
    if descriptions:
        text = (transaction.description or "").lower()
        if not any(part.lower() in text for part in descriptions):
            return False

    if rule.transaction_type is not None and transaction.transaction_type != rule.transaction_type:
        return False

    conditions = split_pattern(rule.amount_pattern)
    if conditions and not any(amount_condition_matches(c, transaction.amount) for c in conditions):
        return False

    return True


def validate_amount_pattern(pattern: Optional[str]) -> Optional[str]:
    conditions = split_pattern(pattern)
    for condition in conditions:
        if condition[0] in AMOUNT_OPERATORS:
            _amount_bound(condition[1:])
        elif not _PLAIN_AMOUNT.match(condition):
            raise ValidationError(
                f"Invalid amount condition '{condition}'; use =N, >N, <N or digits"
            )
    return PATTERN_SEPARATOR.join(conditions) if conditions else None


def validate_description_pattern(pattern: Optional[str]) -> Optional[str]:
    parts = split_pattern(pattern)
    return PATTERN_SEPARATOR.join(parts) if parts else None


def validate_priority(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Rule priority must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"Rule priority must be non-negative, got {value}")
    return value


def validate_transaction_type(value) -> Optional[TransactionType]:
    if value is None or isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(value)
    except ValueError:
        choices = ", ".join(t.value for t in TransactionType)
        raise ValidationError(f"Unknown transaction type '{value}'; expected one of {choices}")


def _require_criteria(rule: ReconciliationRule) -> None:
    if rule.description_pattern is None and rule.amount_pattern is None and rule.transaction_type is None:
        raise ValidationError(
            "A rule needs a description pattern, an amount pattern or a transaction type"
        )


class RulesService:
    """Service for managing a company's reconciliation rules."""

    def __init__(self, db: Database):
        """Initialize rules service.

        Args:
            db: Database instance
        """
        self.db = db
        self.reader = LedgerReader(db)
        self.settings = ReconciliationSettingsService(db)

    def create_rule(
        self,
        company_id: int,
        name: str,
        description_pattern: Optional[str] = None,
        amount_pattern: Optional[str] = None,
        transaction_type: Optional[TransactionType | str] = None,
        priority: int = DEFAULT_RULE_PRIORITY,
        is_active: bool = True,
    ) -> int:
        """Create a reconciliation rule.

        Args:
            company_id: Owning company
            name: Rule name, unique within the company
            description_pattern: ``|`` separated substrings of the description
            amount_pattern: ``|`` separated amount conditions
            transaction_type: Only transactions of this type
            priority: Evaluation order, lowest first
            is_active: Whether previews use the rule

        Returns:
            ID of the created rule

        Raises:
            NotFoundError: If the company doesn't exist
            ValidationError: If a field is invalid or no criterion is set
            ConflictError: If the company already has a rule with this name
        """
        if self.db.get_company(company_id) is None:
            raise NotFoundError(errors.company_not_found(company_id))

        name = (name or "").strip()
        if not name:
            raise ValidationError("Rule name cannot be empty")

        draft = ReconciliationRule(
            id=0,
            company_id=company_id,
            name=name,
            description_pattern=validate_description_pattern(description_pattern),
            amount_pattern=validate_amount_pattern(amount_pattern),
            transaction_type=validate_transaction_type(transaction_type),
            priority=validate_priority(priority),
            is_active=bool(is_active),
        )
        _require_criteria(draft)

        rule_id = self.db.create_rule(
            company_id=company_id,
            name=draft.name,
            description_pattern=draft.description_pattern,
            amount_pattern=draft.amount_pattern,
            transaction_type=draft.transaction_type,
            priority=draft.priority,
            is_active=draft.is_active,
        )
        logger.info("Reconciliation rule created", rule_id=rule_id, company_id=company_id, name=name)
        return rule_id

    def get_rule(self, rule_id: int) -> Optional[ReconciliationRule]:
        return self.db.get_rule(rule_id)

    def require_rule(self, rule_id: int) -> ReconciliationRule:
        rule = self.db.get_rule(rule_id)
        if rule is None:
            raise NotFoundError(errors.rule_not_found(rule_id))
        return rule

    def list_rules(self, company_id: int, active_only: bool = False) -> list[ReconciliationRule]:
        """List a company's rules in evaluation order.

        Raises:
            NotFoundError: If the company doesn't exist
        """
        if self.db.get_company(company_id) is None:
            raise NotFoundError(errors.company_not_found(company_id))
        return self.db.list_rules(company_id, active_only=active_only)

    def update_rule(
        self,
        rule_id: int,
        name: Optional[str] = None,
        description_pattern: Optional[str] = None,
        amount_pattern: Optional[str] = None,
        transaction_type: Optional[TransactionType | str] = None,
        priority: Optional[int] = None,
    ) -> ReconciliationRule:
        """Change some fields of a rule; fields left as None keep their value.

        An empty string clears a pattern or the transaction type.

        Raises:
            NotFoundError: If the rule doesn't exist
            ValidationError: If a field is invalid or no criterion would remain
            ConflictError: If the new name is taken within the company
        """
        rule = self.require_rule(rule_id)
        changes = {}
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Rule name cannot be empty")
            changes["name"] = name
        if description_pattern is not None:
            changes["description_pattern"] = validate_description_pattern(description_pattern)
        if amount_pattern is not None:
            changes["amount_pattern"] = validate_amount_pattern(amount_pattern)
        if transaction_type is not None:
            changes["transaction_type"] = validate_transaction_type(transaction_type or None)
        if priority is not None:
            changes["priority"] = validate_priority(priority)

        updated = replace(rule, **changes)
        _require_criteria(updated)
        self.db.update_rule(updated)
        logger.info("Reconciliation rule updated", rule_id=rule_id, fields=sorted(changes))
        return self.require_rule(rule_id)

    def set_active(self, rule_id: int, is_active: bool) -> ReconciliationRule:
        """Enable or disable a rule."""
        rule = self.require_rule(rule_id)
        self.db.update_rule(replace(rule, is_active=is_active))
        logger.info("Reconciliation rule toggled", rule_id=rule_id, is_active=is_active)
        return self.require_rule(rule_id)

    def set_priority(self, rule_id: int, priority: int) -> ReconciliationRule:
        """Move a rule in the evaluation order."""
        return self.update_rule(rule_id, priority=priority)

    def delete_rule(self, rule_id: int) -> None:
        """Delete a rule.

        Raises:
            NotFoundError: If the rule doesn't exist
        """
        self.db.delete_rule(rule_id)
        logger.info("Reconciliation rule deleted", rule_id=rule_id)

    def preview_matches(
        self, bank_account_id: int, date_range: Optional[DateRange] = None
    ) -> list[RuleCandidate]:
        """Pairs the company's active rules would propose; nothing is written.

        Rules are tried in priority order. For each pending transaction a
        rule selects, the first pending entry whose score reaches the
        company's minimum match score is proposed, and both records are
        left out of every later proposal.

        Raises:
            NotFoundError: If the bank account doesn't exist
        """
        records = self.reader.read_unmatched(bank_account_id, date_range)
        company_id = records.bank_account.company_id
        settings = self.settings.get_settings(company_id)
        rules = self.db.list_rules(company_id, active_only=True)

        proposals: list[RuleCandidate] = []
        used_transactions: set[int] = set()
        used_entries: set[int] = set()

        for rule in rules:
            for transaction in records.transactions:
                if transaction.id in used_transactions or not matches_by_rule(transaction, rule):
                    continue
                for entry in records.entries:
                    if entry.id in used_entries:
                        continue
                    confidence = score_candidate(transaction, entry, settings.amount_tolerance)
                    if confidence >= settings.min_match_score:
                        proposals.append(RuleCandidate(rule, transaction, entry, confidence))
                        used_transactions.add(transaction.id)
                        used_entries.add(entry.id)
                        break

        logger.info(
            "Rule preview finished",
            bank_account_id=bank_account_id,
            rules=len(rules),
            proposals=len(proposals),
        )
        return proposals
