"""
Account snapshot preparation.

The account store hands over balances in whatever shape the UI keeps them:
a list of records with loosely spelled types ("Credit Card", "creditCards"),
Account objects, or a plain {type: balance} mapping. Everything here turns
that into an immutable tuple of Account for the projection.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import pandas as pd

from core.schema import Account, AccountType, LIABILITY_TYPES
from core.utils import to_float

logger = logging.getLogger(__name__)


_ACCOUNT_TYPE_ALIASES: Dict[str, AccountType] = {
    # assets
    "chequing": AccountType.CHECKING,
    "checkings": AccountType.CHECKING,
    "cash": AccountType.CHECKING,
    "saving": AccountType.SAVINGS,
    "high_yield_savings": AccountType.SAVINGS,
    "investments": AccountType.INVESTMENT,
    "retirement_401k": AccountType.RETIREMENT,
    "401k": AccountType.RETIREMENT,
    "ira": AccountType.RETIREMENT,
    "roth_ira": AccountType.RETIREMENT,
    "brokerages": AccountType.BROKERAGE,
    "vehicles": AccountType.VEHICLE,
    "car": AccountType.VEHICLE,
    "realestate": AccountType.REAL_ESTATE,
    "property": AccountType.REAL_ESTATE,
    "home": AccountType.REAL_ESTATE,
    # liabilities
    "credit_cards": AccountType.CREDIT_CARD,
    "creditcard": AccountType.CREDIT_CARD,
    "creditcards": AccountType.CREDIT_CARD,
    "credit": AccountType.CREDIT_CARD,
    "lines_of_credit": AccountType.LINE_OF_CREDIT,
    "loc": AccountType.LINE_OF_CREDIT,
    "heloc": AccountType.LINE_OF_CREDIT,
    "mortgages": AccountType.MORTGAGE,
    "home_loan": AccountType.MORTGAGE,
    "auto_loans": AccountType.AUTO_LOAN,
    "car_loan": AccountType.AUTO_LOAN,
    "student_loans": AccountType.STUDENT_LOAN,
    "personal_loans": AccountType.PERSONAL_LOAN,
    "loan": AccountType.PERSONAL_LOAN,
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

AccountsInput = Union[None, Mapping[str, Any], Iterable[Union[Account, Mapping[str, Any]]]]


def canonicalize_account_type(value: Any) -> Optional[AccountType]:
    """Resolve a loosely spelled account type; None when it cannot be classified."""
    if isinstance(value, AccountType):
        return value
    if value is None:
        return None
    text = _CAMEL_BOUNDARY.sub("_", str(value).strip())
    key = re.sub(r"[\s\-]+", "_", text).lower().strip("_")
    key = re.sub(r"_+", "_", key)
    if not key:
        return None
    try:
        return AccountType(key)
    except ValueError:
        return _ACCOUNT_TYPE_ALIASES.get(key)


def _classify(raw_type: Any, balance: float, account_id: str) -> AccountType:
    resolved = canonicalize_account_type(raw_type)
    if resolved is not None:
        return resolved
    # Unknown kinds are classified by sign: negative balances are owed.
    fallback = AccountType.PERSONAL_LOAN if balance < 0 else AccountType.CHECKING
    logger.warning(
        "Unknown account type %r on account %s; treating it as %s",
        raw_type, account_id, fallback.value,
    )
    return fallback


def _account_from_record(record: Mapping[str, Any], index: int) -> Optional[Account]:
    account_id = str(record.get("id") or record.get("account_id") or record.get("accountId") or f"account-{index}")
    balance = to_float(record.get("balance", record.get("current_balance")))
    if balance is None:
        logger.warning("Account %s has no usable balance; skipped", account_id)
        return None
    raw_type = record.get("type", record.get("account_type", record.get("accountType")))
    return Account(id=account_id, type=_classify(raw_type, balance, account_id), balance=balance)


def build_account_snapshot(accounts: AccountsInput) -> Tuple[Account, ...]:
    """
    Normalise account input into an immutable snapshot.

    Parameters
    ----------
    accounts : mapping, iterable or None
        One of:
          - {type: balance}, e.g. {"checking": 29.22, "creditCards": -20361}
          - an iterable of dicts with id / type / balance keys
          - an iterable of Account objects
        None or an empty collection yields an empty snapshot.
    """
    if accounts is None:
        return ()

    if isinstance(accounts, Mapping):
        out = []
        for raw_type, raw_balance in accounts.items():
            balance = to_float(raw_balance)
            if balance is None:
                logger.warning("Balance for %r is not numeric; skipped", raw_type)
                continue
            out.append(Account(id=str(raw_type), type=_classify(raw_type, balance, str(raw_type)), balance=balance))
        return tuple(out)

    out = []
    for i, item in enumerate(accounts):
        if isinstance(item, Account):
            out.append(item)
        elif isinstance(item, Mapping):
            account = _account_from_record(item, i)
            if account is not None:
                out.append(account)
        else:
            logger.warning("Ignoring account entry of type %s", type(item).__name__)
    return tuple(out)


def compute_net_worth(accounts: Iterable[Account]) -> float:
    """Assets minus the absolute value of liabilities."""
    return float(sum(a.net_value for a in accounts))


def total_liabilities(accounts: Iterable[Account]) -> float:
    """Outstanding debt as a positive amount."""
    return float(sum(abs(a.balance) for a in accounts if a.type in LIABILITY_TYPES))


def accounts_to_dataframe(accounts: Iterable[Account]) -> pd.DataFrame:
    rows = [
        {
            "id": a.id,
            "type": a.type.value,
            "balance": a.balance,
            "is_liability": a.is_liability,
            "net_value": a.net_value,
        }
        for a in accounts
    ]
    return pd.DataFrame(rows, columns=["id", "type", "balance", "is_liability", "net_value"])
