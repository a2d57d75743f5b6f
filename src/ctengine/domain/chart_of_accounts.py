"""Chart of accounts: account code to name and classification lookup."""

from types import MappingProxyType
from typing import Mapping, Optional

from ctengine.domain.entities import Account, Classification
from ctengine.domain.errors import UnknownAccountError

# First digit of the account code decides the financial-statement bucket
PREFIX_CLASSIFICATIONS: Mapping[str, Classification] = MappingProxyType(
    {
        "1": Classification.ASSET,
        "2": Classification.LIABILITY,
        "3": Classification.EQUITY,
        "4": Classification.REVENUE,
        "5": Classification.EXPENSE,
        "6": Classification.EXPENSE,
    }
)

DEFAULT_ACCOUNT_NAMES: Mapping[str, str] = MappingProxyType(
    {
        # Assets
        "1000": "Fixed Assets",
        "1100": "Current Assets",
        "1200": "Cash at Bank",
        "1300": "Debtors",
        "1400": "Stock",
        # Liabilities
        "2000": "Current Liabilities",
        "2100": "Creditors",
        "2200": "Accruals",
        "2300": "Long-term Liabilities",
        # Equity
        "3000": "Share Capital",
        "3100": "Retained Earnings",
        "3200": "Current Year Earnings",
        # Revenue
        "4000": "Sales Revenue",
        "4100": "Service Revenue",
        "4900": "Other Income",
        # Expenses
        "5000": "Cost of Sales",
        "6000": "Administrative Expenses",
        "6100": "Professional Fees",
        "6200": "Travel & Entertainment",
        "6300": "Office Expenses",
        "6400": "Marketing & Advertising",
        "6500": "Insurance",
        "6600": "Depreciation",
        "6900": "Other Expenses",
    }
)

DEFAULT_OVERRIDES: Mapping[str, tuple[str, Classification]] = MappingProxyType(
    {"9000": ("Suspense", Classification.OTHER)}
)

DEPRECIATION_CODE = "6600"


class ChartOfAccounts:
    """Table-driven account lookup.

    Classification comes from the prefix table unless the code is listed in
    the override table. Instances are never mutated; ``with_override``
    returns a new chart.
    """

    def __init__(
        self,
        names: Optional[Mapping[str, str]] = None,
        overrides: Optional[Mapping[str, tuple[str, Classification]]] = None,
    ):
        """Initialize chart of accounts.

        Args:
            names: Registered names for taxonomy codes (defaults to the
                standard chart)
            overrides: Codes with an explicit name and classification that
                bypass the prefix table (defaults to 9000 Suspense)
        """
        self._names = MappingProxyType(dict(DEFAULT_ACCOUNT_NAMES if names is None else names))
        self._overrides = MappingProxyType(
            dict(DEFAULT_OVERRIDES if overrides is None else overrides)
        )

    def with_override(
        self,
        code: str,
        name: str,
        classification: Classification = Classification.OTHER,
    ) -> "ChartOfAccounts":
        """Return a new chart with an extra override entry."""
        overrides = dict(self._overrides)
        overrides[code] = (name, classification)
        return ChartOfAccounts(names=self._names, overrides=overrides)

    def classify(self, code: str) -> Classification:
        """Return the classification for an account code.

        Raises:
            UnknownAccountError: If the code matches no prefix and no override
        """
        code = code.strip()
        if code in self._overrides:
            return self._overrides[code][1]
        classification = PREFIX_CLASSIFICATIONS.get(code[:1])
        if classification is None:
            raise UnknownAccountError(code)
        return classification

    def name(self, code: str) -> Optional[str]:
        """Return the registered name for a code, or None if it has none.

        Raises:
            UnknownAccountError: If the code matches no prefix and no override
        """
        code = code.strip()
        if code in self._overrides:
            return self._overrides[code][0]
        if code[:1] not in PREFIX_CLASSIFICATIONS:
            raise UnknownAccountError(code)
        return self._names.get(code)

    def resolve(self, code: str, name: Optional[str] = None) -> Account:
        """Build the Account for a code, accepting ad-hoc names.

        A code outside the taxonomy is accepted as ``Other`` when the caller
        supplies a name, so accounts invented by document extraction do not
        block a merge.

        Args:
            code: Account code
            name: Name supplied with the line, if any

        Returns:
            Account entity

        Raises:
            UnknownAccountError: If the code is unclassifiable and unnamed
        """
        code = code.strip()
        name = name.strip() if name else None
        try:
            classification = self.classify(code)
        except UnknownAccountError:
            if not name:
                raise
            return Account(code=code, name=name, classification=Classification.OTHER)

        registered = self.name(code)
        resolved_name = registered or name or f"{classification.value} account {code}"
        return Account(code=code, name=resolved_name, classification=classification)

    def accounts(self) -> list[Account]:
        """List registered accounts sorted by code."""
        result = [
            Account(code=code, name=name, classification=PREFIX_CLASSIFICATIONS[code[:1]])
            for code, name in self._names.items()
            if code not in self._overrides and code[:1] in PREFIX_CLASSIFICATIONS
        ]
        result.extend(
            Account(code=code, name=name, classification=classification)
            for code, (name, classification) in self._overrides.items()
        )
        return sorted(result, key=lambda account: account.code)


DEFAULT_CHART = ChartOfAccounts()
