"""
Financial field catalog for fin-sheet-ingest.

Column 1 of every data row names a field by its internal key (e.g.
``revenue``). The set of keys is closed: ``FieldKey`` enumerates them and
``FIELD_CATALOG`` maps each key to its immutable ``FieldDefinition``.
Catalog order is the order of keys in every ``PeriodRecord``.

Field categories:
- driver_required / driver_optional: inputs the downstream calculator
  needs (or can use) to derive the statements.
- override_pl / override_bs / override_cf: optional actual values that
  replace a calculated line item.

``first_period_only`` fields (opening balances) are meaningful only for
period index 0; the resolver forces them to ``None`` elsewhere.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Literal


class FieldKey(str, Enum):
    """Closed set of financial field keys.

    Members compare equal to their string value, so
    ``record["revenue"]`` and ``record[FieldKey.REVENUE]`` are the same.
    """

    # Core drivers
    REVENUE = "revenue"
    GROSS_MARGIN_PERCENTAGE = "grossMarginPercentage"
    OPERATING_EXPENSES = "operatingExpenses"
    OPENING_CASH = "openingCash"
    ACCOUNTS_RECEIVABLE_VALUE_AVG = "accountsReceivableValueAvg"
    INVENTORY_VALUE_AVG = "inventoryValueAvg"
    ACCOUNTS_PAYABLE_VALUE_AVG = "accountsPayableValueAvg"
    NET_FIXED_ASSETS = "netFixedAssets"
    TOTAL_BANK_LOANS = "totalBankLoans"
    INITIAL_EQUITY = "initialEquity"

    # Optional drivers
    DEPRECIATION_AND_AMORTISATION = "depreciationAndAmortisation"
    NET_INTEREST_EXPENSE_INCOME = "netInterestExpenseIncome"
    INCOME_TAX_RATE_PERCENTAGE = "incomeTaxRatePercentage"
    DIVIDENDS_PAID = "dividendsPaid"
    EXTRAORDINARY_ITEMS = "extraordinaryItems"
    CAPITAL_EXPENDITURES = "capitalExpenditures"

    # P&L overrides
    OVERRIDE_COGS = "override_cogs"
    OVERRIDE_GROSS_PROFIT = "override_grossProfit"
    OVERRIDE_EBITDA = "override_ebitda"
    OVERRIDE_EBIT = "override_ebit"
    OVERRIDE_PBT = "override_pbt"
    OVERRIDE_INCOME_TAX = "override_incomeTax"
    OVERRIDE_NET_PROFIT = "override_netProfit"

    # Balance sheet overrides
    OVERRIDE_AR_ENDING = "override_AR_ending"
    OVERRIDE_INVENTORY_ENDING = "override_Inventory_ending"
    OVERRIDE_AP_ENDING = "override_AP_ending"
    OVERRIDE_TOTAL_CURRENT_ASSETS = "override_totalCurrentAssets"
    OVERRIDE_TOTAL_ASSETS = "override_totalAssets"
    OVERRIDE_TOTAL_CURRENT_LIABILITIES = "override_totalCurrentLiabilities"
    OVERRIDE_TOTAL_LIABILITIES = "override_totalLiabilities"
    OVERRIDE_EQUITY_ENDING = "override_equity_ending"

    # Cash flow overrides
    OVERRIDE_CLOSING_CASH = "override_closingCash"
    OVERRIDE_OPERATING_CASH_FLOW = "override_operatingCashFlow"
    OVERRIDE_WORKING_CAPITAL_CHANGE = "override_workingCapitalChange"

    @classmethod
    def lookup(cls, raw: object) -> FieldKey | None:
        """Return the member whose value equals ``raw`` exactly, else ``None``.

        Surrounding whitespace is ignored; case is not.
        """
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip())
        except ValueError:
            return None


FieldType = Literal["currency", "percentage", "days"]
FieldCategory = Literal[
    "driver_required", "driver_optional", "override_pl", "override_bs", "override_cf"
]
FieldGroup = Literal["P&L", "Balance Sheet", "Cash Flow"]

OVERRIDE_CATEGORIES: tuple[FieldCategory, ...] = ("override_pl", "override_bs", "override_cf")


@dataclass(frozen=True)
class FieldDefinition:
    """Immutable catalog entry for one financial field."""
    key: FieldKey
    label: str
    field_type: FieldType
    category: FieldCategory
    group: FieldGroup
    required: bool = False
    first_period_only: bool = False
    note: str | None = None

    @property
    def is_override(self) -> bool:
        return self.category in OVERRIDE_CATEGORIES

    @property
    def is_percentage(self) -> bool:
        return self.field_type == "percentage"


def _override(key: FieldKey, label: str, category: FieldCategory, group: FieldGroup,
              note: str | None = None) -> FieldDefinition:
    return FieldDefinition(key, label, "currency", category, group, note=note)


_DEFINITIONS: tuple[FieldDefinition, ...] = (
    # -- Core drivers -------------------------------------------------------
    FieldDefinition(FieldKey.REVENUE, "Receita Líquida (Revenue)", "currency",
                    "driver_required", "P&L", required=True),
    FieldDefinition(FieldKey.GROSS_MARGIN_PERCENTAGE, "Margem Bruta %", "percentage",
                    "driver_required", "P&L", required=True,
                    note="Ex: 40 para 40%. Usado para calcular CPV/CSV."),
    FieldDefinition(FieldKey.OPERATING_EXPENSES, "Despesas Operacionais Totais (SG&A)",
                    "currency", "driver_required", "P&L", required=True),
    FieldDefinition(FieldKey.OPENING_CASH, "Caixa (Saldo Inicial)", "currency",
                    "driver_required", "Balance Sheet", required=True,
                    first_period_only=True, note="Apenas para o 1º período da série."),
    FieldDefinition(FieldKey.ACCOUNTS_RECEIVABLE_VALUE_AVG,
                    "Contas a Receber (Valor Médio do Período)", "currency",
                    "driver_required", "Balance Sheet", required=True),
    FieldDefinition(FieldKey.INVENTORY_VALUE_AVG, "Estoques (Valor Médio do Período)",
                    "currency", "driver_required", "Balance Sheet", required=True),
    FieldDefinition(FieldKey.ACCOUNTS_PAYABLE_VALUE_AVG,
                    "Contas a Pagar (Valor Médio do Período)", "currency",
                    "driver_required", "Balance Sheet", required=True),
    FieldDefinition(FieldKey.NET_FIXED_ASSETS, "Ativo Imobilizado Líquido (Saldo Final)",
                    "currency", "driver_required", "Balance Sheet", required=True),
    FieldDefinition(FieldKey.TOTAL_BANK_LOANS, "Empréstimos Bancários Totais (Saldo Final)",
                    "currency", "driver_required", "Balance Sheet", required=True),
    FieldDefinition(FieldKey.INITIAL_EQUITY, "Patrimônio Líquido (Saldo Inicial)", "currency",
                    "driver_required", "Balance Sheet", required=True,
                    first_period_only=True, note="Apenas para o 1º período da série."),
    # -- Optional drivers ---------------------------------------------------
    FieldDefinition(FieldKey.DEPRECIATION_AND_AMORTISATION, "Depreciação e Amortização (D&A)",
                    "currency", "driver_optional", "P&L"),
    FieldDefinition(FieldKey.NET_INTEREST_EXPENSE_INCOME,
                    "Despesas/Receitas Financeiras (Líquido)", "currency",
                    "driver_optional", "P&L", note="Negativo para despesa líquida"),
    FieldDefinition(FieldKey.INCOME_TAX_RATE_PERCENTAGE,
                    "Alíquota de Imposto de Renda Efetiva %", "percentage",
                    "driver_optional", "P&L",
                    note="Ex: 25 para 25%. Usada sobre o PBT."),
    FieldDefinition(FieldKey.DIVIDENDS_PAID, "Dividendos Pagos / Distribuições", "currency",
                    "driver_optional", "Cash Flow"),
    FieldDefinition(FieldKey.EXTRAORDINARY_ITEMS, "(Opcional) Itens Extraordinários (Líquido)",
                    "currency", "driver_optional", "P&L",
                    note="Positivo para ganho, negativo para perda extraordinária."),
    FieldDefinition(FieldKey.CAPITAL_EXPENDITURES, "Investimentos em Ativo Imobilizado (CAPEX)",
                    "currency", "driver_optional", "Cash Flow"),
    # -- P&L overrides ------------------------------------------------------
    _override(FieldKey.OVERRIDE_COGS, "CPV/CSV (Valor Real)", "override_pl", "P&L",
              note="Substitui cálculo via Margem Bruta %"),
    _override(FieldKey.OVERRIDE_GROSS_PROFIT, "Lucro Bruto (Valor Real)", "override_pl", "P&L"),
    _override(FieldKey.OVERRIDE_EBITDA, "EBITDA (Valor Real)", "override_pl", "P&L"),
    _override(FieldKey.OVERRIDE_EBIT, "EBIT/Lucro Operacional (Valor Real)", "override_pl", "P&L"),
    _override(FieldKey.OVERRIDE_PBT, "LAIR/Lucro Antes IR (Valor Real)", "override_pl", "P&L"),
    _override(FieldKey.OVERRIDE_INCOME_TAX, "Imposto de Renda (Valor Real)", "override_pl", "P&L"),
    _override(FieldKey.OVERRIDE_NET_PROFIT, "Lucro Líquido (Valor Real)", "override_pl", "P&L"),
    # -- Balance sheet overrides --------------------------------------------
    _override(FieldKey.OVERRIDE_AR_ENDING, "Contas a Receber (Saldo Final Real)",
              "override_bs", "Balance Sheet"),
    _override(FieldKey.OVERRIDE_INVENTORY_ENDING, "Estoques (Saldo Final Real)",
              "override_bs", "Balance Sheet"),
    _override(FieldKey.OVERRIDE_AP_ENDING, "Contas a Pagar (Saldo Final Real)",
              "override_bs", "Balance Sheet"),
    _override(FieldKey.OVERRIDE_TOTAL_CURRENT_ASSETS, "Ativo Circulante Total (Real)",
              "override_bs", "Balance Sheet"),
    _override(FieldKey.OVERRIDE_TOTAL_ASSETS, "Ativo Total (Real)", "override_bs", "Balance Sheet"),
    _override(FieldKey.OVERRIDE_TOTAL_CURRENT_LIABILITIES, "Passivo Circulante Total (Real)",
              "override_bs", "Balance Sheet"),
    _override(FieldKey.OVERRIDE_TOTAL_LIABILITIES, "Passivo Total (Real)",
              "override_bs", "Balance Sheet"),
    _override(FieldKey.OVERRIDE_EQUITY_ENDING, "Patrimônio Líquido (Saldo Final Real)",
              "override_bs", "Balance Sheet"),
    # -- Cash flow overrides ------------------------------------------------
    _override(FieldKey.OVERRIDE_CLOSING_CASH, "Caixa Final (Valor Real)", "override_cf",
              "Cash Flow", note="Se preenchido, será comparado com cálculo do DFC"),
    _override(FieldKey.OVERRIDE_OPERATING_CASH_FLOW, "Fluxo de Caixa Operacional (Real)",
              "override_cf", "Cash Flow"),
    _override(FieldKey.OVERRIDE_WORKING_CAPITAL_CHANGE, "Variação do Capital de Giro (Real)",
              "override_cf", "Cash Flow", note="Positivo = Uso de Caixa"),
)

FIELD_CATALOG: dict[FieldKey, FieldDefinition] = {d.key: d for d in _DEFINITIONS}


def get_field(key: FieldKey | str) -> FieldDefinition:
    """Return the definition for ``key``.

    Raises:
        KeyError: If ``key`` is not a catalog field.
    """
    field_key = FieldKey.lookup(key) if not isinstance(key, FieldKey) else key
    if field_key is None:
        raise KeyError(f"Unknown field key: {key!r}")
    return FIELD_CATALOG[field_key]


def field_keys(categories: FieldCategory | Iterable[FieldCategory] | None = None) -> list[FieldKey]:
    """Catalog keys in catalog order, optionally filtered by category."""
    if categories is None:
        return list(FIELD_CATALOG)
    if isinstance(categories, str):
        categories = [categories]
    wanted = set(categories)
    return [k for k, d in FIELD_CATALOG.items() if d.category in wanted]


def driver_field_keys() -> list[FieldKey]:
    """Required drivers first, then optional drivers."""
    return field_keys("driver_required") + field_keys("driver_optional")


def override_field_keys(group: FieldGroup | None = None) -> list[FieldKey]:
    """Override keys, optionally restricted to one statement group."""
    by_group: dict[str, FieldCategory] = {
        "P&L": "override_pl",
        "Balance Sheet": "override_bs",
        "Cash Flow": "override_cf",
    }
    if group is None:
        return field_keys(OVERRIDE_CATEGORIES)
    return field_keys(by_group[group])


def is_override_field(key: FieldKey | str) -> bool:
    """True for override fields; unknown keys are never overrides."""
    field_key = FieldKey.lookup(key) if not isinstance(key, FieldKey) else key
    return field_key is not None and FIELD_CATALOG[field_key].is_override
