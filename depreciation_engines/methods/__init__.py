"""Depreciation method strategies."""

from depreciation_engines.methods.annuity import AnnuityMethod, annuity_factor
from depreciation_engines.methods.base import DepreciationContext, DepreciationMethod
from depreciation_engines.methods.bonus import BonusMethod
from depreciation_engines.methods.declining_balance import (
    Declining150Method,
    DecliningBalanceMethod,
    DoubleDecliningMethod,
)
from depreciation_engines.methods.macrs import HALF_YEAR_RATES, MACRSMethod
from depreciation_engines.methods.straight_line import StraightLineMethod
from depreciation_engines.methods.sum_of_years import SumOfYearsMethod
from depreciation_engines.methods.units_of_production import UnitsOfProductionMethod

__all__ = [
    "AnnuityMethod",
    "BonusMethod",
    "Declining150Method",
    "DecliningBalanceMethod",
    "DepreciationContext",
    "DepreciationMethod",
    "DoubleDecliningMethod",
    "HALF_YEAR_RATES",
    "MACRSMethod",
    "StraightLineMethod",
    "SumOfYearsMethod",
    "UnitsOfProductionMethod",
    "annuity_factor",
]
