"""Currency -- ISO 4217 codes accepted on depreciation amounts."""

from __future__ import annotations

from typing import ClassVar

from depreciation_kernel.exceptions import InvalidCurrencyError


class CurrencyRegistry:
    """
    Registry of ISO 4217 currency codes with their display names.

    Depreciation amounts are always rounded to cents regardless of the
    currency's minor unit, so only code validity is tracked here.
    """

    _CURRENCIES: ClassVar[dict[str, str]] = {
        "AED": "UAE Dirham",
        "ARS": "Argentine Peso",
        "AUD": "Australian Dollar",
        "BHD": "Bahraini Dinar",
        "BRL": "Brazilian Real",
        "CAD": "Canadian Dollar",
        "CHF": "Swiss Franc",
        "CLP": "Chilean Peso",
        "CNY": "Chinese Yuan",
        "COP": "Colombian Peso",
        "CZK": "Czech Koruna",
        "DKK": "Danish Krone",
        "EGP": "Egyptian Pound",
        "EUR": "Euro",
        "GBP": "Pound Sterling",
        "HKD": "Hong Kong Dollar",
        "HUF": "Hungarian Forint",
        "IDR": "Indonesian Rupiah",
        "ILS": "Israeli New Shekel",
        "INR": "Indian Rupee",
        "JPY": "Japanese Yen",
        "KES": "Kenyan Shilling",
        "KRW": "South Korean Won",
        "KWD": "Kuwaiti Dinar",
        "MXN": "Mexican Peso",
        "MYR": "Malaysian Ringgit",
        "NGN": "Nigerian Naira",
        "NOK": "Norwegian Krone",
        "NZD": "New Zealand Dollar",
        "PHP": "Philippine Peso",
        "PKR": "Pakistani Rupee",
        "PLN": "Polish Zloty",
        "QAR": "Qatari Riyal",
        "RON": "Romanian Leu",
        "SAR": "Saudi Riyal",
        "SEK": "Swedish Krona",
        "SGD": "Singapore Dollar",
        "THB": "Thai Baht",
        "TRY": "Turkish Lira",
        "TWD": "New Taiwan Dollar",
        "USD": "US Dollar",
        "VND": "Vietnamese Dong",
        "ZAR": "South African Rand",
    }

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """True when ``code`` (already normalised) is a registered currency."""
        return code in cls._CURRENCIES

    @classmethod
    def name_of(cls, code: str) -> str:
        return cls._CURRENCIES.get(code, code)

    @classmethod
    def validate(cls, code: str) -> str:
        """
        Normalise and validate a currency code.

        Postconditions:
            - Returns the upper-cased, stripped code.
        Raises:
            InvalidCurrencyError: If the code is not registered.
        """
        normalized = code.upper().strip() if code else ""
        if not cls.is_valid(normalized):
            raise InvalidCurrencyError(code)
        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
