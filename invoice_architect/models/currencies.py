"""
Currency Registry.

The fixed ISO 4217 code set, display names for currency pickers, and
the ordered symbol table the interpreter uses to recognise currencies
in free text. The registry is immutable and built once per process.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, List, Mapping, Optional, Pattern, Tuple

ISO_4217_CURRENCIES = {
    "AED": "UAE Dirham", "AFN": "Afghani", "ALL": "Lek", "AMD": "Armenian Dram",
    "ANG": "Netherlands Antillean Guilder", "AOA": "Kwanza", "ARS": "Argentine Peso",
    "AUD": "Australian Dollar", "AWG": "Aruban Florin", "AZN": "Azerbaijan Manat",
    "BAM": "Convertible Mark", "BBD": "Barbados Dollar", "BDT": "Taka",
    "BGN": "Bulgarian Lev", "BHD": "Bahraini Dinar", "BIF": "Burundi Franc",
    "BMD": "Bermudian Dollar", "BND": "Brunei Dollar", "BOB": "Boliviano",
    "BRL": "Brazilian Real", "BSD": "Bahamian Dollar", "BTN": "Ngultrum",
    "BWP": "Pula", "BYN": "Belarusian Ruble", "BZD": "Belize Dollar",
    "CAD": "Canadian Dollar", "CDF": "Congolese Franc", "CHF": "Swiss Franc",
    "CLP": "Chilean Peso", "CNY": "Yuan Renminbi", "COP": "Colombian Peso",
    "CRC": "Costa Rican Colon", "CUP": "Cuban Peso", "CVE": "Cabo Verde Escudo",
    "CZK": "Czech Koruna", "DJF": "Djibouti Franc", "DKK": "Danish Krone",
    "DOP": "Dominican Peso", "DZD": "Algerian Dinar", "EGP": "Egyptian Pound",
    "ERN": "Nakfa", "ETB": "Ethiopian Birr", "EUR": "Euro", "FJD": "Fiji Dollar",
    "FKP": "Falkland Islands Pound", "GBP": "Pound Sterling", "GEL": "Lari",
    "GHS": "Ghana Cedi", "GIP": "Gibraltar Pound", "GMD": "Dalasi",
    "GNF": "Guinean Franc", "GTQ": "Quetzal", "GYD": "Guyana Dollar",
    "HKD": "Hong Kong Dollar", "HNL": "Lempira", "HTG": "Gourde", "HUF": "Forint",
    "IDR": "Rupiah", "ILS": "New Israeli Sheqel", "INR": "Indian Rupee",
    "IQD": "Iraqi Dinar", "IRR": "Iranian Rial", "ISK": "Iceland Krona",
    "JMD": "Jamaican Dollar", "JOD": "Jordanian Dinar", "JPY": "Yen",
    "KES": "Kenyan Shilling", "KGS": "Som", "KHR": "Riel", "KMF": "Comorian Franc",
    "KPW": "North Korean Won", "KRW": "Won", "KWD": "Kuwaiti Dinar",
    "KYD": "Cayman Islands Dollar", "KZT": "Tenge", "LAK": "Lao Kip",
    "LBP": "Lebanese Pound", "LKR": "Sri Lanka Rupee", "LRD": "Liberian Dollar",
    "LSL": "Loti", "LYD": "Libyan Dinar", "MAD": "Moroccan Dirham",
    "MDL": "Moldovan Leu", "MGA": "Malagasy Ariary", "MKD": "Denar", "MMK": "Kyat",
    "MNT": "Tugrik", "MOP": "Pataca", "MRU": "Ouguiya", "MUR": "Mauritius Rupee",
    "MVR": "Rufiyaa", "MWK": "Malawi Kwacha", "MXN": "Mexican Peso",
    "MYR": "Malaysian Ringgit", "MZN": "Mozambique Metical", "NAD": "Namibia Dollar",
    "NGN": "Naira", "NIO": "Cordoba Oro", "NOK": "Norwegian Krone",
    "NPR": "Nepalese Rupee", "NZD": "New Zealand Dollar", "OMR": "Rial Omani",
    "PAB": "Balboa", "PEN": "Sol", "PGK": "Kina", "PHP": "Philippine Peso",
    "PKR": "Pakistan Rupee", "PLN": "Zloty", "PYG": "Guarani", "QAR": "Qatari Rial",
    "RON": "Romanian Leu", "RSD": "Serbian Dinar", "RUB": "Russian Ruble",
    "RWF": "Rwanda Franc", "SAR": "Saudi Riyal", "SBD": "Solomon Islands Dollar",
    "SCR": "Seychelles Rupee", "SDG": "Sudanese Pound", "SEK": "Swedish Krona",
    "SGD": "Singapore Dollar", "SHP": "Saint Helena Pound", "SLE": "Leone",
    "SOS": "Somali Shilling", "SRD": "Surinam Dollar", "SSP": "South Sudanese Pound",
    "STN": "Dobra", "SVC": "El Salvador Colon", "SYP": "Syrian Pound",
    "SZL": "Lilangeni", "THB": "Baht", "TJS": "Somoni", "TMT": "Turkmenistan New Manat",
    "TND": "Tunisian Dinar", "TOP": "Pa'anga", "TRY": "Turkish Lira",
    "TTD": "Trinidad and Tobago Dollar", "TWD": "New Taiwan Dollar",
    "TZS": "Tanzanian Shilling", "UAH": "Hryvnia", "UGX": "Uganda Shilling",
    "USD": "US Dollar", "UYU": "Peso Uruguayo", "UZS": "Uzbekistan Sum",
    "VES": "Bolivar Soberano", "VND": "Dong", "VUV": "Vatu", "WST": "Tala",
    "XAF": "CFA Franc BEAC", "XCD": "East Caribbean Dollar", "XOF": "CFA Franc BCEAO",
    "XPF": "CFP Franc", "YER": "Yemeni Rial", "ZAR": "Rand", "ZMW": "Zambian Kwacha",
    "ZWL": "Zimbabwe Dollar",
}

# Order matters: longer symbols must be tried before the symbols they contain
# ("US$" before "S$" and "$", "CA$" before "A$"). Bare "$" resolves to USD.
CURRENCY_SYMBOLS: Tuple[Tuple[str, str], ...] = (
    ("US$", "USD"), ("CA$", "CAD"), ("C$", "CAD"), ("AU$", "AUD"), ("A$", "AUD"),
    ("NZ$", "NZD"), ("HK$", "HKD"), ("S$", "SGD"), ("R$", "BRL"), ("MX$", "MXN"),
    ("₹", "INR"), ("€", "EUR"), ("£", "GBP"), ("¥", "JPY"), ("₩", "KRW"),
    ("₽", "RUB"), ("₺", "TRY"), ("₪", "ILS"), ("₱", "PHP"), ("₫", "VND"),
    ("฿", "THB"), ("₦", "NGN"), ("₴", "UAH"), ("₵", "GHS"), ("₡", "CRC"),
    ("₲", "PYG"), ("₸", "KZT"), ("₼", "AZN"), ("₾", "GEL"), ("zł", "PLN"),
    ("Kč", "CZK"), ("Rs.", "INR"), ("$", "USD"),
)

_CODE_TOKEN = re.compile(r"\b([A-Z]{3})\b(?![ \t]+[A-Z]{2,}\b)")


def _symbol_pattern(symbol: str) -> Pattern:
    # Symbols that start with a letter must not be glued to a preceding word
    if symbol[0].isalpha():
        return re.compile(r"(?<![A-Za-z])" + re.escape(symbol))
    return re.compile(re.escape(symbol))


@dataclass(frozen=True)
class CurrencyRegistry:
    """
    Immutable view of the supported currencies.

    Example:
        >>> registry = CurrencyRegistry.default()
        >>> registry.normalize("inr")
        "INR"
        >>> registry.detect("Total: ₹ 1,180.00")
        "INR"
    """
    names: Mapping[str, str]
    symbols: Tuple[Tuple[Pattern, str], ...]

    @classmethod
    def default(cls) -> 'CurrencyRegistry':
        return cls(
            names=dict(ISO_4217_CURRENCIES),
            symbols=tuple((_symbol_pattern(s), code) for s, code in CURRENCY_SYMBOLS),
        )

    @property
    def codes(self) -> FrozenSet[str]:
        return frozenset(self.names)

    def is_supported(self, code: Optional[str]) -> bool:
        return self.normalize(code) is not None

    def normalize(self, code: Optional[str]) -> Optional[str]:
        """Return the upper-cased code if it is a supported ISO 4217 code."""
        if not code:
            return None
        candidate = code.strip().upper()
        return candidate if candidate in self.names else None

    def name_of(self, code: str) -> str:
        return self.names.get(code.upper(), code)

    def options(self) -> List[Tuple[str, str]]:
        """Sorted (code, display name) pairs for currency pickers."""
        return sorted(self.names.items())

    def detect(self, text: str) -> Optional[str]:
        """
        Recognise the currency used in free text.

        Symbols are tried in table order; when none is present the first
        bare three-letter uppercase token that is a supported code wins.
        A token followed by another all-caps word on the same line is read
        as part of an uppercase heading, not as a code.
        """
        for pattern, code in self.symbols:
            if code in self.names and pattern.search(text):
                return code

        for match in _CODE_TOKEN.finditer(text):
            if match.group(1) in self.names:
                return match.group(1)
        return None


DEFAULT_REGISTRY = CurrencyRegistry.default()
