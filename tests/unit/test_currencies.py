"""Unit tests for the currency registry."""

import pytest

from invoice_architect.models.currencies import DEFAULT_REGISTRY, CurrencyRegistry


@pytest.mark.parametrize("code,expected", [("usd", "USD"), (" inr ", "INR"), ("XYZ", None), ("", None), (None, None)])
def test_normalize(code, expected) -> None:
    """Test case-insensitive lookup of supported codes."""
    assert DEFAULT_REGISTRY.normalize(code) == expected


def test_options_are_sorted_pairs() -> None:
    """Test the picker options."""
    options = DEFAULT_REGISTRY.options()

    assert options == sorted(options)
    assert ("EUR", "Euro") in options
    assert len(options) == len(DEFAULT_REGISTRY.codes)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Total US$ 100", "USD"),
        ("Total A$ 100", "AUD"),
        ("Total S$ 100", "SGD"),
        ("Total HK$ 100", "HKD"),
        ("Total £ 100", "GBP"),
        ("Price 100 zł", "PLN"),
        ("Cars 3 100", None),
    ],
)
def test_detect_prefers_longest_symbol(text: str, expected) -> None:
    """Test that compound dollar symbols win over bare $."""
    assert DEFAULT_REGISTRY.detect(text) == expected


def test_symbol_must_start_a_word() -> None:
    """Test that a letter-led symbol glued to a word is not a currency."""
    assert DEFAULT_REGISTRY.detect("HRs. 100") is None
    assert DEFAULT_REGISTRY.detect("Rs. 100") == "INR"


def test_restricted_registry() -> None:
    """Test a registry limited to a few codes."""
    registry = CurrencyRegistry(names={"EUR": "Euro"}, symbols=DEFAULT_REGISTRY.symbols)

    assert registry.detect("Total $ 5 or € 4") == "EUR"
    assert registry.normalize("usd") is None
    assert registry.is_supported("eur")
    assert registry.name_of("eur") == "Euro"


@pytest.mark.parametrize("text", ["ALL PRICES INCLUDE TAX", "TOP QUALITY", "Order 2 CUP HOLDERS"])
def test_uppercase_heading_words_are_not_codes(text: str) -> None:
    """Test that a code-like word inside an all-caps phrase is ignored."""
    assert DEFAULT_REGISTRY.detect(text) is None


def test_code_before_lowercase_text() -> None:
    """Test that a bare code next to ordinary words is still detected."""
    assert DEFAULT_REGISTRY.detect("Amount due 120 GBP") == "GBP"
    assert DEFAULT_REGISTRY.detect("Total EUR 40 only") == "EUR"
