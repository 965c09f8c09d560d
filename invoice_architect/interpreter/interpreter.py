"""
Text Interpreter Module.

Infers invoice fields from the plain text produced by the extractors.
Every heuristic is independent: a field that cannot be confidently
inferred is left as None, and nothing here raises for odd input.

Heuristics:
    - Title: first line mentioning "invoice"
    - Invoice number, issue/due dates: label followed by a token
    - Currency: symbol table first, then bare ISO codes
    - Company/client: spans between party labels, metadata lines split off
    - Notes/terms: labelled paragraphs
    - GST extras: tax treatment, place of supply, e-way bill, IRN, charges
    - Line items: positional numbers on lines without summary keywords

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Tuple

from config import get_config
from invoice_architect.models.currencies import DEFAULT_REGISTRY, CurrencyRegistry
from invoice_architect.models.invoice import (
    CHARGE_FIELDS,
    GstTreatment,
    ImportedInvoice,
    LineItem,
    PartialAddressBlock,
    PartialCharges,
)
from invoice_architect.utils.logger import get_logger

from . import patterns
from .normalizers import AmountNormalizer, DateNormalizer, clean_text

# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class InterpreterSettings:
    """
    Immutable interpreter configuration, built once.

    Attributes:
        registry: Supported currency codes and symbols.
        max_quantity: Line-item quantities above this are rejected.
        extended_fields: Read GST fields and charges, and treat GST
            labels as line-item stop words.
        default_tax_percent: Tax rate for items without a percent token.
    """
    registry: CurrencyRegistry = field(default=DEFAULT_REGISTRY)
    max_quantity: float = 100000
    extended_fields: bool = True
    default_tax_percent: float = 0.0

    @classmethod
    def from_config(cls) -> 'InterpreterSettings':
        """Read the ``interpreter`` section of settings.yaml."""
        return cls(
            registry=DEFAULT_REGISTRY,
            max_quantity=float(get_config("interpreter.max_quantity", 100000)),
            extended_fields=bool(get_config("interpreter.gst_extensions", True)),
            default_tax_percent=float(get_config("interpreter.default_tax_percent", 0)),
        )

    @property
    def stop_words(self) -> Tuple[str, ...]:
        if self.extended_fields:
            return patterns.STOP_WORDS + patterns.GST_STOP_WORDS
        return patterns.STOP_WORDS


class TextInterpreter:
    """
    Heuristic plain text -> ImportedInvoice.

    Example:
        >>> interpreter = TextInterpreter()
        >>> imported = interpreter.interpret("Invoice Number: INV-2024-001")
        >>> imported.invoice_number
        'INV-2024-001'
    """

    def __init__(self, settings: Optional[InterpreterSettings] = None) -> None:
        self.settings = settings or InterpreterSettings.from_config()
        self.date_normalizer = DateNormalizer()
        self.amount_normalizer = AmountNormalizer()
        logger.debug(
            f"TextInterpreter initialized (extended={self.settings.extended_fields}, "
            f"max_quantity={self.settings.max_quantity})"
        )

    def interpret(self, text: str) -> ImportedInvoice:
        """
        Infer whatever invoice fields the text supports.

        Args:
            text: Plain text from any extractor.

        Returns:
            ImportedInvoice with unrecognized fields left as None.
        """
        imported = ImportedInvoice()
        if not text or not text.strip():
            return imported

        text = text.replace('\r\n', '\n').replace('\r', '\n')
        lines = [line.strip() for line in text.split('\n')]

        imported.title = self._title(lines)
        imported.invoice_number = self._first_group(patterns.INVOICE_NUMBER, text)
        imported.issue_date = self._date(patterns.ISSUE_DATE, text)
        imported.due_date = self._date(patterns.DUE_DATE, text)
        imported.currency = self.settings.registry.detect(text)
        imported.company = self._party(lines, patterns.COMPANY_START, patterns.COMPANY_END)
        imported.client = self._party(lines, patterns.CLIENT_START, patterns.CLIENT_END)
        imported.notes = self._first_group(patterns.NOTES, text)
        imported.terms = self._first_group(patterns.TERMS, text)
        imported.line_items = self._line_items(lines) or None

        if self.settings.extended_fields:
            self._extended(imported, text)

        logger.info(f"Interpreted fields: {imported.present_fields}")
        return imported

    # =========================================================================
    # HEADER FIELDS
    # =========================================================================

    @staticmethod
    def _title(lines: List[str]) -> Optional[str]:
        for line in lines:
            if patterns.TITLE_KEYWORD.search(line):
                return clean_text(line)
        return None

    @staticmethod
    def _first_group(pattern: Pattern, text: str) -> Optional[str]:
        match = pattern.search(text)
        if not match:
            return None
        value = match.group(1).strip()
        return value or None

    def _date(self, pattern: Pattern, text: str) -> Optional[str]:
        token = self._first_group(pattern, text)
        return self.date_normalizer.normalize(token) if token else None

    # =========================================================================
    # PARTIES
    # =========================================================================

    def _party(self, lines: List[str], start: Pattern, end: Pattern) -> Optional[PartialAddressBlock]:
        """
        Read the block between a party label and the next closing label.

        The span also closes at a line-item table header.
        """
        span: Optional[List[str]] = None
        for line in lines:
            if span is None:
                match = start.match(line)
                if match:
                    span = [match.group(1)]
                continue
            if end.match(line) or self._is_table_header(line):
                break
            span.append(line)

        if span is None:
            return None

        block = self._address_block([line for line in span if line])
        return None if block.is_empty() else block

    @staticmethod
    def _is_table_header(line: str) -> bool:
        return bool(
            patterns.TABLE_HEADER_DESCRIPTION.search(line)
            and patterns.TABLE_HEADER_QUANTITY.search(line)
        )

    def _address_block(self, lines: List[str]) -> PartialAddressBlock:
        block = PartialAddressBlock()
        remaining = []
        for line in lines:
            if not self._take_metadata(block, line):
                remaining.append(clean_text(line))

        if remaining:
            block.name = remaining[0]
        if len(remaining) > 1:
            block.address = "\n".join(remaining[1:])
        return block

    def _take_metadata(self, block: PartialAddressBlock, line: str) -> bool:
        """Copy metadata found on ``line`` into ``block``; True if the line was metadata."""
        found = False

        for attr, pattern in (
            ('gstin', patterns.GSTIN),
            ('pan', patterns.PAN),
            ('state_code', patterns.STATE_CODE),
        ):
            match = pattern.search(line)
            if match:
                if getattr(block, attr) is None:
                    setattr(block, attr, match.group(1).upper())
                found = True

        state = patterns.STATE.search(line)
        if state and state.group(1).strip():
            if block.state is None:
                block.state = clean_text(state.group(1))
            found = True

        if patterns.PLACE_OF_SUPPLY.search(line):
            found = True

        email = patterns.EMAIL.search(line)
        if email:
            if block.email is None:
                block.email = email.group(0)
            found = True

        website = patterns.WEBSITE.search(line)
        if website and not email:
            if block.website is None:
                block.website = website.group(0)
            found = True

        phone = patterns.PHONE_LABELLED.match(line)
        if phone or (patterns.PHONE_BARE.match(line) and sum(c.isdigit() for c in line) >= 7):
            number = clean_text(phone.group(1) if phone else line)
            if block.phone is None:
                block.phone = number
            elif block.alt_phone is None:
                block.alt_phone = number
            found = True

        tax_id = patterns.TAX_ID.match(line)
        if tax_id:
            if block.tax_id is None:
                block.tax_id = tax_id.group(1)
            found = True

        return found

    # =========================================================================
    # GST EXTRAS
    # =========================================================================

    def _extended(self, imported: ImportedInvoice, text: str) -> None:
        has_igst = bool(patterns.IGST.search(text))
        has_cgst = bool(patterns.CGST.search(text))
        has_sgst = bool(patterns.SGST.search(text))
        if has_igst and not has_cgst:
            imported.gst_treatment = GstTreatment.INTER_STATE
        elif has_cgst and has_sgst:
            imported.gst_treatment = GstTreatment.INTRA_STATE

        imported.place_of_supply = self._first_group(patterns.PLACE_OF_SUPPLY, text)
        imported.eway_bill = self._first_group(patterns.EWAY_BILL, text)
        irn = self._first_group(patterns.IRN, text)
        imported.irn = irn.lower() if irn else None
        imported.amount_in_words = self._first_group(patterns.AMOUNT_IN_WORDS, text)
        imported.payment_summary = self._first_group(patterns.PAYMENT_SUMMARY, text)

        charges = PartialCharges()
        for name in CHARGE_FIELDS:
            token = self._first_group(patterns.CHARGES[name], text)
            if token:
                setattr(charges, name, self.amount_normalizer.to_float(token))
        imported.charges = None if charges.is_empty() else charges

    # =========================================================================
    # LINE ITEMS
    # =========================================================================

    def _line_items(self, lines: List[str]) -> List[LineItem]:
        items = []
        for line in lines:
            item = self.parse_line_item(line)
            if item is not None:
                items.append(item)
        logger.debug(f"Line-item heuristic matched {len(items)} line(s)")
        return items

    def parse_line_item(self, line: str) -> Optional[LineItem]:
        """
        Read one line as ``description quantity rate [... total] [tax%]``.

        Args:
            line: A single text line.

        Returns:
            LineItem (without an id), or None when the line is not an item.

        Example:
            >>> item = interpreter.parse_line_item("Widget A   3   25.00   10%")
            >>> (item.description, item.quantity, item.rate, item.tax_percent)
            ('Widget A', 3.0, 25.0, 10.0)
        """
        if not line or not line.strip():
            return None
        lowered = line.lower()
        if any(word in lowered for word in self.settings.stop_words):
            return None

        percents = patterns.PERCENT.findall(line)
        remainder = patterns.PERCENT.sub(' ', line)
        numbers = list(patterns.NUMBER.finditer(remainder))
        if len(numbers) < 2:
            return None

        values = [self.amount_normalizer.to_float(match.group(0)) or 0.0 for match in numbers]
        quantity, rate, total = values[0], values[1], values[-1]
        if quantity <= 0 or quantity > self.settings.max_quantity:
            return None
        if rate <= 0:
            rate = total / quantity

        description = patterns.TRAILING_PUNCTUATION.sub('', remainder[:numbers[0].start()]).strip()
        if not description:
            description = clean_text(patterns.NON_DESCRIPTION.sub(' ', line))

        tax_percent = float(percents[-1]) if percents else self.settings.default_tax_percent
        return LineItem(
            description=clean_text(description),
            quantity=quantity,
            rate=rate,
            tax_percent=tax_percent,
        )
