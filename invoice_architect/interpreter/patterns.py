"""
Regex Patterns for the Text Interpreter.

All label and token patterns live here so the heuristics in
interpreter.py read as a sequence of lookups. Patterns are compiled once
at import time; matching is case-insensitive unless noted.
"""

import re

_I = re.IGNORECASE
_IM = re.IGNORECASE | re.MULTILINE

# =============================================================================
# HEADER FIELDS
# =============================================================================

TITLE_KEYWORD = re.compile(r'invoice', _I)

INVOICE_NUMBER = re.compile(
    r'invoice\s*(?:number|no\b\.?|#)\s*[:#\-]?\s*([A-Za-z0-9\-/]+)', _I
)

DATE_TOKEN = (
    r'\d{4}[/\-.]\d{1,2}[/\-.]\d{1,2}'
    r'|\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}'
    r'|[A-Za-z]{3,9}\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}'
    r'|\d{1,2}(?:st|nd|rd|th)?\s+[A-Za-z]{3,9}\.?,?\s+\d{4}'
)

# Label, then anything on the same line up to the first date-like token
ISSUE_DATE = re.compile(
    r'(?:issue\s+date|invoice\s+date|date\s+of\s+issue)[^\n\d]*?(' + DATE_TOKEN + r')', _I
)
DUE_DATE = re.compile(
    r'(?:due\s+date|payment\s+due)[^\n\d]*?(' + DATE_TOKEN + r')', _I
)

# =============================================================================
# PARTIES
# =============================================================================

# Label at line start; group 1 is whatever follows on the same line
COMPANY_START = re.compile(r'^\s*(?:bill(?:ed)?\s+from|from|seller)\b\s*:?\s*(.*)$', _I)
COMPANY_END = re.compile(r'^\s*(?:bill(?:ed)?\s+to|ship(?:ped)?\s+to|client|buyer)\b', _I)

CLIENT_START = re.compile(r'^\s*(?:bill(?:ed)?\s+to|client|buyer)\b\s*:?\s*(.*)$', _I)
CLIENT_END = re.compile(r'^\s*(?:notes?|terms|subtotal|sub\s+total|total)\b', _I)

# A line-item table header names a description column and a quantity column
TABLE_HEADER_DESCRIPTION = re.compile(r'\b(?:description|item|items|particulars|product|service)\b', _I)
TABLE_HEADER_QUANTITY = re.compile(r'\b(?:qty|quantity)\b', _I)

# Metadata lines inside a party block
GSTIN = re.compile(r'\bGSTIN\b\s*(?:no\.?|number)?\s*[:#\-]?\s*([0-9A-Z]{15})\b', _I)
PAN = re.compile(r'\bPAN\b\s*(?:no\.?|number)?\s*[:#\-]?\s*([A-Z]{5}\d{4}[A-Z])\b', _I)
STATE_CODE = re.compile(r'\bstate\s*code\b\s*[:#\-]?\s*(\d{2})\b', _I)
STATE = re.compile(r'\bstate\b\s*[:\-]\s*([A-Za-z][A-Za-z .]*?)\s*(?=,|\||;|\bstate\s*code\b|$)', _I)
PLACE_OF_SUPPLY = re.compile(r'\bplace\s+of\s+supply\b\s*[:\-]?\s*([^\n]+)', _I)
EMAIL = re.compile(r'[\w.+\-]+@[\w\-]+(?:\.[\w\-]+)+')
WEBSITE = re.compile(r'(?:https?://|www\.)[^\s,;]+', _I)
PHONE_LABELLED = re.compile(
    r'^(?:phone|tel|telephone|mobile|mob|ph|cell|contact)\b\.?\s*(?:no\.?)?\s*[:\-]?\s*(\+?[\d\s().\-]{6,})$', _I
)
PHONE_BARE = re.compile(r'^\+?[\d\s().\-]{7,}$')
TAX_ID = re.compile(
    r'^(?:tax\s*id|vat(?:\s*(?:no\.?|number|id))?|tin|ein|abn)\b\.?\s*[:#\-]?\s*([A-Za-z0-9\-]+)$', _I
)

# =============================================================================
# FREE TEXT SECTIONS
# =============================================================================

NOTES = re.compile(
    r'^\s*notes?\b\s*:?[ \t]*(.*?)(?=\n\s*\n|\n\s*(?:terms|payment\s+terms)\b|\Z)', _IM | re.DOTALL
)
TERMS = re.compile(
    r'^\s*(?:terms(?:\s*(?:and|&)\s*conditions)?|payment\s+terms)\b\s*:?[ \t]*(.*?)(?=\n\s*\n|\n\s*notes?\b|\Z)',
    _IM | re.DOTALL
)

# =============================================================================
# GST EXTRAS
# =============================================================================

IGST = re.compile(r'\bIGST\b', _I)
CGST = re.compile(r'\bCGST\b', _I)
SGST = re.compile(r'\b(?:SGST|UTGST)\b', _I)

EWAY_BILL = re.compile(
    r'\be[\-\s]?way\s*bill\b\s*(?:no\.?|number|#)?\s*[:#\-]?\s*([A-Za-z0-9\-]*\d[A-Za-z0-9\-]*)', _I
)
IRN = re.compile(r'\bIRN\b\s*(?:no\.?|number)?\s*[:#\-]?\s*([0-9a-f]{64})\b', _I)
AMOUNT_IN_WORDS = re.compile(
    r'\bamount\s+(?:chargeable\s+)?in\s+words\b\s*[:\-]?\s*([^\n]+)', _I
)
PAYMENT_SUMMARY = re.compile(r'\bpayment\s+(?:summary|status)\b\s*[:\-]?\s*([^\n]+)', _I)

AMOUNT = r'(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)'

CHARGES = {
    'shipping': re.compile(
        r'^\s*(?:shipping|delivery|freight)(?:\s+(?:charges?|fee))?\b[^\d\n]*?' + AMOUNT, _IM
    ),
    'wrapping': re.compile(
        r'^\s*(?:gift\s+)?wrap(?:ping)?(?:\s+(?:charges?|fee))?\b[^\d\n]*?' + AMOUNT, _IM
    ),
    'donation': re.compile(r'^\s*donation\b[^\d\n]*?' + AMOUNT, _IM),
}

# =============================================================================
# LINE ITEMS
# =============================================================================

STOP_WORDS = (
    'invoice', 'subtotal', 'total', 'tax', 'amount due', 'balance',
    'bill to', 'bill from', 'notes', 'terms', 'payment', 'due date', 'issue date',
)
GST_STOP_WORDS = ('cgst', 'sgst', 'igst', 'gst')

# Standalone numbers only: "A2" or "3pcs" are not numeric tokens
NUMBER = re.compile(r'(?<![A-Za-z\d])(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?(?![A-Za-z\d])')
PERCENT = re.compile(r'(?<![A-Za-z\d])(\d+(?:\.\d+)?)\s*%')

TRAILING_PUNCTUATION = re.compile(r'[\s\W_]+$')
NON_DESCRIPTION = re.compile(r'[\d\W_]+')
