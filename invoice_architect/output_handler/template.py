"""
Invoice Template Module.

Exports the invoice being edited (plus logo and attachments) as a JSON
template document and restores such documents later. Restoring goes
through InvoiceMerger.restore, so stored line-item ids survive and
absent fields never wipe existing data.

Document layout:
    {
        "version": 1,
        "exportedAt": "2026-01-21T10:30:00+00:00",
        "invoice": {...},
        "logo": "data:image/png;base64,..." | null,
        "attachments": [{"id", "name", "size", "dataUrl"}, ...]
    }

Author: ML Engineering Team
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from config import get_config
from invoice_architect.merge.merger import InvoiceMerger
from invoice_architect.models.invoice import Attachment, ImportedInvoice, Invoice
from invoice_architect.utils.exceptions import TemplateError
from invoice_architect.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class TemplateDocument:
    """A parsed template: the stored invoice and its side data."""
    invoice: ImportedInvoice
    version: int = 1
    exported_at: Optional[str] = None
    logo: Optional[str] = None
    attachments: List[Attachment] = field(default_factory=list)


class TemplateHandler:
    """
    Writes and reads invoice template documents.

    Example:
        >>> handler = TemplateHandler()
        >>> text = handler.export(invoice, attachments=[attachment])
        >>> restored = handler.apply(Invoice(), handler.load(text))
    """

    def __init__(self, merger: Optional[InvoiceMerger] = None) -> None:
        self.merger = merger or InvoiceMerger()
        self.version = int(get_config("output.template_version", 1))

    def export(
        self,
        invoice: Invoice,
        logo: Optional[str] = None,
        attachments: Iterable[Attachment] = ()
    ) -> str:
        """
        Serialize an invoice template.

        Args:
            invoice: Invoice to store.
            logo: Optional logo data URL.
            attachments: Files kept beside the invoice.

        Returns:
            JSON text.
        """
        document = {
            'version': self.version,
            'exportedAt': datetime.now(timezone.utc).isoformat(timespec='seconds'),
            'invoice': invoice.to_dict(),
            'logo': logo,
            'attachments': [attachment.to_dict() for attachment in attachments],
        }
        logger.debug(f"Exported template with {len(invoice.line_items)} line items")
        return json.dumps(document, indent=2, ensure_ascii=False)

    def load(self, text: str, source: Optional[str] = None) -> TemplateDocument:
        """
        Parse a template document.

        Raises:
            TemplateError: On invalid JSON or a missing invoice object.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise TemplateError(f"not valid JSON ({e.msg} at line {e.lineno})", source) from e

        if not isinstance(data, dict) or not isinstance(data.get('invoice'), dict):
            raise TemplateError("missing 'invoice' object", source)

        attachments = data.get('attachments')
        document = TemplateDocument(
            invoice=ImportedInvoice.from_dict(data['invoice']),
            version=self._version(data.get('version')),
            exported_at=data.get('exportedAt') if isinstance(data.get('exportedAt'), str) else None,
            logo=data.get('logo') if isinstance(data.get('logo'), str) else None,
            attachments=[
                Attachment.from_dict(item)
                for item in (attachments if isinstance(attachments, list) else [])
                if isinstance(item, dict)
            ],
        )
        logger.info(f"Loaded template v{document.version} ({len(document.attachments)} attachment(s))")
        return document

    def apply(self, current: Invoice, document: TemplateDocument) -> Invoice:
        """Restore a loaded template onto the current invoice."""
        return self.merger.restore(current, document.invoice)

    def _version(self, value: Any) -> int:
        if isinstance(value, int) and not isinstance(value, bool):
            if value > self.version:
                logger.warning(f"Template version {value} is newer than supported version {self.version}")
            return value
        return self.version
