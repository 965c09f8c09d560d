"""
Output Handler Module for the Invoice Import Subsystem.

This module provides:
    - TemplateHandler: JSON template export/restore
    - ExcelExporter: line-item workbook export

Author: ML Engineering Team
"""

from .excel_exporter import ExcelExporter
from .template import TemplateDocument, TemplateHandler

__all__ = ['ExcelExporter', 'TemplateDocument', 'TemplateHandler']
