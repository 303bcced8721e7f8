"""Value types for stylesheet documents and extracted token sections."""

from .css_document import CssDocument
from .token_section import MISSING_LINE, CssBlock, DesignTokenSection, TokenSectionAnchors

__all__ = ['CssDocument', 'CssBlock', 'DesignTokenSection', 'TokenSectionAnchors', 'MISSING_LINE']
