"""PDF processing and text extraction."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)


class PDFDocument:
    """Represents an open PDF document."""

    def __init__(self, source: Union[Path, bytes]):
        """Open a PDF from a path or from raw bytes."""
        if isinstance(source, (bytes, bytearray)):
            self.path = None
            self.doc = fitz.open(stream=bytes(source), filetype="pdf")
        else:
            self.path = Path(source)
            self.doc = fitz.open(str(self.path))
        self.page_count = len(self.doc)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if hasattr(self, 'doc'):
            self.doc.close()

    def extract_pages(self, max_pages: Optional[int] = None) -> List[Dict]:
        """Extract plain text per page, skipping pages without text."""
        end_page = self.page_count if max_pages is None else min(max_pages, self.page_count)

        pages = []
        for page_num in range(end_page):
            text = self.doc[page_num].get_text()
            logger.debug(f"Page {page_num + 1}: extracted {len(text)} characters")

            if text.strip():
                pages.append({"page_num": page_num + 1, "text": text})

        return pages


class PDFProcessor:
    """Turns a PDF into the single text blob fed to fact extraction."""

    def extract_text(self, source: Union[Path, bytes], max_pages: Optional[int] = None) -> str:
        """Extract text with a ``--- Page N ---`` header before each page."""
        with PDFDocument(source) as document:
            logger.info(f"Found {document.page_count} pages in PDF")
            pages = document.extract_pages(max_pages=max_pages)

        text = "\n\n".join(f"--- Page {page['page_num']} ---\n{page['text']}" for page in pages)
        logger.info(f"Total extracted text: {len(text)} characters")
        return text


def extract_pdf_text(source: Union[Path, bytes], max_pages: Optional[int] = None) -> str:
    """Convenience wrapper around PDFProcessor.extract_text."""
    return PDFProcessor().extract_text(source, max_pages=max_pages)
