"""
End-to-end parsing orchestration.
"""
from pathlib import Path
from typing import Optional
import logging

from .config import Settings, load_settings
from .document import reconstruct_document
from .layout import LayoutReconstructor
from .loader import PDFLoader
from ..models.schema import ParsedDocument

logger = logging.getLogger(__name__)


class StatementParser:
    """Loads a PDF and runs layout reconstruction and field extraction on every page."""

    def __init__(self, settings: Optional[Settings] = None, verbose: bool = False):
        self.settings = settings or load_settings()
        self.reconstructor = LayoutReconstructor.from_settings(self.settings)
        self.verbose = verbose

        if verbose:
            logging.basicConfig(level=logging.DEBUG)

    def parse(self, pdf_path: Path) -> ParsedDocument:
        """
        Parse a PDF file into a ParsedDocument.

        Args:
            pdf_path: Path to PDF file

        Returns:
            ParsedDocument object
        """
        loader = PDFLoader(pdf_path)
        try:
            pages = loader.load()

            if not pages:
                raise ValueError("No pages found in PDF")

            document = reconstruct_document(pages, self.reconstructor)
            logger.info(f"Parsed {document.summary.total_pages} pages, "
                        f"{document.summary.total_transactions} lines")
            return document

        finally:
            loader.close()


def parse_pdf(pdf_path: Path, settings: Optional[Settings] = None,
              verbose: bool = False) -> ParsedDocument:
    """
    Parse a statement PDF.

    Args:
        pdf_path: Path to PDF file
        settings: Settings to use; the packaged defaults when omitted
        verbose: Enable verbose logging

    Returns:
        ParsedDocument object
    """
    parser = StatementParser(settings, verbose)
    return parser.parse(pdf_path)
