"""
Tests for PDF loading and end-to-end parsing, with pdfplumber replaced by a fake.
"""
import pytest

from ..core.config import Settings
from ..core.loader import PDFLoader, TextRun, normalize_run_text
from ..core.runner import parse_pdf


class FakePage:
    def __init__(self, words, width=600, height=800):
        self.words = words
        self.width = width
        self.height = height

    def extract_words(self, **kwargs):
        return self.words


class FakePDF:
    def __init__(self, pages):
        self.pages = pages
        self.closed = False

    def close(self):
        self.closed = True


def word(text, x0, top, size=10):
    return {"text": text, "x0": x0, "top": top, "bottom": top + size}


@pytest.fixture
def fake_pdf(monkeypatch):
    pdf = FakePDF([
        FakePage([
            word("01/05/2024", 50, 90),
            word("Coffee", 120, 90),
            word("$4.50", 200, 90),
            word("ﬁle", 50, 102),
        ]),
        FakePage([]),
    ])
    monkeypatch.setattr("pdfplumber.open", lambda path: pdf)
    return pdf


class TestPDFLoader:

    def test_runs_use_bottom_up_y(self, fake_pdf):
        loader = PDFLoader("statement.pdf")
        pages = loader.load()
        assert len(pages) == 2
        assert pages[0].page_num == 1
        assert pages[0].runs[0] == TextRun("01/05/2024", 50.0, 700.0)

    def test_ligatures_are_normalized(self, fake_pdf):
        pages = PDFLoader("statement.pdf").load()
        assert pages[0].runs[-1].text == "file"

    def test_get_page(self, fake_pdf):
        loader = PDFLoader("statement.pdf")
        assert loader.get_page(2).runs == []
        assert loader.get_page(3) is None

    def test_close(self, fake_pdf):
        loader = PDFLoader("statement.pdf")
        loader.load()
        loader.close()
        assert fake_pdf.closed

    def test_open_errors_propagate(self, monkeypatch):
        def broken(path):
            raise OSError("not a pdf")

        monkeypatch.setattr("pdfplumber.open", broken)
        with pytest.raises(OSError):
            PDFLoader("statement.pdf").load()


def test_normalize_run_text():
    assert normalize_run_text("  ﬂight\tfare ") == "flight fare"


class TestParsePdf:

    def test_end_to_end(self, fake_pdf):
        document = parse_pdf("statement.pdf", settings=Settings())
        assert fake_pdf.closed
        assert document.summary.page_numbers == [1, 2]
        assert document.pages[0].text == "01/05/2024 Coffee $4.50\nfile"
        assert document.pages[0].transactions[0].amount == "$4.50"
        assert document.pages[1].text == ""

    def test_empty_pdf_is_an_error(self, monkeypatch):
        pdf = FakePDF([])
        monkeypatch.setattr("pdfplumber.open", lambda path: pdf)
        with pytest.raises(ValueError):
            parse_pdf("empty.pdf", settings=Settings())
        assert pdf.closed
