import io

import pymupdf
import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

SURVEY_LINES = [
    "Course Evaluation Form",
    "Date: 12/03/2025",
    "Name: Jane Doe",
    "Company: Acme Ltd",
    "Email: JANE@EXAMPLE.COM",
    "Q1: 4",
    "Q2: 5",
    "Q3: 4",
    "Q4: 3",
    "Q5: 4",
    "Q6: 5",
    "Q7: 4",
    "Q8: 3",
    "Q9: 5",
    "Q10: 9",
    "Suggestions: More practical exercises please",
]

PARTICIPANTS = [
    ("Alice Smith", "Acme", "alice@acme.com", "4", "5"),
    ("Bob Jones", "Globex", "bob@globex.com", "3", "4"),
    ("Carol White", "Initech", "carol@initech.com", "5", "5"),
]


def _draw_lines(c: canvas.Canvas, lines: list[str]) -> None:
    y = 740
    for line in lines:
        c.drawString(72, y, line)
        y -= 18


def participant_lines(name: str, company: str, email: str, q1: str, q2: str) -> list[str]:
    return [
        f"Name: {name}",
        f"Company: {company}",
        f"Email: {email}",
        f"Q1: {q1}",
        f"Q2: {q2}",
        "Suggestions: Add more hands-on examples",
    ]


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def survey_pdf_bytes() -> bytes:
    """One filled-in evaluation form with a text layer."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    _draw_lines(c, SURVEY_LINES)
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_form_pdf_bytes() -> bytes:
    """Three participants' forms, one per page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for participant in PARTICIPANTS:
        _draw_lines(c, participant_lines(*participant))
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def uncompressed_pdf_bytes() -> bytes:
    """A PDF whose content stream keeps BT/ET text operators in plain sight."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter, pageCompression=0)
    _draw_lines(c, SURVEY_LINES)
    c.save()
    return buf.getvalue()


@pytest.fixture()
def image_only_pdf_bytes() -> bytes:
    """One page carrying a single bitmap and no text layer, like a scanned form."""
    pixmap = pymupdf.Pixmap(pymupdf.csRGB, pymupdf.IRect(0, 0, 120, 160), False)
    pixmap.clear_with(230)
    doc = pymupdf.open()
    page = doc.new_page(width=612, height=792)
    page.insert_image(page.rect, pixmap=pixmap)
    data = doc.tobytes()
    doc.close()
    return data
