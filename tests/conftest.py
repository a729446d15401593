import io

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from quoteflow.intake.models import CandidateFile


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page quote PDF."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.drawString(72, 720, "Cotacao de seguro - Porto")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_quote(sample_pdf_bytes: bytes) -> CandidateFile:
    """A real PDF wrapped as a candidate file."""
    return CandidateFile.from_bytes("cotacao-porto.pdf", sample_pdf_bytes, "application/pdf")
