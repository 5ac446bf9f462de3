"""Shared fixtures: environment isolation and minimal PDF documents."""

import pytest

SETTINGS_ENV_VARS = [
    "EXTRACTION_MODE",
    "REMOTE_PROVIDER",
    "GROQ_API_KEY",
    "GROQ_API_URL",
    "GROQ_MODEL",
    "BEDROCK_MODEL_ID",
    "MAX_PAGES",
    "REQUEST_TIMEOUT",
    "VAULT_DIR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of Settings defaults."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(page_texts: list[str]) -> bytes:
    """Build a PDF with one line of Helvetica text per page."""
    page_count = len(page_texts)
    kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(page_count))
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {page_count} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
    ]
    for i, text in enumerate(page_texts):
        stream = f"BT /F1 12 Tf 72 720 Td ({_escape(text)}) Tj ET".encode("latin-1")
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                "/Resources << /Font << /F1 3 0 R >> >> "
                f"/Contents {5 + 2 * i} 0 R >>"
            ).encode()
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_position = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_position}\n%%EOF\n"
    ).encode()
    return bytes(out)


@pytest.fixture
def make_pdf():
    return build_pdf


SAMPLE_AGREEMENT_PAGES = [
    "CREDIT AGREEMENT dated as of May 24, 2022",
    "Borrower: Orion Manufacturing Ltd, a Delaware corporation.",
    "Aggregate Commitments of $250 million. Applicable Rate means Term SOFR plus 4.50% per annum.",
    "Maturity Date means May 24, 2027.",
    "ARTICLE VI. COVENANTS The Borrower shall maintain a Consolidated Leverage Ratio "
    "and a Debt Service coverage test.",
]


@pytest.fixture
def sample_agreement_pdf():
    return build_pdf(SAMPLE_AGREEMENT_PAGES)
