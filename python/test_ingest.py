"""
Tests for reanchor.ingest — reading paragraphs from DOCX and text files.

Run: python3 test_ingest.py
From: python/
"""

import os
import sys
import tempfile
from io import BytesIO

sys.path.insert(0, '.')

from docx import Document

from reanchor.ingest import paragraphs_from_docx, paragraphs_from_text, read_paragraphs


def _doc_to_bytes(doc):
    buf = BytesIO()
    doc.save(buf)
    return buf.getvalue()


def _make_doc():
    doc = Document()
    doc.add_paragraph("First paragraph.")
    doc.add_paragraph("")
    doc.add_paragraph("Third\twith tab")
    doc.add_paragraph("Line one\nLine two")
    return doc


def test_paragraphs_from_docx():
    paragraphs = paragraphs_from_docx(BytesIO(_doc_to_bytes(_make_doc())))
    assert [p.index for p in paragraphs] == [0, 1, 2, 3]
    assert paragraphs[0].text == "First paragraph."
    assert paragraphs[1].text == ""
    assert paragraphs[2].text == "Third with tab"
    assert paragraphs[3].text == "Line one\nLine two"
    print("PASS: test_paragraphs_from_docx")


def test_invalid_docx_raises_value_error():
    try:
        paragraphs_from_docx(BytesIO(b"definitely not a zip"))
    except ValueError as e:
        assert "Could not read document" in str(e)
    else:
        raise AssertionError("expected ValueError")
    print("PASS: test_invalid_docx_raises_value_error")


def test_paragraphs_from_text():
    paragraphs = paragraphs_from_text("Alpha line.\n\nBeta line.\n  \n\nGamma\ncontinued.\n")
    assert [(p.index, p.text) for p in paragraphs] == [
        (0, "Alpha line."),
        (1, "Beta line."),
        (2, "Gamma\ncontinued."),
    ]
    assert paragraphs_from_text("   \n") == []
    print("PASS: test_paragraphs_from_text")


def test_read_paragraphs_dispatches_on_suffix():
    with tempfile.TemporaryDirectory() as tmp:
        docx_path = os.path.join(tmp, "sample.docx")
        _make_doc().save(docx_path)
        assert read_paragraphs(docx_path)[2].text == "Third with tab"

        txt_path = os.path.join(tmp, "sample.txt")
        with open(txt_path, "w", encoding="utf-8") as f:
            f.write("One.\n\nTwo.")
        assert [p.text for p in read_paragraphs(txt_path)] == ["One.", "Two."]
    print("PASS: test_read_paragraphs_dispatches_on_suffix")


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

if __name__ == '__main__':
    tests = [
        test_paragraphs_from_docx,
        test_invalid_docx_raises_value_error,
        test_paragraphs_from_text,
        test_read_paragraphs_dispatches_on_suffix,
    ]

    passed = 0
    failed = 0
    for t in tests:
        try:
            t()
            passed += 1
        except Exception as e:
            print(f"FAIL: {t.__name__} — {e}")
            failed += 1

    print(f"\nResults: {passed} passed, {failed} failed out of {len(tests)} tests")
    if failed > 0:
        sys.exit(1)
