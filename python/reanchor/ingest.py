import io
import re
from pathlib import Path
from typing import List, Union

import structlog
from docx import Document
from docx.oxml.ns import qn

from reanchor.models import Paragraph

logger = structlog.get_logger(__name__)

_BLANK_LINES = re.compile(r"\n[ \t]*\n+")


def _paragraph_text(p_element) -> str:
    """
    Accepted-changes text of one <w:p>: deleted text is skipped,
    <w:tab/> becomes a space and <w:br/>/<w:cr/> become newlines.
    """
    text = ""
    for run in p_element.iter(qn("w:r")):
        if run.getparent().tag == qn("w:del"):
            continue
        for child in run:
            if child.tag == qn("w:t"):
                text += child.text or ""
            elif child.tag == qn("w:tab"):
                text += " "
            elif child.tag in (qn("w:br"), qn("w:cr")):
                text += "\n"
    return text


def paragraphs_from_docx(file_stream: io.BytesIO) -> List[Paragraph]:
    """
    Reads the top-level body paragraphs of a DOCX in document order.
    Empty paragraphs keep their index so offsets match the editor's view.
    """
    try:
        file_stream.seek(0)
        doc = Document(file_stream)
    except Exception as e:
        logger.error(f"DOCX load failed: {e}", exc_info=True)
        raise ValueError(f"Could not read document: {str(e)}") from e

    paragraphs = []
    for child in doc.element.body.iterchildren():
        if child.tag == qn("w:p"):
            paragraphs.append(Paragraph(index=len(paragraphs), text=_paragraph_text(child)))
    return paragraphs


def paragraphs_from_text(text: str) -> List[Paragraph]:
    blocks = _BLANK_LINES.split(text.strip()) if text.strip() else []
    return [Paragraph(index=i, text=block.strip()) for i, block in enumerate(blocks)]


def read_paragraphs(path: Union[str, Path]) -> List[Paragraph]:
    path = Path(path)
    if path.suffix.lower() == ".docx":
        with open(path, "rb") as f:
            return paragraphs_from_docx(io.BytesIO(f.read()))
    with open(path, "r", encoding="utf-8") as f:
        return paragraphs_from_text(f.read())
