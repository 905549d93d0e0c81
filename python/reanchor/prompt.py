"""
Text that goes to the language model and text that comes back.

The model call itself belongs to the caller; these helpers only build the
prompt for a revision request and turn the model's reply into raw edit
records for the validation pipeline.
"""

import json
import re
from typing import Any, List, Optional

import structlog

from reanchor.models import Comment, RevisionRequest

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT = """You are a collaborative writing assistant. The user will provide a document with inline comments on specific words, phrases, or sentences, and/or a global instruction that applies to the entire document. Your job is to suggest revisions based on these inputs.

Return a JSON array of changes. Each change must specify:
- "paraIndex": the 0-based paragraph index
- "oldText": the EXACT text to replace (copy it precisely from the paragraph, character for character)
- "newText": the replacement text

Rules:
- For inline comments: only modify the commented text. Keep changes minimal and targeted.
- For global instructions: apply the instruction across all paragraphs as appropriate. Each change should still be a targeted replacement of a specific substring.
- The "oldText" must be an exact substring of the paragraph text.
- If a comment asks you to change/replace/rewrite specific text, revise just that text.
- If a comment gives a general instruction (e.g. "make more vivid"), apply it to the commented span only.
- If a comment includes quoted selected text, use that exact selected text as "oldText" unless the user explicitly asks for a wider rewrite.
- If there is both a global instruction and inline comments, apply both.

Return ONLY valid JSON. No markdown, no explanation, no code fences. Just the JSON array.

Example response:
[{"paraIndex": 2, "oldText": "walked slowly", "newText": "ambled"}]"""

_SUBSET_NOTE = (
    "\n\nNote: You are seeing a {scope} subset of paragraphs from a larger document. "
    "The paragraph numbers are their positions in the full document. "
    "Only suggest changes to the paragraphs shown."
)

_OPENING_FENCE = re.compile(r"^```(?:json)?\n?")
_CLOSING_FENCE = re.compile(r"\n?```$")


class ModelResponseError(ValueError):
    """The model's reply could not be parsed as JSON."""


def format_comment_line(comment: Comment) -> str:
    selected = comment.selected_text or ""
    span_suffix = f" [chars {comment.start}-{comment.end}]" if comment.has_span() else ""
    return f'  → Comment on "{selected}"{span_suffix}: {comment.comment}\n'


def build_document_description(request: RevisionRequest) -> str:
    comments_by_para = {}
    for comment in request.comments:
        if comment.para_index is not None:
            comments_by_para.setdefault(comment.para_index, []).append(comment)

    lines: List[str] = []
    for paragraph in request.paragraphs:
        lines.append(f"Paragraph {paragraph.index + 1}: {paragraph.text}\n")
        for comment in comments_by_para.get(paragraph.index, []):
            lines.append(format_comment_line(comment))
        lines.append("\n")

    instruction = (request.global_instruction or "").strip()
    if instruction:
        lines.append(f"\nGlobal instruction (apply to the ENTIRE document): {instruction}\n")

    return "".join(lines)


def build_system_prompt(subset_scope: Optional[str] = None) -> str:
    if subset_scope:
        return SYSTEM_PROMPT + _SUBSET_NOTE.format(scope=subset_scope)
    return SYSTEM_PROMPT


def build_user_message(request: RevisionRequest) -> str:
    request.require_instructions()
    scope = request.subset_scope
    if scope:
        logger.info(
            "Subset mode",
            scope=scope,
            sent=len(request.paragraphs),
            indices=[p.index for p in request.paragraphs],
        )
    else:
        logger.info("Full mode", sent=len(request.paragraphs))
    return (
        "Here is my document with comments. Please suggest revisions:\n\n" + build_document_description(request)
    )


def parse_model_response(text: str) -> List[Any]:
    """
    Parse the model's reply into a list of raw edit records.
    Tolerates a single surrounding markdown code fence; anything that
    is valid JSON but not an array yields an empty list.
    """
    payload = (text or "").strip()
    if payload.startswith("```"):
        payload = _CLOSING_FENCE.sub("", _OPENING_FENCE.sub("", payload, count=1), count=1)

    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ModelResponseError(f"Model response is not valid JSON: {e}") from e

    if not isinstance(parsed, list):
        logger.warning("Model response is not a JSON array", kind=type(parsed).__name__)
        return []
    return parsed
