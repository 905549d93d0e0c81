from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from reanchor.config import SUBSET_SCOPES


def _strict_int(value: Any) -> Optional[int]:
    # bool is an int subclass; a JSON true/false is never an offset.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


class DropReason(str, Enum):
    INVALID_SHAPE = "invalidShape"
    INVALID_INDEX = "invalidIndex"
    MISSING_PARAGRAPH = "missingParagraph"
    UNRESOLVED_OLD_TEXT = "unresolvedOldText"


class RemapReason(str, Enum):
    SINGLE_COMMENT_ANCHOR = "single-comment-anchor"
    UNIQUE_EXACT = "unique-exact"
    UNIQUE_LOOSE = "unique-loose"


class Paragraph(BaseModel):
    """One immutable text block of the document, in full-document index space."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0)
    text: str = ""


class Comment(BaseModel):
    """
    A user annotation attached to one paragraph.
    The character range and selected text are optional and only trusted
    when they actually fit the paragraph they point at.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    para_index: Optional[int] = Field(None, alias="paraIndex")
    start: Optional[int] = None
    end: Optional[int] = None
    selected_text: Optional[str] = Field(None, alias="selectedText")
    comment: str = ""

    @field_validator("para_index", "start", "end", mode="before")
    @classmethod
    def _only_integers(cls, value: Any) -> Optional[int]:
        return _strict_int(value)

    @field_validator("selected_text", mode="before")
    @classmethod
    def _only_strings(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("comment", mode="before")
    @classmethod
    def _instruction_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    def has_span(self) -> bool:
        return self.start is not None and self.end is not None and self.end > self.start

    def range_within(self, length: int) -> bool:
        """True when [start, end) is a non-empty range inside a text of `length` chars."""
        return self.has_span() and self.start >= 0 and self.end <= length


class ProposedEdit(BaseModel):
    """
    A single edit as emitted by the language model.
    Nothing about it is trusted: the paragraph may be wrong and the old
    text may only approximately exist in it.
    """

    model_config = ConfigDict(populate_by_name=True, strict=True, frozen=True)

    para_index: Union[int, float] = Field(..., alias="paraIndex")
    old_text: str = Field(..., alias="oldText")
    new_text: str = Field(..., alias="newText")

    @field_validator("para_index", mode="before")
    @classmethod
    def _reject_bool(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("paraIndex must be a number")
        return value

    @property
    def index(self) -> Optional[int]:
        """The paragraph index as an int, or None when it is not integral."""
        if isinstance(self.para_index, int):
            return self.para_index
        if self.para_index.is_integer():
            return int(self.para_index)
        return None


class ResolvedEdit(BaseModel):
    """
    An edit whose old_text is guaranteed to be a literal substring of
    the paragraph at para_index.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    para_index: int = Field(..., alias="paraIndex")
    old_text: str = Field(..., alias="oldText")
    new_text: str = Field(..., alias="newText")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class RevisionRequest(BaseModel):
    """
    Everything the caller sent for one revision round.

    `paragraphs` may be a plain list of strings (full mode, indices 0..N-1)
    or a list of {index, text} objects (a focused or section subset of a
    larger document). `proposed_edits` stays raw; the validation pipeline
    classifies each record itself.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    paragraphs: List[Paragraph] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    global_instruction: Optional[str] = Field(None, alias="globalInstruction")
    focused_mode: bool = Field(False, alias="focusedMode")
    scope_mode: Optional[str] = Field(None, alias="scopeMode")
    proposed_edits: List[Any] = Field(default_factory=list, alias="proposedEdits")

    @model_validator(mode="before")
    @classmethod
    def _use_paragraph_map(cls, data: Any) -> Any:
        # Focused mode only ever reads the map; without one nothing was sent.
        if isinstance(data, dict) and data.get("focusedMode"):
            data = dict(data)
            data["paragraphs"] = data.pop("paragraphMap", None) or []
        return data

    @field_validator("paragraphs", mode="before")
    @classmethod
    def _index_plain_paragraphs(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"index": i, "text": p} if isinstance(p, str) else p for i, p in enumerate(value)]
        return value

    @property
    def subset_scope(self) -> Optional[str]:
        """Name of the subset scope, or None when the whole document was sent."""
        if not self.focused_mode:
            return None
        return self.scope_mode if self.scope_mode in SUBSET_SCOPES else "focused"

    def require_instructions(self) -> None:
        has_instruction = bool(self.global_instruction and self.global_instruction.strip())
        if not self.paragraphs or (not self.comments and not has_instruction):
            raise ValueError("Missing paragraphs or revision instructions")
