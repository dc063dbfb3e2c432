from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class FieldKind(Enum):
    SINGLE_LINE_TEXT = "single_line_text"
    MULTI_LINE_TEXT = "multi_line_text"
    EDITABLE_REGION = "editable_region"


@dataclass
class ElementRef:
    """
    What the page glue knows about a form element.
    `value` holds the input/textarea value, or the innerText of an editable region;
    the glue keeps it current before dispatching input events.
    """
    tag: str
    input_type: Optional[str] = None
    content_editable: bool = False
    value: str = ""
    element_id: str = field(default_factory=lambda: uuid.uuid4().hex[:10])


@dataclass
class FieldVerdict:
    kind: Optional[FieldKind]
    reason: str

    @property
    def allowed(self) -> bool:
        return self.kind is not None


@dataclass
class FieldKindPolicy:
    text_input_types: tuple[Optional[str], ...] = ("text", "", None)

    def decide(self, element: ElementRef) -> FieldVerdict:
        tag = (element.tag or "").lower()
        if tag == "textarea":
            return FieldVerdict(FieldKind.MULTI_LINE_TEXT, "tag:textarea")
        if tag == "input":
            itype = element.input_type.lower() if element.input_type else element.input_type
            if itype in self.text_input_types:
                return FieldVerdict(FieldKind.SINGLE_LINE_TEXT, f"input:{itype or 'text'}")
            if not element.content_editable:
                return FieldVerdict(None, f"input type {itype!r} is not text")
        if element.content_editable:
            return FieldVerdict(FieldKind.EDITABLE_REGION, f"contenteditable:{tag}")
        return FieldVerdict(None, f"tag {tag!r} is not editable")
