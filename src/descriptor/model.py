# src/descriptor/model.py
from __future__ import annotations

from typing import Dict, Iterator, List, Literal, Optional

from pydantic import BaseModel, Field


class ElementNode(BaseModel):
    """
    A single element of a parsed descriptor document.

    Children are stored in document order. `text` holds the first
    non-whitespace character-data run found directly inside the element.
    """
    name: str = Field(min_length=1)
    text: Optional[str] = None
    attributes: Dict[str, str] = Field(default_factory=dict)
    children: List[ElementNode] = Field(default_factory=list)

    def child(self, name: str) -> Optional[ElementNode]:
        """Returns the first direct child with the given name, or None."""
        return next((c for c in self.children if c.name == name), None)

    def children_named(self, name: str) -> List[ElementNode]:
        return [c for c in self.children if c.name == name]

    def iter(self) -> Iterator[ElementNode]:
        """Yields this node and all descendants in document order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.children


class Document(BaseModel):
    """One parsed descriptor file. `root` is None when no matching root element was found."""
    source: str
    root: Optional[ElementNode] = None


class ParseError(BaseModel):
    """Per-file failure value. 'io' for unreadable files, 'syntax' for malformed markup."""
    source: str
    kind: Literal["io", "syntax"]
    message: str
    line: Optional[int] = None
    column: Optional[int] = None

    def describe(self) -> str:
        where = f" (line {self.line}, column {self.column})" if self.line is not None else ""
        return f"{self.source}: {self.message}{where}"


class ParseResult(BaseModel):
    source: str
    document: Optional[Document] = None
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.document is not None


class ParserSettings(BaseModel):
    root_tag: Optional[str] = None
    forbid_dtd: bool = True


class FlatElement(BaseModel):
    """One element of a flattened tree; `parent` indexes the owning element, -1 for the root."""
    name: str
    text: Optional[str] = None
    attributes: Dict[str, str] = Field(default_factory=dict)
    parent: int = -1


class FlatParseResult(BaseModel):
    """
    ParseResult with the element tree stored as a pre-order list.

    Used to hand results across the process boundary: the payload has a fixed
    nesting depth however deep the document is.
    """
    source: str
    error: Optional[ParseError] = None
    has_document: bool = False
    elements: List[FlatElement] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ParseResult) -> FlatParseResult:
        flat = cls(source=result.source, error=result.error, has_document=result.document is not None)
        root = result.document.root if result.document is not None else None
        if root is None:
            return flat

        stack = [(root, -1)]
        while stack:
            element, parent = stack.pop()
            index = len(flat.elements)
            flat.elements.append(FlatElement(
                name=element.name, text=element.text, attributes=element.attributes, parent=parent
            ))
            stack.extend((child, index) for child in reversed(element.children))
        return flat

    def to_result(self) -> ParseResult:
        if not self.has_document:
            return ParseResult(source=self.source, error=self.error)

        built: List[ElementNode] = []
        for flat in self.elements:
            element = ElementNode(name=flat.name, text=flat.text, attributes=flat.attributes)
            if flat.parent >= 0:
                built[flat.parent].children.append(element)
            built.append(element)
        root = built[0] if built else None
        return ParseResult(source=self.source, document=Document(source=self.source, root=root), error=self.error)
