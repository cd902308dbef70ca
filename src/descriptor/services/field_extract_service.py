# src/descriptor/services/field_extract_service.py
import logging
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from descriptor.model import ElementNode

logger = logging.getLogger(__name__)

NAME_PLACEHOLDER = "(no module name)"


def placeholder_for(field_name: str) -> str:
    return f"(no {field_name})"


class FieldSpec(BaseModel):
    """A classification field read from a direct child element of the root."""
    element: str
    placeholder: str


class KeySchema(BaseModel):
    """
    Describes how a classification key tuple is built from a root element.

    The tuple holds one slot per entry in `fields` (in order), followed by the
    value of `name_attribute` on the root itself.
    """
    fields: List[FieldSpec] = Field(default_factory=list)
    name_attribute: str = "name"
    name_placeholder: str = NAME_PLACEHOLDER

    @classmethod
    def for_fields(cls, element_names: Sequence[str], name_attribute: str = "name") -> "KeySchema":
        """Builds a schema with the standard '(no <field>)' placeholders."""
        return cls(
            fields=[FieldSpec(element=n, placeholder=placeholder_for(n)) for n in element_names],
            name_attribute=name_attribute,
        )

    @property
    def labels(self) -> List[str]:
        return [f.element for f in self.fields] + [self.name_attribute]


class ClassificationKeys(BaseModel):
    keys: Tuple[str, ...]
    missing: List[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.missing


class FieldExtractService:
    """
    Derives the classification key tuple of a document.

    Only direct children of the root are inspected. Absent or empty values are
    replaced with the field's placeholder and reported in `missing`; this
    service never raises on incomplete input.
    """

    def __init__(self, schema: KeySchema):
        self.schema = schema

    @staticmethod
    def _child_text(root: ElementNode, element: str) -> Optional[str]:
        for child in root.children_named(element):
            if child.text and child.text.strip():
                return child.text.strip()
        return None

    def extract(self, root: Optional[ElementNode]) -> ClassificationKeys:
        keys: List[str] = []
        missing: List[str] = []

        for spec in self.schema.fields:
            value = self._child_text(root, spec.element) if root is not None else None
            if value:
                keys.append(value)
            else:
                keys.append(spec.placeholder)
                missing.append(spec.element)

        name = None
        if root is not None:
            name = (root.attributes.get(self.schema.name_attribute) or "").strip() or None
        if name:
            keys.append(name)
        else:
            keys.append(self.schema.name_placeholder)
            missing.append(f"{self.schema.name_attribute} attribute")

        return ClassificationKeys(keys=tuple(keys), missing=missing)
