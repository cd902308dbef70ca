# src/descriptor/services/document_parse_service.py
import io
import logging
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union
from xml.etree.ElementTree import Element

from defusedxml import ElementTree as DefusedET
from defusedxml.common import DefusedXmlException

from descriptor.model import Document, ElementNode, ParseError, ParseResult, ParserSettings

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    """Strips a '{namespace-uri}' prefix from an ElementTree tag or attribute name."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _first_text_run(elem: Element) -> Optional[str]:
    """
    Returns the first non-whitespace character-data run directly inside `elem`.

    The runs are the leading text and the tail of every child, in document order.
    Later runs never replace an earlier one.
    """
    runs = [elem.text] + [child.tail for child in elem]
    for run in runs:
        if run and run.strip():
            return run.strip()
    return None


class DocumentParseService:
    """
    Streaming parser turning one descriptor file into a Document.

    Uses start/end events and an explicit stack of open nodes, so a node is
    attached to its parent only after all of its children are closed.
    Per-file problems are returned as ParseError values, never raised.
    """

    def __init__(self, root_tag: Optional[str] = None, forbid_dtd: bool = True):
        self.root_tag = root_tag
        self.forbid_dtd = forbid_dtd

    @classmethod
    def from_settings(cls, settings: ParserSettings) -> "DocumentParseService":
        return cls(root_tag=settings.root_tag, forbid_dtd=settings.forbid_dtd)

    def parse_file(self, path: Union[str, Path]) -> ParseResult:
        source = str(path)
        try:
            with open(path, "rb") as fh:
                return self.parse_stream(fh, source)
        except OSError as e:
            logger.debug("Could not open %s: %s", source, e)
            return ParseResult(
                source=source,
                error=ParseError(source=source, kind="io", message=f"Could not open file: {e.strerror or e}"),
            )

    def parse_bytes(self, data: bytes, source: str = "<memory>") -> ParseResult:
        return self.parse_stream(io.BytesIO(data), source)

    def parse_stream(self, stream: BinaryIO, source: str = "<stream>") -> ParseResult:
        try:
            root = self._build(stream)
        except DefusedET.ParseError as e:
            line, column = getattr(e, "position", (None, None))
            return ParseResult(
                source=source,
                error=ParseError(source=source, kind="syntax", message=str(e), line=line, column=column),
            )
        except DefusedXmlException as e:
            return ParseResult(
                source=source,
                error=ParseError(source=source, kind="syntax", message=f"Forbidden construct: {e}"),
            )
        except OSError as e:
            return ParseResult(
                source=source,
                error=ParseError(source=source, kind="io", message=f"Read failed: {e}"),
            )

        return ParseResult(source=source, document=Document(source=source, root=root))

    def _matches_root(self, tag: str) -> bool:
        return self.root_tag is None or _local_name(tag) == self.root_tag

    def _build(self, stream: BinaryIO) -> Optional[ElementNode]:
        """
        Consumes parse events until the captured root element closes.

        Raises the parser's exceptions unchanged; the partial stack is dropped
        with them.
        """
        stack: List[Tuple[Element, ElementNode]] = []
        events = DefusedET.iterparse(
            stream,
            events=("start", "end"),
            forbid_dtd=self.forbid_dtd,
            forbid_entities=True,
            forbid_external=True,
        )

        for event, elem in events:
            if event == "start":
                if stack or self._matches_root(elem.tag):
                    node = ElementNode(
                        name=_local_name(elem.tag),
                        attributes={_local_name(k): v for k, v in elem.attrib.items()},
                    )
                    stack.append((elem, node))
                continue

            # event == "end"
            if not stack or stack[-1][0] is not elem:
                # Outside the captured subtree
                elem.clear()
                continue

            _, node = stack.pop()
            node.text = _first_text_run(elem)

            # The parent still needs this element's tail for its own text.
            tail = elem.tail
            elem.clear()
            elem.tail = tail

            if stack:
                stack[-1][1].children.append(node)
            else:
                return node

        return None
