# src/aggregator/collectors.py
import logging
from pathlib import Path
from typing import Optional, Protocol

from aggregator.hierarchy import HierarchicalAggregator
from aggregator.model import ModuleRecord
from aggregator.schema_index import SchemaIndex
from descriptor.model import Document
from descriptor.services.field_extract_service import (
    ClassificationKeys,
    FieldExtractService,
    KeySchema,
)

logger = logging.getLogger(__name__)


class DocumentConsumer(Protocol):
    """Anything the scan controller can fold parsed documents into."""

    def consume(self, document: Document) -> None: ...

    @property
    def incomplete(self) -> int: ...


class ModuleClassifier:
    """
    Buckets module descriptors by their classification key tuple.

    Documents with missing fields are never dropped: they land under the
    placeholder keys and are tallied in `incomplete`.
    """

    def __init__(self, schema: KeySchema, keep_documents: bool = False, root_path: Optional[Path] = None):
        self.schema = schema
        self.extractor = FieldExtractService(schema)
        self.aggregator = HierarchicalAggregator()
        self.keep_documents = keep_documents
        self.root_path = Path(root_path) if root_path else None
        self._incomplete = 0

    @property
    def incomplete(self) -> int:
        return self._incomplete

    @property
    def labels(self):
        return self.schema.labels

    def _relative(self, source: str) -> str:
        path = Path(source)
        if self.root_path is not None:
            try:
                path = path.parent.relative_to(self.root_path)
            except ValueError:
                path = path.parent
        return path.as_posix()

    def consume(self, document: Document) -> ClassificationKeys:
        keys = self.extractor.extract(document.root)

        if not keys.is_complete:
            for field in keys.missing:
                logger.warning("Missing %s in %s", field, document.source)
            self._incomplete += 1

        record = None
        if self.keep_documents:
            record = ModuleRecord(relative_path=self._relative(document.source), keys=keys.keys, root=document.root)

        self.aggregator.insert(keys.keys, auxiliary=record)
        return keys


class SchemaCollector:
    """Feeds every parsed tree into a SchemaIndex."""

    def __init__(self) -> None:
        self.index = SchemaIndex()

    @property
    def incomplete(self) -> int:
        return 0

    def consume(self, document: Document) -> None:
        if document.root is None:
            logger.debug("No root element in %s", document.source)
            return
        self.index.observe(document.root)
