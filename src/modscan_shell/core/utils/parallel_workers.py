import logging
from typing import Optional

from descriptor.model import FlatParseResult
from descriptor.services.document_parse_service import DocumentParseService

logger = logging.getLogger(__name__)


def parse_descriptor_worker(path: str, root_tag: Optional[str], forbid_dtd: bool) -> str:
    """
    Worker function parsing one descriptor file.
    Returns a FlatParseResult as a JSON string; per-file failures are inside it.
    """
    svc = DocumentParseService(root_tag=root_tag, forbid_dtd=forbid_dtd)
    result = svc.parse_file(path)
    if result.error:
        logger.debug("Worker parse error in %s: %s", path, result.error.message)
    # Flat JSON: avoids complex pickling on Windows spawn and stays shallow for deep trees
    return FlatParseResult.from_result(result).model_dump_json()
