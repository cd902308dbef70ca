# tests/core/test_scan_controller.py
import pytest

from aggregator.collectors import ModuleClassifier, SchemaCollector
from descriptor.controllers.scan_controller import ScanController, ScanSummary
from descriptor.model import FlatParseResult, ParserSettings
from descriptor.services.document_parse_service import DocumentParseService
from descriptor.services.field_extract_service import KeySchema

GOOD_1 = '<module name="alpha"><GroupOwner>os</GroupOwner><classification>Driver</classification></module>'
TRUNCATED = '<module name="beta"><GroupOwner>os</GroupOwner><classif'
GOOD_3 = '<module name="gamma"><GroupOwner>hw</GroupOwner></module>'
DEPTH = 1500
DEEP = "<x>" * DEPTH + "</x>" * DEPTH


@pytest.fixture
def descriptor_files(tmp_path):
    paths = []
    for i, content in enumerate([GOOD_1, TRUNCATED, GOOD_3], start=1):
        d = tmp_path / f"m{i}"
        d.mkdir()
        p = d / "module.tmpl"
        p.write_text(content, encoding="utf-8")
        paths.append(p)
    return paths


def _classifier():
    return ModuleClassifier(KeySchema.for_fields(["GroupOwner", "classification"]))


def _leaves(classifier):
    return [(path, node.count) for path, node in classifier.aggregator.iter_leaves()]


def test_malformed_file_is_skipped_and_counted(descriptor_files):
    classifier = _classifier()
    summary = ScanController(ParserSettings(root_tag="module")).scan(descriptor_files, classifier)

    assert summary.files_total == 3
    assert summary.parsed == 2
    assert summary.parse_errors == 1
    assert summary.unreadable == 0
    assert summary.incomplete == 1
    assert _leaves(classifier) == [
        (("hw", "(no classification)", "gamma"), 1),
        (("os", "Driver", "alpha"), 1),
    ]


def test_unreadable_file_is_counted(tmp_path, descriptor_files):
    classifier = _classifier()
    summary = ScanController(ParserSettings()).scan(
        [descriptor_files[0], tmp_path / "gone" / "module.tmpl"], classifier
    )
    assert summary.parsed == 1
    assert summary.unreadable == 1
    assert classifier.aggregator.total_at() == 1


def test_parallel_scan_matches_sequential(descriptor_files):
    sequential, parallel = _classifier(), _classifier()
    controller = ScanController(ParserSettings(root_tag="module"))

    seq_summary = controller.scan(descriptor_files, sequential, workers=1)
    par_summary = controller.scan(descriptor_files, parallel, workers=2)

    assert _leaves(parallel) == _leaves(sequential)
    assert parallel.incomplete == sequential.incomplete
    assert par_summary.model_dump(exclude={"duration_s"}) == seq_summary.model_dump(exclude={"duration_s"})


def test_schema_collector_through_scan(descriptor_files):
    collector = SchemaCollector()
    summary = ScanController(ParserSettings()).scan(descriptor_files, collector)

    assert summary.incomplete == 0
    assert collector.index.element_counts == {"GroupOwner": 2, "classification": 1, "module": 2}


def test_summary_line_format():
    summary = ScanSummary(files_total=3, parsed=2, parse_errors=1, unreadable=0, incomplete=1)
    assert summary.summary_line() == (
        "Processed 3 file(s): 2 parsed, 1 parse error(s), 0 unreadable, 1 incomplete."
    )


def test_empty_path_list():
    summary = ScanController(ParserSettings()).scan([], _classifier(), workers=4)
    assert summary.files_total == 0
    assert summary.parsed == 0


def _chain_length(root):
    length = 0
    node = root
    while node is not None:
        length += 1
        node = node.children[0] if node.children else None
    return length


@pytest.mark.parametrize("workers", [1, 2])
def test_deeply_nested_file_parses_with_any_worker_count(tmp_path, workers):
    deep = tmp_path / "deep" / "module.tmpl"
    deep.parent.mkdir()
    deep.write_text(DEEP, encoding="utf-8")
    plain = tmp_path / "plain" / "module.tmpl"
    plain.parent.mkdir()
    plain.write_text(GOOD_1, encoding="utf-8")

    collector = SchemaCollector()
    summary = ScanController(ParserSettings()).scan([deep, plain], collector, workers=workers)

    assert summary.parsed == 2
    assert summary.parse_errors == 0
    assert summary.worker_failures == 0
    assert collector.index.element_counts["x"] == DEPTH
    assert collector.index.child_counts("x") == {"x": DEPTH - 1}


def test_flat_result_rebuilds_deep_tree():
    result = DocumentParseService().parse_bytes(DEEP.encode(), "deep.xml")
    flat = FlatParseResult.from_result(result)

    assert len(flat.elements) == DEPTH
    assert [e.parent for e in flat.elements[:3]] == [-1, 0, 1]

    rebuilt = FlatParseResult.model_validate_json(flat.model_dump_json()).to_result()
    assert rebuilt.ok
    assert rebuilt.document.source == "deep.xml"
    assert _chain_length(rebuilt.document.root) == DEPTH


def test_flat_result_keeps_sibling_order_text_and_errors():
    svc = DocumentParseService()
    result = svc.parse_bytes(
        b'<module name="m"><a k="1">one</a><b><c>deep</c></b><a>two</a></module>', "m.xml"
    )
    assert FlatParseResult.from_result(result).to_result().model_dump() == result.model_dump()

    broken = svc.parse_bytes(b"<module><a>", "broken.xml")
    rebuilt = FlatParseResult.from_result(broken).to_result()
    assert rebuilt.document is None
    assert rebuilt.error == broken.error


def test_summary_line_reports_worker_failures():
    summary = ScanSummary(files_total=2, parsed=1, worker_failures=1)
    assert summary.summary_line() == (
        "Processed 2 file(s): 1 parsed, 0 parse error(s), 0 unreadable, 0 incomplete. "
        "1 file(s) lost to worker failures."
    )
