# tests/core/test_navigation.py
from pathlib import Path

import pytest

from aggregator.collectors import ModuleClassifier
from aggregator.controllers.navigation_controller import NavigationController
from descriptor.services.document_parse_service import DocumentParseService
from descriptor.services.field_extract_service import KeySchema
from modscan_shell.core.managers.navigator_manager import NavigatorManager

ROOT = Path("/src/tree")

DOCS = {
    "drivers/net/module.tmpl":
        b'<module name="net" version="1"><GroupOwner>os</GroupOwner>'
        b'<classification>Driver</classification><description>Network</description></module>',
    "drivers/usb/module.tmpl":
        b'<module name="usb"><GroupOwner>os</GroupOwner><classification>Driver</classification></module>',
    "tools/gdb/module.tmpl":
        b'<module name="gdb"><GroupOwner>tools</GroupOwner></module>',
}


@pytest.fixture
def tree():
    classifier = ModuleClassifier(
        KeySchema.for_fields(["GroupOwner", "classification"]), keep_documents=True, root_path=ROOT
    )
    svc = DocumentParseService()
    for rel, xml in DOCS.items():
        classifier.consume(svc.parse_bytes(xml, str(ROOT / rel)).document)
    return NavigationController().build_tree(classifier)


def test_tree_groups_by_owner_then_classification(tree):
    assert tree.node_type == "root"
    assert tree.count == 3
    assert [c.label for c in tree.children] == ["os", "tools"]

    os_node = tree.children[0]
    assert os_node.node_type == "owner"
    assert os_node.count == 2
    assert [c.label for c in os_node.children] == ["Driver"]
    assert os_node.children[0].node_type == "classification"

    tools = tree.children[1]
    assert tools.children[0].label == "(no classification)"


def test_module_nodes_carry_path_attributes_and_children(tree):
    modules = tree.children[0].children[0].children
    assert [m.label for m in modules] == ["net", "usb"]

    net = modules[0]
    assert net.node_type == "module"
    assert net.path == "drivers/net"
    assert net.attributes == {"name": "net", "version": "1"}
    assert [(c.label, c.value) for c in net.children] == [
        ("GroupOwner", "os"),
        ("classification", "Driver"),
        ("description", "Network"),
    ]


def test_to_jstree_shape(tree):
    data = NavigationController().to_jstree(tree, open_depth=1)
    assert data["text"] == "Modules (3)"
    assert data["state"]["opened"] is True
    assert data["children"][0]["text"] == "os (2)"
    assert data["children"][0]["state"]["opened"] is False

    module = data["children"][0]["children"][0]["children"][0]
    assert module["data"]["type"] == "module"
    assert module["data"]["path"] == "drivers/net"
    assert module["children"][2]["text"] == "description: Network"


def test_navigator_cursor_moves(tree):
    nav = NavigatorManager()
    nav.load(tree)
    assert nav.location == "/"

    assert nav.enter("os").label == "os"
    assert nav.enter("1").label == "Driver"
    assert nav.location == "/os/Driver"
    assert nav.enter("missing") is None
    assert nav.location == "/os/Driver"

    nav.up()
    assert nav.location == "/os"
    nav.enter("/")
    assert nav.current is tree
    nav.up()
    assert nav.current is tree


def test_tree_and_jstree_are_idempotent(tree):
    classifier = ModuleClassifier(
        KeySchema.for_fields(["GroupOwner", "classification"]), keep_documents=True, root_path=ROOT
    )
    svc = DocumentParseService()
    for rel, xml in DOCS.items():
        classifier.consume(svc.parse_bytes(xml, str(ROOT / rel)).document)
    controller = NavigationController()

    first = controller.build_tree(classifier)
    assert controller.build_tree(classifier).model_dump() == first.model_dump()
    assert first.model_dump() == tree.model_dump()
    assert classifier.aggregator.total_at() == 3

    data = controller.to_jstree(first, open_depth=2)
    assert controller.to_jstree(first, open_depth=2) == data
    assert first.model_dump() == tree.model_dump()


def test_node_types_follow_key_labels():
    classifier = ModuleClassifier(KeySchema.for_fields(["classification", "GroupOwner", "description"]))
    classifier.consume(DocumentParseService().parse_bytes(DOCS["drivers/net/module.tmpl"], "net.tmpl").document)

    tree = NavigationController().build_tree(classifier)
    classification = tree.children[0]
    owner = classification.children[0]
    description = owner.children[0]

    assert (classification.label, classification.node_type) == ("Driver", "classification")
    assert (owner.label, owner.node_type) == ("os", "owner")
    assert (description.label, description.node_type) == ("Network", "group")
    assert NavigationController().to_jstree(description)["text"] == "Network (1)"


def test_deeply_nested_module_projects_without_recursion():
    depth = 1500
    xml = (
        b'<module name="deep"><GroupOwner>os</GroupOwner>'
        + b"<x>" * depth + b"leaf" + b"</x>" * depth
        + b"</module>"
    )
    classifier = ModuleClassifier(
        KeySchema.for_fields(["GroupOwner", "classification"]), keep_documents=True, root_path=ROOT
    )
    classifier.consume(DocumentParseService().parse_bytes(xml, str(ROOT / "deep/module.tmpl")).document)

    controller = NavigationController()
    module = controller.build_tree(classifier).children[0].children[0].children[0]
    assert module.label == "deep"
    assert [c.label for c in module.children] == ["GroupOwner", "x"]

    node, levels = module.children[1], 0
    while node.children:
        node, levels = node.children[0], levels + 1
    assert levels == depth - 1
    assert node.value == "leaf"

    entry, levels = controller.to_jstree(module, open_depth=1)["children"][1], 0
    while entry["children"]:
        entry, levels = entry["children"][0], levels + 1
    assert levels == depth - 1
    assert entry["text"] == "x: leaf"
    assert entry["state"]["opened"] is False
