# tests/core/test_handlers.py
import json

import pandas as pd
import pytest

from modscan_shell.app import main
from modscan_shell.core.context.shell_context import ShellContext
from modscan_shell.core.handlers.build_handler import handle_build
from modscan_shell.core.handlers.classify_handler import handle_classify
from modscan_shell.core.handlers.export_handler import handle_export
from modscan_shell.core.handlers.nav_handler import handle_nav
from modscan_shell.core.handlers.schema_handler import handle_schema
from modscan_shell.core.handlers.suffix_handler import handle_suffix

MODULES = {
    "drivers/net/module.tmpl":
        '<module name="net"><GroupOwner>os</GroupOwner><classification>Driver</classification>'
        '<type>lib</type></module>',
    "drivers/usb/module.tmpl":
        '<module name="usb"><GroupOwner>os</GroupOwner><classification>Driver</classification>'
        '<type>lib</type></module>',
    "broken/module.tmpl": '<module name="broken"><GroupOwner>os',
    "tools/gdb/module.tmpl": '<module name="gdb"><GroupOwner>tools</GroupOwner></module>',
}


@pytest.fixture
def source_tree(tmp_path):
    root = tmp_path / "tree"
    for rel, content in MODULES.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    (root / "drivers" / "net" / "common.mk").write_text("NAME=devnp-net\nINSTALLDIR=sbin\nLIBS=socket\n")
    (root / "drivers" / "net" / "rules.mk").write_text("X = 1\nall:\n\tqcc -c $(X) $(SRC)\n")
    return root


@pytest.fixture
def ctx():
    return ShellContext()


def test_classify_prints_hierarchy_and_summary(source_tree, ctx, capsys):
    assert handle_classify([str(source_tree), "--no-progress"], ctx) == 0
    out = capsys.readouterr().out

    assert "MODULE HIERARCHY" in out
    assert "os [2]" in out
    assert "      net [1]" in out
    assert "tools [1]" in out
    assert "  (no classification) [1]" in out
    assert "WARNING: Found 1 file(s) with incomplete data" in out
    assert "Processed 4 file(s): 3 parsed, 1 parse error(s), 0 unreadable, 1 incomplete." in out
    assert ctx.classifier.aggregator.total_at() == 3


def test_classify_missing_root_returns_1(tmp_path, ctx, capsys):
    code = handle_classify([str(tmp_path / "nowhere")], ctx)
    assert code == 1
    assert "❌ Error: Directory does not exist" in capsys.readouterr().out
    assert ctx.classifier is None


def test_classify_with_custom_fields(source_tree, ctx, capsys):
    assert handle_classify([str(source_tree), "--fields", "type", "--no-progress"], ctx) == 0
    out = capsys.readouterr().out
    assert "lib [2]" in out
    assert "(no type) [1]" in out


def test_schema_report(source_tree, ctx, capsys):
    assert handle_schema([str(source_tree), "--no-progress"], ctx) == 0
    out = capsys.readouterr().out
    assert "XML ANALYSIS RESULTS" in out
    assert f"{'module':<40}: 3 instances" in out
    assert "Processed 4 file(s): 3 parsed, 1 parse error(s), 0 unreadable, 0 incomplete." in out


def test_schema_missing_root_returns_1(tmp_path, ctx, capsys):
    assert handle_schema([str(tmp_path / "nowhere")], ctx) == 1


def test_export_requires_previous_run(tmp_path, ctx, capsys):
    assert handle_export(["classify", "-o", str(tmp_path / "out.csv")], ctx) == 1
    assert "Run 'classify <root>' first" in capsys.readouterr().out


def test_export_classify_to_csv(source_tree, tmp_path, ctx):
    handle_classify([str(source_tree), "--no-progress"], ctx)
    out_file = tmp_path / "out" / "classes.csv"

    assert handle_export(["classify", "-o", str(out_file)], ctx) == 0
    frame = pd.read_csv(out_file)
    assert list(frame.columns) == ["GroupOwner", "classification", "type", "name", "count"]
    assert frame["count"].sum() == 3


def test_export_schema_to_csv(source_tree, tmp_path, ctx):
    handle_schema([str(source_tree), "--no-progress"], ctx)
    out_file = tmp_path / "schema.csv"

    assert handle_export(["schema", "-o", str(out_file), "--element", "module"], ctx) == 0
    frame = pd.read_csv(out_file)
    assert set(frame["element"]) == {"module"}


def test_nav_session(source_tree, ctx, capsys):
    assert handle_nav(["ls"], ctx) == 1
    assert handle_nav(["load", str(source_tree)], ctx) == 0
    assert "Loaded 3 module(s)" in capsys.readouterr().out

    assert handle_nav(["cd", "os"], ctx) == 0
    assert handle_nav(["cd", "Driver"], ctx) == 0
    capsys.readouterr()

    assert handle_nav(["ls"], ctx) == 0
    listing = capsys.readouterr().out
    assert "net  (drivers/net)" in listing
    assert "usb  (drivers/usb)" in listing

    assert handle_nav(["cd", "1"], ctx) == 0
    assert handle_nav(["attrs"], ctx) == 0
    attrs = capsys.readouterr().out
    assert "Path:    drivers/net" in attrs
    assert "  name = net" in attrs

    assert handle_nav(["up"], ctx) == 0
    assert ctx.navigator.location == "/os/Driver"
    assert handle_nav(["cd", "missing"], ctx) == 1


def test_nav_loads_and_prints_deeply_nested_module(tmp_path, ctx, capsys):
    depth = 1200
    root = tmp_path / "tree"
    for rel, content in {
        "deep/module.tmpl":
            '<module name="deep"><GroupOwner>os</GroupOwner>' + "<x>" * depth + "</x>" * depth + "</module>",
        "net/module.tmpl": MODULES["drivers/net/module.tmpl"],
    }.items():
        path = root / rel
        path.parent.mkdir(parents=True)
        path.write_text(content, encoding="utf-8")

    assert handle_nav(["load", str(root)], ctx) == 0
    assert "Loaded 2 module(s)" in capsys.readouterr().out

    assert handle_nav(["cd", "os"], ctx) == 0
    assert handle_nav(["cd", "(no classification)"], ctx) == 0
    assert handle_nav(["cd", "deep"], ctx) == 0
    capsys.readouterr()

    assert handle_nav(["tree"], ctx) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "deep  (deep)"
    assert sum(1 for line in lines if line.strip() == "x") == depth
    assert lines[-1] == "  " * depth + "x"

    assert handle_nav(["tree", "--depth", "2"], ctx) == 0
    assert capsys.readouterr().out.splitlines() == ["deep  (deep)", "  GroupOwner: os", "  x", "    x"]


def test_nav_json_to_file(source_tree, tmp_path, ctx):
    handle_nav(["load", str(source_tree)], ctx)
    out_file = tmp_path / "tree.json"

    assert handle_nav(["json", "-o", str(out_file), "--open-depth", "0"], ctx) == 0
    data = json.loads(out_file.read_text(encoding="utf-8"))
    assert data["text"] == "Modules (3)"
    assert data["state"]["opened"] is False
    assert [c["text"] for c in data["children"]] == ["os (2)", "tools (1)"]


def test_suffix(source_tree, capsys):
    assert handle_suffix([str(source_tree)], ShellContext()) == 0
    out = capsys.readouterr().out
    assert f"{'tmpl':<30}: 4" in out
    assert f"{'mk':<30}: 2" in out


def test_suffix_missing_root_returns_1(tmp_path, capsys):
    assert handle_suffix([str(tmp_path / "nowhere")], ShellContext()) == 1


def test_build_commonmk(source_tree, ctx, capsys):
    assert handle_build(["commonmk", str(source_tree)], ctx) == 0
    out = capsys.readouterr().out
    assert "Project: drivers/net" in out
    assert "NAME:        devnp-net" in out


def test_build_makevars(source_tree, tmp_path, ctx, capsys):
    modules = tmp_path / "modules.txt"
    modules.write_text("qcc\n")

    assert handle_build(["makevars", str(source_tree), "--modules", str(modules)], ctx) == 0
    out = capsys.readouterr().out
    assert "UNDEFINED VARIABLES (1):" in out
    assert "  SRC" in out
    assert f"  {'qcc':<30} [module]" in out


def test_main_runs_one_shot_command(source_tree, capsys):
    assert main(["suffix", str(source_tree)]) == 0
    assert "Total unique suffixes/basenames" in capsys.readouterr().out


def test_main_reports_missing_root(tmp_path):
    assert main(["classify", str(tmp_path / "nowhere")]) == 1
