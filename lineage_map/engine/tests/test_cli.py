"""
Tests for the lineage_layout command line entry point.

Run with:
    python -m pytest lineage_map/engine/tests/test_cli.py -v
"""

import json
import logging
import sys
from pathlib import Path

import pytest

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from lineage_map.engine.lineage_layout import main, parse_args, build_options, EXIT_OK, EXIT_ERROR, EXIT_INVALID


GRAPH = {
    "nodes": [
        {"id": "T1", "type": "table", "name": "Source"},
        {"id": "f1", "type": "field", "name": "amount", "tableId": "T1"},
        {"id": "f2", "type": "field", "name": "rate", "tableId": "T1"},
        {"id": "T2", "type": "table", "name": "Target"},
        {"id": "f3", "type": "field", "name": "total", "tableId": "T2", "transformation": "f1 * f9"},
    ],
    "edges": [
        {"id": "e1", "source": "f1", "target": "f3", "type": "field-field"},
        {"id": "e2", "source": "f2", "target": "f3", "type": "field-field"},
    ],
}


@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def graph_file(tmp_path):
    path = tmp_path / "sample.json"
    path.write_text(json.dumps(GRAPH), encoding="utf-8")
    return path


def test_layout_json(graph_file, tmp_path, capsys):
    out = tmp_path / "out"

    code = main(["--graph", str(graph_file), "--output", str(out), "--focus", "f3"])

    assert code == EXIT_OK
    data = json.loads((out / "sample_layout.json").read_text(encoding="utf-8"))
    assert data["inferred_edges"][0]["id"] == "T1->T2"
    assert data["related_fields"] == ["f1", "f2", "f3"]
    assert (out / "lineage_layout.log").exists()

    printed = capsys.readouterr().out
    assert "Tables: 2, levels: 2, inferred table edges: 1" in printed
    assert 'f3: Field "f9" is used in transformation but has no edge connecting to "f3"' in printed


def test_strict_exit_code(graph_file, tmp_path):
    assert main(["--graph", str(graph_file), "--output", str(tmp_path), "--strict"]) == EXIT_INVALID


def test_missing_input(tmp_path):
    assert main(["--graph", str(tmp_path / "nope.json"), "--output", str(tmp_path)]) == EXIT_ERROR


def test_bad_options_file(graph_file, tmp_path):
    options = tmp_path / "options.json"
    options.write_text(json.dumps({"tableWidth": -1}), encoding="utf-8")

    assert main(["--graph", str(graph_file), "--options", str(options), "--output", str(tmp_path)]) == EXIT_ERROR


def test_option_precedence(tmp_path):
    options = tmp_path / "options.json"
    options.write_text(json.dumps({"tableWidth": 200, "levelPadding": 80}), encoding="utf-8")

    args = parse_args(["--graph", "g.json", "--options", str(options), "--level-padding", "60"])

    merged = build_options(args)
    assert merged.table_width == 200
    assert merged.level_padding == 60
    assert merged.table_height == 40


def test_mappings_to_excel(tmp_path):
    mappings = tmp_path / "loans.csv"
    mappings.write_text(
        "source_table,source_field,dest_table,dest_field,rules\n"
        "stg_loan,amount,fct_loan,amount,stg_loan.amount\n",
        encoding="utf-8",
    )
    out = tmp_path / "out"

    code = main(["--mappings", str(mappings), "--expand", "fct_loan", "--format", "excel",
                 "--output", str(out), "--strict"])

    assert code == EXIT_OK
    assert len(list(out.glob("loans_layout_*.xlsx"))) == 1
    assert not (out / "loans_layout.json").exists()


def test_mappings_focus_matches_any_case(tmp_path, capsys):
    mappings = tmp_path / "loans.csv"
    mappings.write_text(
        "Source Table,Source Field,Target Table,Target Field\n"
        "stg_loan,amount,fct_loan,amount\n",
        encoding="utf-8",
    )
    out = tmp_path / "out"

    code = main(["--mappings", str(mappings), "--focus", "fct_loan.amount", "--output", str(out)])

    assert code == EXIT_OK
    data = json.loads((out / "loans_layout.json").read_text(encoding="utf-8"))
    assert data["focal_field_id"] == "FCT_LOAN.AMOUNT"
    assert data["related_fields"] == ["FCT_LOAN.AMOUNT", "STG_LOAN.AMOUNT"]
    assert "Related to FCT_LOAN.AMOUNT (both): FCT_LOAN.AMOUNT, STG_LOAN.AMOUNT" in capsys.readouterr().out


def test_input_is_required():
    with pytest.raises(SystemExit):
        parse_args([])
