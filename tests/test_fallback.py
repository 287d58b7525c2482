import pytest

from kyrisk.triage.keywords import make_scored
from kyrisk.triage.normalizer import to_line
from kyrisk.triage.select import (
    GENERIC_FALLBACK,
    FallbackTable,
    FallbackTemplate,
    backfill,
    load_fallback_table,
    select_top,
)
from kyrisk.validation.table_validator import validate_entries

TABLE = FallbackTable(
    templates=(
        FallbackTemplate(
            patterns=("slope", "shotcrete"),
            hazard="Loose rock above the slope could fall onto workers",
            countermeasure="Scale loose rock before starting",
        ),
        FallbackTemplate(
            patterns=("trench",),
            hazard="Trench walls could collapse onto workers",
            countermeasure="Install shoring before entry",
        ),
    ),
    version="test",
)


def test_backfill_tops_up_to_limit():
    out = backfill([], "Shotcrete on the slope", "hazard", 3, TABLE)
    assert [s.origin for s in out] == ["template", "fallback", "fallback"]
    assert out[0].display == "Loose rock above the slope could fall onto workers"
    assert out[1].display == out[2].display == GENERIC_FALLBACK.hazard


def test_backfill_is_idempotent():
    a = backfill([], "trench and slope work", "countermeasure", 5, TABLE)
    b = backfill([], "trench and slope work", "countermeasure", 5, TABLE)
    assert a == b
    assert [s.display for s in a[:2]] == ["Scale loose rock before starting", "Install shoring before entry"]


def test_backfill_leaves_full_lists_alone():
    full = [make_scored(to_line(f"Line number {i}")) for i in range(3)]
    assert backfill(full, "slope", "hazard", 3, TABLE) == full


def test_template_matching_existing_line_is_skipped():
    selected = [make_scored(to_line("Loose rock above the slope could fall onto workers"))]
    out = backfill(selected, "slope", "hazard", 2, TABLE)
    assert [s.origin for s in out] == ["ai", "fallback"]


def test_no_work_description_means_generic_only():
    out = backfill([], "", "hazard", 2, TABLE)
    assert all(s.origin == "fallback" for s in out)


def test_unknown_field_is_rejected():
    with pytest.raises(ValueError):
        backfill([], "slope", "third_party", 3, TABLE)


def test_select_top_is_stable():
    lines = [make_scored(to_line(t)) for t in ("Alpha line here", "Bravo line here", "Fall from slope")]
    out = select_top(lines, 2)
    assert [s.display for s in out] == ["Fall from slope", "Alpha line here"]


def test_packaged_templates_load():
    table = load_fallback_table()
    assert table.version == "2025.1"
    assert len(table.templates) == 9
    assert any(t.applies_to("mortar spraying on the slope face") for t in table.templates)


def test_invalid_template_entries_are_skipped(tmp_path):
    p = tmp_path / "templates.yaml"
    p.write_text(
        "version: t1\n"
        "templates:\n"
        "  - patterns: [pipe]\n"
        "    hazard: Pipe could roll onto a worker\n"
        "    countermeasure: Chock pipes on the stockpile\n"
        "  - patterns: [road]\n"
        "    hazard: ''\n"
        "generic:\n"
        "  hazard: Unexpected hazards could hurt someone\n"
        "  countermeasure: Stop and reassess\n",
        encoding="utf-8",
    )
    table = load_fallback_table(str(p))
    assert table.version == "t1"
    assert len(table.templates) == 1
    assert table.templates[0].patterns == ("pipe",)
    assert table.generic.countermeasure == "Stop and reassess"


def test_missing_template_file_gives_generic_only(tmp_path):
    table = load_fallback_table(str(tmp_path / "nope.yaml"))
    assert table.templates == ()
    assert table.generic == GENERIC_FALLBACK


def test_validate_entries_reports_index():
    problems = validate_entries([
        {"patterns": ["a"], "hazard": "h", "countermeasure": "c"},
        {"patterns": "a", "hazard": ""},
    ])
    assert [p["index"] for p in problems] == [1]
    assert len(problems[0]["errors"]) >= 2
