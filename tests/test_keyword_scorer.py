from kyrisk.triage.keywords import (
    alignment_bonus,
    alignment_keywords_from,
    ensure_causal,
    keyword_hits,
    make_scored,
    score_line,
)
from kyrisk.triage.normalizer import to_line
from kyrisk.triage.tables import DEFAULT_TABLES, TriageTables


def test_danger_keywords_add_weight():
    score, hits = score_line(to_line("Worker could fall from the slope edge"))
    assert score == 6.5
    assert hits == ["fall", "edge", "slope"]


def test_generic_phrase_and_short_line_are_penalized():
    score, hits = score_line(to_line("Be careful"))
    assert hits == []
    assert score == -3.0


def test_very_short_line_gets_both_penalties():
    score, _ = score_line(to_line("Fall"))
    assert score == 0.5


def test_repeated_keyword_counts_once():
    once, _ = score_line(to_line("Slope work near the slope"))
    twice, _ = score_line(to_line("Slope work near the slope and the slope"))
    assert once == twice


def test_alignment_bonus_for_countermeasures():
    line = to_line("Keep the backhoe clear of the slope")
    plain, _ = score_line(line)
    boosted, _ = score_line(line, alignment_keywords={"backhoe", "slope"})
    assert plain == 4.0
    assert boosted == 6.0


def test_alignment_bonus_is_capped():
    assert alignment_bonus("fall slope backhoe crane", {"fall", "slope", "backhoe", "crane"}) == 3.0
    assert alignment_bonus("fall slope", None) == 0.0


def test_alignment_keywords_from_hazards():
    kws = alignment_keywords_from(["Fall from slope", "Backhoe in the blind spot"])
    assert {"fall", "slope", "backhoe", "blind spot"} <= kws


def test_custom_tables_are_used():
    tables = TriageTables(danger_keywords={"asphalt": 5.0}, generic_penalties={})
    assert keyword_hits("Hot asphalt spill", tables) == ["asphalt"]
    assert keyword_hits("Hot asphalt spill", DEFAULT_TABLES) == []


def test_make_scored_records_origin():
    s = make_scored(to_line("- Crane suspended load swings"), origin="template")
    assert s.display == "Crane suspended load swings"
    assert s.origin == "template"
    assert "suspended load" in s.hits


def test_ensure_causal():
    assert ensure_causal("Slippery footing on the ramp") == (
        "Slippery footing on the ramp, which could lead to tripping or slipping"
    )
    assert ensure_causal("Trench wall") == "Trench wall, which could lead to collapse or falling"
    assert ensure_causal("Backhoe swing radius") == (
        "Backhoe swing radius, which could lead to contact or being caught"
    )
    assert ensure_causal("Loose cable.") == "Loose cable, which could lead to an accident"
    assert ensure_causal("Worker could fall") == "Worker could fall"
    assert ensure_causal("") == ""


def test_keywords_only_match_at_word_starts():
    score, hits = score_line(to_line("Check the attachment points"))
    assert hits == []
    assert score == 0.0
    assert keyword_hits("Train new workers on signals") == []
    assert keyword_hits("Heavy rainfall expected") == ["rain"]
    assert keyword_hits("There is a risk of falling") == ["fall"]


def test_alignment_bonus_needs_whole_word_starts():
    line = to_line("Retrain the crew on the reversing alarm")
    assert alignment_bonus(line.display, {"rain"}) == 0.0
    assert alignment_bonus(line.display, {"reversing"}) == 1.0
