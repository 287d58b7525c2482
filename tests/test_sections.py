from kyrisk.triage.sections import SupplementSections, split_sections


def test_split_sectioned_supplement():
    text = (
        "Mortar spraying on slope\n"
        "[AI supplement | Hazards]\n"
        "- Fall from slope\n"
        "- Rockfall from the shoulder\n"
        "Countermeasures:\n"
        "- Use harness\n"
        "Third-party measures: Post a flagger\n"
    )
    s = split_sections(text)
    assert s.work == "Mortar spraying on slope"
    assert s.hazards == "- Fall from slope\n- Rockfall from the shoulder"
    assert s.countermeasures == "- Use harness"
    assert s.third_party == "Post a flagger"


def test_full_width_brackets_and_colons():
    s = split_sections("【Hazards】\nBackhoe swing\nCountermeasures：Keep clear")
    assert s.hazards == "Backhoe swing"
    assert s.countermeasures == "Keep clear"


def test_text_without_headers_is_work():
    s = split_sections("Just a note: nothing else")
    assert s.work == "Just a note: nothing else"
    assert s.hazards == ""


def test_empty():
    assert split_sections(None) == SupplementSections()
    assert split_sections("   ") == SupplementSections()


def test_bullet_with_colon_stays_in_its_section():
    s = split_sections("[Hazards]\n- Pedestrians: may walk past the gate\n- Fall from slope")
    assert s.hazards == "- Pedestrians: may walk past the gate\n- Fall from slope"
    assert s.third_party == ""
