# scripts/score_sheet.py
# Score a KY sheet from the command line.
#
#   python scripts/score_sheet.py sheet.yaml
#   python scripts/score_sheet.py sheet.json --limit 3 --review
#
# Sheet layout (YAML or JSON):
#   context:    {third_party_level, worker_count, weather_applied, photo_score, work_detail}
#   candidates: [{hazard, countermeasure, P, S, category}, ...]
#   ai_text:    optional sectioned AI reply, split into the ai_* fields left empty
#   ai_hazards / human_hazards / ai_countermeasures / human_countermeasures / ai_third_party: text
#   review:     optional review-sheet body (human / ai / weather / photos)
import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pandas as pd
import yaml

from kyrisk.config import get_config, load_coefficient_table, load_triage_tables
from kyrisk.risk.pipeline import score_hazards
from kyrisk.risk.report import lines_frame, scores_frame
from kyrisk.risk.review import review_risk
from kyrisk.triage.pipeline import SupplementRequest, generate_supplement
from kyrisk.triage.select import load_fallback_table


def read_sheet(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise SystemExit(f"{path}: expected a mapping at the top level")
    return data


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Score hazards and triage AI supplement text for one KY sheet.")
    ap.add_argument("sheet", type=Path, help="YAML or JSON sheet")
    ap.add_argument("--limit", type=int, default=None, help="lines kept per list (default from config)")
    ap.add_argument("--review", action="store_true", help="also print the human vs AI review score")
    args = ap.parse_args(argv)

    cfg = get_config()
    coeff = load_coefficient_table(cfg)
    tables = load_triage_tables(cfg)
    limit = args.limit if args.limit is not None else cfg["triage_limit"]

    sheet = read_sheet(args.sheet)
    context = sheet.get("context") or {}

    pd.set_option("display.width", 200)
    pd.set_option("display.max_colwidth", 60)

    scored = score_hazards(sheet.get("candidates") or [], context, coeff)
    print("== Hazard scores ==")
    print(scores_frame(scored).to_string(index=False) if scored else "(no candidates)")

    req = SupplementRequest(
        work_description=str(context.get("work_detail") or context.get("work_description") or ""),
        ai_hazards=sheet.get("ai_hazards") or "",
        ai_countermeasures=sheet.get("ai_countermeasures") or "",
        ai_third_party=sheet.get("ai_third_party") or "",
        human_hazards=sheet.get("human_hazards") or "",
        human_countermeasures=sheet.get("human_countermeasures") or "",
        third_party_level=str(context.get("third_party_level") or ""),
        limit=limit,
    )
    if sheet.get("ai_text"):
        req = req.with_ai_text(sheet["ai_text"])
    result = generate_supplement(req, load_fallback_table(cfg["templates_path"]), tables)
    for title, lines in (
        ("AI hazards", result.hazards),
        ("AI countermeasures", result.countermeasures),
        ("Third-party measures", result.third_party),
    ):
        print(f"\n== {title} ==")
        print(lines_frame(lines).to_string(index=False) if lines else "(none)")

    if args.review:
        rv = review_risk(sheet.get("review") or {})
        print("\n== Review score ==")
        print(f"human={rv.total_human} ai={rv.total_ai} delta={rv.delta}")
        top = pd.DataFrame([i.model_dump() for i in rv.ai_top5])
        print(top.to_string(index=False))

    return 0


if __name__ == "__main__":
    sys.exit(main())
