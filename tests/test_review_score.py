from kyrisk.risk.review import (
    PhotoSet,
    normalize_to_100,
    review_risk,
    score_photos,
    score_third_party,
    score_workers,
)


def test_empty_body_scores_without_error():
    r = review_risk({})
    assert r.total_human == 39
    assert r.total_ai == 36
    assert r.delta == -3
    assert r.breakdown["weather"].score == 0
    assert r.meta["raw_human"] == 55.0


def test_ai_top5_sorted_with_stable_ties():
    r = review_risk({})
    assert [i.key for i in r.ai_top5] == ["text_quality_ai", "photo", "third_party", "workers", "weather"]


def test_weather_points():
    body = {
        "weather_applied": {
            "precipitation_mm": 7,
            "wind_speed_ms": 10,
            "temperature_c": 31,
            "weather_text": "Thunderstorm",
        }
    }
    assert review_risk(body).breakdown["weather"].score == 68


def test_worker_and_third_party_points():
    assert score_workers(None).score == 6
    assert score_workers("0").score == 6
    assert score_workers(4).score == 6
    assert score_workers(8).score == 10
    assert score_workers(12).score == 15
    assert score_workers(40).score == 20
    assert score_third_party("many").score == 22
    assert score_third_party("few").score == 10
    assert score_third_party("?").score == 6


def test_photo_points():
    changed = PhotoSet(slope_now_url="a.jpg", slope_prev_url="b.jpg")
    assert score_photos(changed).score == 22
    same = PhotoSet(slope_now_url="a.jpg", slope_prev_url="a.jpg", path_now_url="c.jpg")
    assert score_photos(same).score == 16


def test_human_keywords_raise_human_total():
    bare = review_risk({"human": {"hazards": "nothing much"}})
    rich = review_risk({"human": {"hazards": "Backhoe near the slope edge, trench could collapse"}})
    assert rich.total_human > bare.total_human
    assert "machinery/lifting" in rich.breakdown["keyword"].reasons[0]


def test_delta_is_bounded():
    body = {
        "human": {"work_detail": "excavation", "third_party_level": "many", "worker_count": 30},
        "ai": {"ai_hazards": "Fall could occur\n" * 20},
        "weather": {"precipitation_mm": 20, "wind_speed_ms": 20, "weather_text": "storm"},
    }
    r = review_risk(body)
    assert 0 <= r.total_human <= 100
    assert 0 <= r.total_ai <= 100
    assert -100 <= r.delta <= 100


def test_malformed_sections_are_ignored():
    r = review_risk({"human": "garbage", "weather": "sunny", "photos": None})
    assert r.breakdown["weather"].reasons == ["Weather: no data (not evaluated)"]
    assert review_risk(None).total_human == r.total_human


def test_normalize_to_100():
    assert normalize_to_100(0, 100) == 0
    assert normalize_to_100(50, 0) == 0
    assert normalize_to_100(300, 100) == 100
    assert normalize_to_100(70, 140) == 50
