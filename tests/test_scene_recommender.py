"""Tests for scene scoring and recommendations."""

from scenes import SCENES
from scene_recommender import (
    get_recommendations,
    get_best_scene,
    is_scene_suitable,
    get_scene_warning,
)


def make_product(name="", category="", description="", features=None):
    return {"name": name, "category": category, "description": description, "features": features or []}


class TestRecommendations:
    def test_exactly_one_top_pick_with_max_score(self):
        for limit in (1, 3, 6):
            recs = get_recommendations(make_product("Gift box", "food"), limit)
            top = [r for r in recs if r["isTopPick"]]
            assert len(top) == 1
            assert top[0]["score"] == max(r["score"] for r in recs)
            assert len(recs) == limit

    def test_category_scores(self):
        recs = get_recommendations(make_product(category="electronics"), 6)
        scores = {r["sceneId"]: r["score"] for r in recs}
        assert scores["studio-white"] == 100
        assert scores["minimalist"] == 90
        assert scores["lifestyle"] == 80
        assert scores["outdoor"] == 50

    def test_sorted_descending(self):
        recs = get_recommendations(make_product("luxury watch", "jewelry"), 6)
        scores = [r["score"] for r in recs]
        assert scores == sorted(scores, reverse=True)

    def test_category_match_flag(self):
        recs = get_recommendations(make_product(category="sports"), 6)
        flags = {r["sceneId"]: r["categoryMatch"] for r in recs}
        assert flags["outdoor"] is True
        assert flags["luxury"] is False

    def test_text_rule_adds_score_and_reason(self):
        recs = get_recommendations(make_product("Premium leather wallet"), 6)
        luxury = next(r for r in recs if r["sceneId"] == "luxury")
        assert luxury["score"] == 70
        assert luxury["reason"] == "产品定位高端，推荐奢华场景"
        assert luxury["isTopPick"] is True

    def test_chinese_keywords(self):
        recs = get_recommendations(make_product("户外防水背包"), 1)
        assert recs[0]["sceneId"] == "outdoor"
        assert recs[0]["score"] == 75

    def test_score_clamped_and_category_reason_wins(self):
        recs = get_recommendations(make_product(category="electronics", description="modern design"), 6)
        minimalist = next(r for r in recs if r["sceneId"] == "minimalist")
        assert minimalist["score"] == 100
        assert minimalist["reason"] == "突出现代设计感"

    def test_default_reason_is_scene_description(self):
        recs = get_recommendations(make_product(), 6)
        for rec in recs:
            assert rec["reason"] == SCENES[rec["sceneId"]]["description"]
            assert rec["score"] == 50

    def test_ties_keep_definition_order(self):
        recs = get_recommendations(make_product(), 6)
        assert [r["sceneId"] for r in recs] == list(SCENES.keys())


class TestHelpers:
    def test_best_scene_without_signal(self):
        assert get_best_scene(make_product()) == "studio-white"

    def test_best_scene_with_category(self):
        assert get_best_scene(make_product(category="beauty")) == "luxury"

    def test_is_scene_suitable(self):
        product = make_product(category="electronics")
        assert is_scene_suitable(product, "studio-white") is True
        assert is_scene_suitable(product, "outdoor") is False
        assert is_scene_suitable(product, "unknown-scene") is False

    def test_warning_requires_known_category(self):
        assert get_scene_warning(make_product(), "outdoor") is None
        assert get_scene_warning(make_product(category="unknown"), "outdoor") is None

    def test_no_warning_above_threshold(self):
        # 基础分 50，不会低于 40
        assert get_scene_warning(make_product(category="jewelry"), "outdoor") is None
