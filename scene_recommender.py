"""
智能场景推荐
根据产品类别 + 名称/描述/卖点文本，为 6 个场景打分 (0-100)：

    最终分 = 50 (基础) + 类别推荐 priority*10 + 文本规则加分，截断到 0-100

推荐理由优先取类别推荐理由，其次文本规则理由，都没有时用场景描述。
按分数降序（稳定排序，同分保持场景定义顺序），第一名标记为首选。
"""

import logging

from categories import get_category_by_id, get_category_scene_recommendations
from scenes import SCENES, DEFAULT_SCENE_ID, get_scene_name

logger = logging.getLogger(__name__)

BASE_SCORE = 50
SUITABLE_SCORE = 60
WARNING_SCORE = 40


# ============================================================
# 文本规则（按顺序检查，各规则互相独立）
# ============================================================

FEATURE_RULES = (
    {
        "scene_id": "luxury",
        "keywords": ("luxury", "premium", "high-end", "高端", "奢华", "精品"),
        "score": 20,
        "reason": "产品定位高端，推荐奢华场景",
    },
    {
        "scene_id": "outdoor",
        "keywords": ("outdoor", "sport", "adventure", "户外", "运动", "探险", "waterproof", "防水"),
        "score": 25,
        "reason": "产品适合户外使用",
    },
    {
        "scene_id": "lifestyle",
        "keywords": ("home", "cozy", "comfort", "家居", "舒适", "居家", "daily", "日常"),
        "score": 20,
        "reason": "产品适合生活场景展示",
    },
    {
        "scene_id": "seasonal",
        "keywords": ("gift", "holiday", "celebration", "礼品", "节日", "送礼", "christmas", "圣诞"),
        "score": 25,
        "reason": "产品适合作为礼品展示",
    },
    {
        "scene_id": "minimalist",
        "keywords": ("minimal", "simple", "modern", "极简", "简约", "设计感", "elegant", "优雅"),
        "score": 20,
        "reason": "产品设计简约现代",
    },
    {
        "scene_id": "studio-white",
        "keywords": ("商品", "产品", "电商", "product", "e-commerce", "main image"),
        "score": 15,
        "reason": "适合标准电商主图展示",
    },
)


def _search_text(product):
    name = (product.get("name") or "").lower()
    description = (product.get("description") or "").lower()
    features = " ".join(f.lower() for f in (product.get("features") or []))
    return f"{name} {description} {features}"


def _contains_keywords(text, keywords):
    return any(kw.lower() in text for kw in keywords)


def _feature_contributions(product):
    """文本规则命中情况: {scene_id: (score, [reason, ...])}"""
    text = _search_text(product)
    contributions = {}
    for rule in FEATURE_RULES:
        if _contains_keywords(text, rule["keywords"]):
            score, reasons = contributions.get(rule["scene_id"], (0, []))
            contributions[rule["scene_id"]] = (score + rule["score"], reasons + [rule["reason"]])
    return contributions


# ============================================================
# 推荐
# ============================================================

def get_recommendations(product, limit=3):
    """
    返回前 limit 个场景推荐:
    [{sceneId, score, reason, isTopPick, categoryMatch}, ...]
    """
    category_recs = {}
    if product.get("category"):
        for rec in get_category_scene_recommendations(product["category"]):
            category_recs.setdefault(rec["scene_id"], rec)

    feature_recs = _feature_contributions(product)

    recommendations = []
    for scene_id, scene in SCENES.items():
        score = BASE_SCORE
        reasons = []

        cat_rec = category_recs.get(scene_id)
        if cat_rec:
            score += cat_rec["priority"] * 10
            reasons.append(cat_rec["reason"])

        if scene_id in feature_recs:
            feat_score, feat_reasons = feature_recs[scene_id]
            score += feat_score
            reasons.extend(feat_reasons)

        score = min(100, max(0, score))
        recommendations.append({
            "sceneId": scene_id,
            "score": score,
            "reason": reasons[0] if reasons else (scene["description"] or "适合展示产品"),
            "isTopPick": False,
            "categoryMatch": cat_rec is not None,
        })

    recommendations.sort(key=lambda r: r["score"], reverse=True)
    if recommendations:
        recommendations[0]["isTopPick"] = True

    top = recommendations[:limit]
    if top:
        logger.debug(f"场景推荐: {[(r['sceneId'], r['score']) for r in top]}")
    return top


def get_best_scene(product):
    recommendations = get_recommendations(product, 1)
    return recommendations[0]["sceneId"] if recommendations else DEFAULT_SCENE_ID


def is_scene_suitable(product, scene_id):
    for rec in get_recommendations(product, len(SCENES)):
        if rec["sceneId"] == scene_id:
            return rec["score"] >= SUITABLE_SCORE
    return False


def get_scene_warning(product, scene_id):
    """场景明显不匹配时返回提示文字，否则 None"""
    if not product.get("category"):
        return None

    category = get_category_by_id(product["category"])
    if not category:
        return None

    for rec in get_recommendations(product, len(SCENES)):
        if rec["sceneId"] == scene_id and rec["score"] < WARNING_SCORE:
            preferred = "、".join(get_scene_name(s) for s in category["suggested_scenes"])
            return (f"{get_scene_name(scene_id)}可能不是{category['name']}类产品的最佳选择，"
                    f"推荐尝试: {preferred}")
    return None
