"""
语义引擎
固定的中文关键词词典 (材质 / 风格 / 颜色 / 用途) → 相关英文词、视觉提示、适合场景。
在产品名称 + 描述 + 卖点中查找关键词，计算置信度，用于：
- 推荐场景
- 生成语义增强的提示片段
- 评估产品与场景的匹配度
"""

import re
import logging
from types import MappingProxyType

from categories import get_category_by_keyword
from scenes import SCENES, SCENE_IDS, DEFAULT_SCENE_ID, get_scene_name

logger = logging.getLogger(__name__)

MAX_MATCHES_FOR_ENHANCEMENT = 5
MAX_CATEGORY_ENHANCEMENTS = 3


# ============================================================
# 语义词典
# ============================================================

def _entry(category, related_terms, visual_cues, scene_hints):
    return MappingProxyType({
        "category": category,
        "related_terms": tuple(related_terms),
        "visual_cues": tuple(visual_cues),
        "scene_hints": tuple(scene_hints),
    })


SEMANTIC_MAPPINGS = MappingProxyType({
    # 材质
    "金属": _entry("material", ["metallic", "steel", "aluminum", "chrome"],
                  ["reflective surface", "metallic sheen", "polished finish"],
                  ["minimalist", "studio-white"]),
    "皮革": _entry("material", ["leather", "genuine leather", "faux leather"],
                  ["leather texture", "premium material", "natural grain"],
                  ["luxury", "lifestyle"]),
    "木质": _entry("material", ["wooden", "timber", "oak", "walnut"],
                  ["wood grain", "natural wood", "warm wood tones"],
                  ["lifestyle", "minimalist"]),
    "玻璃": _entry("material", ["glass", "crystal", "transparent"],
                  ["transparent material", "glass reflection", "crystal clear"],
                  ["minimalist", "luxury"]),
    "陶瓷": _entry("material", ["ceramic", "porcelain", "pottery"],
                  ["ceramic finish", "smooth glaze", "handcrafted feel"],
                  ["lifestyle", "studio-white"]),
    "布料": _entry("material", ["fabric", "textile", "cloth", "cotton"],
                  ["soft fabric texture", "textile detail", "natural draping"],
                  ["lifestyle", "studio-white"]),

    # 风格
    "现代": _entry("style", ["modern", "contemporary", "sleek"],
                  ["modern design", "clean lines", "contemporary aesthetic"],
                  ["minimalist", "studio-white"]),
    "复古": _entry("style", ["vintage", "retro", "classic", "antique"],
                  ["vintage style", "retro aesthetic", "classic elegance"],
                  ["lifestyle", "luxury"]),
    "简约": _entry("style", ["minimal", "simple", "clean"],
                  ["minimalist design", "simple elegance", "uncluttered"],
                  ["minimalist", "studio-white"]),
    "奢华": _entry("style", ["luxury", "premium", "high-end", "exclusive"],
                  ["luxury aesthetic", "premium quality", "opulent feel"],
                  ["luxury"]),

    # 颜色
    "黑色": _entry("color", ["black", "dark", "ebony"],
                  ["deep black", "dark tone", "noir aesthetic"],
                  ["luxury", "minimalist"]),
    "白色": _entry("color", ["white", "pure", "ivory"],
                  ["pure white", "clean white", "bright and clean"],
                  ["studio-white", "minimalist"]),
    "金色": _entry("color", ["gold", "golden", "champagne"],
                  ["golden tone", "luxurious gold", "warm gold shimmer"],
                  ["luxury", "seasonal"]),

    # 用途
    "户外": _entry("usage", ["outdoor", "adventure", "camping", "hiking"],
                  ["outdoor setting", "adventure lifestyle", "nature backdrop"],
                  ["outdoor"]),
    "办公": _entry("usage", ["office", "work", "professional", "business"],
                  ["office environment", "professional setting", "workspace"],
                  ["minimalist", "lifestyle"]),
    "家居": _entry("usage", ["home", "living", "interior", "domestic"],
                  ["home setting", "living space", "cozy interior"],
                  ["lifestyle"]),
    "运动": _entry("usage", ["sports", "athletic", "fitness", "active"],
                  ["athletic style", "dynamic energy", "active lifestyle"],
                  ["outdoor", "lifestyle"]),
})


# ============================================================
# 分析
# ============================================================

def _search_text(product):
    features = " ".join(product.get("features") or [])
    return f"{product.get('name') or ''} {product.get('description') or ''} {features}".lower()


def calculate_confidence(text, keyword):
    """min(1, 出现次数*10 / 词数 + 0.3)"""
    occurrences = len(re.findall(re.escape(keyword), text, flags=re.IGNORECASE))
    word_count = len(text.split()) or 1
    return min(1.0, occurrences * 10 / word_count + 0.3)


def analyze_product(product):
    """返回命中的关键词 [{keyword, category, suggestions, confidence}]，按置信度降序"""
    text = _search_text(product)
    matches = []
    for keyword, mapping in SEMANTIC_MAPPINGS.items():
        keyword_lower = keyword.lower()
        if keyword_lower in text:
            matches.append({
                "keyword": keyword,
                "category": mapping["category"],
                "suggestions": list(mapping["visual_cues"]),
                "confidence": calculate_confidence(text, keyword_lower),
            })
    matches.sort(key=lambda m: m["confidence"], reverse=True)
    return matches


def recommend_scene(product):
    matches = analyze_product(product)
    scene_scores = {scene_id: 0.0 for scene_id in SCENE_IDS}

    for match in matches:
        for scene_id in SEMANTIC_MAPPINGS[match["keyword"]]["scene_hints"]:
            scene_scores[scene_id] += match["confidence"]

    category = get_category_by_keyword(product.get("category") or "")
    if category:
        for scene_id in category["suggested_scenes"]:
            if scene_id in scene_scores:
                scene_scores[scene_id] += 0.5

    best_scene, max_score = DEFAULT_SCENE_ID, 0.0
    for scene_id, score in scene_scores.items():
        if score > max_score:
            best_scene, max_score = scene_id, score

    logger.debug(f"语义场景推荐: {best_scene} ({max_score:.2f})")
    return best_scene


def generate_semantic_enhancements(product):
    """前 5 个命中关键词的视觉提示 + 类别前 3 个增强词，去重保序"""
    enhancements = []
    for match in analyze_product(product)[:MAX_MATCHES_FOR_ENHANCEMENT]:
        enhancements.extend(match["suggestions"])

    category = get_category_by_keyword(product.get("category") or "")
    if category:
        enhancements.extend(category["prompt_enhancements"][:MAX_CATEGORY_ENHANCEMENTS])

    return list(dict.fromkeys(enhancements))


def get_scene_prompt_hints(scene_id):
    scene = SCENES.get(scene_id)
    return list(scene["prompt_hints"]) if scene else []


def match_product_to_scene(product, scene_id):
    """
    产品与场景的匹配度
    基础 0.5，关键词场景命中每个 +0.1，类别推荐场景 +0.2，上限 1
    """
    scene_name = get_scene_name(scene_id)
    match_score = 0.5
    suggestions = []
    warnings = []

    for match in analyze_product(product):
        if scene_id in SEMANTIC_MAPPINGS[match["keyword"]]["scene_hints"]:
            match_score += 0.1
            suggestions.append(f"产品的{match['keyword']}特性与{scene_name}场景很搭配")

    category = get_category_by_keyword(product.get("category") or "")
    if category:
        if scene_id in category["suggested_scenes"]:
            match_score += 0.2
        else:
            preferred = "、".join(get_scene_name(s) for s in category["suggested_scenes"])
            warnings.append(f"{category['name']}类产品通常更适合{preferred}场景")

    return {
        "matchScore": min(1.0, match_score),
        "suggestions": suggestions,
        "warnings": warnings,
    }


def get_related_terms(keyword):
    mapping = SEMANTIC_MAPPINGS.get(keyword)
    return list(mapping["related_terms"]) if mapping else []


def analyze_keywords(keywords):
    """批量查词典，命中的关键词置信度固定为 1.0"""
    results = {}
    for keyword in keywords:
        mapping = SEMANTIC_MAPPINGS.get(keyword)
        if mapping:
            results[keyword] = {
                "keyword": keyword,
                "category": mapping["category"],
                "suggestions": list(mapping["visual_cues"]),
                "confidence": 1.0,
            }
    return results
