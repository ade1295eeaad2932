"""
产品类别注册表
- 9 个产品类别：关键词、推荐场景、通用提示增强词、摄影设置
- 按优先级的场景推荐 (scene, priority 1-5, reason, modifiers)
- 常见材质词 / 应避免的词

查找全部降级为 None / 空列表，不抛异常。
"""

import logging

logger = logging.getLogger(__name__)


# ============================================================
# 类别定义
# ============================================================

CATEGORIES = (
    {
        "id": "electronics",
        "name": "数码电子",
        "icon": "📱",
        "keywords": ("手机", "电脑", "耳机", "相机", "平板", "智能手表", "充电器"),
        "suggested_scenes": ("studio-white", "minimalist", "lifestyle"),
        "prompt_enhancements": (
            "sleek metallic surface",
            "reflective screen",
            "modern technology aesthetic",
            "precise edge lighting",
            "clean digital product shot",
        ),
        "photography_settings": {
            "preferred_lighting": "studio",
            "preferred_angle": "elevated",
            "depth_of_field": "medium",
            "background_style": "gradient",
        },
        "scene_recommendations": (
            {"scene_id": "studio-white", "priority": 5, "reason": "展示产品细节和工艺",
             "modifiers": ("product focus", "tech aesthetic")},
            {"scene_id": "minimalist", "priority": 4, "reason": "突出现代设计感",
             "modifiers": ("clean lines", "geometric")},
            {"scene_id": "lifestyle", "priority": 3, "reason": "展示使用场景",
             "modifiers": ("desk setup", "modern workspace")},
        ),
        "material_keywords": ("aluminum", "glass", "plastic", "metal", "matte", "glossy"),
        "avoid_keywords": ("vintage", "rustic", "organic", "handmade"),
    },
    {
        "id": "fashion",
        "name": "服装服饰",
        "icon": "👔",
        "keywords": ("衣服", "裤子", "裙子", "外套", "T恤", "帽子", "围巾"),
        "suggested_scenes": ("lifestyle", "studio-white", "minimalist"),
        "prompt_enhancements": (
            "fabric texture detail",
            "natural draping",
            "fashion photography style",
            "soft flattering light",
            "stylish presentation",
        ),
        "photography_settings": {
            "preferred_lighting": "soft",
            "preferred_angle": "front",
            "depth_of_field": "shallow",
            "background_style": "contextual",
        },
        "scene_recommendations": (
            {"scene_id": "lifestyle", "priority": 5, "reason": "展示穿搭效果",
             "modifiers": ("fashion model", "styled outfit")},
            {"scene_id": "studio-white", "priority": 4, "reason": "清晰展示款式",
             "modifiers": ("flat lay", "hanging display")},
            {"scene_id": "minimalist", "priority": 3, "reason": "突出设计细节",
             "modifiers": ("fabric focus", "textile detail")},
        ),
        "material_keywords": ("cotton", "silk", "wool", "linen", "leather", "denim", "polyester"),
        "avoid_keywords": ("tech", "digital", "electronic", "mechanical"),
    },
    {
        "id": "beauty",
        "name": "美妆护肤",
        "icon": "💄",
        "keywords": ("口红", "护肤品", "化妆品", "香水", "面膜", "精华"),
        "suggested_scenes": ("luxury", "minimalist", "studio-white"),
        "prompt_enhancements": (
            "glossy product surface",
            "elegant bottle design",
            "beauty product lighting",
            "luxurious texture",
            "premium cosmetic photography",
        ),
        "photography_settings": {
            "preferred_lighting": "soft",
            "preferred_angle": "elevated",
            "depth_of_field": "shallow",
            "background_style": "gradient",
        },
        "scene_recommendations": (
            {"scene_id": "luxury", "priority": 5, "reason": "突出高端品质",
             "modifiers": ("premium packaging", "elegant")},
            {"scene_id": "minimalist", "priority": 4, "reason": "简约高级感",
             "modifiers": ("clean beauty", "skincare")},
            {"scene_id": "studio-white", "priority": 3, "reason": "产品细节展示",
             "modifiers": ("bottle detail", "texture")},
        ),
        "material_keywords": ("glass", "ceramic", "metal cap", "frosted", "transparent", "rose gold"),
        "avoid_keywords": ("industrial", "rugged", "outdoor", "sporty"),
    },
    {
        "id": "home",
        "name": "家居家装",
        "icon": "🏡",
        "keywords": ("家具", "灯具", "装饰", "收纳", "床品", "厨具"),
        "suggested_scenes": ("lifestyle", "minimalist", "studio-white"),
        "prompt_enhancements": (
            "cozy home atmosphere",
            "interior design context",
            "warm ambient lighting",
            "comfortable living space",
            "home lifestyle photography",
        ),
        "photography_settings": {
            "preferred_lighting": "natural",
            "preferred_angle": "elevated",
            "depth_of_field": "medium",
            "background_style": "contextual",
        },
        "scene_recommendations": (
            {"scene_id": "lifestyle", "priority": 5, "reason": "展示家居场景",
             "modifiers": ("interior design", "room setting")},
            {"scene_id": "minimalist", "priority": 4, "reason": "突出产品设计",
             "modifiers": ("Scandinavian", "modern home")},
            {"scene_id": "studio-white", "priority": 3, "reason": "产品独立展示",
             "modifiers": ("product focus", "clean")},
        ),
        "material_keywords": ("wood", "fabric", "ceramic", "glass", "metal", "rattan", "marble"),
        "avoid_keywords": ("industrial", "tech", "digital", "sporty"),
    },
    {
        "id": "food",
        "name": "食品饮料",
        "icon": "🍔",
        "keywords": ("零食", "饮料", "茶叶", "咖啡", "保健品", "调味品"),
        "suggested_scenes": ("lifestyle", "studio-white", "seasonal"),
        "prompt_enhancements": (
            "appetizing presentation",
            "food photography lighting",
            "fresh and delicious look",
            "culinary styling",
            "gourmet aesthetic",
        ),
        "photography_settings": {
            "preferred_lighting": "natural",
            "preferred_angle": "top-down",
            "depth_of_field": "shallow",
            "background_style": "contextual",
        },
        "scene_recommendations": (
            {"scene_id": "lifestyle", "priority": 5, "reason": "展示美食场景",
             "modifiers": ("food styling", "appetizing")},
            {"scene_id": "studio-white", "priority": 4, "reason": "包装展示",
             "modifiers": ("product packaging", "clean")},
            {"scene_id": "seasonal", "priority": 3, "reason": "节日礼品展示",
             "modifiers": ("gift set", "festive")},
        ),
        "material_keywords": ("packaging", "glass bottle", "tin", "paper box", "fresh", "organic"),
        "avoid_keywords": ("tech", "digital", "industrial", "mechanical"),
    },
    {
        "id": "sports",
        "name": "运动户外",
        "icon": "⚽",
        "keywords": ("运动鞋", "运动服", "健身器材", "户外装备", "球类"),
        "suggested_scenes": ("outdoor", "lifestyle", "studio-white"),
        "prompt_enhancements": (
            "dynamic action feel",
            "athletic lifestyle",
            "outdoor adventure context",
            "energetic composition",
            "sports photography style",
        ),
        "photography_settings": {
            "preferred_lighting": "natural",
            "preferred_angle": "dynamic",
            "depth_of_field": "medium",
            "background_style": "contextual",
        },
        "scene_recommendations": (
            {"scene_id": "outdoor", "priority": 5, "reason": "展示户外使用",
             "modifiers": ("action shot", "adventure")},
            {"scene_id": "lifestyle", "priority": 4, "reason": "运动生活方式",
             "modifiers": ("athletic", "gym setting")},
            {"scene_id": "studio-white", "priority": 3, "reason": "产品细节展示",
             "modifiers": ("product focus", "technical detail")},
        ),
        "material_keywords": ("mesh", "rubber", "synthetic", "breathable", "durable", "waterproof"),
        "avoid_keywords": ("formal", "elegant", "luxury", "delicate"),
    },
    {
        "id": "jewelry",
        "name": "珠宝首饰",
        "icon": "💍",
        "keywords": ("戒指", "项链", "手链", "耳环", "手表", "眼镜"),
        "suggested_scenes": ("luxury", "minimalist", "studio-white"),
        "prompt_enhancements": (
            "sparkling gemstone",
            "precious metal reflection",
            "jewelry macro photography",
            "elegant luxury lighting",
            "high-end accessory shot",
        ),
        "photography_settings": {
            "preferred_lighting": "dramatic",
            "preferred_angle": "elevated",
            "depth_of_field": "shallow",
            "background_style": "reflective",
        },
        "scene_recommendations": (
            {"scene_id": "luxury", "priority": 5, "reason": "突出奢华品质",
             "modifiers": ("sparkle", "precious")},
            {"scene_id": "minimalist", "priority": 4, "reason": "优雅简约展示",
             "modifiers": ("elegant display", "refined")},
            {"scene_id": "studio-white", "priority": 3, "reason": "清晰细节展示",
             "modifiers": ("macro detail", "craftsmanship")},
        ),
        "material_keywords": ("gold", "silver", "platinum", "diamond", "gemstone", "pearl", "crystal"),
        "avoid_keywords": ("casual", "sporty", "outdoor", "rugged"),
    },
    {
        "id": "baby",
        "name": "母婴用品",
        "icon": "👶",
        "keywords": ("婴儿用品", "玩具", "童装", "奶瓶", "纸尿裤"),
        "suggested_scenes": ("lifestyle", "studio-white", "minimalist"),
        "prompt_enhancements": (
            "soft pastel colors",
            "gentle nurturing atmosphere",
            "safe and comforting",
            "family-friendly styling",
            "warm parenting context",
        ),
        "photography_settings": {
            "preferred_lighting": "soft",
            "preferred_angle": "elevated",
            "depth_of_field": "medium",
            "background_style": "contextual",
        },
        "scene_recommendations": (
            {"scene_id": "lifestyle", "priority": 5, "reason": "温馨家庭场景",
             "modifiers": ("nursery", "family")},
            {"scene_id": "studio-white", "priority": 4, "reason": "产品安全展示",
             "modifiers": ("safe", "clean")},
            {"scene_id": "minimalist", "priority": 3, "reason": "简约温柔风格",
             "modifiers": ("pastel", "gentle")},
        ),
        "material_keywords": ("soft", "cotton", "safe plastic", "silicone", "organic", "hypoallergenic"),
        "avoid_keywords": ("sharp", "industrial", "dark", "dramatic", "luxury"),
    },
    {
        "id": "office",
        "name": "办公文具",
        "icon": "📎",
        "keywords": ("文具", "办公用品", "笔记本", "打印机", "收纳盒"),
        "suggested_scenes": ("minimalist", "studio-white", "lifestyle"),
        "prompt_enhancements": (
            "organized workspace",
            "professional office setting",
            "clean desk aesthetic",
            "productive atmosphere",
            "modern office photography",
        ),
        "photography_settings": {
            "preferred_lighting": "natural",
            "preferred_angle": "elevated",
            "depth_of_field": "medium",
            "background_style": "contextual",
        },
        "scene_recommendations": (
            {"scene_id": "minimalist", "priority": 5, "reason": "专业简约风格",
             "modifiers": ("desk setup", "organized")},
            {"scene_id": "studio-white", "priority": 4, "reason": "产品清晰展示",
             "modifiers": ("product focus", "clean")},
            {"scene_id": "lifestyle", "priority": 3, "reason": "办公场景展示",
             "modifiers": ("workspace", "productivity")},
        ),
        "material_keywords": ("paper", "metal", "plastic", "leather", "wood", "cork"),
        "avoid_keywords": ("outdoor", "sporty", "casual", "party"),
    },
)

CATEGORY_IDS = tuple(c["id"] for c in CATEGORIES)


# ============================================================
# 查找
# ============================================================

def get_category_by_id(category_id):
    for category in CATEGORIES:
        if category["id"] == category_id:
            return category
    return None


def get_category_by_keyword(text):
    """
    按文本解析类别，顺序有意义：
    1. 与类别 id 精确匹配（忽略大小写，AI 分析返回的 mappedCategory 走这里）
    2. 类别名称包含该文本
    3. 与关键词列表双向子串匹配
    """
    if not text:
        return None

    lower = text.lower()

    for category in CATEGORIES:
        if category["id"].lower() == lower:
            return category

    for category in CATEGORIES:
        if lower in category["name"].lower():
            return category

    for category in CATEGORIES:
        for kw in category["keywords"]:
            kw_lower = kw.lower()
            if lower in kw_lower or kw_lower in lower:
                return category

    return None


def get_all_keywords():
    return [kw for category in CATEGORIES for kw in category["keywords"]]


def get_category_photography_settings(category_id):
    category = get_category_by_id(category_id)
    return category["photography_settings"] if category else None


def get_category_scene_recommendations(category_id):
    """类别的场景推荐，按 priority 降序（稳定排序，同优先级保持定义顺序）"""
    category = get_category_by_id(category_id)
    if not category:
        return []
    return sorted(category["scene_recommendations"], key=lambda r: r["priority"], reverse=True)


def get_category_scene_modifiers(category_id, scene_id):
    """特定场景的类别修饰词，没有对应推荐时返回空列表"""
    category = get_category_by_id(category_id)
    if not category:
        return []
    for rec in category["scene_recommendations"]:
        if rec["scene_id"] == scene_id:
            return list(rec.get("modifiers") or ())
    return []


def should_avoid_keyword(category_id, keyword):
    """keyword 中包含类别任一避免词时返回 True（忽略大小写）"""
    category = get_category_by_id(category_id)
    if not category or not keyword:
        return False
    lower = keyword.lower()
    return any(avoid.lower() in lower for avoid in category["avoid_keywords"])


def get_category_material_keywords(category_id):
    category = get_category_by_id(category_id)
    return list(category["material_keywords"]) if category else []


def category_to_dict(category):
    """转为可 JSON 序列化的普通字典"""
    return {
        "id": category["id"],
        "name": category["name"],
        "icon": category["icon"],
        "keywords": list(category["keywords"]),
        "suggestedScenes": list(category["suggested_scenes"]),
        "promptEnhancements": list(category["prompt_enhancements"]),
        "photographySettings": dict(category["photography_settings"]),
        "sceneRecommendations": [
            {
                "sceneId": r["scene_id"],
                "priority": r["priority"],
                "reason": r["reason"],
                "modifiers": list(r.get("modifiers") or ()),
            }
            for r in category["scene_recommendations"]
        ],
        "materialKeywords": list(category["material_keywords"]),
        "avoidKeywords": list(category["avoid_keywords"]),
    }
