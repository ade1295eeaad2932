"""
侧通道提示词
模特 / 融合 / 一致性 / AIDA 阶段的配置 → 英文短语串，供 PromptBuilder 原样接入。
配置未启用时返回空字符串，对应层也就不会出现在最终提示词里。
"""

import logging

logger = logging.getLogger(__name__)


# ============================================================
# 模特
# ============================================================

DEFAULT_MODEL_CONFIG = {
    "enabled": False,
    "display_type": "none",
    "gender": "unspecified",
    "age_group": "young",
    "skin_tone": "unspecified",
    "hair_style": "unspecified",
    "body_type": "unspecified",
    "makeup": "unspecified",
    "pose": "standing",
    "expression": "smile",
    "clothing_style": "auto",
    "partial_focus": None,
}

MODEL_SCALE_PHRASES = (
    "realistic proportions",
    "accurate product scale relative to human body",
    "natural perspective",
)

AGE_PHRASES = {"young": "young adult", "middle": "middle-aged", "mature": "mature elegant"}
SKIN_PHRASES = {"asian": "Asian", "fair": "fair skin", "tan": "tan skin", "dark": "dark skin"}
BODY_PHRASES = {
    "slim": "slim figure",
    "average": "average build",
    "athletic": "athletic build",
    "curvy": "curvy figure",
}
MAKEUP_PHRASES = {
    "natural": "natural makeup",
    "light": "light makeup",
    "glamorous": "glamorous makeup",
}
EXPRESSION_PHRASES = {
    "smile": "warm smile",
    "natural": "natural expression",
    "cool": "cool confident look",
    "friendly": "friendly approachable look",
    "focused": "focused expression",
}
POSE_PHRASES = {
    "standing": "standing pose",
    "sitting": "seated pose",
    "walking": "walking pose",
    "side": "side profile",
    "closeup": "close-up shot",
}
CLOTHING_PHRASES = {
    "casual": "casual outfit",
    "business": "business attire",
    "sporty": "sporty athletic wear",
    "fashion": "fashionable trendy outfit",
    "elegant": "elegant sophisticated attire",
}

# 产品类别 → 推荐模特配置
MODEL_RECOMMENDATIONS = {
    "electronics": {
        "display_type": "holding",
        "config": {"gender": "unspecified", "age_group": "young", "expression": "smile",
                   "clothing_style": "fashion", "pose": "standing"},
        "reason": "数码产品适合手持展示，突出产品尺寸和易用性",
    },
    "fashion": {
        "display_type": "wearing",
        "config": {"gender": "unspecified", "age_group": "young", "expression": "natural",
                   "clothing_style": "auto", "pose": "standing", "body_type": "slim"},
        "reason": "服装产品需要穿戴展示，体现上身效果",
    },
    "beauty": {
        "display_type": "partial",
        "config": {"gender": "female", "age_group": "young", "makeup": "glamorous",
                   "expression": "natural", "partial_focus": "face"},
        "reason": "美妆产品适合面部特写，展示使用效果",
    },
    "home": {
        "display_type": "using",
        "config": {"gender": "unspecified", "age_group": "young", "expression": "friendly",
                   "clothing_style": "casual", "pose": "sitting"},
        "reason": "家居产品适合生活场景展示，营造温馨氛围",
    },
    "food": {
        "display_type": "holding",
        "config": {"gender": "unspecified", "age_group": "young", "expression": "smile",
                   "clothing_style": "casual", "pose": "standing"},
        "reason": "食品适合手持展示，增加食欲感",
    },
    "sports": {
        "display_type": "wearing",
        "config": {"gender": "unspecified", "age_group": "young", "body_type": "athletic",
                   "clothing_style": "sporty", "expression": "focused", "pose": "standing"},
        "reason": "运动产品需要展示穿戴效果和运动感",
    },
    "jewelry": {
        "display_type": "partial",
        "config": {"gender": "female", "age_group": "young", "makeup": "light",
                   "expression": "natural", "clothing_style": "elegant", "partial_focus": "hands"},
        "reason": "珠宝首饰适合局部特写，展示佩戴效果",
    },
    "baby": {
        "display_type": "using",
        "config": {"gender": "female", "age_group": "young", "expression": "friendly",
                   "clothing_style": "casual", "pose": "sitting"},
        "reason": "母婴产品适合使用场景展示，传递关爱感",
    },
    "office": {
        "display_type": "using",
        "config": {"gender": "unspecified", "age_group": "young", "expression": "focused",
                   "clothing_style": "business", "pose": "sitting"},
        "reason": "办公用品适合工作场景展示，体现专业感",
    },
}


def get_model_recommendation(category_id):
    """返回 {display_type, config, reason}，未知类别返回 None"""
    recommendation = MODEL_RECOMMENDATIONS.get(category_id)
    if not recommendation:
        return None
    return {
        "display_type": recommendation["display_type"],
        "config": dict(recommendation["config"]),
        "reason": recommendation["reason"],
    }


def apply_model_recommendation(category_id, base_config=None):
    """在默认配置上套用类别推荐，返回新的已启用配置；未知类别返回 None"""
    recommendation = get_model_recommendation(category_id)
    if not recommendation:
        return None
    config = dict(base_config or DEFAULT_MODEL_CONFIG)
    config.update(recommendation["config"])
    config["enabled"] = True
    config["display_type"] = recommendation["display_type"]
    return config


def _display_phrase(config):
    display_type = config.get("display_type")
    if display_type == "holding":
        return "a model naturally holding the product with realistic hand-to-product size ratio"
    if display_type == "wearing":
        return "a model wearing the product with accurate fit and proportions"
    if display_type == "using":
        return "a model naturally using the product in context with realistic scale"
    if display_type == "partial":
        focus = (config.get("partial_focus") or "hands").replace("_", " ")
        return f"close-up shot of model's {focus} with the product at accurate size"
    return ""


def build_model_prompt(model_config):
    config = dict(DEFAULT_MODEL_CONFIG)
    config.update(model_config or {})
    if not config["enabled"] or config["display_type"] == "none":
        return ""

    parts = list(MODEL_SCALE_PHRASES)
    parts.append(_display_phrase(config))

    if config["gender"] != "unspecified":
        parts.append("male model" if config["gender"] == "male" else "female model")

    parts.append(AGE_PHRASES.get(config["age_group"], ""))

    if config["skin_tone"] != "unspecified":
        parts.append(SKIN_PHRASES.get(config["skin_tone"], ""))

    if config["hair_style"] != "unspecified":
        parts.append(f"{config['hair_style']} hair")

    if config["body_type"] != "unspecified":
        parts.append(BODY_PHRASES.get(config["body_type"], ""))

    if config["makeup"] not in ("unspecified", "none"):
        parts.append(MAKEUP_PHRASES.get(config["makeup"], ""))

    parts.append(EXPRESSION_PHRASES.get(config["expression"], ""))
    parts.append(POSE_PHRASES.get(config["pose"], ""))

    if config["clothing_style"] != "auto":
        parts.append(CLOTHING_PHRASES.get(config["clothing_style"], ""))

    return ", ".join(p for p in parts if p.strip())


# ============================================================
# 融合 / 一致性
# ============================================================

FUSION_BASE_PHRASES = (
    "seamlessly blend the product into the reference image",
    "match lighting and perspective of reference",
    "maintain consistent color grading",
    "photorealistic integration",
)

FUSION_MODE_PHRASES = {
    "product_scene": ("place product naturally in the scene background",
                      "adjust product scale to fit scene perspective"),
    "product_model": ("model holding or using the product naturally",
                      "realistic hand-product interaction"),
    "full": ("integrate product with model in the scene",
             "cohesive composition with all elements"),
}

CONSISTENCY_MODE_PHRASES = {
    "style": ("strictly maintain the artistic style, brushwork, and lighting of reference images",
              "adapt product to the reference style"),
    "character": ("maintain character identity, facial features, and body structure from references",
                  "ensure character looks exactly like the person in reference images"),
    "color": ("match the exact color palette and tonal balance of reference images",
              "use dominant colors from references"),
    "brand": ("adhere to the brand visual identity shown in references",
              "maintain consistent sophisticated commercial look"),
}


def build_fusion_prompt(fusion_config):
    config = fusion_config or {}
    if not config.get("enabled"):
        return ""
    parts = list(FUSION_BASE_PHRASES)
    parts.extend(FUSION_MODE_PHRASES.get(config.get("mode", "product_scene"), ()))
    return ", ".join(parts)


def build_consistency_prompt(consistency_config):
    config = consistency_config or {}
    if not config.get("enabled") or not config.get("reference_images"):
        return ""

    mode = config.get("mode", "style")
    parts = [f"use provided reference images for {mode} consistency"]
    parts.extend(CONSISTENCY_MODE_PHRASES.get(mode, ()))

    strength = max(0.0, min(1.0, config.get("strength", 0.8)))
    if strength > 0.8:
        parts.append("high fidelity to references")
    elif strength < 0.5:
        parts.append("loose inspiration from references")
    return ", ".join(parts)


# ============================================================
# AIDA 阶段
# ============================================================

AIDA_STAGES = {
    "attention": "Make the image instantly eye-catching with a bold focal point on the product",
    "interest": "Reveal the product's key functions and details to spark curiosity",
    "desire": "Show the product delivering its benefit in an aspirational moment the viewer wants",
    "action": "Convey trust and urgency with a clean, confident hero shot that invites purchase",
}


def build_aida_prompt(stage):
    return AIDA_STAGES.get((stage or "").lower(), "")
