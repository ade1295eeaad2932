"""
分层提示词编译器

产品信息 + 场景 + 生成设置 + Deep Vision DNA + 外部侧通道提示
    → 17 个语义层 (core_subject / scene_context / lighting / ...)
    → 按 5 个语义分组拼成一段自然语言指令 + 一条逗号分隔的负面提示

分组顺序:
    instruction  (core_subject)                    "Create a ... ."
    subject      (model, fusion, consistency)      ". " 连接
    environment  (scene_context, lighting, composition, scale)   "Use ..., ... ."
    technical    (deep_vision, quality, color_fidelity)          ". " 连接
    enhancement  (style, semantic, marketing, aida, detail)      ", " 连接
    extras       (add_prompt 追加的自由文本)                      ". " 连接

compose_prompt() 是纯函数，相同输入得到相同 finalPrompt / negativePrompt；
PromptBuilder 只是在它外面包了一层链式 setter，不能多处同时修改同一实例。
"""

import re
import logging
from datetime import datetime

from config import merge_settings, normalize_settings_keys, validate_settings
from categories import get_category_by_id, get_category_scene_modifiers
from scenes import DEFAULT_SCENE_ID, get_scene_by_id
from semantic_engine import generate_semantic_enhancements
from deep_vision import (
    describe_dna, get_forbidden_elements,
    normalize_intrinsic_dna, normalize_art_direction_dna,
)

logger = logging.getLogger(__name__)


# ============================================================
# 层定义
# ============================================================

LAYER_WEIGHTS = {
    "core_subject": 1.5,
    "model": 1.4,
    "fusion": 1.4,
    "consistency": 1.3,
    "scene_context": 1.2,
    "deep_vision": 1.35,
    "scale": 1.4,
    "lighting": 1.0,
    "composition": 1.0,
    "style": 1.1,
    "quality": 1.3,
    "semantic": 0.9,
    "marketing": 1.25,
    "aida": 1.15,
    "detail": 0.8,
    "color_fidelity": 1.45,
    "negative": 1.0,
}

LAYER_TYPES = tuple(LAYER_WEIGHTS.keys())

# 外部传入的侧通道提示，内容非空才启用
SIDE_CHANNEL_LAYERS = ("model", "fusion", "consistency", "marketing", "aida")

BUCKETS = (
    ("instruction", ("core_subject",)),
    ("subject", ("model", "fusion", "consistency")),
    ("environment", ("scene_context", "lighting", "composition", "scale")),
    ("technical", ("deep_vision", "quality", "color_fidelity")),
    ("enhancement", ("style", "semantic", "marketing", "aida", "detail")),
)

DEFAULT_NEGATIVE_PROMPTS = (
    "blurry", "low quality", "distorted", "watermark", "text overlay",
    "cropped", "out of frame", "duplicate", "ugly", "deformed",
    "bad anatomy", "extra limbs", "poorly drawn",
    "unrealistic proportions", "oversized product", "wrong scale",
    "disproportionate", "giant product", "tiny hands",
)

MAX_SCENE_HINTS = 4
MAX_SEMANTIC_ENHANCEMENTS = 5
MAX_DETAIL_FEATURES = 3
DESCRIPTION_LIMIT = 80


# ============================================================
# 短语表: (层类型, 取值) → 英文短语
# ============================================================

PHRASES = {
    ("lighting", "natural"): "natural daylight, soft ambient lighting",
    ("lighting", "studio"): "professional studio lighting, three-point lighting setup",
    ("lighting", "dramatic"): "dramatic rim lighting, high contrast, moody atmosphere",
    ("lighting", "soft"): "soft diffused lighting, gentle shadows, even illumination",

    ("composition", "generic"): "centered composition at a slightly elevated angle",
    ("aspect_ratio", "1:1"): "square format",
    ("aspect_ratio", "4:3"): "landscape orientation",
    ("aspect_ratio", "3:4"): "portrait orientation",
    ("aspect_ratio", "16:9"): "wide cinematic format",
    ("aspect_ratio", "9:16"): "vertical mobile format",

    ("style", "realistic"): "photorealistic, true to life, authentic look",
    ("style", "artistic"): "artistic interpretation, creative styling, aesthetic appeal",
    ("style", "commercial"): "commercial photography style, e-commerce ready, professional",

    ("quality", "standard"): "high quality, sharp details, good resolution",
    ("quality", "high"): "8K quality, ultra sharp, professional grade, pristine details",
    ("quality", "ultra"): "16K resolution, masterpiece quality, exceptional clarity, flawless execution",
    ("quality", "enhance_details"): "enhanced micro details",
    ("quality", "add_shadow"): "natural product shadows",

    ("size", "pocket"): "small enough that it easily fits in a pocket",
    ("size", "palm"): "compact enough to rest comfortably in one palm",
    ("size", "handheld"): "sized to be held comfortably in one or two hands",
    ("size", "tabletop"): "a moderately sized item that sits naturally on a table",
    ("size", "desktop"): "a larger desktop item occupying a realistic share of the desk",
    ("size", "furniture"): "furniture-sized and proportioned like real furniture in the room",
    ("size", "large"): "a large item shown at its true full size",
    ("scale", "generic"): "maintaining realistic scale relative to surrounding environment and furniture",

    ("subject_noun", "electronics"): "an electronic device",
    ("subject_noun", "fashion"): "a fashion item",
    ("subject_noun", "beauty"): "a beauty product",
    ("subject_noun", "home"): "a home product",
    ("subject_noun", "food"): "a food product",
    ("subject_noun", "sports"): "a sports product",
    ("subject_noun", "jewelry"): "a piece of jewelry",
    ("subject_noun", "baby"): "a baby product",
    ("subject_noun", "office"): "an office product",
    ("subject_noun", "fallback"): "the product",

    ("color_fidelity", "enabled"): (
        "Match the product colors exactly as they appear in the reference image, "
        "without shifting hue, saturation or brightness"
    ),
}

# 防水卖点 × 水相关场景
WATER_FEATURE_TERMS = ("waterproof", "water-resistant", "water resistant", "防水")
WATER_SCENE_MARKERS = ("outdoor", "pool", "beach", "rain", "water")
WATER_PHRASES = (
    "water droplets beading on the product surface",
    "realistic water splashes interacting with the product",
)

# 太阳能 / 户外卖点 × 日照场景
SUN_FEATURE_TERMS = ("solar", "sun", "outdoor", "户外", "太阳能")
SUN_SCENE_MARKERS = ("outdoor", "sun", "beach", "summer")
SUN_PHRASES = (
    "bright sunlight glinting off the product",
    "crisp natural shadows cast by direct sun",
    "subtle lens flare from the sun",
)


def phrase(kind, value, default=""):
    return PHRASES.get((kind, value), default)


# ============================================================
# 各层内容
# ============================================================

def _strip_article(text):
    if text[:2] in ("a ", "A "):
        return text[2:]
    return text


def _join_features(features):
    if len(features) == 1:
        return features[0]
    if len(features) == 2:
        return f"{features[0]} and {features[1]}"
    return ", ".join(features[:-1]) + f", and {features[-1]}"


def build_core_subject_layer(product, scene_id):
    noun = (product.get("name") or "").strip()
    if not noun:
        noun = phrase("subject_noun", product.get("category") or "", phrase("subject_noun", "fallback"))

    text = f"professional product photograph of {noun}"
    if product.get("brand"):
        text += f" by {product['brand']}"

    scene_description = (product.get("scene_descriptions") or {}).get(scene_id)
    description = (product.get("description") or "").strip()
    if scene_description:
        text += f", featuring {_strip_article(scene_description.strip())}"
    elif description:
        text += f", featuring {description[:DESCRIPTION_LIMIT]}"
    return text


def build_scene_context_layer(product, scene):
    if not scene:
        return ""

    parts = list(scene["prompt_hints"][:MAX_SCENE_HINTS])
    features = " ".join(product.get("features") or []).lower()
    scene_id = scene["id"]

    if any(t in features for t in WATER_FEATURE_TERMS) and any(m in scene_id for m in WATER_SCENE_MARKERS):
        logger.debug(f"场景 {scene_id} 叠加防水互动描述")
        parts.extend(WATER_PHRASES)

    if any(t in features for t in SUN_FEATURE_TERMS) and any(m in scene_id for m in SUN_SCENE_MARKERS):
        logger.debug(f"场景 {scene_id} 叠加日照描述")
        parts.extend(SUN_PHRASES)

    return ", ".join(parts)


def build_lighting_layer(scene, settings):
    if scene and scene["has_detailed_lighting"]:
        logger.debug(f"场景 {scene['id']} 自带光照描述，跳过通用光照")
        return ""
    return phrase("lighting", settings.get("lighting"), phrase("lighting", "studio"))


def build_composition_layer(scene, settings):
    parts = []
    if not (scene and scene["has_detailed_composition"]):
        parts.append(phrase("composition", "generic"))
    parts.append(phrase("aspect_ratio", settings.get("aspect_ratio"), phrase("aspect_ratio", "1:1")))
    return ", ".join(parts)


def build_scale_layer(product, scene):
    if not (scene and scene["scale_sensitive"]):
        return ""

    parts = []
    if product.get("size_reference"):
        parts.append(f"the product is {product['size_reference']}")
    size_phrase = phrase("size", product.get("size_category") or "")
    if size_phrase:
        parts.append(size_phrase)
    parts.append(phrase("scale", "generic"))
    return ", ".join(parts)


def build_deep_vision_layer(intrinsic, art_direction, scene):
    include_lighting = not (scene and scene["has_detailed_lighting"])
    if not include_lighting and art_direction and art_direction.get("lighting_scenario"):
        logger.debug(f"场景 {scene['id']} 自带光照描述，跳过 DNA 光照句")
    return ". ".join(describe_dna(intrinsic, art_direction, include_lighting=include_lighting))


def build_style_layer(settings):
    return phrase("style", settings.get("style"), phrase("style", "commercial"))


def build_quality_layer(settings):
    parts = [phrase("quality", settings.get("quality"), phrase("quality", "high"))]
    if settings.get("enhance_details"):
        parts.append(phrase("quality", "enhance_details"))
    if settings.get("add_shadow"):
        parts.append(phrase("quality", "add_shadow"))
    return ", ".join(parts)


def build_semantic_layer(product):
    return ", ".join(generate_semantic_enhancements(product)[:MAX_SEMANTIC_ENHANCEMENTS])


def build_detail_layer(product, scene_id):
    # 拼在 enhancement 组的逗号之后，各子句都以小写开头
    clauses = []

    features = [f for f in (product.get("features") or []) if f][:MAX_DETAIL_FEATURES]
    if features:
        clauses.append(f"highlighting that the product features {_join_features(features)}")

    style = product.get("style")
    audience = product.get("target_audience")
    if style:
        clauses.append(f"styled in a {style} aesthetic")
    if audience:
        clauses.append(f"appealing to {audience}")

    category_id = product.get("category") or ""
    modifiers = get_category_scene_modifiers(category_id, scene_id)
    if not modifiers:
        category = get_category_by_id(category_id)
        modifiers = list(category["prompt_enhancements"][:2]) if category else []
    if modifiers:
        clauses.append(f"emphasizing {', '.join(modifiers)}")

    return ", ".join(clauses)


def build_color_fidelity_layer(settings):
    return phrase("color_fidelity", "enabled") if settings.get("color_correction") else ""


def build_negative_layer(art_direction):
    negatives = list(DEFAULT_NEGATIVE_PROMPTS)
    for element in get_forbidden_elements(art_direction):
        if element not in negatives:
            negatives.append(element)
    return ", ".join(negatives)


# ============================================================
# 组合
# ============================================================

def _clean(text):
    return text.strip().rstrip(".").strip()


def _render_bucket(bucket, entries):
    if bucket == "instruction":
        text = entries[0]
        if not text.lower().startswith("create"):
            text = f"Create a {text}"
        return f"{text}."
    if bucket == "environment":
        return f"Use {', '.join(entries)}."
    if bucket == "enhancement":
        return f"{', '.join(entries)}."
    return f"{'. '.join(entries)}."


def combine_layers(layers, extra_prompts=()):
    """启用层按语义分组拼接成一段自然语言，negative 层不参与"""
    contents = {
        layer["name"]: _clean(layer["content"])
        for layer in layers
        if layer["enabled"] and layer["name"] != "negative" and layer["content"].strip()
    }

    clauses = []
    for bucket, names in BUCKETS:
        entries = [contents[name] for name in names if contents.get(name)]
        if entries:
            clauses.append(_render_bucket(bucket, entries))

    extras = [_clean(p) for p in extra_prompts if p and p.strip()]
    extras = [p for p in extras if p]
    if extras:
        clauses.append(f"{'. '.join(extras)}.")

    prompt = re.sub(r"\s+", " ", " ".join(clauses)).strip()
    return re.sub(r"\.{2,}", ".", prompt)


def build_layers(product=None, scene_id=DEFAULT_SCENE_ID, settings=None,
                 intrinsic_dna=None, art_direction_dna=None,
                 side_prompts=None, overrides=None):
    """计算全部层，只返回内容非空的层"""
    product = product or {}
    settings = merge_settings(settings)
    side_prompts = side_prompts or {}
    overrides = overrides or {}
    scene = get_scene_by_id(scene_id)
    if scene is None:
        logger.debug(f"未知场景: {scene_id}，场景相关层不输出")

    generators = {
        "core_subject": lambda: build_core_subject_layer(product, scene_id),
        "scene_context": lambda: build_scene_context_layer(product, scene),
        "deep_vision": lambda: build_deep_vision_layer(intrinsic_dna, art_direction_dna, scene),
        "scale": lambda: build_scale_layer(product, scene),
        "lighting": lambda: build_lighting_layer(scene, settings),
        "composition": lambda: build_composition_layer(scene, settings),
        "style": lambda: build_style_layer(settings),
        "quality": lambda: build_quality_layer(settings),
        "semantic": lambda: build_semantic_layer(product),
        "detail": lambda: build_detail_layer(product, scene_id),
        "color_fidelity": lambda: build_color_fidelity_layer(settings),
        "negative": lambda: build_negative_layer(art_direction_dna),
    }

    layers = []
    for name in LAYER_TYPES:
        if name in SIDE_CHANNEL_LAYERS:
            content = overrides.get(name) or side_prompts.get(name) or ""
        else:
            content = overrides.get(name) or generators[name]()

        if not content.strip():
            continue
        layers.append({
            "name": name,
            "content": content,
            "weight": LAYER_WEIGHTS[name],
            "enabled": True,
        })
    return layers


def compose_prompt(product=None, scene_id=DEFAULT_SCENE_ID, settings=None,
                   intrinsic_dna=None, art_direction_dna=None,
                   side_prompts=None, overrides=None, extra_prompts=()):
    """
    编译完整提示词，不修改任何传入对象

    Returns:
        {"layers", "finalPrompt", "negativePrompt", "metadata": {scene, product, generatedAt}}
    """
    layers = build_layers(product, scene_id, settings, intrinsic_dna, art_direction_dna,
                          side_prompts, overrides)
    final_prompt = combine_layers(layers, extra_prompts)
    negative = next((layer["content"] for layer in layers if layer["name"] == "negative"), "")

    logger.info(f"提示词已生成: 场景={scene_id}, 启用层={len(layers)}, 长度={len(final_prompt)}")
    return {
        "layers": layers,
        "finalPrompt": final_prompt,
        "negativePrompt": negative,
        "metadata": {
            "scene": scene_id,
            "product": (product or {}).get("name") or "",
            "generatedAt": datetime.now().isoformat(),
        },
    }


def format_preview(layers, final_prompt):
    lines = ["=== 提示词预览 ===", ""]
    for layer in layers:
        if layer["enabled"] and layer["content"]:
            lines.append(f"[{layer['name']}] (权重: {layer['weight']})")
            lines.append(layer["content"])
            lines.append("")
    lines.append("=== 最终提示词 ===")
    lines.append(final_prompt)
    return "\n".join(lines)


# ============================================================
# 链式构建器
# ============================================================

def _text_value(value, name):
    """侧通道 / 覆盖 / 追加内容只接受字符串，None 视为空"""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{name} 必须是字符串，收到 {type(value).__name__}")
    return value


class PromptBuilder:
    """保存编译参数的可变容器，build() 时交给 compose_prompt()"""

    def __init__(self):
        self.reset()

    def reset(self):
        self.product = None
        self.scene_id = DEFAULT_SCENE_ID
        self.settings = None
        self.intrinsic_dna = None
        self.art_direction_dna = None
        self.side_prompts = {name: "" for name in SIDE_CHANNEL_LAYERS}
        self.overrides = {}
        self.extra_prompts = []
        return self

    def set_product(self, product):
        self.product = product
        return self

    def set_scene(self, scene_id):
        self.scene_id = scene_id
        return self

    def set_settings(self, settings):
        settings = normalize_settings_keys(settings)
        errors = validate_settings(settings)
        if errors:
            raise ValueError("; ".join(errors))
        self.settings = settings
        return self

    def set_deep_vision(self, intrinsic=None, art_direction=None):
        self.intrinsic_dna = normalize_intrinsic_dna(intrinsic)
        self.art_direction_dna = normalize_art_direction_dna(art_direction)
        return self

    def set_model_prompt(self, prompt):
        self.side_prompts["model"] = _text_value(prompt, "model")
        return self

    def set_fusion_prompt(self, prompt):
        self.side_prompts["fusion"] = _text_value(prompt, "fusion")
        return self

    def set_consistency_prompt(self, prompt):
        self.side_prompts["consistency"] = _text_value(prompt, "consistency")
        return self

    def set_marketing_prompt(self, prompt):
        self.side_prompts["marketing"] = _text_value(prompt, "marketing")
        return self

    def set_aida_prompt(self, prompt):
        self.side_prompts["aida"] = _text_value(prompt, "aida")
        return self

    def set_layer_content(self, layer, content):
        """手动覆盖某一层的内容"""
        if layer not in LAYER_WEIGHTS:
            raise ValueError(f"未知提示词层: {layer}")
        self.overrides[layer] = _text_value(content, layer)
        return self

    def add_prompt(self, prompt):
        self.extra_prompts.append(_text_value(prompt, "extra prompt"))
        return self

    def _compose(self):
        return compose_prompt(
            product=self.product,
            scene_id=self.scene_id,
            settings=self.settings,
            intrinsic_dna=self.intrinsic_dna,
            art_direction_dna=self.art_direction_dna,
            side_prompts=self.side_prompts,
            overrides=self.overrides,
            extra_prompts=self.extra_prompts,
        )

    def build(self):
        return self._compose()

    def build_prompt(self):
        return self._compose()["finalPrompt"]

    def preview(self):
        config = self._compose()
        return format_preview(config["layers"], config["finalPrompt"])


def create_prompt_builder():
    return PromptBuilder()


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(asctime)s - %(levelname)s - %(message)s")
    demo = (
        PromptBuilder()
        .set_product({
            "name": "SmartWatch X",
            "category": "electronics",
            "features": ["waterproof", "solar charging"],
            "description": "",
        })
        .set_scene("outdoor")
        .set_settings({"lighting": "natural", "aspect_ratio": "16:9"})
    )
    print(demo.preview())
