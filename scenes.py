"""
场景注册表
- 6 个内置拍摄场景：默认生成设置、有序的自然语言提示片段 (prompt hints)、标签
- 结构化标记：场景提示是否已自带光照 / 构图描述，是否需要比例控制
- 预设模板 (templates)：场景 + 设置覆盖 + 带 {product} 占位符的提示模板

进程内只读，定义顺序即列表顺序。
"""

import logging
from types import MappingProxyType

logger = logging.getLogger(__name__)

DEFAULT_SCENE_ID = "studio-white"


# ============================================================
# 场景定义
# ============================================================

# has_detailed_lighting / has_detailed_composition: 提示片段已写明光照/构图，
# 生成器不再叠加通用描述。scale_sensitive: 有真实环境的场景，产品尺寸失真会很突兀。
_SCENE_DEFINITIONS = [
    {
        "id": "studio-white",
        "name": "纯白棚拍",
        "description": "专业电商白底图，干净简洁，适合主图展示",
        "icon": "📷",
        "default_settings": {
            "background": "white",
            "lighting": "studio",
            "style": "commercial",
        },
        "prompt_hints": [
            "a pure white seamless background creating clean e-commerce presentation",
            "professional three-point studio lighting that creates soft diffused highlights",
            "centered composition at a slightly elevated angle showcasing product clearly",
        ],
        "tags": ["电商主图", "白底图", "产品展示"],
        "has_detailed_lighting": True,
        "has_detailed_composition": True,
        "scale_sensitive": False,
    },
    {
        "id": "lifestyle",
        "name": "生活场景",
        "description": "真实生活环境展示，增强产品代入感",
        "icon": "🏠",
        "default_settings": {
            "background": "contextual",
            "lighting": "natural",
            "style": "realistic",
        },
        "prompt_hints": [
            "a warm and inviting natural home environment with authentic lifestyle context",
            "soft natural daylight streaming through windows creating gentle ambient lighting",
            "lifestyle composition showing the product in realistic everyday use",
            "cozy interior setting with complementary decor elements and natural textures",
            "product shown at realistic scale proportional to surrounding furniture and environment",
        ],
        "tags": ["场景图", "生活方式", "氛围感"],
        "has_detailed_lighting": True,
        "has_detailed_composition": True,
        "scale_sensitive": True,
    },
    {
        "id": "outdoor",
        "name": "户外场景",
        "description": "户外自然环境，适合运动、户外用品",
        "icon": "🌲",
        "default_settings": {
            "background": "contextual",
            "lighting": "natural",
            "style": "realistic",
        },
        "prompt_hints": [
            "a dynamic natural outdoor environment with scenic nature backdrop",
            "golden hour lighting with warm natural sunlight creating dramatic atmosphere",
            "adventure lifestyle composition emphasizing product in action context",
            "sharp focus on product with natural depth of field and environmental storytelling",
            "product displayed at true-to-life scale within the natural outdoor setting",
        ],
        "tags": ["户外", "运动", "自然"],
        "has_detailed_lighting": True,
        "has_detailed_composition": True,
        "scale_sensitive": True,
    },
    {
        "id": "seasonal",
        "name": "节日主题",
        "description": "节日氛围图，适合促销活动",
        "icon": "🎄",
        "default_settings": {
            "background": "contextual",
            "lighting": "dramatic",
            "style": "artistic",
        },
        "prompt_hints": [
            "a festive atmosphere with seasonal decorations and celebration elements",
            "warm holiday lighting creating magical ambiance and special occasion mood",
            "gift-giving context with elegant seasonal styling and holiday themes",
            "dramatic composition emphasizing the joy and spirit of the celebration",
            "product presented at appropriate scale relative to holiday decorations and setting",
        ],
        "tags": ["节日", "促销", "活动"],
        "has_detailed_lighting": True,
        "has_detailed_composition": True,
        "scale_sensitive": True,
    },
    {
        "id": "luxury",
        "name": "高端奢华",
        "description": "奢华质感，适合高端品牌展示",
        "icon": "💎",
        "default_settings": {
            "background": "gradient",
            "lighting": "dramatic",
            "style": "artistic",
            "quality": "ultra",
        },
        "prompt_hints": [
            "an elegant dark gradient background with subtle reflections emphasizing luxury",
            "dramatic rim lighting highlighting premium materials and craftsmanship textures",
            "sophisticated composition conveying exclusivity and refined aesthetic",
            "opulent atmosphere capturing every luxurious detail",
        ],
        "tags": ["高端", "奢侈品", "品质感"],
        "has_detailed_lighting": True,
        "has_detailed_composition": True,
        "scale_sensitive": False,
    },
    {
        "id": "minimalist",
        "name": "极简风格",
        "description": "简约设计感，突出产品本身",
        "icon": "⬜",
        "default_settings": {
            "background": "gradient",
            "lighting": "soft",
            "style": "commercial",
        },
        "prompt_hints": [
            "a minimalist design with clean aesthetic and generous negative space",
            "simple composition with geometric simplicity emphasizing modern elegance",
            "soft diffused lighting creating subtle shadows without distraction",
            "modern and sleek presentation focusing entirely on product form and function",
        ],
        "tags": ["极简", "现代", "简约"],
        "has_detailed_lighting": True,
        "has_detailed_composition": True,
        "scale_sensitive": False,
    },
]


def _freeze(definition):
    scene = dict(definition)
    scene["default_settings"] = MappingProxyType(dict(definition["default_settings"]))
    scene["prompt_hints"] = tuple(definition["prompt_hints"])
    scene["tags"] = tuple(definition["tags"])
    return MappingProxyType(scene)


SCENES = MappingProxyType({d["id"]: _freeze(d) for d in _SCENE_DEFINITIONS})
SCENE_IDS = tuple(SCENES.keys())


def get_scene_by_id(scene_id):
    """按 id 查找场景，未知 id 返回 None"""
    return SCENES.get(scene_id)


def scene_list():
    """全部场景（定义顺序）"""
    return list(SCENES.values())


def get_scenes_by_tag(tag):
    return [scene for scene in SCENES.values() if tag in scene["tags"]]


def get_scene_name(scene_id):
    scene = SCENES.get(scene_id)
    return scene["name"] if scene else scene_id


def scene_to_dict(scene):
    """转为可 JSON 序列化的普通字典"""
    return {
        "id": scene["id"],
        "name": scene["name"],
        "description": scene["description"],
        "icon": scene["icon"],
        "defaultSettings": dict(scene["default_settings"]),
        "promptHints": list(scene["prompt_hints"]),
        "tags": list(scene["tags"]),
    }


# ============================================================
# 预设模板
# ============================================================

TEMPLATES = (
    {
        "id": "ecommerce-main",
        "name": "电商主图标准版",
        "description": "适用于淘宝、京东等平台的标准商品主图",
        "scene": "studio-white",
        "settings": {"aspect_ratio": "1:1", "quality": "high", "background": "white",
                     "lighting": "studio", "style": "commercial"},
        "prompt_template": (
            "Professional e-commerce product photography of {product}, pure white background, "
            "studio lighting, centered composition, high-end commercial style, clean and minimal, "
            "soft shadows"
        ),
        "tags": ("电商", "主图", "标准"),
    },
    {
        "id": "lifestyle-home",
        "name": "家居生活场景",
        "description": "温馨家居环境，展示产品使用场景",
        "scene": "lifestyle",
        "settings": {"aspect_ratio": "4:3", "quality": "high", "background": "contextual",
                     "lighting": "natural", "style": "realistic"},
        "prompt_template": (
            "{product} in a cozy modern living room, natural daylight through large windows, "
            "warm and inviting atmosphere, lifestyle photography, realistic home environment"
        ),
        "tags": ("生活", "家居", "场景"),
    },
    {
        "id": "luxury-premium",
        "name": "高端奢华展示",
        "description": "奢华质感，适合高端品牌产品",
        "scene": "luxury",
        "settings": {"aspect_ratio": "1:1", "quality": "ultra", "background": "gradient",
                     "lighting": "dramatic", "style": "artistic"},
        "prompt_template": (
            "Luxury product photography of {product}, elegant dark gradient background, "
            "dramatic rim lighting, premium aesthetic, sophisticated composition"
        ),
        "tags": ("高端", "奢华", "品牌"),
    },
    {
        "id": "outdoor-adventure",
        "name": "户外探险风格",
        "description": "自然户外环境，适合运动户外产品",
        "scene": "outdoor",
        "settings": {"aspect_ratio": "16:9", "quality": "high", "background": "contextual",
                     "lighting": "natural", "style": "realistic"},
        "prompt_template": (
            "{product} in an outdoor adventure setting, beautiful natural landscape, "
            "golden hour lighting, dynamic outdoor photography, scenic mountain or forest backdrop"
        ),
        "tags": ("户外", "运动", "自然"),
    },
    {
        "id": "minimalist-modern",
        "name": "极简现代风格",
        "description": "简约设计感，突出产品本身",
        "scene": "minimalist",
        "settings": {"aspect_ratio": "1:1", "quality": "high", "background": "gradient",
                     "lighting": "soft", "style": "commercial"},
        "prompt_template": (
            "Minimalist product photography of {product}, clean geometric background, "
            "soft gradient, ample negative space, modern sleek aesthetic, subtle shadows"
        ),
        "tags": ("极简", "现代", "简约"),
    },
    {
        "id": "festival-celebration",
        "name": "节日促销主题",
        "description": "节日氛围，适合促销活动使用",
        "scene": "seasonal",
        "settings": {"aspect_ratio": "1:1", "quality": "high", "background": "contextual",
                     "lighting": "dramatic", "style": "artistic"},
        "prompt_template": (
            "{product} in a festive celebration setting, holiday decorations, "
            "warm celebratory lighting, gift-giving atmosphere, special occasion mood"
        ),
        "tags": ("节日", "促销", "活动"),
    },
)


def get_template_by_id(template_id):
    for template in TEMPLATES:
        if template["id"] == template_id:
            return template
    return None


def render_template(template_id, product_name):
    """用产品名填充模板，未知模板返回空字符串"""
    template = get_template_by_id(template_id)
    if template is None:
        logger.warning(f"未知模板: {template_id}")
        return ""
    return template["prompt_template"].format(product=product_name or "the product")
