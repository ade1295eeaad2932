"""
产品会话
- ProductInfo 的创建 / camelCase 转换
- AI 分析结果 (ProductInsight) 的校验与默认值补全
- 上传图片列表：只有第一张图触发 AI 分析；最后一张图移除时清空图片派生字段
"""

import logging
from datetime import datetime

from config import APP_CONFIG
from categories import CATEGORY_IDS
from scenes import SCENE_IDS
from image_validator import check_upload

logger = logging.getLogger(__name__)

SIZE_CATEGORIES = ("pocket", "palm", "handheld", "tabletop", "desktop", "furniture", "large")

CATEGORY_SIZE_DEFAULTS = {
    "electronics": "handheld",
    "fashion": "handheld",
    "beauty": "palm",
    "home": "tabletop",
    "food": "handheld",
    "sports": "handheld",
    "jewelry": "pocket",
    "baby": "handheld",
    "office": "handheld",
}

SIZE_REFERENCES = {
    "pocket": "a compact pocket-sized item",
    "palm": "fits comfortably in one palm",
    "handheld": "a handheld product easy to carry",
    "tabletop": "a tabletop item of moderate size",
    "desktop": "a desktop-sized product",
    "furniture": "a furniture-scale item",
    "large": "a large product",
}

# 来源于图片分析，最后一张图移除时清空
IMAGE_DERIVED_FIELDS = (
    "category", "material_prompts", "scene_descriptions",
    "size_category", "size_reference", "color_palette",
)

_PRODUCT_CAMEL_TO_SNAKE = {
    "targetAudience": "target_audience",
    "colorPalette": "color_palette",
    "materialPrompts": "material_prompts",
    "sceneDescriptions": "scene_descriptions",
    "sizeCategory": "size_category",
    "sizeReference": "size_reference",
}


# ============================================================
# ProductInfo
# ============================================================

def new_product_info():
    return {
        "name": "",
        "category": "",
        "description": "",
        "features": [],
        "target_audience": "",
        "brand": "",
        "style": "",
        "color_palette": [],
        "material_prompts": [],
        "scene_descriptions": {},
        "size_category": "",
        "size_reference": "",
    }


def product_from_dict(data):
    """接受 camelCase 或 snake_case 键名，缺失字段用空值补齐"""
    product = new_product_info()
    for key, value in (data or {}).items():
        key = _PRODUCT_CAMEL_TO_SNAKE.get(key, key)
        if key in product and value is not None:
            product[key] = value
    return product


def product_summary(product):
    parts = []
    if product.get("name"):
        parts.append(product["name"])
    if product.get("brand"):
        parts.append(f"by {product['brand']}")
    if product.get("category"):
        parts.append(f"({product['category']})")
    return " ".join(parts)


# ============================================================
# ProductInsight
# ============================================================

def default_insight():
    """AI 分析失败时使用的兜底结果"""
    return {
        "categoryName": "General Product",
        "mappedCategory": "other",
        "primaryMaterial": "other",
        "surfaceTexture": "clean surface",
        "reflectiveness": "medium",
        "colorPalette": [],
        "features": [],
        "targetAudience": "General consumers",
        "predictedStyle": "Modern",
        "suggestedScenes": ["studio-white"],
        "generatedPrompts": ["professional product photography"],
        "sceneDescriptions": {
            "studio-white": "a professional product with clean finish and precise details",
            "lifestyle": "a versatile product designed for everyday comfort and use",
            "outdoor": "a durable product built for active outdoor adventures",
            "seasonal": "a thoughtful gift that brings joy to any celebration",
            "luxury": "a premium product showcasing exceptional quality and craftsmanship",
            "minimalist": "a beautifully designed product with clean modern aesthetics",
        },
        "sizeCategory": "handheld",
        "sizeReference": "a compact handheld product",
    }


def infer_size_from_category(category_id):
    return CATEGORY_SIZE_DEFAULTS.get(category_id, "handheld")


def normalize_insight(raw):
    """
    校验 AI 返回的 ProductInsight 并补全默认值，返回新字典；
    缺少基本字段时返回 None，由调用方改用 default_insight()
    """
    if not isinstance(raw, dict):
        return None
    if not (isinstance(raw.get("categoryName"), str)
            and isinstance(raw.get("mappedCategory"), str)
            and isinstance(raw.get("features"), list)
            and isinstance(raw.get("generatedPrompts"), list)):
        return None

    insight = dict(raw)

    if insight["mappedCategory"] not in CATEGORY_IDS:
        logger.warning(f"无效的类别 \"{insight['mappedCategory']}\"，使用 electronics")
        insight["mappedCategory"] = "electronics"

    if not isinstance(insight.get("sceneDescriptions"), dict):
        base_prompt = insight["generatedPrompts"][0] if insight["generatedPrompts"] else "professional product"
        insight["sceneDescriptions"] = {scene_id: base_prompt for scene_id in SCENE_IDS}

    if insight.get("sizeCategory") not in SIZE_CATEGORIES:
        insight["sizeCategory"] = infer_size_from_category(insight["mappedCategory"])

    if not insight.get("sizeReference") or not isinstance(insight["sizeReference"], str):
        insight["sizeReference"] = SIZE_REFERENCES.get(insight["sizeCategory"], "a handheld product")

    if not isinstance(insight.get("colorPalette"), list):
        insight["colorPalette"] = []

    return insight


def apply_insight(product, insight):
    """把分析结果合并进 ProductInfo（原地修改），用户已填的卖点/人群/风格不覆盖"""
    product["category"] = insight.get("mappedCategory") or product.get("category", "")
    if not product.get("features"):
        product["features"] = list(insight.get("features") or [])
    if not product.get("target_audience"):
        product["target_audience"] = insight.get("targetAudience") or ""
    if not product.get("style"):
        product["style"] = insight.get("predictedStyle") or ""
    product["material_prompts"] = list(insight.get("generatedPrompts") or [])
    product["scene_descriptions"] = dict(insight.get("sceneDescriptions") or {})
    product["size_category"] = insight.get("sizeCategory") or ""
    product["size_reference"] = insight.get("sizeReference") or ""
    product["color_palette"] = list(insight.get("colorPalette") or [])
    return product


# ============================================================
# 会话
# ============================================================

class ProductSession:
    """一个产品的编辑会话：ProductInfo + 已上传图片"""

    def __init__(self, product=None):
        self.product = product_from_dict(product)
        self.images = []
        self.last_insight = None

    @property
    def can_add_more_images(self):
        return len(self.images) < APP_CONFIG["upload"]["max_files"]

    def add_image(self, image_id, data, mime_type="image/jpeg", analyzer=None):
        """
        添加一张图片；检查不通过或数量已满时返回 None。
        只有第一张图会调用 analyzer(data, context) 做 AI 分析。
        """
        if not self.can_add_more_images:
            logger.warning(f"最多上传 {APP_CONFIG['upload']['max_files']} 张图片")
            return None

        check = check_upload(data, mime_type)
        if not check["passed"]:
            logger.warning(f"图片 {image_id} 未通过检查: {check['reasons']}")
            return None

        should_analyze = not self.images
        image = {
            "id": image_id,
            "data": data,
            "mime_type": mime_type,
            "analysis": check["analysis"],
            "uploaded_at": datetime.now().isoformat(),
        }
        self.images.append(image)

        if should_analyze and analyzer is not None:
            context = {"name": self.product["name"], "description": self.product["description"]}
            insight = normalize_insight(analyzer(data, context)) or default_insight()
            self.last_insight = insight
            apply_insight(self.product, insight)
            logger.info(f"产品分析完成: {insight['categoryName']} → {self.product['category']}")

        return image

    def remove_image(self, image_id):
        before = len(self.images)
        self.images = [img for img in self.images if img["id"] != image_id]
        if len(self.images) == before:
            return False

        if not self.images:
            empty = new_product_info()
            for field in IMAGE_DERIVED_FIELDS:
                self.product[field] = empty[field]
            self.last_insight = None
            logger.info("已移除全部图片，清空图片派生的产品信息")
        return True

    def clear(self):
        self.product = new_product_info()
        self.images = []
        self.last_insight = None

    def summary(self):
        return product_summary(self.product)
