"""
配置系统
- 从 config.json 加载 API 配置（OpenRouter / Gemini 图片模型）
- 定义上传与生成的默认限制
- 定义默认生成设置（GenerationSettings）及各枚举字段的可选值
- 统一的日志初始化
"""

import json
import os
import sys
import logging

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_FILE = os.environ.get("PROMPT_STUDIO_CONFIG", os.path.join(BASE_DIR, "config.json"))
OUTPUT_DIR = os.path.join(BASE_DIR, "output")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(level=logging.INFO, log_file=None):
    """入口脚本调用：输出到 stdout，可选同时写入 UTF-8 日志文件"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)


# ============================================================
# API 配置
# ============================================================

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_IMAGE_MODEL = "google/gemini-3-pro-image-preview"
DEFAULT_ANALYSIS_MODEL = "google/gemini-2.5-flash"


def load_api_config():
    """从 config.json 加载 API 配置"""
    if not os.path.exists(CONFIG_FILE):
        logger.warning(f"配置文件不存在: {CONFIG_FILE}")
        logger.warning("请创建 config.json，参考格式：")
        logger.warning('  {"api_key": "sk-or-xxx", "base_url": "", '
                       '"image_model": "google/gemini-3-pro-image-preview"}')
        return {}

    with open(CONFIG_FILE, "r", encoding="utf-8") as f:
        config = json.load(f)

    return config


def get_api_key():
    config = load_api_config()
    return config.get("api_key", "")


def get_base_url():
    config = load_api_config()
    url = config.get("base_url", "")
    return url if url else DEFAULT_BASE_URL  # 空字符串使用 OpenRouter 默认地址


def get_image_model():
    config = load_api_config()
    return config.get("image_model", "") or DEFAULT_IMAGE_MODEL


def get_analysis_model():
    config = load_api_config()
    return config.get("analysis_model", "") or DEFAULT_ANALYSIS_MODEL


def get_timeout():
    config = load_api_config()
    return config.get("timeout", APP_CONFIG["api"]["timeout"])


def get_max_retries():
    config = load_api_config()
    return config.get("max_retries", APP_CONFIG["api"]["max_retries"])


# ============================================================
# 应用常量
# ============================================================

APP_CONFIG = {
    "app_name": "电商智能生图系统",
    "version": "1.0.0",

    "api": {
        "timeout": 120,               # 秒
        "max_retries": 3,
    },

    "upload": {
        "max_files": 3,
        "max_file_size": 10 * 1024 * 1024,   # 10MB
        "accepted_types": ["image/jpeg", "image/png", "image/webp"],
        "min_width": 256,
        "min_height": 256,
        "max_width": 4096,
        "max_height": 4096,
    },

    "generation": {
        "default_quantity": 1,
        "max_quantity": 9,
        "default_aspect_ratio": "1:1",
        "default_quality": "high",
    },
}


# ============================================================
# 生成设置 (GenerationSettings)
# ============================================================

DEFAULT_SETTINGS = {
    "quantity": APP_CONFIG["generation"]["default_quantity"],
    "aspect_ratio": APP_CONFIG["generation"]["default_aspect_ratio"],
    "quality": APP_CONFIG["generation"]["default_quality"],
    "style": "commercial",
    "lighting": "studio",
    "background": "white",
    "enhance_details": True,
    "remove_background": False,
    "add_shadow": True,
    "color_correction": False,
}

SETTING_CHOICES = {
    "aspect_ratio": ("1:1", "4:3", "3:4", "16:9", "9:16"),
    "quality": ("standard", "high", "ultra"),
    "style": ("realistic", "artistic", "commercial"),
    "lighting": ("natural", "studio", "dramatic", "soft"),
    "background": ("white", "gradient", "contextual", "transparent"),
}

# 前端 / HTTP 层使用 camelCase
_CAMEL_TO_SNAKE = {
    "aspectRatio": "aspect_ratio",
    "enhanceDetails": "enhance_details",
    "removeBackground": "remove_background",
    "addShadow": "add_shadow",
    "colorCorrection": "color_correction",
}


def normalize_settings_keys(settings):
    """camelCase 键名转换为 snake_case，未知键原样保留"""
    if not settings:
        return {}
    return {_CAMEL_TO_SNAKE.get(k, k): v for k, v in settings.items()}


def validate_settings(settings):
    """校验枚举字段，返回错误信息列表（空列表表示通过）"""
    errors = []
    for field, choices in SETTING_CHOICES.items():
        value = settings.get(field)
        if value is not None and value not in choices:
            errors.append(f"{field}={value!r} 不在可选值 {list(choices)} 中")

    quantity = settings.get("quantity")
    max_quantity = APP_CONFIG["generation"]["max_quantity"]
    if quantity is not None and (not isinstance(quantity, int) or not (1 <= quantity <= max_quantity)):
        errors.append(f"quantity={quantity} 超出范围 1-{max_quantity}")
    return errors


def merge_settings(overrides=None):
    """默认设置 + 覆盖项，返回新字典"""
    merged = dict(DEFAULT_SETTINGS)
    merged.update(normalize_settings_keys(overrides))
    return merged
