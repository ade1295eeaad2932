"""
上传图片检查
- 文件类型 / 大小 / 尺寸是否在上传限制内
- 宽高比、是否白底（四角采样）、画质档位（按像素数）

检查结果只作为提示，不修改图片。
"""

import io
import os
import logging

import numpy as np
from PIL import Image

from config import APP_CONFIG

logger = logging.getLogger(__name__)

CORNER_INSET = 5
WHITE_THRESHOLD = 240
WHITE_CORNERS_REQUIRED = 3

HIGH_QUALITY_PIXELS = 2_000_000    # >= 2MP
MEDIUM_QUALITY_PIXELS = 500_000    # >= 0.5MP


# ============================================================
# 工具函数
# ============================================================

def load_image(source):
    """从路径或字节加载为 RGB 图片，失败返回 None"""
    try:
        if isinstance(source, (bytes, bytearray)):
            img = Image.open(io.BytesIO(source))
        else:
            img = Image.open(source)
        img.load()
        if img.mode != "RGB":
            img = img.convert("RGB")
        return img
    except (OSError, ValueError) as e:
        logger.warning(f"无法加载图片: {e}")
        return None


def _source_size(source):
    if isinstance(source, (bytes, bytearray)):
        return len(source)
    return os.path.getsize(source)


def is_white_background(img):
    """四个角（内缩 5px）至少 3 个 RGB 都 > 240 视为白底"""
    pixels = np.asarray(img)
    h, w = pixels.shape[:2]
    x_right = max(0, w - CORNER_INSET)
    y_bottom = max(0, h - CORNER_INSET)
    x_left = min(CORNER_INSET, w - 1)
    y_top = min(CORNER_INSET, h - 1)

    samples = [
        pixels[y_top, x_left],
        pixels[y_top, min(x_right, w - 1)],
        pixels[min(y_bottom, h - 1), x_left],
        pixels[min(y_bottom, h - 1), min(x_right, w - 1)],
    ]
    white_count = sum(1 for p in samples if np.all(p[:3] > WHITE_THRESHOLD))
    return white_count >= WHITE_CORNERS_REQUIRED


def determine_quality(width, height):
    pixels = width * height
    if pixels >= HIGH_QUALITY_PIXELS:
        return "high"
    if pixels >= MEDIUM_QUALITY_PIXELS:
        return "medium"
    return "low"


# ============================================================
# 上传检查
# ============================================================

def check_upload(source, mime_type):
    """
    检查一张上传的产品图片。

    参数:
        source: 图片路径或字节
        mime_type: 上传时声明的 MIME 类型

    返回:
        {
            "passed": bool,
            "analysis": {aspect_ratio, is_white_background, quality, width, height} 或 None,
            "reasons": [...]       # 未通过的原因列表
        }
    """
    limits = APP_CONFIG["upload"]
    reasons = []

    if mime_type not in limits["accepted_types"]:
        reasons.append(f"不支持的文件类型: {mime_type}")

    size = _source_size(source)
    if size > limits["max_file_size"]:
        reasons.append(f"文件过大，最大支持 {limits['max_file_size'] // 1024 // 1024}MB")

    img = load_image(source)
    if img is None:
        reasons.append("无法加载图片")
        return {"passed": False, "analysis": None, "reasons": reasons}

    width, height = img.size
    if width < limits["min_width"] or height < limits["min_height"]:
        reasons.append(f"尺寸过小: {width}x{height} (最小 {limits['min_width']}x{limits['min_height']})")
    if width > limits["max_width"] or height > limits["max_height"]:
        reasons.append(f"尺寸过大: {width}x{height} (最大 {limits['max_width']}x{limits['max_height']})")

    analysis = {
        "aspect_ratio": round(width / height, 3),
        "is_white_background": is_white_background(img),
        "quality": determine_quality(width, height),
        "width": width,
        "height": height,
    }

    if reasons:
        logger.warning(f"图片检查未通过: {'; '.join(reasons)}")

    return {"passed": not reasons, "analysis": analysis, "reasons": reasons}
