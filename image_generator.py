"""
AI 图片生成
- 策略模式：ImageGenerator 基类 + OpenRouterGenerator（Gemini 图片模型）
- 请求体: 编译好的提示词 + 负面提示 + 参考图 + 生成设置
- 参考图统一转为 data URL（本地路径 / 字节用 Pillow 重新编码，URL 原样传递）
- 结果统一为 {"success", "images", "error"}
"""

import base64
import io
import logging
import os
import time
from abc import ABC, abstractmethod

import requests
from PIL import Image

from config import get_api_key, get_base_url, get_image_model, get_timeout, get_max_retries

logger = logging.getLogger(__name__)

MAX_REFERENCE_SIDE = 2048


# ============================================================
# 辅助函数
# ============================================================

def image_to_data_url(source, max_side=MAX_REFERENCE_SIDE):
    """
    将图片转为 data URL。
    source 为 http(s) URL 或 data URL 时原样返回；为路径或字节时用 Pillow 读取、
    限制最长边后编码为 PNG（带透明通道）或 JPEG。
    """
    if isinstance(source, str) and source.startswith(("http://", "https://", "data:")):
        return source

    if isinstance(source, (bytes, bytearray)):
        img = Image.open(io.BytesIO(source))
    else:
        img = Image.open(source)

    if max(img.size) > max_side:
        img.thumbnail((max_side, max_side))

    buf = io.BytesIO()
    if img.mode in ("RGBA", "LA", "P"):
        img = img.convert("RGBA")
        img.save(buf, format="PNG")
        mime = "image/png"
    else:
        img = img.convert("RGB")
        img.save(buf, format="JPEG", quality=92)
        mime = "image/jpeg"

    b64 = base64.b64encode(buf.getvalue()).decode("utf-8")
    return f"data:{mime};base64,{b64}"


def save_image_from_data_url(data_url, output_path):
    """将 data URL 图片保存为文件"""
    _, b64_data = data_url.split(",", 1)
    with open(output_path, "wb") as f:
        f.write(base64.b64decode(b64_data))


def save_image_from_url(url, output_path):
    """从 URL 下载图片并保存"""
    resp = requests.get(url, timeout=get_timeout())
    resp.raise_for_status()
    with open(output_path, "wb") as f:
        f.write(resp.content)


def build_generation_request(prompt_config, reference_images=None, settings=None):
    """PromptConfig → 交给生成服务的请求体"""
    return {
        "prompt": prompt_config["finalPrompt"],
        "negativePrompt": prompt_config["negativePrompt"],
        "referenceImages": list(reference_images or []),
        "settings": dict(settings or {}),
    }


# ============================================================
# 生成器基类
# ============================================================

class ImageGenerator(ABC):
    """图片生成器抽象基类"""

    def __init__(self):
        self.call_count = 0

    @abstractmethod
    def generate(self, request):
        """
        生成图片。

        参数:
            request: build_generation_request() 返回的请求体

        返回:
            {"success": bool, "images": [url 或 data URL, ...], "error": str 或 None}
        """
        pass

    def get_stats(self):
        return {"call_count": self.call_count}


# ============================================================
# OpenRouter 生成器
# ============================================================

class OpenRouterGenerator(ImageGenerator):
    """通过 OpenRouter chat completions 接口调用图片模型"""

    def __init__(self, api_key=None, base_url=None, model=None):
        super().__init__()
        self.api_key = api_key or get_api_key()
        self.base_url = (base_url or get_base_url()).rstrip("/")
        self.model = model or get_image_model()

    def _build_messages(self, request):
        text = request["prompt"]
        if request.get("negativePrompt"):
            text += f"\n\nAvoid: {request['negativePrompt']}"

        settings = request.get("settings") or {}
        aspect_ratio = settings.get("aspect_ratio") or settings.get("aspectRatio")
        if aspect_ratio:
            text += f"\n\nAspect ratio: {aspect_ratio}"

        content = [{"type": "text", "text": text}]
        for ref in request.get("referenceImages") or []:
            content.append({"type": "image_url", "image_url": {"url": image_to_data_url(ref)}})
        return [{"role": "user", "content": content}]

    def _post(self, payload):
        resp = requests.post(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
            timeout=get_timeout(),
        )
        resp.raise_for_status()
        return resp.json()

    @staticmethod
    def _collect_images(data):
        images = []
        for choice in data.get("choices", []):
            message = choice.get("message") or {}
            for image in message.get("images") or []:
                url = (image.get("image_url") or {}).get("url", "")
                if url:
                    images.append(url)
        return images

    def generate(self, request):
        if not self.api_key:
            logger.error("未配置 API Key")
            return {"success": False, "images": [], "error": "未配置 API Key"}

        payload = {
            "model": self.model,
            "messages": self._build_messages(request),
            "modalities": ["image", "text"],
        }

        quantity = (request.get("settings") or {}).get("quantity", 1)
        max_retries = get_max_retries()
        images = []
        last_error = None

        for i in range(quantity):
            for attempt in range(1, max_retries + 1):
                self.call_count += 1
                try:
                    logger.info(f"生成图片 {i + 1}/{quantity} (第 {attempt} 次尝试): {self.model}")
                    data = self._post(payload)
                    found = self._collect_images(data)
                    if found:
                        images.extend(found)
                        break
                    last_error = "生成服务未返回图片"
                    logger.warning(f"{last_error}: {str(data)[:200]}")
                except (requests.RequestException, ValueError) as e:
                    last_error = str(e)
                    logger.error(f"图片生成失败: {e}")

                if attempt < max_retries:
                    time.sleep(2 ** attempt)

        if not images:
            return {"success": False, "images": [], "error": last_error or "生成服务未返回图片"}

        logger.info(f"生成成功: {len(images)} 张")
        return {"success": True, "images": images, "error": None}


# ============================================================
# 工厂函数
# ============================================================

def create_generator(name=None):
    """创建图片生成器实例"""
    if name in (None, "openrouter", "gemini"):
        return OpenRouterGenerator()
    logger.warning(f"未知生成器 '{name}'，回退到 OpenRouter")
    return OpenRouterGenerator()


def save_generated_images(images, output_dir, prefix="generated"):
    """把生成结果保存到 output_dir，返回文件路径列表"""
    os.makedirs(output_dir, exist_ok=True)
    paths = []
    for idx, image in enumerate(images, 1):
        path = os.path.join(output_dir, f"{prefix}_{idx}.png")
        if image.startswith("data:"):
            save_image_from_data_url(image, path)
        else:
            save_image_from_url(image, path)
        paths.append(path)
    return paths
