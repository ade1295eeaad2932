"""
产品洞察引擎
把第一张产品图 + 用户填写的名称/描述交给视觉模型，返回 ProductInsight：
类别映射、卖点、材质、场景定制描述、尺寸类别等。

走 OpenAI 兼容接口（默认 OpenRouter），任何失败都回退到 default_insight()。
"""

import json
import re
import logging

from openai import OpenAI, OpenAIError

from config import get_api_key, get_base_url, get_analysis_model, get_timeout, get_max_retries
from image_generator import image_to_data_url
from product_session import normalize_insight, default_insight

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = """你是一个专业的电商产品分析专家。请仔细分析这张产品图片，并结合用户上下文。

{context}

请返回严格的 JSON 格式 (不要包含 Markdown 代码块标记)：

{{
  "categoryName": "简短的产品类别名称 (英文)",
  "mappedCategory": "只能从以下选项中选择一个：electronics/fashion/beauty/home/food/sports/jewelry/baby/office",
  "primaryMaterial": "主要材质",
  "surfaceTexture": "材质表面纹理描述 (英文)",
  "reflectiveness": "反光程度 (high/medium/low/none)",
  "colorPalette": ["#RRGGBB"],
  "features": ["卖点1", "卖点2", "卖点3"],
  "targetAudience": "推测的目标受众",
  "predictedStyle": "设计风格",
  "suggestedScenes": ["推荐场景Key"],
  "generatedPrompts": ["通用Prompt"],
  "sceneDescriptions": {{
    "studio-white": "...", "lifestyle": "...", "outdoor": "...",
    "seasonal": "...", "luxury": "...", "minimalist": "..."
  }},
  "sizeCategory": "pocket/palm/handheld/tabletop/desktop/furniture/large",
  "sizeReference": "自然语言描述产品尺寸，用于比例参照"
}}

注意：
1. 把样品照片描述成全新出厂的理想状态，禁止出现 scratched, damaged, old, used, worn, dusty, dirty 等词。
2. generatedPrompts 和 sceneDescriptions 用自然的英文完整句子描述产品本身（形状、材质、表面处理），
   不要写具体颜色名称，不要写光照、机位和场景。
3. sceneDescriptions 为每个场景各写一句侧重点不同的产品描述。
4. sizeCategory / sizeReference 用于在生活场景中保持真实比例。
"""

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$")


def parse_json_response(text):
    """解析模型输出的 JSON，容忍 Markdown 代码块包裹和前后的说明文字"""
    cleaned = _FENCE_PATTERN.sub("", (text or "").strip())
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise
        return json.loads(cleaned[start:end + 1])


def _context_text(context):
    if not context:
        return "没有提供额外的产品文本信息。"
    return (f"用户提供的产品信息: 名称=\"{context.get('name') or ''}\", "
            f"描述=\"{context.get('description') or ''}\"。请结合这些信息和图片进行分析。")


def create_client():
    return OpenAI(
        api_key=get_api_key(),
        base_url=get_base_url(),
        timeout=get_timeout(),
        max_retries=get_max_retries(),
    )


def analyze_product_image(image, context=None, client=None):
    """
    分析一张产品图片。

    参数:
        image: 路径 / 字节 / URL / data URL
        context: {"name", "description"}（可选）
        client: OpenAI 客户端（可选，默认按 config.json 创建）

    返回:
        ProductInsight 字典（失败时为 default_insight()）
    """
    if client is None and not get_api_key():
        logger.error("未配置 API Key，使用默认产品分析结果")
        return default_insight()

    try:
        client = client or create_client()
        logger.info(f"分析产品图片... (有上下文: {bool(context)})")
        response = client.chat.completions.create(
            model=get_analysis_model(),
            messages=[{
                "role": "user",
                "content": [
                    {"type": "text", "text": ANALYSIS_PROMPT.format(context=_context_text(context))},
                    {"type": "image_url", "image_url": {"url": image_to_data_url(image)}},
                ],
            }],
        )
        raw = parse_json_response(response.choices[0].message.content)
    except (OpenAIError, ValueError, OSError, IndexError) as e:
        logger.error(f"产品分析失败: {e}")
        return default_insight()

    insight = normalize_insight(raw)
    if insight is None:
        logger.warning("分析结果格式无效，使用默认值")
        return default_insight()

    logger.info(f"产品分析完成: {insight['categoryName']} → {insight['mappedCategory']}")
    return insight
