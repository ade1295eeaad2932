"""
电商智能生图 - FastAPI 后端

启动:
    python app.py
    # 或
    uvicorn app:app --host 0.0.0.0 --port 8000 --reload

API 文档: http://localhost:8000/docs
"""

from __future__ import annotations

import asyncio
import json
import logging
from concurrent.futures import ThreadPoolExecutor

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config import APP_CONFIG, merge_settings
from scenes import DEFAULT_SCENE_ID, scene_list, scene_to_dict, TEMPLATES
from categories import CATEGORIES, category_to_dict
from scene_recommender import get_recommendations, get_best_scene, get_scene_warning
from semantic_engine import recommend_scene
from product_session import product_from_dict
from prompt_builder import PromptBuilder
from image_generator import build_generation_request, create_generator

# ---------------------------------------------------------------------------
# 初始化
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=APP_CONFIG["app_name"], version=APP_CONFIG["version"])

# CORS - 允许前端跨域
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 线程池 (图片生成是阻塞的网络请求 + 重试等待，不能占住事件循环)
executor = ThreadPoolExecutor(max_workers=2)


# ---------------------------------------------------------------------------
# 辅助函数
# ---------------------------------------------------------------------------

async def _read_body(request: Request) -> dict | None:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


def _builder_from_body(body: dict) -> PromptBuilder:
    """请求体 → 配置好的 PromptBuilder，设置非法时抛 ValueError"""
    builder = (
        PromptBuilder()
        .set_product(product_from_dict(body.get("product")))
        .set_scene(body.get("scene") or DEFAULT_SCENE_ID)
        .set_settings(body.get("settings") or {})
        .set_deep_vision(body.get("intrinsic_dna"), body.get("art_direction_dna"))
        .set_model_prompt(body.get("model_prompt", ""))
        .set_fusion_prompt(body.get("fusion_prompt", ""))
        .set_consistency_prompt(body.get("consistency_prompt", ""))
        .set_marketing_prompt(body.get("marketing_prompt", ""))
        .set_aida_prompt(body.get("aida_prompt", ""))
    )
    overrides = body.get("layer_overrides") or {}
    if not isinstance(overrides, dict):
        raise ValueError("layer_overrides 必须是对象")
    for layer, content in overrides.items():
        builder.set_layer_content(layer, content)
    for extra in body.get("extra_prompts") or []:
        builder.add_prompt(extra)
    return builder


# ---------------------------------------------------------------------------
# 注册表
# ---------------------------------------------------------------------------

@app.get("/api/scenes")
async def list_scenes():
    return {"scenes": [scene_to_dict(scene) for scene in scene_list()]}


@app.get("/api/categories")
async def list_categories():
    return {"categories": [category_to_dict(c) for c in CATEGORIES]}


@app.get("/api/templates")
async def list_templates():
    return {"templates": [
        {**t, "settings": dict(t["settings"]), "tags": list(t["tags"])} for t in TEMPLATES
    ]}


# ---------------------------------------------------------------------------
# 场景推荐
# ---------------------------------------------------------------------------

@app.post("/api/recommend")
async def recommend(request: Request):
    body = await _read_body(request)
    if body is None:
        return {"error": "请求体必须是 JSON 对象"}

    product = product_from_dict(body.get("product"))
    limit = body.get("limit", 3)
    if not isinstance(limit, int) or limit < 1:
        return {"error": "limit 必须是正整数"}

    result = {
        "recommendations": get_recommendations(product, limit),
        "best_scene": get_best_scene(product),
        "semantic_scene": recommend_scene(product),
    }
    scene = body.get("scene")
    if scene:
        result["warning"] = get_scene_warning(product, scene)
    return result


# ---------------------------------------------------------------------------
# 提示词编译 / 生成
# ---------------------------------------------------------------------------

@app.post("/api/prompt")
async def compile_prompt(request: Request):
    body = await _read_body(request)
    if body is None:
        return {"error": "请求体必须是 JSON 对象"}

    try:
        builder = _builder_from_body(body)
    except ValueError as e:
        return {"error": str(e)}

    config = builder.build()
    if body.get("preview"):
        config["preview"] = builder.preview()
    return config


@app.post("/api/generate")
async def generate(request: Request):
    body = await _read_body(request)
    if body is None:
        return {"error": "请求体必须是 JSON 对象"}

    reference_images = body.get("reference_images") or []
    if not reference_images:
        return {"error": "请至少提供一张产品参考图"}

    try:
        builder = _builder_from_body(body)
    except ValueError as e:
        return {"error": str(e)}

    prompt_config = builder.build()
    settings = merge_settings(body.get("settings"))
    generation_request = build_generation_request(prompt_config, reference_images, settings)

    generator = create_generator(body.get("generator"))
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(executor, generator.generate, generation_request)
    result["prompt"] = prompt_config["finalPrompt"]
    result["negativePrompt"] = prompt_config["negativePrompt"]
    return result


if __name__ == "__main__":
    import uvicorn

    logger.info("启动服务: http://localhost:8000/docs")
    uvicorn.run(app, host="0.0.0.0", port=8000)
