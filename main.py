"""
电商智能生图 - 命令行入口

用法:
    python main.py scenes
    python main.py recommend --product product.json
    python main.py prompt --product product.json --scene outdoor --aspect-ratio 16:9
    python main.py prompt --name "SmartWatch X" --image photo.jpg --with-model --preview
"""

import json
import logging
import argparse
import mimetypes

from config import setup_logging, SETTING_CHOICES
from scenes import DEFAULT_SCENE_ID, SCENE_IDS, scene_list, render_template
from scene_recommender import get_recommendations, get_scene_warning
from semantic_engine import match_product_to_scene
from product_session import ProductSession
from side_prompts import apply_model_recommendation, build_model_prompt, build_aida_prompt, AIDA_STAGES
from prompt_builder import PromptBuilder

logger = logging.getLogger(__name__)


def load_product(args):
    """从 --product JSON 文件和 --name/--category 等参数组装 ProductInfo"""
    data = {}
    if args.product:
        with open(args.product, "r", encoding="utf-8") as f:
            data = json.load(f)

    for key in ("name", "category", "description", "brand"):
        value = getattr(args, key, None)
        if value:
            data[key] = value
    if getattr(args, "features", None):
        data["features"] = args.features
    return data


def cmd_scenes(args):
    for scene in scene_list():
        print(f"{scene['icon']} {scene['id']:<14} {scene['name']}  {scene['description']}")
    return 0


def cmd_recommend(args):
    session = ProductSession(load_product(args))
    recommendations = get_recommendations(session.product, args.limit)
    for rec in recommendations:
        mark = "★" if rec["isTopPick"] else " "
        print(f"{mark} {rec['sceneId']:<14} {rec['score']:>3}  {rec['reason']}")
    return 0


def cmd_prompt(args):
    session = ProductSession(load_product(args))

    if args.image:
        from insight_engine import analyze_product_image

        with open(args.image, "rb") as f:
            data = f.read()
        mime_type = mimetypes.guess_type(args.image)[0] or "image/jpeg"
        if session.add_image(args.image, data, mime_type, analyzer=analyze_product_image) is None:
            logger.error(f"图片未通过检查: {args.image}")
            return 1

    product = session.product
    overrides = {
        "aspect_ratio": args.aspect_ratio,
        "lighting": args.lighting,
        "quality": args.quality,
        "style": args.style,
        "background": args.background,
    }
    settings = {k: v for k, v in overrides.items() if v is not None}
    if args.color_correction:
        settings["color_correction"] = True

    builder = (
        PromptBuilder()
        .set_product(product)
        .set_scene(args.scene)
        .set_settings(settings)
    )

    if args.with_model:
        model_config = apply_model_recommendation(product.get("category"))
        if model_config:
            builder.set_model_prompt(build_model_prompt(model_config))
    if args.aida:
        builder.set_aida_prompt(build_aida_prompt(args.aida))
    if args.template:
        builder.add_prompt(render_template(args.template, product.get("name")))
    for extra in args.extra or []:
        builder.add_prompt(extra)

    warning = get_scene_warning(product, args.scene)
    if warning:
        logger.warning(warning)
    for message in match_product_to_scene(product, args.scene)["warnings"]:
        logger.warning(message)

    if args.preview:
        print(builder.preview())
        return 0

    config = builder.build()
    print(config["finalPrompt"])
    if args.negative:
        print()
        print(f"Negative: {config['negativePrompt']}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="电商产品图提示词编译器")
    parser.add_argument("--verbose", "-v", action="store_true", help="输出 DEBUG 日志")
    parser.add_argument("--log-file", help="同时写入日志文件")
    sub = parser.add_subparsers(dest="command", required=True)

    p_scenes = sub.add_parser("scenes", help="列出全部场景")
    p_scenes.set_defaults(func=cmd_scenes)

    def add_product_args(p):
        p.add_argument("--product", "-p", help="产品信息 JSON 文件")
        p.add_argument("--name", help="产品名称")
        p.add_argument("--category", help="产品类别 id")
        p.add_argument("--description", help="产品描述")
        p.add_argument("--brand", help="品牌")
        p.add_argument("--features", nargs="*", help="产品卖点")

    p_rec = sub.add_parser("recommend", help="推荐拍摄场景")
    add_product_args(p_rec)
    p_rec.add_argument("--limit", "-n", type=int, default=3, help="返回数量 (默认: 3)")
    p_rec.set_defaults(func=cmd_recommend)

    p_prompt = sub.add_parser("prompt", help="编译提示词")
    add_product_args(p_prompt)
    p_prompt.add_argument("--scene", "-s", default=DEFAULT_SCENE_ID, choices=SCENE_IDS)
    p_prompt.add_argument("--aspect-ratio", choices=SETTING_CHOICES["aspect_ratio"])
    p_prompt.add_argument("--lighting", choices=SETTING_CHOICES["lighting"])
    p_prompt.add_argument("--quality", choices=SETTING_CHOICES["quality"])
    p_prompt.add_argument("--style", choices=SETTING_CHOICES["style"])
    p_prompt.add_argument("--background", choices=SETTING_CHOICES["background"])
    p_prompt.add_argument("--color-correction", action="store_true", help="严格匹配参考图颜色")
    p_prompt.add_argument("--image", help="产品图片，先做 AI 分析再编译")
    p_prompt.add_argument("--with-model", action="store_true", help="按类别推荐加入模特描述")
    p_prompt.add_argument("--aida", choices=tuple(AIDA_STAGES), help="AIDA 营销阶段")
    p_prompt.add_argument("--template", help="追加预设模板")
    p_prompt.add_argument("--extra", nargs="*", help="追加自由文本")
    p_prompt.add_argument("--negative", action="store_true", help="同时输出负面提示")
    p_prompt.add_argument("--preview", action="store_true", help="逐层预览")
    p_prompt.set_defaults(func=cmd_prompt)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
