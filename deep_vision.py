"""
Deep Vision DNA
- ProductIntrinsicDNA: 产品固有事实（材质、形态、品牌色），同一产品的所有艺术指导变体都不能改变
- ArtDirectionDNA: 一次风格变体（光照、景别/景深、构图、调色、光学参数、禁止元素），可随时替换

AI 返回的结构经常缺字段或类型不对，这里统一清洗成固定形状，
再由 describe_dna() 逐项生成英文陈述句，缺哪项就跳过哪句。
"""

import re
import logging

logger = logging.getLogger(__name__)

HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


def _text(value):
    return value.strip() if isinstance(value, str) else ""


def _text_list(value):
    if not isinstance(value, (list, tuple)):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def _section(raw, key):
    value = raw.get(key) if isinstance(raw, dict) else None
    return value if isinstance(value, dict) else {}


# ============================================================
# 清洗
# ============================================================

def normalize_intrinsic_dna(raw):
    """返回固定形状的 ProductIntrinsicDNA，无法识别的字段置空"""
    if not isinstance(raw, dict):
        return None

    material = _section(raw, "material_analysis")
    form = _section(raw, "form_factor")
    palette = [c for c in _text_list(raw.get("brand_color_palette")) if HEX_COLOR_PATTERN.match(c)]

    return {
        "material_analysis": {
            "surface_texture": _text(material.get("surface_texture")),
            "reflectivity": _text(material.get("reflectivity")),
        },
        "form_factor": {
            "shape_keywords": _text_list(form.get("shape_keywords")),
        },
        "brand_color_palette": palette,
    }


def normalize_art_direction_dna(raw):
    """返回 ArtDirectionDNA，只保留有内容的子结构"""
    if not isinstance(raw, dict):
        return None

    dna = {}

    lighting = _section(raw, "lighting_scenario")
    lighting = {k: _text(lighting.get(k)) for k in ("style", "direction", "atmosphere")}
    if any(lighting.values()):
        dna["lighting_scenario"] = lighting

    photo = _section(raw, "photography_settings")
    photo = {k: _text(photo.get(k)) for k in ("shot_scale", "depth_of_field")}
    if any(photo.values()):
        dna["photography_settings"] = photo

    keyword = _text(_section(raw, "composition_guide").get("keyword"))
    if keyword:
        dna["composition_guide"] = {"keyword": keyword}

    tone = _text(_section(raw, "color_grading").get("tone"))
    if tone:
        dna["color_grading"] = {"tone": tone}

    optics = _section(raw, "optical_mechanics")
    optics = {k: _text(optics.get(k)) for k in ("lens_type", "aperture", "shutter_speed")}
    if any(optics.values()):
        dna["optical_mechanics"] = optics

    forbidden = _text_list(_section(raw, "negative_constraints").get("forbidden_elements"))
    if forbidden:
        dna["negative_constraints"] = {"forbidden_elements": forbidden}

    return dna


# ============================================================
# 句子生成
# ============================================================

def _material_sentence(intrinsic):
    material = _section(intrinsic, "material_analysis")
    texture = _text(material.get("surface_texture"))
    reflectivity = _text(material.get("reflectivity"))
    if texture and reflectivity:
        return f"Preserve the product's material: {texture} surface with {reflectivity} reflectivity"
    if texture:
        return f"Preserve the product's material: {texture} surface"
    if reflectivity:
        return f"Preserve the product's material: {reflectivity} reflectivity"
    return ""


def _form_sentence(intrinsic):
    shapes = _text_list(_section(intrinsic, "form_factor").get("shape_keywords"))
    if not shapes:
        return ""
    return f"Keep the product form factor: {', '.join(shapes)}"


def _lighting_sentence(art):
    lighting = _section(art, "lighting_scenario")
    style = _text(lighting.get("style"))
    direction = _text(lighting.get("direction"))
    atmosphere = _text(lighting.get("atmosphere"))
    if not (style or direction or atmosphere):
        return ""

    sentence = f"Light the scene with {style or 'balanced'} lighting"
    if direction:
        sentence += f" from the {direction}"
    if atmosphere:
        sentence += f", creating a {atmosphere} atmosphere"
    return sentence


def _camera_sentence(art):
    photo = _section(art, "photography_settings")
    shot_scale = _text(photo.get("shot_scale"))
    depth = _text(photo.get("depth_of_field"))
    if shot_scale and depth:
        return f"Frame it as a {shot_scale} shot with {depth} depth of field"
    if shot_scale:
        return f"Frame it as a {shot_scale} shot"
    if depth:
        return f"Use {depth} depth of field"
    return ""


def _color_grading_sentence(art):
    tone = _text(_section(art, "color_grading").get("tone"))
    return f"Apply {tone} color grading" if tone else ""


def _optics_sentence(art):
    optics = _section(art, "optical_mechanics")
    lens = _text(optics.get("lens_type"))
    aperture = _text(optics.get("aperture"))
    shutter = _text(optics.get("shutter_speed"))
    if not (lens or aperture or shutter):
        return ""

    parts = []
    if lens:
        parts.append(f"a {lens} lens")
    if aperture:
        parts.append(f"aperture {aperture}")
    if shutter:
        parts.append(f"shutter speed {shutter}")
    return "Shoot with " + ", ".join(parts)


def _composition_sentence(art):
    keyword = _text(_section(art, "composition_guide").get("keyword"))
    return f"Compose using {keyword}" if keyword else ""


def describe_dna(intrinsic=None, art_direction=None, include_lighting=True):
    """
    Intrinsic + Art Direction → 陈述句列表（顺序固定）
    include_lighting=False 时不输出光照句（场景自带光照描述时由调用方关闭）
    品牌色不输出，颜色通过参考图传递
    """
    intrinsic = intrinsic if isinstance(intrinsic, dict) else {}
    art = art_direction if isinstance(art_direction, dict) else {}

    sentences = [
        _material_sentence(intrinsic),
        _form_sentence(intrinsic),
        _lighting_sentence(art) if include_lighting else "",
        _camera_sentence(art),
        _color_grading_sentence(art),
        _optics_sentence(art),
        _composition_sentence(art),
    ]
    return [s for s in sentences if s]


def get_forbidden_elements(art_direction):
    if not isinstance(art_direction, dict):
        return []
    return _text_list(_section(art_direction, "negative_constraints").get("forbidden_elements"))
