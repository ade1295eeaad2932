"""Tests for the layered prompt compiler."""

import copy
import re

import pytest

from scenes import get_scene_by_id
from prompt_builder import (
    PromptBuilder,
    compose_prompt,
    combine_layers,
    build_layers,
    build_lighting_layer,
    build_scale_layer,
    build_detail_layer,
    build_core_subject_layer,
    LAYER_WEIGHTS,
    LAYER_TYPES,
)


def make_builder(product, scene="studio-white", **settings):
    return PromptBuilder().set_product(product).set_scene(scene).set_settings(settings)


def layer_names(config):
    return [layer["name"] for layer in config["layers"]]


def layer_content(config, name):
    for layer in config["layers"]:
        if layer["name"] == name:
            return layer["content"]
    return ""


class TestEndToEnd:
    def test_smartwatch_outdoor(self, smartwatch):
        config = make_builder(smartwatch, "outdoor", lighting="natural", aspect_ratio="16:9").build()
        prompt = config["finalPrompt"]

        assert prompt.startswith("Create a professional product photograph of SmartWatch X")
        assert "water droplets" in prompt
        assert "sunlight" in prompt
        assert "shadows" in prompt
        assert "wide cinematic format" in prompt
        assert "blurry" in config["negativePrompt"]

    def test_empty_product_falls_back(self):
        product = {"name": "", "category": "", "description": "", "features": []}
        prompt = make_builder(product).build_prompt()
        assert prompt
        assert prompt.startswith("Create a professional product photograph of the product")

    def test_no_product_at_all(self):
        prompt = PromptBuilder().build_prompt()
        assert prompt.startswith("Create a professional product photograph of the product")

    def test_category_noun_used_without_name(self):
        prompt = make_builder({"name": "", "category": "electronics"}).build_prompt()
        assert prompt.startswith("Create a professional product photograph of an electronic device")

    def test_idempotent(self, smartwatch):
        builder = make_builder(smartwatch, "outdoor", lighting="natural", aspect_ratio="16:9")
        builder.set_deep_vision(
            {"material_analysis": {"surface_texture": "brushed titanium"}},
            {"color_grading": {"tone": "teal and orange"}},
        )
        first = builder.build()
        second = builder.build()
        assert first["finalPrompt"] == second["finalPrompt"]
        assert first["negativePrompt"] == second["negativePrompt"]

    def test_build_does_not_mutate_inputs(self, smartwatch):
        original = copy.deepcopy(smartwatch)
        make_builder(smartwatch, "lifestyle").build()
        assert smartwatch == original

    def test_metadata(self, smartwatch):
        config = make_builder(smartwatch, "luxury").build()
        assert config["metadata"]["scene"] == "luxury"
        assert config["metadata"]["product"] == "SmartWatch X"
        assert config["metadata"]["generatedAt"]

    def test_no_repeated_periods(self, smartwatch):
        builder = make_builder(smartwatch, "lifestyle")
        builder.add_prompt("Shot on film..").add_prompt("Keep it clean.")
        assert ".." not in builder.build_prompt()


class TestBuckets:
    def test_bucket_order(self, smartwatch):
        builder = make_builder(smartwatch, "studio-white")
        builder.set_model_prompt("MODEL_CLAUSE").set_marketing_prompt("MARKETING_CLAUSE")
        prompt = builder.build_prompt()

        idx_instruction = prompt.index("Create a")
        idx_subject = prompt.index("MODEL_CLAUSE")
        idx_environment = prompt.index("Use ")
        idx_technical = prompt.index("8K quality")
        idx_enhancement = prompt.index("MARKETING_CLAUSE")
        assert idx_instruction < idx_subject < idx_environment < idx_technical < idx_enhancement

    def test_instruction_keeps_existing_create(self):
        builder = PromptBuilder().set_layer_content("core_subject", "Create an image of a desk lamp.")
        assert builder.build_prompt().startswith("Create an image of a desk lamp.")

    def test_environment_rendered_as_use_clause(self):
        layers = [
            {"name": "scene_context", "content": "a white backdrop", "weight": 1.2, "enabled": True},
            {"name": "composition", "content": "square format.", "weight": 1.0, "enabled": True},
        ]
        assert combine_layers(layers) == "Use a white backdrop, square format."

    def test_disabled_and_negative_layers_skipped(self):
        layers = [
            {"name": "core_subject", "content": "photo of a mug", "weight": 1.5, "enabled": True},
            {"name": "quality", "content": "8K", "weight": 1.3, "enabled": False},
            {"name": "negative", "content": "blurry", "weight": 1.0, "enabled": True},
        ]
        assert combine_layers(layers) == "Create a photo of a mug."

    def test_extras_appended_last(self, smartwatch):
        builder = make_builder(smartwatch)
        builder.add_prompt("Extra one").add_prompt("Extra two.")
        assert builder.build_prompt().endswith("Extra one. Extra two.")


class TestSideChannels:
    def test_empty_side_channels_excluded(self, smartwatch):
        config = make_builder(smartwatch, "outdoor").build()
        for name in ("model", "fusion", "consistency", "marketing", "aida"):
            assert name not in layer_names(config)
        assert "Use " in config["finalPrompt"]
        assert "8K quality" in config["finalPrompt"]

    def test_side_channel_passthrough(self, smartwatch):
        builder = make_builder(smartwatch)
        builder.set_fusion_prompt("blend into reference").set_aida_prompt("grab attention")
        config = builder.build()
        assert layer_content(config, "fusion") == "blend into reference"
        assert "blend into reference" in config["finalPrompt"]
        assert "grab attention" in config["finalPrompt"]

    def test_reset_clears_state(self, smartwatch):
        builder = make_builder(smartwatch, "outdoor").set_model_prompt("MODEL_CLAUSE").add_prompt("EXTRA")
        builder.reset()
        prompt = builder.build_prompt()
        assert "MODEL_CLAUSE" not in prompt
        assert "EXTRA" not in prompt
        assert builder.build()["metadata"]["scene"] == "studio-white"


class TestOverridesAndValidation:
    def test_set_layer_content_overrides(self, smartwatch):
        builder = make_builder(smartwatch).set_layer_content("style", "moody editorial look")
        config = builder.build()
        assert layer_content(config, "style") == "moody editorial look"
        assert "commercial photography style" not in config["finalPrompt"]

    def test_unknown_layer_raises(self):
        with pytest.raises(ValueError):
            PromptBuilder().set_layer_content("sparkle", "x")

    def test_non_string_content_raises(self):
        with pytest.raises(ValueError):
            PromptBuilder().set_layer_content("detail", 5)
        with pytest.raises(ValueError):
            PromptBuilder().set_model_prompt(["a model"])
        with pytest.raises(ValueError):
            PromptBuilder().add_prompt(3)

    def test_none_content_treated_as_empty(self, smartwatch):
        config = make_builder(smartwatch).set_aida_prompt(None).set_layer_content("style", None).build()
        assert "aida" not in layer_names(config)
        assert "commercial photography style" in layer_content(config, "style")

    def test_invalid_setting_raises(self):
        with pytest.raises(ValueError):
            PromptBuilder().set_settings({"lighting": "neon"})

    def test_camel_case_settings_accepted(self, smartwatch):
        prompt = PromptBuilder().set_product(smartwatch).set_settings({"aspectRatio": "9:16"}).build_prompt()
        assert "vertical mobile format" in prompt

    def test_layer_weights(self):
        assert LAYER_WEIGHTS["core_subject"] == 1.5
        assert LAYER_WEIGHTS["color_fidelity"] == 1.45
        assert LAYER_WEIGHTS["detail"] == 0.8
        assert len(LAYER_TYPES) == 17


class TestScaleLayer:
    def test_studio_white_never_scaled(self):
        product = {"size_category": "pocket", "size_reference": "about the size of a coin"}
        assert build_scale_layer(product, get_scene_by_id("studio-white")) == ""

    def test_lifestyle_pocket(self):
        product = {"name": "Earbuds", "size_category": "pocket"}
        config = make_builder(product, "lifestyle").build()
        assert "easily fits in a pocket" in layer_content(config, "scale")
        assert "easily fits in a pocket" in config["finalPrompt"]

    def test_size_reference_and_generic_clause(self):
        product = {"size_reference": "about the size of a smartphone"}
        content = build_scale_layer(product, get_scene_by_id("outdoor"))
        assert content.startswith("the product is about the size of a smartphone")
        assert content.endswith("maintaining realistic scale relative to surrounding environment and furniture")


class TestLightingAndComposition:
    def test_studio_lighting_suppressed(self):
        scene = get_scene_by_id("studio-white")
        assert build_lighting_layer(scene, {"lighting": "studio"}) == ""

    def test_lighting_layer_absent_for_builtin_scene(self, smartwatch):
        config = make_builder(smartwatch, "studio-white", lighting="studio").build()
        assert "lighting" not in layer_names(config)

    def test_unknown_scene_uses_generic_phrases(self, smartwatch):
        config = make_builder(smartwatch, "underwater", lighting="dramatic").build()
        assert layer_content(config, "lighting").startswith("dramatic rim lighting")
        assert "centered composition at a slightly elevated angle" in layer_content(config, "composition")
        assert "scene_context" not in layer_names(config)
        assert "scale" not in layer_names(config)

    def test_aspect_phrase_always_present(self, smartwatch):
        config = make_builder(smartwatch, "minimalist", aspect_ratio="4:3").build()
        assert layer_content(config, "composition") == "landscape orientation"


class TestDeepVisionLayer:
    ART = {
        "lighting_scenario": {"style": "warm", "direction": "left", "atmosphere": "organic"},
        "photography_settings": {"shot_scale": "close-up", "depth_of_field": "shallow"},
        "negative_constraints": {"forbidden_elements": ["plastic wrap", "blurry"]},
    }

    def test_scene_lighting_wins(self, smartwatch):
        builder = make_builder(smartwatch, "studio-white").set_deep_vision(None, self.ART)
        content = layer_content(builder.build(), "deep_vision")
        assert "Light the scene" not in content
        assert "close-up shot" in content

    def test_lighting_sentence_for_unknown_scene(self, smartwatch):
        builder = make_builder(smartwatch, "custom").set_deep_vision(None, self.ART)
        assert "Light the scene with warm lighting from the left" in builder.build_prompt()

    def test_forbidden_elements_in_negative(self, smartwatch):
        config = make_builder(smartwatch).set_deep_vision(None, self.ART).build()
        negatives = config["negativePrompt"].split(", ")
        assert "plastic wrap" in negatives
        assert negatives.count("blurry") == 1

    def test_pure_function_accepts_raw_dna(self, smartwatch):
        config = compose_prompt(
            product=smartwatch,
            scene_id="studio-white",
            intrinsic_dna={"form_factor": {"shape_keywords": ["rounded", "slim"]}},
        )
        assert "Keep the product form factor: rounded, slim" in config["finalPrompt"]


class TestContentLayers:
    def test_core_subject_scene_description(self):
        product = {
            "name": "SmartWatch X",
            "brand": "Acme",
            "description": "generic description",
            "scene_descriptions": {"outdoor": "A rugged watch built for adventure"},
        }
        text = build_core_subject_layer(product, "outdoor")
        assert text == ("professional product photograph of SmartWatch X by Acme, "
                        "featuring rugged watch built for adventure")

    def test_core_subject_description_truncated(self):
        product = {"name": "Lamp", "description": "x" * 200}
        text = build_core_subject_layer(product, "studio-white")
        assert text.endswith("featuring " + "x" * 80)

    def test_detail_one_feature(self):
        text = build_detail_layer({"features": ["waterproof"]}, "studio-white")
        assert text == "highlighting that the product features waterproof"

    def test_detail_three_features(self):
        product = {"features": ["waterproof", "solar charging", "GPS", "NFC"]}
        text = build_detail_layer(product, "studio-white")
        assert text == "highlighting that the product features waterproof, solar charging, and GPS"
        assert "NFC" not in text

    def test_detail_two_features_and_modifiers(self):
        product = {"features": ["a", "b"], "category": "electronics", "style": "minimal",
                   "target_audience": "runners"}
        text = build_detail_layer(product, "studio-white")
        assert text == ("highlighting that the product features a and b, styled in a minimal aesthetic, "
                        "appealing to runners, emphasizing product focus, tech aesthetic")

    def test_detail_falls_back_to_category_enhancements(self):
        text = build_detail_layer({"category": "electronics"}, "luxury")
        assert text == "emphasizing sleek metallic surface, reflective screen"

    def test_enhancement_clauses_stay_lower_case(self):
        product = {"name": "Lamp", "category": "home", "style": "cozy", "target_audience": "students"}
        prompt = make_builder(product, "lifestyle").build_prompt()
        assert "styled in a cozy aesthetic, appealing to students, emphasizing" in prompt
        assert not re.search(r", (Styled|Appealing|Emphasize)", prompt)

    def test_color_fidelity_only_when_enabled(self, smartwatch):
        off = make_builder(smartwatch).build()
        on = make_builder(smartwatch, color_correction=True).build()
        assert "color_fidelity" not in layer_names(off)
        assert "reference image" in layer_content(on, "color_fidelity")

    def test_quality_extras(self, smartwatch):
        config = make_builder(smartwatch, quality="ultra", enhance_details=True, add_shadow=False).build()
        content = layer_content(config, "quality")
        assert content.startswith("16K resolution")
        assert "enhanced micro details" in content
        assert "natural product shadows" not in content

    def test_semantic_layer_capped(self):
        product = {"name": "金属 皮革 木质 玻璃", "category": "electronics"}
        layers = build_layers(product=product)
        semantic = next(layer for layer in layers if layer["name"] == "semantic")
        assert len(semantic["content"].split(", ")) == 5


class TestPreview:
    def test_preview_lists_layers(self, smartwatch):
        text = make_builder(smartwatch, "outdoor").preview()
        assert text.startswith("=== 提示词预览 ===")
        assert "[core_subject] (权重: 1.5)" in text
        assert "=== 最终提示词 ===" in text
