"""Tests for upload checks."""

from PIL import Image

from image_validator import check_upload, determine_quality, is_white_background, load_image


class TestQuality:
    def test_thresholds(self):
        assert determine_quality(2000, 1000) == "high"
        assert determine_quality(1000, 500) == "medium"
        assert determine_quality(700, 700) == "low"


class TestWhiteBackground:
    def test_white(self):
        assert is_white_background(Image.new("RGB", (300, 300), (255, 255, 255))) is True

    def test_colored(self):
        assert is_white_background(Image.new("RGB", (300, 300), (200, 30, 30))) is False

    def test_three_white_corners_enough(self):
        img = Image.new("RGB", (300, 300), (255, 255, 255))
        img.paste((0, 0, 0), (0, 0, 50, 50))
        assert is_white_background(img) is True

    def test_two_white_corners_not_enough(self):
        img = Image.new("RGB", (300, 300), (255, 255, 255))
        img.paste((0, 0, 0), (0, 0, 300, 50))
        assert is_white_background(img) is False


class TestCheckUpload:
    def test_passes(self, make_image_bytes):
        result = check_upload(make_image_bytes(800, 400), "image/png")
        assert result["passed"] is True
        assert result["reasons"] == []
        assert result["analysis"]["aspect_ratio"] == 2.0
        assert result["analysis"]["is_white_background"] is True
        assert result["analysis"]["width"] == 800

    def test_rejects_type(self, make_image_bytes):
        result = check_upload(make_image_bytes(), "image/gif")
        assert result["passed"] is False
        assert "image/gif" in result["reasons"][0]

    def test_rejects_small(self, make_image_bytes):
        result = check_upload(make_image_bytes(100, 300), "image/png")
        assert result["passed"] is False
        assert result["analysis"]["width"] == 100

    def test_unreadable(self):
        result = check_upload(b"not an image", "image/jpeg")
        assert result["passed"] is False
        assert result["analysis"] is None

    def test_path_source(self, tmp_path, make_image_bytes):
        path = tmp_path / "product.jpg"
        path.write_bytes(make_image_bytes(300, 300, color=(10, 10, 10), fmt="JPEG"))
        result = check_upload(str(path), "image/jpeg")
        assert result["passed"] is True
        assert result["analysis"]["is_white_background"] is False


class TestLoadImage:
    def test_converts_to_rgb(self, make_image_bytes):
        img = load_image(make_image_bytes(10, 10, color=(0, 0, 0, 0), mode="RGBA"))
        assert img.mode == "RGB"

    def test_invalid(self):
        assert load_image(b"garbage") is None
