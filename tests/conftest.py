import io

import pytest
from PIL import Image


@pytest.fixture
def make_image_bytes():
    """生成内存中的测试图片"""

    def _make(width=512, height=512, color=(255, 255, 255), fmt="PNG", mode="RGB"):
        img = Image.new(mode, (width, height), color)
        buf = io.BytesIO()
        img.save(buf, format=fmt)
        return buf.getvalue()

    return _make


@pytest.fixture
def smartwatch():
    return {
        "name": "SmartWatch X",
        "category": "electronics",
        "features": ["waterproof", "solar charging"],
        "description": "",
    }
