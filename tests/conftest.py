# tests/conftest.py

import logging

import cv2
import numpy as np
import pytest


def write_image(path, img):
    assert cv2.imwrite(str(path), img)
    return str(path)


def random_image(height=100, width=100, seed=None):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 255, (height, width, 3), dtype=np.uint8)


@pytest.fixture
def image_dir(tmp_path):
    """a.png and b.png are pixel-identical; c.png is unrelated"""
    directory = tmp_path / "images"
    directory.mkdir()

    img = random_image(seed=1)
    write_image(directory / "a.png", img)
    write_image(directory / "b.png", img)
    write_image(directory / "c.png", random_image(seed=2))

    return directory


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers setup_logging attached to the root logger"""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_collision_finder", False):
            root.removeHandler(handler)
            handler.close()
