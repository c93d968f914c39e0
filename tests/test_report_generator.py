# tests/test_report_generator.py

import json
import os

import pytest

from core.batch_processor import HashedImage
from core.collision_detector import CollisionReport, find_collisions
from core.hashing import HashConfig, build_hasher, hash_one
from utils.report_generator import DuplicateReportGenerator, format_collisions
from conftest import random_image, write_image


@pytest.fixture
def groups(tmp_path):
    img = random_image(seed=20)
    first = write_image(tmp_path / "first.png", img)
    second = write_image(tmp_path / "second.png", img)
    _, image_hash = hash_one(build_hasher(), first)
    return find_collisions([
        HashedImage((100, 100), first, image_hash),
        HashedImage((100, 100), second, image_hash),
    ])


def test_format_collisions(groups):
    first, second = groups[0].paths

    assert format_collisions(groups) == (
        "\n"
        "collision:\n"
        "  100 x 100\n"
        f"    {first}\n"
        f"    {second}\n"
    )


def test_format_no_collisions():
    assert format_collisions([]) == ""


def test_json_report(tmp_path, groups):
    report = CollisionReport(config=HashConfig(), candidates=3, hashed=2, groups=groups)
    output = tmp_path / "report.json"

    DuplicateReportGenerator().generate_report(report, str(output))

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["resolution"] == 10
    assert data["use_dct"] is True
    assert data["candidates"] == 3
    assert data["hashed"] == 2
    assert len(data["groups"]) == 1
    assert data["groups"][0]["width"] == 100
    assert data["groups"][0]["paths"] == groups[0].paths
    assert data["groups"][0]["hash"] == str(groups[0].hash)


def test_space_savings_counts_all_but_first(groups):
    savings = DuplicateReportGenerator()._calculate_space_savings(groups)

    assert savings == os.path.getsize(groups[0].paths[1])
