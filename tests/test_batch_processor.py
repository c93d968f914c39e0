# tests/test_batch_processor.py

import threading

import pytest

from core.batch_processor import BatchProcessor, HashedImage
from core.exceptions import ConfigurationError
from core.hashing import HashConfig
from conftest import random_image, write_image


class CountingFactory:
    """Hasher factory that records every hasher it builds"""

    def __init__(self, config):
        self.config = config
        self.built = []
        self.lock = threading.Lock()

    def __call__(self):
        hasher = self.config.build()
        with self.lock:
            self.built.append((threading.get_ident(), hasher))
        return hasher


@pytest.fixture
def image_paths(tmp_path):
    return [
        write_image(tmp_path / f"img_{i}.png", random_image(seed=i))
        for i in range(6)
    ]


def test_process_all_hashes_every_image(image_paths):
    processor = BatchProcessor(n_workers=2)

    results = processor.process_all(HashConfig().build, image_paths)

    assert len(results) == len(image_paths)
    assert {r.path for r in results} == set(image_paths)
    for result in results:
        assert isinstance(result, HashedImage)
        assert result.dimensions == (100, 100)


def test_one_hasher_per_worker(image_paths):
    factory = CountingFactory(HashConfig())
    processor = BatchProcessor(n_workers=2)

    results = processor.process_all(factory, image_paths)

    assert len(results) == len(image_paths)
    assert 1 <= len(factory.built) <= 2
    # each worker thread built exactly one hasher
    thread_ids = [ident for ident, _ in factory.built]
    assert len(thread_ids) == len(set(thread_ids))


def test_decode_failures_are_dropped(tmp_path, image_paths, capsys):
    corrupt = tmp_path / "corrupt.jpg"
    corrupt.write_bytes(b"\xff\xd8 garbage")
    paths = image_paths[:2] + [str(corrupt)] + image_paths[2:]

    results = BatchProcessor(n_workers=3).process_all(HashConfig().build, paths)

    assert len(results) == len(image_paths)
    assert str(corrupt) not in {r.path for r in results}
    captured = capsys.readouterr()
    assert captured.out == ""
    assert str(corrupt) not in captured.err


def test_all_failures_yield_empty_result(tmp_path):
    paths = []
    for i in range(3):
        path = tmp_path / f"bad_{i}.png"
        path.write_text("nope")
        paths.append(str(path))

    assert BatchProcessor(n_workers=2).process_all(HashConfig().build, paths) == []


def test_empty_input_does_not_build_hashers():
    factory = CountingFactory(HashConfig())

    assert BatchProcessor().process_all(factory, []) == []
    assert factory.built == []


def test_process_pool(image_paths):
    processor = BatchProcessor(n_workers=2, use_threading=False)

    results = processor.process_all(HashConfig(resolution=8).build, image_paths)

    assert {r.path for r in results} == set(image_paths)
    assert all(r.hash.hash.size == 64 for r in results)


@pytest.mark.parametrize("n_workers", [0, -1])
def test_invalid_worker_count(n_workers):
    with pytest.raises(ConfigurationError):
        BatchProcessor(n_workers=n_workers)
