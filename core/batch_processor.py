# core/batch_processor.py

import logging
import multiprocessing as mp
import threading
from concurrent.futures import ThreadPoolExecutor, ProcessPoolExecutor
from typing import Callable, List, NamedTuple, Optional, Sequence

import imagehash
from tqdm import tqdm

from core.exceptions import ConfigurationError, ImageDecodeError
from core.hashing import Dimensions, ImageHasher, hash_one

logger = logging.getLogger(__name__)

# Holds the hasher owned by the current pool worker
_worker_state = threading.local()


class HashedImage(NamedTuple):
    dimensions: Dimensions
    path: str
    hash: imagehash.ImageHash


def _init_worker(hasher_factory: Callable[[], ImageHasher]):
    """Pool initializer: build this worker's private hasher once"""
    _worker_state.hasher = hasher_factory()
    logger.debug("Worker %s built %r", threading.current_thread().name,
                 _worker_state.hasher)


def _hash_path(path: str) -> Optional[HashedImage]:
    """Hash one path with the worker's hasher; None if it fails to decode"""
    try:
        dimensions, image_hash = hash_one(_worker_state.hasher, path)
    except ImageDecodeError as e:
        logger.debug("Skipping undecodable file %s (%s)", e.path, e.reason)
        return None
    return HashedImage(dimensions, path, image_hash)


class BatchProcessor:
    """
    Fan perceptual hashing out over a worker pool
    """

    def __init__(self,
                 n_workers: int = None,
                 use_threading: bool = True,
                 show_progress: bool = False):
        if n_workers is not None and n_workers < 1:
            raise ConfigurationError(f"n_workers must be positive, got {n_workers}")
        self.n_workers = n_workers or mp.cpu_count()
        self.use_threading = use_threading
        self.show_progress = show_progress

    def process_all(self,
                    hasher_factory: Callable[[], ImageHasher],
                    paths: Sequence[str]) -> List[HashedImage]:
        """
        Hash every path in parallel.

        Args:
            hasher_factory: Called once per worker to build its hasher.
                Must be picklable when running with processes.
            paths: Candidate file paths

        Returns:
            Successfully hashed images. Files that fail to decode are
            dropped; result order is not significant.
        """
        if not paths:
            return []

        executor_class = ThreadPoolExecutor if self.use_threading else ProcessPoolExecutor
        n_workers = min(self.n_workers, len(paths))
        logger.info("Hashing %d files with %d %s", len(paths), n_workers,
                    "threads" if self.use_threading else "processes")

        with executor_class(max_workers=n_workers,
                            initializer=_init_worker,
                            initargs=(hasher_factory,)) as executor:
            results = list(tqdm(
                executor.map(_hash_path, paths),
                total=len(paths),
                desc="Hashing images",
                disable=not self.show_progress
            ))

        hashed = [result for result in results if result is not None]
        skipped = len(paths) - len(hashed)
        if skipped:
            logger.info("Skipped %d files that could not be decoded", skipped)

        return hashed
