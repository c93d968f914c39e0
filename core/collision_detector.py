# core/collision_detector.py

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

import imagehash

from core.batch_processor import BatchProcessor, HashedImage
from core.hashing import Dimensions, HashConfig

logger = logging.getLogger(__name__)

CollisionKey = Tuple[imagehash.ImageHash, Dimensions]


@dataclass
class CollisionGroup:
    """Files sharing both a perceptual hash and pixel dimensions"""
    hash: imagehash.ImageHash
    dimensions: Dimensions
    paths: List[str] = field(default_factory=list)

    @property
    def width(self) -> int:
        return self.dimensions[0]

    @property
    def height(self) -> int:
        return self.dimensions[1]


@dataclass
class CollisionReport:
    """Result of one detection run under a single HashConfig"""
    config: HashConfig
    candidates: int
    hashed: int
    groups: List[CollisionGroup]


def aggregate(items: Iterable[HashedImage]) -> Dict[CollisionKey, List[str]]:
    """
    Group hashed images by (hash, dimensions).

    Paths within a group keep the order in which items arrive.
    """
    groups: Dict[CollisionKey, List[str]] = {}
    for dimensions, path, image_hash in items:
        groups.setdefault((image_hash, dimensions), []).append(path)
    return groups


def find_collisions(items: Iterable[HashedImage]) -> List[CollisionGroup]:
    """
    Aggregate and keep only groups with two or more members.

    Groups are ordered by hash hex string, then by (width, height).
    """
    collisions = [
        CollisionGroup(hash=image_hash, dimensions=dimensions, paths=paths)
        for (image_hash, dimensions), paths in aggregate(items).items()
        if len(paths) > 1
    ]
    collisions.sort(key=lambda group: (str(group.hash), group.dimensions))
    return collisions


class CollisionDetector:
    """
    Hash a set of candidate files and report exact collisions.

    The detector owns the run's HashConfig; every worker hasher is built
    from it, so all hashes in one aggregation are comparable.
    """

    def __init__(self, config: HashConfig, processor: BatchProcessor = None):
        self.config = config
        self.processor = processor or BatchProcessor()

    def detect(self, paths: Sequence[str]) -> CollisionReport:
        logger.info("Detecting collisions among %d files (resolution=%d, dct=%s)",
                    len(paths), self.config.resolution, self.config.use_dct)

        hashed = self.processor.process_all(self.config.build, paths)
        groups = find_collisions(hashed)

        logger.info("Found %d collision groups among %d hashed images",
                    len(groups), len(hashed))
        return CollisionReport(
            config=self.config,
            candidates=len(paths),
            hashed=len(hashed),
            groups=groups
        )
