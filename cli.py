# cli.py

import argparse
import logging
import os
import sys
from pathlib import Path

from config import DetectorConfig
from core.batch_processor import BatchProcessor
from core.collision_detector import CollisionDetector
from core.exceptions import CollisionFinderError
from utils.file_utils import apply_ignore, list_candidate_files
from utils.logging_config import setup_logging
from utils.report_generator import DuplicateReportGenerator, format_collisions

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-collisions",
        description="Find images in a directory whose perceptual hashes collide"
    )
    parser.add_argument('path', nargs='?', default=None,
                        help='Directory to scan (default: current directory)')
    parser.add_argument('-i', '--ignore',
                        help='Text file listing paths to ignore, one per line')
    parser.add_argument('--no-dct', action='store_true',
                        help='Deactivate DCT preprocessing')
    parser.add_argument('-r', '--resolution', type=int,
                        help='Override hash resolution (default 10)')
    parser.add_argument('-c', '--config',
                        help='YAML configuration file (default: config.yaml if present)')
    parser.add_argument('-w', '--workers', type=int,
                        help='Number of parallel workers (default: CPU count)')
    parser.add_argument('--processes', action='store_true',
                        help='Use worker processes instead of threads')
    parser.add_argument('--progress', action='store_true',
                        help='Show a progress bar on stderr')
    parser.add_argument('-o', '--output',
                        help='Also write the collision report as JSON')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Increase log verbosity (-v info, -vv debug)')
    return parser


def apply_overrides(config: DetectorConfig, args) -> DetectorConfig:
    """Command line flags take precedence over the config file"""
    if args.resolution is not None:
        config.hashing.resolution = args.resolution
    if args.no_dct:
        config.hashing.use_dct = False
    if args.workers is not None:
        config.n_workers = args.workers
    if args.processes:
        config.use_threading = False
    if args.progress:
        config.show_progress = True
    if args.verbose == 1:
        config.log_level = "INFO"
    elif args.verbose > 1:
        config.log_level = "DEBUG"
    return config


def run(args) -> None:
    """Execute a scan; fatal errors propagate to the caller"""
    config_path = args.config or DEFAULT_CONFIG_PATH
    config = apply_overrides(DetectorConfig.load(config_path), args)
    setup_logging(config.log_level, config.log_dir)
    if args.config and not Path(args.config).exists():
        logger.warning("Config file %s not found, using defaults", args.config)

    # Reject a bad configuration before any filesystem or hashing work
    hash_config = config.hash_config()

    directory = args.path if args.path is not None else os.getcwd()
    logger.info("Scanning %s", directory)

    image_paths = list_candidate_files(directory)
    if args.ignore:
        image_paths = apply_ignore(image_paths, args.ignore)

    processor = BatchProcessor(
        n_workers=config.n_workers,
        use_threading=config.use_threading,
        show_progress=config.show_progress
    )
    detector = CollisionDetector(hash_config, processor)
    report = detector.detect(image_paths)

    # stdout stays empty if the report file cannot be written
    if args.output:
        DuplicateReportGenerator().generate_report(report, args.output)

    sys.stdout.write(format_collisions(report.groups))
    sys.stdout.flush()


def main_cli(argv=None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        run(args)
    except (OSError, CollisionFinderError) as e:
        print(e, file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main_cli())
