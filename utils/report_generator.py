# utils/report_generator.py

import json
import logging
from pathlib import Path
from typing import List

from core.collision_detector import CollisionGroup, CollisionReport
from utils.file_utils import format_file_size

logger = logging.getLogger(__name__)


def format_collisions(groups: List[CollisionGroup]) -> str:
    """
    Render collision groups in the console format.

    Each group is preceded by a blank line. Returns an empty string when
    there are no groups.
    """
    lines = []
    for group in groups:
        lines.append("")
        lines.append("collision:")
        lines.append(f"  {group.width} x {group.height}")
        for path in group.paths:
            lines.append(f"    {path}")

    if not lines:
        return ""
    return "\n".join(lines) + "\n"


class DuplicateReportGenerator:
    """
    Generate JSON reports for collision detection results
    """

    def generate_report(self,
                        report: CollisionReport,
                        output_path: str = "collision_report.json"):
        """Write the report to output_path as JSON"""
        report_data = {
            'resolution': report.config.resolution,
            'use_dct': report.config.use_dct,
            'candidates': report.candidates,
            'hashed': report.hashed,
            'groups': [
                {
                    'hash': str(group.hash),
                    'width': group.width,
                    'height': group.height,
                    'paths': list(group.paths)
                }
                for group in report.groups
            ]
        }

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(report_data, f, indent=2)

        logger.info("Report generated: %s (%d groups, %s reclaimable)",
                    output_path, len(report.groups),
                    format_file_size(self._calculate_space_savings(report.groups)))

    def _calculate_space_savings(self, groups: List[CollisionGroup]) -> int:
        """Bytes freed by keeping only the first file of each group"""
        total_size = 0

        for group in groups:
            for path in group.paths[1:]:
                try:
                    total_size += Path(path).stat().st_size
                except OSError:
                    continue

        return total_size
