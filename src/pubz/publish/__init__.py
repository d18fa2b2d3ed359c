"""Build, verification and registry publishing."""

from pubz.publish.build import collect_entry_artifacts, find_missing_artifacts, run_build
from pubz.publish.registry import build_publish_args, publish_package

__all__ = [
    "build_publish_args",
    "collect_entry_artifacts",
    "find_missing_artifacts",
    "publish_package",
    "run_build",
]
