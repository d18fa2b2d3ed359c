"""Git operations."""

from pubz.git.repo import (
    commit_all,
    commit_paths,
    create_tag,
    get_uncommitted_files,
    parse_porcelain,
    push_tag,
    run_git_command,
)

__all__ = [
    "commit_all",
    "commit_paths",
    "create_tag",
    "get_uncommitted_files",
    "parse_porcelain",
    "push_tag",
    "run_git_command",
]
