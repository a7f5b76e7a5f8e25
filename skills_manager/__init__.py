"""
Skills Manager - Link Claude Code skills into the assistant's skills directory

Public API:
    - list_skills: Find skill directories in the skills root
    - get_link_status: Inspect the link for one skill
    - link_skill / unlink_skill: Create or remove one skill symlink
    - diff_selection: Compute the link/unlink delta for a selection
    - apply_changes: Apply a batch of link/unlink operations
    - build_context: Resolve directories and output streams

CLI Entry Point:
    - main: CLI main function
"""

__version__ = "1.0.0"

from .core import (
    # Constants
    DEFAULT_SKILLS_DIR,
    ICONS,

    # Output
    Colors,
    Context,
    build_context,
    get_claude_skills_dir,

    # Errors
    SkillsError,
    ConfigError,
    SkillNotFoundError,
    ConflictError,
    BrokenLinkError,

    # Skill Discovery and Status
    list_skills,
    get_link_status,
    get_all_statuses,
    format_status,

    # Link Management
    validate_skill_name,
    ensure_target_dir,
    link_skill,
    unlink_skill,

    # Reconciliation
    diff_selection,
    apply_changes,
)

from .cli import main

__all__ = [
    # Constants
    "DEFAULT_SKILLS_DIR",
    "ICONS",

    # Output
    "Colors",
    "Context",
    "build_context",
    "get_claude_skills_dir",

    # Errors
    "SkillsError",
    "ConfigError",
    "SkillNotFoundError",
    "ConflictError",
    "BrokenLinkError",

    # Skill Discovery and Status
    "list_skills",
    "get_link_status",
    "get_all_statuses",
    "format_status",

    # Link Management
    "validate_skill_name",
    "ensure_target_dir",
    "link_skill",
    "unlink_skill",

    # Reconciliation
    "diff_selection",
    "apply_changes",

    # CLI
    "main",
]
