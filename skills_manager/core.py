"""
Skills Manager Core Library

This module contains all core logic independent of the CLI interface,
allowing reuse by other Python programs.

Main Features:
    - Skill discovery: scan the skills root for skill directories
    - Link status: inspect the target directory without following links
    - Link management: create and remove one symlink per skill
    - Reconciliation: diff a desired selection against current links

Design Principles:
    - The filesystem is the only state: every call re-derives it
    - Never delete or overwrite anything that is not a symlink
    - Errors are raised as SkillsError subclasses, callers decide how to report
"""

import os
import sys
from pathlib import Path
from typing import Optional, TextIO


# =============================================================================
# Global Configuration
# =============================================================================

# Skills root used when neither --skills-dir nor SKILLS_DIR is given
DEFAULT_SKILLS_DIR = "skills"

SKILLS_DIR_ENV = "SKILLS_DIR"
TARGET_DIR_ENV = "SKILLS_TARGET_DIR"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CONFIG = 3
EXIT_INTERRUPTED = 130


# =============================================================================
# Terminal Color Handling
# =============================================================================

class Colors:
    """
    ANSI color code wrapper class.

    Design considerations:
        - Uses class attributes instead of instance, as colors are global settings
        - Provides disable() method for pipes, NO_COLOR and older Windows cmd
    """
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"

    @classmethod
    def disable(cls):
        """Disable all color output."""
        cls.RESET = cls.BOLD = cls.DIM = cls.RED = cls.GREEN = ""
        cls.YELLOW = cls.BLUE = cls.CYAN = ""


# Windows terminal compatibility handling
if sys.platform == "win32" and not os.environ.get("WT_SESSION"):
    try:
        import colorama
        colorama.init()
    except ImportError:
        Colors.disable()


ICONS = {
    "linked": "✓",
    "unlinked": "○",
    "broken": "⚠",
}


def status_icon(status: dict) -> str:
    """Colored icon for a status record."""
    if status["linked"]:
        return f"{Colors.GREEN}{ICONS['linked']}{Colors.RESET}"
    if status["broken"]:
        return f"{Colors.YELLOW}{ICONS['broken']}{Colors.RESET}"
    return f"{Colors.DIM}{ICONS['unlinked']}{Colors.RESET}"


def format_status(status: dict) -> str:
    """Render a status as '<icon> <name>[ (broken)]'."""
    suffix = f"{Colors.YELLOW} (broken){Colors.RESET}" if status["broken"] else ""
    return f"{status_icon(status)} {status['name']}{suffix}"


# =============================================================================
# Errors
# =============================================================================

class SkillsError(Exception):
    """Base class for every failure the tool reports to the operator."""
    exit_code = EXIT_FAILURE


class ConfigError(SkillsError):
    """The skills root is missing; nothing can be done without it."""
    exit_code = EXIT_CONFIG


class SkillNotFoundError(SkillsError):
    """No source directory exists for the requested skill."""


class ConflictError(SkillsError):
    """The link path is occupied by something that is not a symlink."""


class BrokenLinkError(SkillsError):
    """A symlink exists for the skill but cannot be inspected or resolved."""


# =============================================================================
# Run Context
# =============================================================================

class Context:
    """
    Everything a command needs from the outside world.

    Commands write through the context instead of print() so they can run
    against in-memory streams, and read operator input through prompt().
    """

    def __init__(
        self,
        skills_dir: Path,
        target_dir: Path,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        self.skills_dir = skills_dir
        self.target_dir = target_dir
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr

    def write(self, text: str = ""):
        print(text, file=self.stdout)

    def log_info(self, msg: str):
        """Info message (blue ℹ)."""
        print(f"{Colors.BLUE}ℹ{Colors.RESET} {msg}", file=self.stdout)

    def log_success(self, msg: str):
        """Success message (green ✓)."""
        print(f"{Colors.GREEN}✓{Colors.RESET} {msg}", file=self.stdout)

    def log_warning(self, msg: str):
        """Warning message (yellow ⚠)."""
        print(f"{Colors.YELLOW}⚠{Colors.RESET} {msg}", file=self.stdout)

    def log_error(self, msg: str):
        """Error message (red ✗)."""
        print(f"{Colors.RED}✗{Colors.RESET} {msg}", file=self.stderr)

    def prompt(self, message: str) -> Optional[str]:
        """
        Show a prompt and read one line of input.

        Returns None at end of input so the caller can treat it as quit.
        """
        self.stdout.write(message)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            return None
        return line.strip()


def get_claude_skills_dir(scope: str = "personal") -> Path:
    """
    Get the Claude Code skills directory that links are written to.

    Args:
        scope: "personal" (global) or "project"
    """
    if scope == "project":
        return Path.cwd() / ".claude" / "skills"
    else:
        return Path.home() / ".claude" / "skills"


def build_context(
    skills_dir: Optional[str] = None,
    target_dir: Optional[str] = None,
    project: bool = False,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    environ: Optional[dict] = None,
) -> Context:
    """
    Resolve the skills root and target directory.

    Precedence: explicit argument, then environment, then default.
    The skills root is made absolute but not resolved, because link
    targets are compared as raw strings.
    """
    env = os.environ if environ is None else environ

    source = skills_dir or env.get(SKILLS_DIR_ENV) or DEFAULT_SKILLS_DIR

    if target_dir:
        target = Path(target_dir)
    elif project:
        target = get_claude_skills_dir("project")
    elif env.get(TARGET_DIR_ENV):
        target = Path(env[TARGET_DIR_ENV])
    else:
        target = get_claude_skills_dir("personal")

    return Context(
        skills_dir=Path(source).expanduser().absolute(),
        target_dir=target.expanduser().absolute(),
        stdin=stdin,
        stdout=stdout,
        stderr=stderr,
    )


# =============================================================================
# Skill Discovery and Link Status
# =============================================================================

def list_skills(skills_dir: Path) -> list[str]:
    """
    Discover all skills in the skills root.

    Criteria: any non-hidden sub-directory is a skill; files are ignored.

    Returns:
        Skill names sorted lexicographically
    """
    if not skills_dir.is_dir():
        raise ConfigError(f"Skills directory '{skills_dir}' not found")

    return sorted(
        item.name
        for item in skills_dir.iterdir()
        if item.is_dir() and not item.name.startswith(".")
    )


def get_link_status(name: str, skills_dir: Path, target_dir: Path, strict: bool = False) -> dict:
    """
    Inspect target_dir/name without following it.

    Linked: a symlink whose raw target equals skills_dir/name.
    Broken: any other symlink whose target does not resolve, or an entry
            that could not be inspected.
    Anything else (absent, a real file or directory, a symlink to some
    other existing path) is unlinked.

    With strict=True a broken link raises BrokenLinkError instead of
    being reported in the status.
    """
    target_path = target_dir / name
    source_path = skills_dir / name
    status = {"name": name, "linked": False, "broken": False}

    try:
        if not os.path.lexists(target_path):
            return status
        if not target_path.is_symlink():
            return status
        link_target = os.readlink(target_path)
        if link_target == str(source_path):
            status["linked"] = True
        elif not target_path.exists():
            status["broken"] = True
    except OSError:
        status["broken"] = True

    if strict and status["broken"]:
        raise BrokenLinkError(f"{target_path} is a broken symlink")
    return status


def get_all_statuses(skills_dir: Path, target_dir: Path) -> list[dict]:
    """Status of every discovered skill, in discovery order."""
    return [
        get_link_status(name, skills_dir, target_dir)
        for name in list_skills(skills_dir)
    ]


# =============================================================================
# Link Management
# =============================================================================

def validate_skill_name(name: str):
    """Reject names that are empty or would escape the configured directories."""
    if not name or name in (".", "..") or "/" in name or os.sep in name:
        raise SkillNotFoundError(f"Invalid skill name: '{name}'")


def ensure_target_dir(target_dir: Path) -> bool:
    """
    Create the target directory if missing.

    Returns:
        True if the directory had to be created
    """
    if target_dir.is_dir():
        return False
    target_dir.mkdir(parents=True, exist_ok=True)
    return True


def link_skill(name: str, skills_dir: Path, target_dir: Path) -> str:
    """
    Point target_dir/name at skills_dir/name.

    An existing symlink is replaced whatever it points at; any other
    occupant is a conflict and is left untouched.

    Returns:
        "linked" or "relinked"
    """
    validate_skill_name(name)

    source_path = skills_dir / name
    target_path = target_dir / name

    if not source_path.is_dir():
        raise SkillNotFoundError(f"Skill '{name}' not found in {skills_dir}")

    ensure_target_dir(target_dir)

    action = "linked"
    if os.path.lexists(target_path):
        if not target_path.is_symlink():
            raise ConflictError(
                f"{target_path} exists but is not a symlink. Remove it manually first."
            )
        target_path.unlink()
        action = "relinked"

    os.symlink(str(source_path), str(target_path), target_is_directory=True)
    return action


def unlink_skill(name: str, target_dir: Path) -> str:
    """
    Remove the symlink target_dir/name.

    Returns:
        "unlinked", or "not linked" when there was nothing to remove
    """
    validate_skill_name(name)

    target_path = target_dir / name

    if not os.path.lexists(target_path):
        return "not linked"

    if not target_path.is_symlink():
        raise ConflictError(
            f"{target_path} exists but is not a symlink. Remove it manually."
        )

    target_path.unlink()
    return "unlinked"


# =============================================================================
# Reconciliation
# =============================================================================

def diff_selection(names: list[str], linked, selected) -> tuple[list[str], list[str]]:
    """
    Compute the minimal changes that turn the linked set into the selection.

    Both result lists follow the order of names, so output is reproducible.

    Returns:
        (to_link, to_unlink)
    """
    linked = set(linked)
    selected = set(selected)
    to_link = [n for n in names if n in selected and n not in linked]
    to_unlink = [n for n in names if n in linked and n not in selected]
    return to_link, to_unlink


def apply_changes(ctx: Context, to_link: list[str], to_unlink: list[str]) -> list[tuple[str, Exception]]:
    """
    Apply a batch of unlink and link operations.

    Each skill is attempted independently: a failure is reported and
    collected, and the rest of the batch still runs.

    Returns:
        List of (skill name, error) for the operations that failed
    """
    failures = []

    for name in to_unlink:
        try:
            result = unlink_skill(name, ctx.target_dir)
        except (SkillsError, OSError) as e:
            ctx.log_error(str(e))
            failures.append((name, e))
            continue
        if result == "unlinked":
            ctx.write(f"{Colors.DIM}{ICONS['unlinked']}{Colors.RESET} Unlinked: {name}")

    if to_link:
        try:
            if ensure_target_dir(ctx.target_dir):
                ctx.log_info(f"Creating target directory: {ctx.target_dir}")
        except OSError as e:
            ctx.log_error(f"Cannot create target directory {ctx.target_dir}: {e}")
            failures.extend((name, e) for name in to_link)
            return failures

    for name in to_link:
        try:
            link_skill(name, ctx.skills_dir, ctx.target_dir)
        except (SkillsError, OSError) as e:
            ctx.log_error(str(e))
            failures.append((name, e))
            continue
        ctx.write(f"{Colors.GREEN}{ICONS['linked']}{Colors.RESET} Linked: {name}")

    return failures
