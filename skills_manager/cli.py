"""
Skills Manager Command Line Interface

此模組負責 CLI 的參數解析和指令處理，核心邏輯由 core 模組提供。
"""

import argparse
import os
import sys

from . import __version__
from .core import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_OK,
    EXIT_USAGE,
    ICONS,
    SKILLS_DIR_ENV,
    TARGET_DIR_ENV,
    Colors,
    SkillsError,
    apply_changes,
    build_context,
    diff_selection,
    format_status,
    get_all_statuses,
    link_skill,
    unlink_skill,
)


QUIT_WORDS = ("q", "quit", "exit")
APPLY_WORDS = ("", "a", "apply")
CANCEL_WORDS = ("c", "cancel")


# =============================================================================
# 輔助函式
# =============================================================================

def print_header(ctx) -> None:
    """輸出標題與目標目錄。"""
    ctx.write(f"{Colors.BOLD}Skill Manager - Claude{Colors.RESET}")
    ctx.write(f"{Colors.DIM}Target: {ctx.target_dir}{Colors.RESET}")
    ctx.write()


def linked_names(statuses: list[dict]) -> set:
    return {s["name"] for s in statuses if s["linked"]}


def parse_selection(selection: str, count: int) -> list[int]:
    """
    解析選擇字串，回傳 0-based 索引。

    支援逗號分隔的數字 (1,3,5) 與範圍 (1-5)，超出範圍的數字會被忽略。
    格式錯誤時拋出 ValueError。
    """
    indices = set()
    for part in selection.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = map(int, part.split("-", 1))
            for i in range(max(start, 1), min(end, count) + 1):
                indices.add(i - 1)
        else:
            i = int(part)
            if 1 <= i <= count:
                indices.add(i - 1)
    return sorted(indices)


def render_skills(ctx, statuses: list[dict], selected: set) -> None:
    """互動模式的 skill 列表：目前狀態加上待套用的選擇。"""
    print_header(ctx)

    for i, status in enumerate(statuses, 1):
        wanted = status["name"] in selected
        box = f"{Colors.CYAN}[x]{Colors.RESET}" if wanted else "[ ]"
        pending = f" {Colors.YELLOW}*{Colors.RESET}" if wanted != status["linked"] else ""
        ctx.write(f"  [{i}] {box} {format_status(status)}{pending}")

    ctx.write()
    ctx.write(f"{Colors.BOLD}Enter selection:{Colors.RESET}")
    ctx.write("  - Numbers to toggle (e.g., 1,3,5) or a range (e.g., 1-5)")
    ctx.write("  - 'all' or '*' to select all, 'none' to clear")
    ctx.write("  - Enter or 'a' to apply, 'c' to cancel changes")
    ctx.write("  - 'q' to quit")


# =============================================================================
# CLI Commands
# =============================================================================

def cmd_list(ctx, args):
    """list 指令：列出所有 skills 及其連結狀態。"""
    statuses = get_all_statuses(ctx.skills_dir, ctx.target_dir)

    ctx.write()
    print_header(ctx)

    if not statuses:
        ctx.log_warning(f"No skills found in {ctx.skills_dir}")
        return EXIT_OK

    for status in statuses:
        ctx.write(format_status(status))

    linked = sum(1 for s in statuses if s["linked"])
    ctx.write()
    ctx.write(f"{Colors.GREEN}Total: {len(statuses)} skills, {linked} linked{Colors.RESET}")
    ctx.write()
    return EXIT_OK


def cmd_link(ctx, args):
    """link 指令：為單一 skill 建立 symlink。"""
    name = args.name
    if not name.strip():
        ctx.log_error("Skill name required")
        return EXIT_USAGE

    created = not ctx.target_dir.is_dir()
    link_skill(name, ctx.skills_dir, ctx.target_dir)
    if created:
        ctx.log_info(f"Created target directory: {ctx.target_dir}")
    ctx.write(f"{Colors.GREEN}{ICONS['linked']}{Colors.RESET} Linked: {name}")
    return EXIT_OK


def cmd_unlink(ctx, args):
    """unlink 指令：移除單一 skill 的 symlink。"""
    name = args.name
    if not name.strip():
        ctx.log_error("Skill name required")
        return EXIT_USAGE

    result = unlink_skill(name, ctx.target_dir)
    if result == "not linked":
        ctx.write(f"{Colors.DIM}Skill '{name}' is not linked{Colors.RESET}")
    else:
        ctx.write(f"{Colors.DIM}{ICONS['unlinked']}{Colors.RESET} Unlinked: {name}")
    return EXIT_OK


def cmd_interactive(ctx, args):
    """interactive 指令：切換選擇後一次套用差異。"""
    statuses = get_all_statuses(ctx.skills_dir, ctx.target_dir)
    selected = linked_names(statuses)

    while True:
        render_skills(ctx, statuses, selected)

        answer = ctx.prompt(f"\n{Colors.GREEN}>{Colors.RESET} ")
        if answer is None:
            ctx.write()
            break

        command = answer.lower()
        names = [s["name"] for s in statuses]

        if command in QUIT_WORDS:
            break

        if command in CANCEL_WORDS:
            selected = linked_names(statuses)
            ctx.log_info("Pending changes discarded")
            continue

        if command in APPLY_WORDS:
            to_link, to_unlink = diff_selection(names, linked_names(statuses), selected)
            if not to_link and not to_unlink:
                ctx.log_info("No changes to apply")
            else:
                failures = apply_changes(ctx, to_link, to_unlink)
                total = len(to_link) + len(to_unlink)
                if failures:
                    ctx.log_warning(f"Applied {total - len(failures)}/{total} changes")
                    for name, error in failures:
                        ctx.write(f"  {Colors.RED}•{Colors.RESET} {name}: {error}")
                else:
                    ctx.log_success(f"Applied {total} changes")
            ctx.write()

            statuses = get_all_statuses(ctx.skills_dir, ctx.target_dir)
            selected = linked_names(statuses)
            continue

        if command in ("all", "*"):
            selected = set(names)
            continue

        if command == "none":
            selected = set()
            continue

        try:
            indices = parse_selection(command, len(statuses))
        except ValueError:
            ctx.log_error("Invalid selection format")
            continue

        for i in indices:
            selected ^= {names[i]}

    return EXIT_OK


# =============================================================================
# Main Entry Point
# =============================================================================

def add_location_args(parser, suppress=False):
    """加入 --skills-dir / --target / --project / --no-color 參數。"""
    default = argparse.SUPPRESS if suppress else None
    parser.add_argument("--skills-dir", "-s", default=default,
                        help=f"Skills source directory (env: {SKILLS_DIR_ENV}, default: ./skills)")
    parser.add_argument("--target", "-t", default=default,
                        help=f"Directory to link skills into (env: {TARGET_DIR_ENV}, default: ~/.claude/skills)")
    parser.add_argument("--project", "-p", action="store_true",
                        default=argparse.SUPPRESS if suppress else False,
                        help="Link into project .claude/skills/")
    parser.add_argument("--no-color", action="store_true",
                        default=argparse.SUPPRESS if suppress else False,
                        help="Disable colored output")


def build_parser() -> argparse.ArgumentParser:
    """建立 argparse parser。"""
    parser = argparse.ArgumentParser(
        prog="skills",
        description="Manage Claude skills by symlinking them into ~/.claude/skills",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive mode (default)
  skills
  skills interactive

  # Show link status of every skill
  skills list

  # Link or unlink a single skill
  skills link commit
  skills unlink commit

  # Use another source or target directory
  skills --skills-dir ~/src/my-skills list
  skills --project link pr
"""
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    add_location_args(parser)
    parser.set_defaults(func=cmd_interactive)

    location = argparse.ArgumentParser(add_help=False)
    add_location_args(location, suppress=True)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # List command
    list_parser = subparsers.add_parser("list", aliases=["ls"], parents=[location],
                                        help="List all skills with their link status")
    list_parser.set_defaults(func=cmd_list)

    # Link command
    link_parser = subparsers.add_parser("link", parents=[location],
                                        help="Create a symlink for a skill")
    link_parser.add_argument("name", help="Skill name to link")
    link_parser.set_defaults(func=cmd_link)

    # Unlink command
    unlink_parser = subparsers.add_parser("unlink", parents=[location],
                                          help="Remove a symlink for a skill")
    unlink_parser.add_argument("name", help="Skill name to unlink")
    unlink_parser.set_defaults(func=cmd_unlink)

    # Interactive command
    interactive_parser = subparsers.add_parser("interactive", aliases=["i"], parents=[location],
                                               help="Toggle skills interactively (default)")
    interactive_parser.set_defaults(func=cmd_interactive)

    return parser


def main(argv=None, stdin=None, stdout=None, stderr=None):
    """CLI 程式進入點。"""
    parser = build_parser()
    args = parser.parse_args(argv)

    out = stdout if stdout is not None else sys.stdout
    if args.no_color or os.environ.get("NO_COLOR") or not out.isatty():
        Colors.disable()

    ctx = build_context(
        skills_dir=args.skills_dir,
        target_dir=args.target,
        project=args.project,
        stdin=stdin,
        stdout=stdout,
        stderr=stderr,
    )

    try:
        return args.func(ctx, args)
    except KeyboardInterrupt:
        ctx.write()
        return EXIT_INTERRUPTED
    except SkillsError as e:
        ctx.log_error(f"Error: {e}")
        return e.exit_code
    except Exception as e:
        ctx.log_error(f"Error: {e}")
        if os.environ.get("DEBUG"):
            raise
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
