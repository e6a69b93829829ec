"""Command-line argument parsing for git-housekeeper."""

import argparse

from git_housekeeper.__version__ import __version__
from git_housekeeper.constants import MENU_ACTIONS


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Interactive repository maintenance: prune orphaned branches, "
        "merge dependency-update PRs, open pull requests",
        epilog="GitHub actions use the GITHUB_TOKEN environment variable when set. "
        "Get a token at https://github.com/settings/tokens (scopes: repo or public_repo)",
    )
    parser.add_argument(
        "action",
        nargs="?",
        choices=[action.key for action in MENU_ACTIONS],
        help="Start an action directly instead of showing the menu",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"git-housekeeper {__version__}")
    parser.add_argument(
        "--no-interactive",
        action="store_true",
        help="Print the orphaned branches and exit (for scripts/automation)",
    )
    parser.add_argument("--remote", default="origin", help="Remote name (default: origin)")
    parser.add_argument(
        "--staging-branch",
        default="staging",
        help="Branch dependency PRs are merged into (default: staging)",
    )
    parser.add_argument(
        "--base-branch",
        default="main",
        help="Only consider PRs targeting this branch (default: main)",
    )
    parser.add_argument(
        "--default-branch",
        default="main",
        help="Default branch to assume when the remote HEAD cannot be read (default: main)",
    )
    parser.add_argument(
        "--exit-delay",
        type=float,
        default=1.5,
        metavar="SECONDS",
        help="How long the final status stays on screen (default: 1.5)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of parallel workers for branch lookups (default: auto-detect based on CPU and threading mode)",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Force sequential processing (disable parallelism)",
    )

    return parser.parse_args(argv)
