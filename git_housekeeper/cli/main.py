"""Command-line interface for git-housekeeper"""

import os
import sys

from rich.console import Console

from git_housekeeper.cli.args import parse_args
from git_housekeeper.config import Config
from git_housekeeper.core import BranchReconciler
from git_housekeeper.exceptions import HousekeeperError, NotARepositoryError
from git_housekeeper.logging_config import setup_logging
from git_housekeeper.services.display_service import DisplayService
from git_housekeeper.services.git import BranchQueries, GitGateway
from git_housekeeper.utils import get_optimal_worker_count, is_free_threading_enabled

console = Console()


def build_config(parsed_args) -> Config:
    """Build config from parsed arguments."""
    return Config(
        remote_name=parsed_args.remote,
        default_branch_fallback=parsed_args.default_branch,
        staging_branch=parsed_args.staging_branch,
        pr_base_branch=parsed_args.base_branch,
        exit_delay=parsed_args.exit_delay,
        verbose=parsed_args.verbose,
        debug=parsed_args.debug,
        sequential=parsed_args.sequential,
        workers=parsed_args.workers,
        github_token=os.environ.get("GITHUB_TOKEN"),
    )


def report_orphans(gateway: GitGateway, config: Config) -> int:
    """Non-interactive mode: print the orphaned branches, delete nothing."""
    reconciler = BranchReconciler(gateway, config)
    orphans = reconciler.compute_orphaned_branches()
    default_branch = BranchQueries(gateway, config).resolve_default_branch() if orphans else None
    DisplayService(verbose=config.verbose, debug=config.debug).display_orphan_table(
        orphans, default_branch, show_summary=config.verbose
    )
    return 0


def main(argv=None):
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)

        # Default to interactive if running in a TTY, unless explicitly disabled
        use_interactive = sys.stdin.isatty() and not parsed_args.no_interactive

        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug, tui_mode=use_interactive)

        config = build_config(parsed_args)

        if parsed_args.debug and not use_interactive:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Threading Information:[/yellow]")
            console.print(f"  Free-threading enabled: {is_free_threading_enabled()}")
            console.print(f"  Optimal workers: {get_optimal_worker_count(config.workers)}")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                if key == "github_token" and value:
                    value = "***"
                console.print(f"  {key}: {value}")
            console.print("[dim]Note: Debug mode forces sequential processing for readable logs[/dim]")

        gateway = GitGateway(os.getcwd())

        if not use_interactive:
            if parsed_args.action not in (None, "prune"):
                console.print(f"[red]'{parsed_args.action}' needs an interactive terminal[/red]")
                return 1
            return report_orphans(gateway, config)

        from git_housekeeper.tui import HousekeeperApp

        app = HousekeeperApp(gateway, config, action=parsed_args.action)
        app.run()
        return app.return_code or 0
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except NotARepositoryError:
        console.print("[red]Not a git repository.[/red]")
        return 1
    except (HousekeeperError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
