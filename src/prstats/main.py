"""Entry point for the GitHub PR stats generator."""

from __future__ import annotations

import logging
import random
import sys
from typing import Optional, Sequence

from .cli import parse_args
from .collect import run_analysis
from .config import load_config, lookback_start
from .errors import ApiError, AuthenticationError, ConfigurationError, DataValidationError
from .export import export_comments
from .github_client import GitHubClient
from .stats import generate_export_summary, generate_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIGURATION = 2
EXIT_AUTHENTICATION = 3
EXIT_API = 4
EXIT_DATA_VALIDATION = 5


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for command-line runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def orchestrate_stats_generation(argv: Optional[Sequence[str]] = None) -> int:
    """Run the full pipeline and map failures to process exit codes."""
    try:
        args = parse_args(argv)
        setup_logging(args.verbose)

        config = load_config(
            repositories=args.repositories,
            label=args.label,
            max_pages=args.max_pages,
            sample_cap=args.sample_cap,
            exhaustive=args.exhaustive,
            months=args.months,
            comments_dir=args.comments_dir,
        )
        since = lookback_start(config.months)
        rng = random.Random(args.seed) if args.seed is not None else None

        print(
            f"Analyzing PRs for repositories: {', '.join(config.repositories)} "
            f"(max {config.max_pages} pages each), created since {since.date().isoformat()}"
        )
        if config.exhaustive:
            print("Sampling disabled: all PRs will be analyzed for comments and reviews")
        else:
            print(f"Sampling enabled: up to {config.sample_cap} PRs will be analyzed for comments and reviews")

        client = GitHubClient(config=config)
        result = run_analysis(client, config, since, rng=rng)

        if result.report.total_items == 0:
            print(f"No PRs found in the last {config.months} months across all repositories.")
            return EXIT_OK

        print()
        print(generate_report(result.report, label=config.label))

        if config.comments_dir:
            exported = export_comments(
                result.events,
                config.comments_dir,
                repositories=config.repositories,
                label=config.label,
            )
            print()
            print(generate_export_summary(exported, config.comments_dir))

        return EXIT_OK
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIGURATION
    except AuthenticationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_AUTHENTICATION
    except ApiError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_API
    except DataValidationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_DATA_VALIDATION
    except Exception:
        logger.exception("Unexpected failure while generating PR statistics")
        return EXIT_UNEXPECTED


def main() -> int:
    return orchestrate_stats_generation()


if __name__ == "__main__":
    raise SystemExit(main())
