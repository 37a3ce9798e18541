"""Command-line interface for the crawl engine."""

import asyncio
import signal
import sys
from typing import Iterable

from seocrawl.analyzer import LLMPageAnalyzer
from seocrawl.config import CrawlConfig, settings
from seocrawl.constants import SUPPORTED_LLM_PROVIDERS
from seocrawl.controller import CrawlController
from seocrawl.exceptions import InvalidSeedUrl
from seocrawl.exclusions import load_exclusions
from seocrawl.export import to_csv, to_json, write_csv, write_json
from seocrawl.link_extractor import LLMLinkExtractor
from seocrawl.llm import LLMClient
from seocrawl.logging_config import setup_logging
from seocrawl.models import CrawlProgress, CrawlSummary


def print_progress(progress: CrawlProgress) -> None:
    """Print a progress snapshot on one line."""
    if progress.message:
        print(f"[{progress.state.value}] {progress.message}", file=sys.stderr, flush=True)


def print_summary(summary: CrawlSummary) -> None:
    """Print the crawl summary in a formatted way.

    Args:
        summary: CrawlSummary returned by the controller
    """
    out = sys.stderr
    print(f"\n{'=' * 60}", file=out)
    print(f"Crawl of: {summary.seed_url}", file=out)
    print(f"{'=' * 60}", file=out)
    print(f"  • State: {summary.state.value}", file=out)
    print(f"  • Analyzed: {summary.analyzed_count} pages in {summary.batches} batches", file=out)
    print(f"  • Discovered: {summary.discovered_count} URLs", file=out)
    print(f"  • Elapsed: {summary.elapsed_seconds:.1f}s", file=out)
    if summary.error:
        print(f"\n❌ Crawl Failed: {summary.error}", file=out)
    print(f"{'=' * 60}\n", file=out)


async def _run_crawl(controller: CrawlController, seed_url: str, exclusions: Iterable[str]) -> CrawlSummary:
    """Run the controller, cancelling it on SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, controller.cancel, "Crawl interrupted by user")
        except (NotImplementedError, RuntimeError):
            pass  # Windows event loops have no signal handlers
    return await controller.run(seed_url, exclusions)


def _build_config(args) -> CrawlConfig:
    config = CrawlConfig.from_file(args.config) if args.config else CrawlConfig.from_env()
    if args.pages is not None:
        config.target_page_count = args.pages
    if args.batch_size is not None:
        config.batch_size = args.batch_size
    if args.delay is not None:
        config.batch_delay_seconds = args.delay
    if args.provider:
        config.llm_provider = args.provider
    if args.model:
        config.llm_model = args.model
    if not config.llm_api_key:
        config.llm_api_key = settings.api_key
    return config


def crawl_command(args):
    """Crawl a site from a seed URL and export the analyzed pages."""
    try:
        config = _build_config(args)
        config.validate()
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if not config.llm_api_key:
        print(
            "Error: LLM API key is required. Set LLM_API_KEY (or GOOGLE_API_KEY for gemini) in .env file or environment variable"
        )
        sys.exit(1)

    try:
        exclusions = load_exclusions(args.exclude) if args.exclude else set()
    except OSError as e:
        print(f"Error: Cannot read exclusion file {args.exclude}: {e}")
        sys.exit(1)
    if exclusions:
        print(f"Excluding {len(exclusions)} URLs from the crawl.", file=sys.stderr)

    client = LLMClient(
        api_key=config.llm_api_key,
        model=config.llm_model,
        provider=config.llm_provider,
        max_retries=config.llm_max_retries,
        request_timeout=config.call_timeout_seconds,
    )
    controller = CrawlController(
        LLMPageAnalyzer(client),
        LLMLinkExtractor(client),
        config=config,
        on_progress=print_progress,
    )

    try:
        summary = asyncio.run(_run_crawl(controller, args.url, exclusions))
    except InvalidSeedUrl as e:
        print(f"Error: {e}")
        sys.exit(1)

    pages = controller.backfilled_results() if args.backfill_inlinks else controller.results

    if pages:
        if args.output_file:
            if args.output == "json":
                write_json(pages, args.output_file, summary)
            else:
                write_csv(pages, args.output_file)
            print(f"\nResults written to {args.output_file}")
        elif args.output == "json":
            print(to_json(pages, summary))
        else:
            print(to_csv(pages))

    print_summary(summary)

    if not summary.succeeded:
        sys.exit(1)


def main(argv=None):
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="SEO crawler - breadth-first site crawl with LLM page analysis"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    crawl_parser = subparsers.add_parser(
        "crawl", help="Crawl a site breadth-first and analyze each page."
    )
    crawl_parser.add_argument("url", help="Seed URL (include http:// or https://)")
    crawl_parser.add_argument(
        "--pages",
        "-n",
        type=int,
        help="Target page count (default: 250)",
    )
    crawl_parser.add_argument(
        "--batch-size",
        type=int,
        help="URLs analyzed per LLM call (default: 5)",
    )
    crawl_parser.add_argument(
        "--delay",
        type=float,
        help="Seconds to wait between batches (default: 1.0)",
    )
    crawl_parser.add_argument(
        "--exclude",
        "-x",
        help="Exclusion list (.txt with one URL per line, or a CSV exported by this tool)",
    )
    crawl_parser.add_argument(
        "--config",
        help="JSON configuration file (default: environment variables)",
    )
    crawl_parser.add_argument(
        "--provider",
        choices=list(SUPPORTED_LLM_PROVIDERS),
        help="LLM provider (default: LLM_PROVIDER or gemini)",
    )
    crawl_parser.add_argument("--model", help="LLM model name")
    crawl_parser.add_argument(
        "--output",
        "-o",
        choices=["csv", "json"],
        default="csv",
        help="Output format (default: csv)",
    )
    crawl_parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file instead of stdout",
    )
    crawl_parser.add_argument(
        "--backfill-inlinks",
        action="store_true",
        help="Attach every inlink seen during the crawl instead of the emission-time snapshot",
    )
    crawl_parser.set_defaults(func=crawl_command)

    args = parser.parse_args(argv)

    # Configure logging based on flags
    setup_logging(
        level=args.log_level,
        log_file=getattr(args, 'log_file', None),
    )

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
