"""CLI entry point for sitecrawl.

Usage:
    python -m sitecrawl --input-address URL [options]
"""

import argparse
import logging
import sys

from .config import DEFAULT_REDIRECT_LIMIT, CrawlConfig
from .crawler import Crawler
from .document import Document
from .file_saver import save_document
from .url import Url, prefix_scheme
from .utils import print_search_results


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="sitecrawl",
        description="sitecrawl - Crawl a website by following its internal links, "
                    "collect its external links and search its text.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Crawl a whole site and list its external links
  python -m sitecrawl --input-address "https://example.com"

  # Crawl a single page only
  python -m sitecrawl --input-address "https://example.com/page" --no-recursive

  # Mirror the site's pages to a folder and search their text
  python -m sitecrawl --input-address "https://example.com" --output-folder "./output" --search "pricing"
        """,
    )

    parser.add_argument(
        "--input-address",
        required=True,
        help="Starting URL to crawl (http:// is assumed when no scheme is given)",
    )

    parser.add_argument(
        "--output-folder",
        default=None,
        help="Local folder to save crawled pages to (default: pages are not saved)",
    )

    parser.add_argument(
        "--recursive",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Crawl the whole site (default: true). Use --no-recursive for a single page.",
    )

    parser.add_argument(
        "--redirect-limit",
        type=int,
        default=DEFAULT_REDIRECT_LIMIT,
        help=f"Maximum redirects to follow per page (default: {DEFAULT_REDIRECT_LIMIT})",
    )

    parser.add_argument(
        "--timeout",
        type=int,
        default=30,
        help="Request timeout in seconds (default: 30)",
    )

    parser.add_argument(
        "--delay",
        type=float,
        default=0.0,
        help="Seconds to wait between page requests (default: 0)",
    )

    parser.add_argument(
        "--search",
        default=None,
        help="Search the crawled pages' text for this (case-insensitive) regular expression",
    )

    parser.add_argument(
        "--sentence-limit",
        type=int,
        default=80,
        help="Maximum length of each search result sentence, must be even (default: 80)",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging (fetch errors, redirects, etc.)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> CrawlConfig:
    return CrawlConfig(
        redirect_limit=args.redirect_limit,
        timeout=args.timeout,
        delay=args.delay,
    )


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def run(args: argparse.Namespace, crawler: Crawler) -> int:
    """Crawl according to ``args`` and print progress and results.

    Returns:
        Process exit code: 0 on success, 1 if the input address could not
        be crawled.
    """
    url = Url(prefix_scheme(args.input_address))
    url.validate()
    docs: list[Document] = []

    print("=" * 70)
    print("  sitecrawl - Starting crawl")
    print(f"  URL:       {url}")
    print(f"  Recursive: {args.recursive}")
    print(f"  Redirect limit: {crawler.config.redirect_limit} | Timeout: {crawler.config.timeout}s")
    if args.output_folder:
        print(f"  Output:    {args.output_folder}")
    if args.search:
        print(f"  Search:    {args.search}")
    print("=" * 70)
    print()

    def on_page(doc: Document) -> None:
        if doc.is_empty():
            reason = crawler.failed.get(doc.url.value, "no HTML")
            print(f"  [FAIL] {doc.url} ({reason})")
            return

        docs.append(doc)
        print(f"[{len(docs)}] [CRAWL] {doc.url}")
        if args.output_folder:
            filepath = save_document(doc, url, args.output_folder)
            if filepath:
                print(f"  [SAVED] {filepath}")

    if args.recursive:
        externals = crawler.crawl_site(url, on_page=on_page)
    else:
        doc = crawler.crawl_url(url, on_page=on_page)
        externals = doc.external_links if doc else None

    print()
    print("=" * 70)
    print("  Crawl Complete")
    print(f"  Pages crawled: {len(docs)}")
    print(f"  Pages failed:  {len(crawler.failed)}")
    if externals is not None:
        print(f"  External links: {len(externals)}")
    print("=" * 70)

    if externals is None:
        print(f"\n[ERROR] Could not crawl {url}")
        return 1

    if externals:
        print("\nExternal links:")
        for link in externals:
            print(f"  {link}")

    if args.search:
        matches = [doc for doc in docs if doc.search(args.search, args.sentence_limit)]
        print(f"\nSearch results for '{args.search}' ({len(matches)} page(s)):\n")
        print_search_results(matches, args.search, sentence_limit=args.sentence_limit)

    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.sentence_limit < 0 or args.sentence_limit % 2 != 0:
        print("[ERROR] --sentence-limit must be an even, non-negative number")
        sys.exit(2)

    with Crawler(build_config(args)) as crawler:
        try:
            code = run(args, crawler)
        except ValueError as e:
            print(f"[ERROR] {e}")
            sys.exit(2)
        except KeyboardInterrupt:
            print("\n\n[INTERRUPTED] Crawl stopped by user.")
            print(f"  Urls visited: {len(crawler.visited)}")
            sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
