"""CLI tool for catmatch.

Usage:
    python -m catmatch.cli match --name "..." [--description "..."] [--taxonomy cats.json] [--remote] [--history] [--record]
    python -m catmatch.cli batch --file rows.json --platform shopify [--taxonomy cats.json] [--output out.json] [--record]
    python -m catmatch.cli prompt --name "..." [--taxonomy cats.json]
    python -m catmatch.cli terms [--category Fashion]
"""
import argparse
import asyncio
import json
import logging
import sys

from catmatch.config import config


def load_taxonomy(path=None):
    """Taxonomy from a JSON file, or fetched from TAXONOMY_URL."""
    from catmatch.taxonomy import TaxonomyClient, load_taxonomy_file

    if path:
        return load_taxonomy_file(path)
    client = TaxonomyClient(config.TAXONOMY_URL, timeout=config.AI_TIMEOUT)
    return asyncio.run(client.fetch())


def build_matcher():
    """Default matcher, with TERM_TABLE_PATH entries taking precedence."""
    from catmatch.matcher import CategoryMatcher
    from catmatch.term_tables import DEFAULT_TERM_TABLE, load_term_table

    table = DEFAULT_TERM_TABLE
    if config.TERM_TABLE_PATH:
        table = load_term_table(config.TERM_TABLE_PATH).merged_with(DEFAULT_TERM_TABLE)
    return CategoryMatcher(term_table=table, direct_match_floor=config.DIRECT_MATCH_FLOOR)


def build_categorizer(taxonomy, remote=False, history=False):
    from catmatch.categorizer import Categorizer
    from catmatch.history import CorrectionCache, HistoryStore
    from catmatch.remote import RemoteClassifier

    config.validate(require_remote=remote)
    store = HistoryStore(config.REDIS_URL, max_history=config.MAX_HISTORY) if history else None
    return Categorizer(
        taxonomy,
        matcher=build_matcher(),
        history=store,
        classifier=RemoteClassifier(timeout=config.AI_TIMEOUT) if remote else None,
        corrections=CorrectionCache(store.lookup_corrections) if store else None,
        review_threshold=config.REVIEW_THRESHOLD,
        lookup_timeout=config.LOOKUP_TIMEOUT,
        max_workers=config.MAX_WORKERS,
    )


def cmd_match(args):
    """Categorize a single product."""
    taxonomy = load_taxonomy(args.taxonomy)
    if not taxonomy:
        print("No categories available. Use --taxonomy or check TAXONOMY_URL")
        sys.exit(1)

    with build_categorizer(taxonomy, remote=args.remote, history=args.history or args.record) as categorizer:
        decision = categorizer.categorize(args.name, args.description)
        if args.record:
            categorizer.record_decision((args.name, args.description), decision)
    print(json.dumps(decision.to_dict(), ensure_ascii=False, indent=2))


def cmd_batch(args):
    """Categorize every row of a Shopify/WooCommerce export."""
    from catmatch.rows import Platform, categorize_rows, parse_rows

    with open(args.file, encoding="utf-8") as f:
        rows = parse_rows(f.read())
    print(f"Parsed {len(rows)} rows")

    taxonomy = load_taxonomy(args.taxonomy)
    if not taxonomy:
        print("No categories available. Use --taxonomy or check TAXONOMY_URL")
        sys.exit(1)

    with build_categorizer(taxonomy, remote=args.remote, history=args.history or args.record) as categorizer:
        result = categorize_rows(rows, Platform(args.platform), categorizer,
                                 max_workers=args.workers, record=args.record)
    print(result.summary())

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result.to_json())
        print(f"Saved to {args.output}")


def cmd_prompt(args):
    """Print the remote classifier prompt for a product."""
    from catmatch.remote import build_prompt

    print(build_prompt(args.name, load_taxonomy(args.taxonomy)))


def cmd_terms(args):
    """List term-table mappings."""
    matcher = build_matcher()
    mappings = matcher.term_table.for_category(args.category) if args.category else list(matcher.term_table)
    for m in mappings:
        target = f"{m.category} > {m.subcategory}" if m.subcategory else m.category
        print(f"  {m.phrase:<24} {target:<40} {m.weight:g}")
    print(f"\n{len(mappings)} mappings")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="catmatch",
        description="Match product titles to marketplace categories",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", help="Command")

    # match
    p = sub.add_parser("match", help="Categorize one product")
    p.add_argument("--name", "-n", required=True, help="Product name")
    p.add_argument("--description", "-d", default="", help="Product description")
    p.add_argument("--taxonomy", "-t", help="Taxonomy JSON file (default: fetch TAXONOMY_URL)")
    p.add_argument("--remote", action="store_true", help="Ask the remote model when unsure")
    p.add_argument("--history", action="store_true", help="Use stored decisions and corrections")
    p.add_argument("--record", action="store_true", help="Save decisions to history (implies --history)")

    # batch
    p = sub.add_parser("batch", help="Categorize an export file")
    p.add_argument("--file", "-f", required=True, help="Rows as JSON or CSV")
    p.add_argument("--platform", "-p", choices=["shopify", "woocommerce"], default="shopify")
    p.add_argument("--taxonomy", "-t", help="Taxonomy JSON file (default: fetch TAXONOMY_URL)")
    p.add_argument("--output", "-o", help="Save results as JSON")
    p.add_argument("--workers", "-w", type=int, help="Worker threads")
    p.add_argument("--remote", action="store_true", help="Ask the remote model when unsure")
    p.add_argument("--history", action="store_true", help="Use stored decisions and corrections")
    p.add_argument("--record", action="store_true", help="Save decisions to history (implies --history)")

    # prompt
    p = sub.add_parser("prompt", help="Show the remote classifier prompt")
    p.add_argument("--name", "-n", required=True, help="Product name")
    p.add_argument("--taxonomy", "-t", help="Taxonomy JSON file (default: fetch TAXONOMY_URL)")

    # terms
    p = sub.add_parser("terms", help="List term mappings")
    p.add_argument("--category", "-c", help="Only this category")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "match": cmd_match,
        "batch": cmd_batch,
        "prompt": cmd_prompt,
        "terms": cmd_terms,
    }
    try:
        commands[args.command](args)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
