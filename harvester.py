"""
Wiki Harvester

Recipe-driven scraper that can:
- Read a listing page and follow each entry to its detail page
- Extract a fixed set of fields from every detail page via CSS selectors
- Query the cocktail API by first letter and flatten the drinks
- Save the resulting tables as CSV or JSON Lines
"""

import sys
import logging
import argparse
from pathlib import Path

import yaml

import harvest_config
from harvest_errors import HarvestError
from page_fetcher import PageFetcher
from persistence.result_table import open_table_store, write_table
from throttle import Throttle

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main(argv=None):
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description='Recipe-driven wiki and API harvester',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Stats mode (recipe-driven index -> detail pages)
  python harvester.py --mode stats --recipe recipes/pokemon_go.yaml
  python harvester.py --mode stats --recipe recipes/pokemon_go.yaml --limit 3 --delay 5
  python harvester.py --mode stats --recipe recipes/pokemon_go.yaml --on-error skip --force

  # Cocktail mode
  python harvester.py --mode cocktail --letter a
  python harvester.py --mode cocktail --letter m --output output/m_drinks.jsonl

  # Debug tools
  python harvester.py --mode stats --recipe recipes/pokemon_go.yaml --verbose-selectors --dry-run
  python harvester.py --dump-html https://example.com
        """
    )

    # Mode selection
    parser.add_argument('--mode', choices=['stats', 'cocktail'], default='stats',
                       help='Pipeline: "stats" (default, recipe-driven) or "cocktail"')

    # Stats mode arguments
    parser.add_argument('--recipe', help='Recipe YAML file for stats mode')
    parser.add_argument('--limit', type=int, help='Maximum number of index entries to process')
    parser.add_argument('--delay', type=float, help='Seconds to wait after each detail page')
    parser.add_argument('--on-error', choices=['abort', 'skip'], default=harvest_config.ON_ERROR,
                       help='What to do when one item fails (default: abort)')

    # Cocktail mode arguments
    parser.add_argument('--letter', help='First letter of the drinks to fetch (cocktail mode)')
    parser.add_argument('--api-base', default=harvest_config.COCKTAIL_API_BASE,
                       help='Cocktail API base URL')

    # Shared options
    parser.add_argument('--output', help='Result table path (.csv or .jsonl)')
    parser.add_argument('--timeout', type=float, help='Per-request timeout in seconds')
    parser.add_argument('--force', action='store_true',
                       help='Overwrite existing result tables')

    # Debug options
    parser.add_argument('--dry-run', action='store_true',
                       help='Print the rows without saving them')
    parser.add_argument('--verbose-selectors', action='store_true',
                       help='Log match counts for CSS selectors (stats mode)')
    parser.add_argument('--dump-html', metavar='URL',
                       help='Dump HTML content for a URL and exit')

    args = parser.parse_args(argv)

    if args.dump_html:
        return 0 if _dump_html(args.dump_html, args.timeout) else 1

    try:
        if args.mode == 'cocktail':
            _run_cocktail_mode(args)
        else:
            _run_stats_mode(args)
    except HarvestError as e:
        logger.error(f"Harvest failed: {e}")
        return 1
    except (ValueError, FileNotFoundError, FileExistsError, yaml.YAMLError) as e:
        logger.error(str(e))
        return 1

    return 0


def _run_stats_mode(args):
    """Run the recipe-driven stats pipeline."""
    if not args.recipe:
        raise ValueError("Stats mode requires --recipe argument")

    from recipe_loader import load_recipe, validate_recipe
    from pipelines import StatsPipeline

    logger.info(f"Loading recipe: {args.recipe}")
    recipe = load_recipe(args.recipe)

    warnings = validate_recipe(recipe)
    if warnings:
        logger.warning("Recipe validation warnings:")
        for warning in warnings:
            logger.warning(f"  - {warning}")

    delay = args.delay if args.delay is not None else recipe.throttle.delay
    result_path = args.output or recipe.output.result_table

    # Fail before any request if the result table can't be written
    _check_writable(result_path, args.force, args.dry_run)
    _check_writable(recipe.output.index_table, args.force, args.dry_run)

    with PageFetcher(timeout=args.timeout) as fetcher:
        pipeline = StatsPipeline(
            recipe=recipe,
            fetcher=fetcher,
            throttle=Throttle(delay),
            limit=args.limit,
            on_error=args.on_error,
            verbose_selectors=args.verbose_selectors
        )

        entries = pipeline.fetch_index()
        if not args.dry_run:
            write_table(pipeline.index_table(entries), recipe.output.index_table, force=args.force)

        table = pipeline.run(entries)

    _emit(table, result_path, args)


def _run_cocktail_mode(args):
    """Run the cocktail API pipeline."""
    if not args.letter:
        raise ValueError("Cocktail mode requires --letter argument")

    from pipelines import CocktailPipeline, validate_letter

    letter = validate_letter(args.letter)
    result_path = args.output or f"{harvest_config.OUTPUT_DIR}/cocktails_{letter}.csv"
    _check_writable(result_path, args.force, args.dry_run)

    with PageFetcher(timeout=args.timeout) as fetcher:
        pipeline = CocktailPipeline(fetcher, api_base=args.api_base)
        table = pipeline.run(letter)

    _emit(table, result_path, args)


def _check_writable(path, force, dry_run):
    open_table_store(path)
    if not dry_run and not force and Path(path).exists():
        raise FileExistsError(f"Result table already exists: {path} (use --force to overwrite)")


def _emit(table, path, args):
    if args.dry_run:
        for row in table.rows:
            print(f"    {row}")
        logger.info(f"DRY RUN - {len(table)} rows not saved")
        return
    write_table(table, path, force=args.force)


def _dump_html(url, timeout):
    """Dump HTML content for a URL."""
    logger.info(f"Dumping HTML for: {url}")

    with PageFetcher(timeout=timeout) as fetcher:
        try:
            html = fetcher.fetch_text(url)
        except HarvestError as e:
            logger.error(f"Failed to fetch page: {e}")
            return False

    output_file = Path("debug_dump.html")
    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(html)
    logger.info(f"HTML saved to: {output_file}")
    return True


if __name__ == "__main__":
    sys.exit(main())
