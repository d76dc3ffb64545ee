"""
Harvest pipelines.

StatsPipeline:
1. Fetches the recipe's index page and extracts (name, link) entries
2. Drops entries without a link
3. Fetches each detail page (up to the batch limit) and extracts its fields
4. Merges index and detail fields into one result table

CocktailPipeline queries the cocktail API for one letter and reshapes the
returned drinks into a flat table.
"""

import logging
import string
from typing import List, Optional
from urllib.parse import urljoin

from pydantic import ValidationError

import harvest_config
from batch_assembler import BatchStats, assemble_all
from extractors.detail_page import extract_fields
from extractors.drink_reshaper import reshape
from extractors.field_selector import count_matches, select_json
from extractors.index_page import drop_incomplete, extract_index_entries
from harvest_errors import ParseError
from harvest_models import ROW_SCHEMAS, DrinkRow, DrinkSearchResponse, IndexEntry
from persistence.result_table import ResultTable
from recipe_loader import Recipe
from throttle import Throttle

logger = logging.getLogger(__name__)

STATS_COLUMNS_PREFIX = ['name', 'url']
DRINK_COLUMNS = ['name', 'instructions', 'ingredients']


class DetailExtractor:
    """Fetches one detail page and reads its fields, then throttles."""

    def __init__(self, fetcher, field_specs, throttle, verbose_selectors=False, row_model=None):
        self.fetcher = fetcher
        self.field_specs = field_specs
        self.throttle = throttle
        self.row_model = row_model
        self.verbose_selectors = verbose_selectors

    def extract(self, location):
        """
        Args:
            location: Absolute detail page URL

        Returns:
            Dict keyed by field name (None for fields that matched nothing)

        The throttle runs after every attempted fetch, failed ones included.
        """
        try:
            document = self.fetcher.fetch_html(location)

            if self.verbose_selectors:
                for spec in self.field_specs:
                    logger.info(f"  Selector '{spec.css}' matched {count_matches(document, spec.css)} elements")

            record = extract_fields(document, self.field_specs)
            missing = [name for name, value in record.items() if value is None]
            if missing:
                logger.warning(f"  No match for {', '.join(missing)} on {location}")

            if self.row_model is not None:
                try:
                    validated = self.row_model.model_validate(record)
                except ValidationError as e:
                    raise ParseError(f"Record from {location} does not fit {self.row_model.__name__}: {e}", url=location) from e
                record = {**record, **validated.model_dump()}

            return record
        finally:
            self.throttle.wait()


class StatsPipeline:
    """
    Recipe-driven index → detail pipeline.
    """

    def __init__(self, recipe: Recipe, fetcher, throttle: Optional[Throttle] = None,
                 limit: Optional[int] = None, on_error: str = harvest_config.ON_ERROR,
                 verbose_selectors: bool = False):
        """
        Initialize the pipeline.

        Args:
            recipe: Recipe configuration
            fetcher: PageFetcher (or anything with fetch_html)
            throttle: Throttle applied after each detail fetch
                (None = recipe delay with a real sleep)
            limit: Override for the recipe's max_items
            on_error: 'abort' or 'skip'
            verbose_selectors: Log match counts for CSS selectors
        """
        self.recipe = recipe
        self.fetcher = fetcher
        self.throttle = throttle or Throttle(recipe.throttle.delay)
        self.limit = limit if limit is not None else recipe.limits.max_items
        self.on_error = on_error
        self.verbose_selectors = verbose_selectors

        self.detail_extractor = DetailExtractor(
            fetcher, recipe.fields, self.throttle, verbose_selectors=verbose_selectors,
            row_model=ROW_SCHEMAS.get(recipe.row_schema)
        )
        self.batch_stats = BatchStats()

        # Statistics
        self.stats = {
            'index_entries_found': 0,
            'index_entries_dropped': 0,
            'detail_pages_fetched': 0,
            'rows_written': 0,
            'throttle_waits': 0
        }

    def fetch_index(self) -> List[IndexEntry]:
        """Fetch the index page and return its complete entries."""
        index = self.recipe.index
        logger.info(f"Fetching index page: {index.url}")

        document = self.fetcher.fetch_html(index.url)

        if self.verbose_selectors:
            logger.info(f"  Selector '{index.entry_css}' matched {count_matches(document, index.entry_css)} elements")

        entries = extract_index_entries(
            document,
            index.base_url,
            index.entry_css,
            name_attribute=index.name_attribute,
            link_attribute=index.link_attribute
        )
        complete = drop_incomplete(entries)

        self.stats['index_entries_found'] = len(entries)
        self.stats['index_entries_dropped'] = len(entries) - len(complete)
        logger.info(f"  Found {len(entries)} entries, {len(complete)} with a detail link")
        return complete

    def extract_entry(self, entry: IndexEntry):
        record = self.detail_extractor.extract(entry.detail_location)
        self.stats['detail_pages_fetched'] += 1
        return record

    def index_table(self, entries: List[IndexEntry]) -> ResultTable:
        return ResultTable(rows=[entry.to_row() for entry in entries],
                           columns=list(STATS_COLUMNS_PREFIX))

    def run(self, entries: Optional[List[IndexEntry]] = None) -> ResultTable:
        """
        Run the pipeline.

        Args:
            entries: Pre-fetched index entries (None = fetch the index page)

        Returns:
            Result table with one row per processed entry
        """
        logger.info(f"Starting stats pipeline: {self.recipe.name}")
        logger.info(f"Fields: {', '.join(spec.name for spec in self.recipe.fields)}")
        logger.info(f"Limit: {self.limit}, delay: {self.throttle.delay}s, on error: {self.on_error}")

        if entries is None:
            entries = self.fetch_index()

        rows = assemble_all(
            entries,
            self.extract_entry,
            limit=self.limit,
            on_error=self.on_error,
            stats=self.batch_stats
        )

        columns = STATS_COLUMNS_PREFIX + [spec.name for spec in self.recipe.fields]
        table = ResultTable(rows=rows, columns=columns)
        self.stats['rows_written'] = len(table)
        self.stats['throttle_waits'] = self.throttle.waits

        # Print summary
        logger.info("=" * 60)
        logger.info("Stats pipeline complete!")
        logger.info(f"Index entries found: {self.stats['index_entries_found']}")
        logger.info(f"Index entries dropped: {self.stats['index_entries_dropped']}")
        logger.info(f"Detail pages fetched: {self.stats['detail_pages_fetched']}")
        logger.info(f"Items skipped: {self.batch_stats.skipped}")
        logger.info(f"Throttle waits: {self.stats['throttle_waits']}")
        logger.info(f"Rows: {self.stats['rows_written']}")
        logger.info("=" * 60)

        return table


def validate_letter(letter: str) -> str:
    """
    Check that letter is a single ASCII letter and return it lowercased.

    Raises:
        ValueError: Otherwise
    """
    if not isinstance(letter, str) or len(letter) != 1 or letter not in string.ascii_letters:
        raise ValueError(f"Search letter must be a single letter a-z, got {letter!r}")
    return letter.lower()


class CocktailPipeline:
    """Search the cocktail API by first letter and reshape the drinks."""

    collection_key = 'drinks'

    def __init__(self, fetcher, api_base: str = harvest_config.COCKTAIL_API_BASE,
                 prefix: str = harvest_config.COCKTAIL_FIELD_PREFIX):
        self.fetcher = fetcher
        self.api_base = api_base.rstrip('/') + '/'
        self.prefix = prefix

    def search_url(self) -> str:
        return urljoin(self.api_base, 'search.php')

    def search(self, letter: str) -> List[DrinkRow]:
        """
        Fetch every drink starting with letter.

        Raises:
            ValueError: If letter is not a single letter
            NetworkError: If the API can't be reached
            ParseError: If the response isn't the expected envelope
        """
        letter = validate_letter(letter)
        url = self.search_url()
        logger.info(f"Searching cocktails starting with '{letter}'")

        payload = self.fetcher.fetch_json(url, params={'f': letter})
        try:
            response = DrinkSearchResponse.model_validate(payload)
        except ValidationError as e:
            raise ParseError(f"Unexpected cocktail API response: {e}", url=url) from e

        raw_records = select_json(response.model_dump(), self.collection_key)
        drinks = reshape(raw_records, prefix=self.prefix)
        logger.info(f"  {len(raw_records)} records, {len(drinks)} drinks")
        return drinks

    def run(self, letter: str) -> ResultTable:
        drinks = self.search(letter)
        return ResultTable(rows=[drink.to_row() for drink in drinks],
                           columns=list(DRINK_COLUMNS))
