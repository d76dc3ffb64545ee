"""
Pipeline tests against a stub fetcher.

The stub serves fixture pages by URL and the throttle records its delays,
so the whole index -> detail -> table flow runs without network or sleeps.
"""

import json
import unittest
from pathlib import Path

from bs4 import BeautifulSoup

from extractors.detail_page import FieldSpec
from harvest_errors import NetworkError, ParseError
from harvest_models import IndexEntry, StatRow
from pipelines import CocktailPipeline, DetailExtractor, StatsPipeline, validate_letter
from recipe_loader import Recipe
from throttle import Throttle

FIXTURES = Path(__file__).parent / "fixtures"

INDEX_URL = "https://pokemongo.fandom.com/wiki/List_of_Pokemon"
BASE_URL = "https://pokemongo.fandom.com"

INDEX_HTML = """
<div class="pogo-list-item-name"><a href="/wiki/Bulbasaur">Bulbasaur</a></div>
<div class="pogo-list-item-name"><a>MissingMon</a></div>
"""


def load_fixture(name):
    with open(FIXTURES / name, 'r', encoding='utf-8') as f:
        return f.read()


class StubFetcher:
    """Serves canned pages; unknown URLs fail like a 404."""

    def __init__(self, pages=None, payload=None):
        self.pages = pages or {}
        self.payload = payload
        self.requested = []

    def fetch_html(self, url):
        self.requested.append(url)
        if url not in self.pages:
            raise NetworkError(f"{url} returned HTTP 404", url=url, status_code=404)
        return BeautifulSoup(self.pages[url], 'lxml')

    def fetch_json(self, url, params=None):
        self.requested.append((url, params))
        return self.payload


def make_recipe(max_items=10, delay=2):
    return Recipe.from_dict({
        'name': 'pokemon_go_stats',
        'index': {
            'url': INDEX_URL,
            'base_url': BASE_URL,
            'entry_css': 'div.pogo-list-item-name > a',
        },
        'detail': {
            'fields': {
                'attack': {'css': 'td[data-source="attack"]', 'type': 'int'},
                'defense': {'css': 'td[data-source="defense"]', 'type': 'int'},
                'stamina': {'css': 'td[data-source="stamina"]', 'type': 'int'},
            }
        },
        'limits': {'max_items': max_items},
        'throttle': {'delay': delay},
    })


class TestDetailExtractor(unittest.TestCase):

    def test_extract_then_throttle(self):
        url = BASE_URL + "/wiki/Bulbasaur"
        fetcher = StubFetcher({url: load_fixture("sample_detail_page.html")})
        slept = []
        specs = [FieldSpec(name="attack", css='td[data-source="attack"]', type="int")]

        record = DetailExtractor(fetcher, specs, Throttle(2, sleep=slept.append)).extract(url)

        self.assertEqual(record, {"attack": 118})
        self.assertEqual(slept, [2])

    def test_failed_fetch_still_throttles(self):
        slept = []
        specs = [FieldSpec(name="attack", css='td[data-source="attack"]', type="int")]
        extractor = DetailExtractor(StubFetcher(), specs, Throttle(2, sleep=slept.append))

        with self.assertRaises(NetworkError):
            extractor.extract(BASE_URL + "/wiki/Ghost")

        self.assertEqual(slept, [2])

    def test_zero_matches_is_absent_not_error(self):
        url = BASE_URL + "/wiki/Empty"
        fetcher = StubFetcher({url: "<html><body><p>No infobox</p></body></html>"})
        specs = [FieldSpec(name="attack", css='td[data-source="attack"]', type="int")]

        record = DetailExtractor(fetcher, specs, Throttle(0)).extract(url)

        self.assertEqual(record, {"attack": None})

    def test_row_model_validation(self):
        url = BASE_URL + "/wiki/Odd"
        fetcher = StubFetcher({url: '<table><tr><td data-source="attack">strong</td></tr></table>'})
        specs = [FieldSpec(name="attack", css='td[data-source="attack"]')]
        extractor = DetailExtractor(fetcher, specs, Throttle(0), row_model=StatRow)

        with self.assertRaises(ParseError):
            extractor.extract(url)

    def test_row_model_fills_missing_fields(self):
        url = BASE_URL + "/wiki/Bulbasaur"
        fetcher = StubFetcher({url: load_fixture("sample_detail_page.html")})
        specs = [FieldSpec(name="attack", css='td[data-source="attack"]', type="int")]
        extractor = DetailExtractor(fetcher, specs, Throttle(0), row_model=StatRow)

        record = extractor.extract(url)

        self.assertEqual(record, {"attack": 118, "defense": None, "stamina": None})


class TestStatsPipeline(unittest.TestCase):

    def setUp(self):
        self.slept = []
        self.throttle = Throttle(2, sleep=self.slept.append)

    def test_end_to_end(self):
        fetcher = StubFetcher({
            INDEX_URL: INDEX_HTML,
            BASE_URL + "/wiki/Bulbasaur": load_fixture("sample_detail_page.html"),
        })
        pipeline = StatsPipeline(make_recipe(), fetcher, throttle=self.throttle)

        with self.assertLogs('pipelines', level='INFO') as logs:
            table = pipeline.run()

        self.assertIn("INFO:pipelines:Throttle waits: 1", logs.output)

        self.assertEqual(table.rows, [{
            "name": "Bulbasaur",
            "url": "https://pokemongo.fandom.com/wiki/Bulbasaur",
            "attack": 118,
            "defense": 111,
            "stamina": 128,
        }])
        self.assertEqual(table.columns, ["name", "url", "attack", "defense", "stamina"])
        self.assertEqual(fetcher.requested, [INDEX_URL, BASE_URL + "/wiki/Bulbasaur"])
        self.assertEqual(self.slept, [2])
        self.assertEqual(pipeline.stats['index_entries_found'], 2)
        self.assertEqual(pipeline.stats['index_entries_dropped'], 1)

    def test_index_table(self):
        fetcher = StubFetcher({INDEX_URL: INDEX_HTML})
        pipeline = StatsPipeline(make_recipe(), fetcher, throttle=self.throttle)

        index = pipeline.index_table(pipeline.fetch_index())

        self.assertEqual(index.rows, [{"name": "Bulbasaur", "url": BASE_URL + "/wiki/Bulbasaur"}])

    def test_limit(self):
        detail = load_fixture("sample_detail_page.html")
        entries = [IndexEntry(name=f"Mon{i}", detail_location=f"{BASE_URL}/wiki/Mon{i}") for i in range(5)]
        fetcher = StubFetcher({e.detail_location: detail for e in entries})

        table = StatsPipeline(make_recipe(max_items=10), fetcher, throttle=self.throttle,
                              limit=2).run(entries)

        self.assertEqual([r["name"] for r in table.rows], ["Mon0", "Mon1"])
        self.assertEqual(len(self.slept), 2)

    def test_failed_detail_aborts(self):
        entries = [IndexEntry(name="Ghost", detail_location=f"{BASE_URL}/wiki/Ghost")]
        pipeline = StatsPipeline(make_recipe(), StubFetcher(), throttle=self.throttle)

        with self.assertRaises(NetworkError):
            pipeline.run(entries)

    def test_failed_detail_skipped(self):
        detail = load_fixture("sample_detail_page.html")
        entries = [
            IndexEntry(name="Ghost", detail_location=f"{BASE_URL}/wiki/Ghost"),
            IndexEntry(name="Bulbasaur", detail_location=f"{BASE_URL}/wiki/Bulbasaur"),
        ]
        fetcher = StubFetcher({f"{BASE_URL}/wiki/Bulbasaur": detail})

        pipeline = StatsPipeline(make_recipe(), fetcher, throttle=self.throttle, on_error='skip')
        table = pipeline.run(entries)

        self.assertEqual([r["name"] for r in table.rows], ["Bulbasaur"])
        self.assertEqual(pipeline.batch_stats.skipped, 1)
        self.assertEqual(self.slept, [2, 2])
        self.assertEqual(pipeline.stats['throttle_waits'], 2)

    def test_unreadable_detail_skipped_still_throttles(self):
        entries = [
            IndexEntry(name="Odd", detail_location=f"{BASE_URL}/wiki/Odd"),
            IndexEntry(name="Bulbasaur", detail_location=f"{BASE_URL}/wiki/Bulbasaur"),
        ]
        fetcher = StubFetcher({
            f"{BASE_URL}/wiki/Odd": '<table><tr><td data-source="attack">?</td></tr></table>',
            f"{BASE_URL}/wiki/Bulbasaur": load_fixture("sample_detail_page.html"),
        })

        pipeline = StatsPipeline(make_recipe(), fetcher, throttle=self.throttle, on_error='skip')
        table = pipeline.run(entries)

        self.assertEqual([r["name"] for r in table.rows], ["Bulbasaur"])
        self.assertEqual(len(fetcher.requested), 2)
        self.assertEqual(self.slept, [2, 2])

    def test_every_failed_detail_throttles(self):
        entries = [IndexEntry(name=f"Ghost{i}", detail_location=f"{BASE_URL}/wiki/Ghost{i}") for i in range(3)]

        pipeline = StatsPipeline(make_recipe(), StubFetcher(), throttle=self.throttle, on_error='skip')
        table = pipeline.run(entries)

        self.assertEqual(len(table), 0)
        self.assertEqual(self.slept, [2, 2, 2])
        self.assertEqual(pipeline.batch_stats.skipped, 3)

    def test_index_fetch_failure(self):
        pipeline = StatsPipeline(make_recipe(), StubFetcher(), throttle=self.throttle)
        with self.assertRaises(NetworkError):
            pipeline.run()


class TestCocktailPipeline(unittest.TestCase):

    def setUp(self):
        self.payload = json.loads(load_fixture("sample_cocktail_search.json"))

    def test_run(self):
        fetcher = StubFetcher(payload=self.payload)
        pipeline = CocktailPipeline(fetcher, api_base="https://api.example.com/api/json/v1/1")

        table = pipeline.run("A")

        self.assertEqual(fetcher.requested,
                         [("https://api.example.com/api/json/v1/1/search.php", {"f": "a"})])
        self.assertEqual(table.columns, ["name", "instructions", "ingredients"])
        self.assertEqual(len(table), 2)
        for row in table.rows:
            self.assertEqual(set(row), {"name", "instructions", "ingredients"})
        self.assertEqual(table.rows[0]["ingredients"], "Gin, Grand Marnier, Lemon Juice")
        self.assertEqual(table.rows[1]["ingredients"], "Amaretto, Cognac")

    def test_null_collection(self):
        pipeline = CocktailPipeline(StubFetcher(payload={"drinks": None}))
        self.assertEqual(pipeline.search("x"), [])

    def test_unexpected_shape(self):
        for payload in ({"cocktails": []}, ["not", "a", "mapping"], {"drinks": "nope"}):
            pipeline = CocktailPipeline(StubFetcher(payload=payload))
            with self.assertRaises(ParseError):
                pipeline.search("a")

    def test_letter_validation(self):
        self.assertEqual(validate_letter("Q"), "q")
        for bad in ("", "ab", "1", "é"):
            with self.assertRaises(ValueError):
                validate_letter(bad)


if __name__ == '__main__':
    unittest.main()
