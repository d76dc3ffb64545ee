"""
Recipe loader for stats pipelines.

Loads and validates YAML recipe files that define which index page to
read, how to find its entries, and which fields to extract from each
detail page.
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path
import yaml

import harvest_config
from extractors.detail_page import FieldSpec, FIELD_TYPES
from harvest_models import ROW_SCHEMAS


@dataclass
class IndexConfig:
    """Where the index page is and how to read its entries."""
    url: str
    base_url: str
    entry_css: str
    name_attribute: Optional[str] = None
    link_attribute: str = "href"


@dataclass
class LimitsConfig:
    """Configuration for batch limits."""
    max_items: Optional[int] = harvest_config.BATCH_LIMIT


@dataclass
class ThrottleConfig:
    """Delay after each detail page fetch, in seconds."""
    delay: float = harvest_config.RATE_LIMIT_DELAY


@dataclass
class OutputConfig:
    """Configuration for output files."""
    index_table: str = f"{harvest_config.OUTPUT_DIR}/index.jsonl"
    result_table: str = f"{harvest_config.OUTPUT_DIR}/results.csv"


@dataclass
class Recipe:
    """
    Complete recipe for a stats pipeline.

    Defines the index page, the detail fields and the run limits.
    """
    name: str
    index: IndexConfig
    fields: List[FieldSpec]
    row_schema: Optional[str] = None
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    throttle: ThrottleConfig = field(default_factory=ThrottleConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Recipe':
        """
        Create a Recipe from a dictionary (loaded from YAML).

        Args:
            data: Dictionary from YAML file

        Returns:
            Recipe instance

        Raises:
            ValueError: If required fields are missing or invalid
        """
        name = data.get('name', 'recipe')

        # Index section
        index_data = data.get('index')
        if not isinstance(index_data, dict):
            raise ValueError("Recipe must have an 'index' dictionary")
        for key in ('url', 'entry_css'):
            value = index_data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"'index.{key}' must be a non-empty string")

        index = IndexConfig(
            url=index_data['url'],
            base_url=index_data.get('base_url') or index_data['url'],
            entry_css=index_data['entry_css'],
            name_attribute=index_data.get('name_attribute'),
            link_attribute=index_data.get('link_attribute') or 'href'
        )

        # Detail fields
        detail_data = data.get('detail')
        if not isinstance(detail_data, dict) or not isinstance(detail_data.get('fields'), dict):
            raise ValueError("Recipe must have a 'detail.fields' dictionary")
        if not detail_data['fields']:
            raise ValueError("'detail.fields' must define at least one field")

        row_schema = detail_data.get('schema')
        if row_schema is not None and not isinstance(row_schema, str):
            raise ValueError("'detail.schema' must be a string")
        if row_schema is not None and row_schema not in ROW_SCHEMAS:
            raise ValueError(f"Unknown row schema: {row_schema}")

        fields = []
        for field_name, spec in detail_data['fields'].items():
            if isinstance(spec, str):
                spec = {'css': spec}
            if not isinstance(spec, dict) or not spec.get('css'):
                raise ValueError(f"Field '{field_name}' needs a 'css' selector")

            field_type = spec.get('type', 'str')
            if field_type not in FIELD_TYPES:
                raise ValueError(f"Invalid type for field '{field_name}': {field_type}")

            fields.append(FieldSpec(
                name=field_name,
                css=spec['css'],
                attribute=spec.get('attribute'),
                type=field_type
            ))

        # Parse limits config
        limits = LimitsConfig()
        if 'limits' in data:
            limits_data = data['limits']
            if isinstance(limits_data, dict) and 'max_items' in limits_data:
                max_items = limits_data['max_items']
                if max_items is not None and (isinstance(max_items, bool) or not isinstance(max_items, int) or max_items < 0):
                    raise ValueError("'limits.max_items' must be a non-negative integer")
                limits.max_items = max_items

        # Parse throttle config
        throttle = ThrottleConfig()
        if 'throttle' in data:
            throttle_data = data['throttle']
            if isinstance(throttle_data, dict) and 'delay' in throttle_data:
                delay = throttle_data['delay']
                if isinstance(delay, bool) or not isinstance(delay, (int, float)) or delay < 0:
                    raise ValueError("'throttle.delay' must be a non-negative number")
                throttle.delay = float(delay)

        # Parse output config
        output = OutputConfig()
        if 'output' in data:
            output_data = data['output']
            if isinstance(output_data, dict):
                output.index_table = output_data.get('index_table', output.index_table)
                output.result_table = output_data.get('result_table', output.result_table)

        return cls(
            name=name,
            index=index,
            fields=fields,
            row_schema=row_schema,
            limits=limits,
            throttle=throttle,
            output=output
        )


def load_recipe(file_path: str) -> Recipe:
    """
    Load a recipe from a YAML file.

    Args:
        file_path: Path to YAML recipe file

    Returns:
        Recipe instance

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If recipe is invalid
        yaml.YAMLError: If YAML parsing fails
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Recipe file not found: {file_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError("Recipe file must contain a YAML dictionary")

    return Recipe.from_dict(data)


def validate_recipe(recipe: Recipe) -> List[str]:
    """
    Validate a recipe and return a list of warnings (not errors).

    Args:
        recipe: Recipe to validate

    Returns:
        List of warning messages (empty if no warnings)
    """
    warnings = []

    for url in (recipe.index.url, recipe.index.base_url):
        if not url.startswith('http://') and not url.startswith('https://'):
            warnings.append(f"URL may be invalid (missing http/https): {url}")

    if recipe.limits.max_items is None:
        warnings.append("No max_items limit - every index entry will be fetched")
    elif recipe.limits.max_items > 1000:
        warnings.append(f"max_items is very high: {recipe.limits.max_items}")

    if recipe.throttle.delay == 0:
        warnings.append("Throttle delay is 0 - requests will not be rate limited")

    return warnings
