"""
Reshape raw cocktail API records into DrinkRow objects.

The API returns one wide record per drink with prefixed keys
(strDrink, strInstructions, strIngredient1..15); we strip the prefix,
keep the name, instructions and ingredient columns, and fold the
ingredients into one list.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from harvest_models import DrinkRow

logger = logging.getLogger(__name__)

INGREDIENT_RE = re.compile(r'^Ingredient\d*$')

NAME_FIELD = 'Drink'
INSTRUCTIONS_FIELD = 'Instructions'


def strip_prefix(record: Dict[str, Any], prefix: str = 'str') -> Dict[str, Any]:
    """Remove prefix from every key that starts with it, keeping key order."""
    stripped = {}
    for key, value in record.items():
        if prefix and key.startswith(prefix) and len(key) > len(prefix):
            key = key[len(prefix):]
        stripped[key] = value
    return stripped


def fold_ingredients(values: Iterable[Optional[str]]) -> List[str]:
    """Keep the non-empty values, stripped, in their original order."""
    folded = []
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            folded.append(text)
    return folded


def reshape(raw_records: List[Dict[str, Any]], prefix: str = 'str') -> List[DrinkRow]:
    """
    Turn raw API records into DrinkRow objects.

    Records without a drink name are dropped.

    Args:
        raw_records: Records as returned under the API's collection key
        prefix: Key prefix to strip (default: "str")

    Returns:
        List of DrinkRow in input order
    """
    rows = []
    for record in raw_records:
        fields = strip_prefix(record, prefix)

        name = fields.get(NAME_FIELD)
        if not name or not str(name).strip():
            logger.debug(f"Dropping drink record without a name: {record.get('idDrink')}")
            continue

        ingredients = fold_ingredients(
            value for key, value in fields.items() if INGREDIENT_RE.match(key)
        )
        instructions = fields.get(INSTRUCTIONS_FIELD)

        rows.append(DrinkRow(
            name=str(name).strip(),
            instructions=instructions.strip() if isinstance(instructions, str) else None,
            ingredients=ingredients,
        ))

    return rows
