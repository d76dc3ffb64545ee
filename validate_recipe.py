"""
Simple script to validate a recipe file.

Usage:
    python validate_recipe.py recipes/pokemon_go.yaml
"""

import sys
import logging

import yaml

from recipe_loader import load_recipe, validate_recipe

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def main():
    if len(sys.argv) < 2:
        print("Usage: python validate_recipe.py <recipe_file>")
        sys.exit(1)

    recipe_file = sys.argv[1]

    try:
        logger.info(f"Loading recipe: {recipe_file}")
        recipe = load_recipe(recipe_file)

        logger.info(f"✓ Recipe '{recipe.name}' loaded successfully")
        logger.info(f"  Index URL: {recipe.index.url}")
        logger.info(f"  Base URL: {recipe.index.base_url}")
        logger.info(f"  Entry CSS: {recipe.index.entry_css}")
        logger.info(f"  Link attribute: {recipe.index.link_attribute}")

        logger.info("  Fields:")
        for spec in recipe.fields:
            source = f" @{spec.attribute}" if spec.attribute else ""
            logger.info(f"    - {spec.name} ({spec.type}): {spec.css}{source}")

        logger.info(f"  Max items: {recipe.limits.max_items}")
        logger.info(f"  Delay: {recipe.throttle.delay}s")
        logger.info(f"  Output index: {recipe.output.index_table}")
        logger.info(f"  Output results: {recipe.output.result_table}")

        warnings = validate_recipe(recipe)
        if warnings:
            logger.warning("Validation warnings:")
            for warning in warnings:
                logger.warning(f"  - {warning}")
        else:
            logger.info("✓ No validation warnings")

        logger.info("")
        logger.info("Recipe is valid and ready to use!")
        logger.info(f"Run with: python harvester.py --mode stats --recipe {recipe_file}")

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Invalid recipe: {e}")
        sys.exit(1)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
