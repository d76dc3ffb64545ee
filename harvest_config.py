"""
Configuration settings for the wiki harvester.

Every value can be overridden with an environment variable of the same
name prefixed with HARVEST_ (e.g. HARVEST_RATE_LIMIT_DELAY=0.5).
"""

import os

# Rate limiting: delay in seconds after each detail page fetch
# Increase this if you're getting blocked or want to be more polite
RATE_LIMIT_DELAY = float(os.environ.get("HARVEST_RATE_LIMIT_DELAY", "2"))

# Maximum number of index entries processed per run (None = no limit)
_batch_limit = os.environ.get("HARVEST_BATCH_LIMIT", "10")
BATCH_LIMIT = int(_batch_limit) if _batch_limit.lower() != "none" else None

# Per-request timeout in seconds
REQUEST_TIMEOUT = float(os.environ.get("HARVEST_REQUEST_TIMEOUT", "30"))

# Browser fingerprint used by curl_cffi
IMPERSONATE = os.environ.get("HARVEST_IMPERSONATE", "chrome120")

# Cocktail API
COCKTAIL_API_BASE = os.environ.get(
    "HARVEST_COCKTAIL_API_BASE",
    "https://www.thecocktaildb.com/api/json/v1/1",
)
COCKTAIL_FIELD_PREFIX = "str"

# Where result tables go when a recipe or flag doesn't say otherwise
OUTPUT_DIR = os.environ.get("HARVEST_OUTPUT_DIR", "output")

# Batch error policy: 'abort' stops at the first failed item, 'skip' drops it
ON_ERROR = os.environ.get("HARVEST_ON_ERROR", "abort")
