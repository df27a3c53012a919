"""Configuration management for the invoice generator."""
import os
from dotenv import load_dotenv

load_dotenv()


def clean_env_value(value):
    """Return an env value with surrounding whitespace and one pair of quotes removed."""
    if not value:
        return ""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return value.strip()


# Where the local store and exported files live
DATA_DIR = clean_env_value(os.getenv("DATA_DIR")) or "./data"
DB_PATH = os.path.join(DATA_DIR, "invoicegen.db")
EXPORT_DIR = clean_env_value(os.getenv("EXPORT_DIR")) or os.path.join(DATA_DIR, "exports")

# Prefixed to every money amount in previews and exports
CURRENCY_SYMBOL = clean_env_value(os.getenv("CURRENCY_SYMBOL")) or "₦"

# Regular and bold TrueType faces used by both exports; must cover CURRENCY_SYMBOL
FONT_DIR = clean_env_value(os.getenv("FONT_DIR")) or os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "invoicegen", "render", "fonts")
FONT_REGULAR = clean_env_value(os.getenv("FONT_REGULAR")) or "DejaVuSans.ttf"
FONT_BOLD = clean_env_value(os.getenv("FONT_BOLD")) or "DejaVuSans-Bold.ttf"

# Raster snapshot upscaling (never below 2x)
IMAGE_SCALE = max(int(os.getenv("IMAGE_SCALE", "2")), 2)

# Zero-padding width for generated document numbers ("001")
DOCUMENT_NUMBER_WIDTH = int(os.getenv("DOCUMENT_NUMBER_WIDTH", "3"))

LOG_LEVEL = clean_env_value(os.getenv("LOG_LEVEL") or "INFO").upper()
