"""
Project-wide constants for the documentation translation workflow.

Module Contents:
    APP_NAME: Application name for display purposes
    SUPPORTED_LANGUAGES: Target language codes, in processing order
    LANGUAGE_NAMES: Language code -> name used inside prompts
    PRODUCTS / PLATFORMS: Content tree layout under content/en/
    VERBOSE_LANGUAGES: Languages that always get detailed request logging
    DEFAULT_*: Default file names and LLM endpoint settings

Example:
    >>> from doctrans_llms.config import LANGUAGE_NAMES
    >>> LANGUAGE_NAMES["hy"]
    'Armenian'
"""

from pathlib import Path

# Application name for display and identification
APP_NAME = "DocTrans-LLMs"

# Language code -> human-readable name (used in prompts)
LANGUAGE_NAMES = {
    "ar": "Arabic",
    "bg": "Bulgarian",
    "cs": "Czech",
    "de": "German",
    "el": "Greek",
    "es": "Spanish",
    "fa": "Persian/Farsi",
    "fr": "French",
    "hi": "Hindi",
    "hr": "Croatian",
    "hu": "Hungarian",
    "hy": "Armenian",
    "id": "Indonesian",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "lt": "Lithuanian",
    "nl": "Dutch",
    "pl": "Polish",
    "pt": "Portuguese",
    "ru": "Russian",
    "sv": "Swedish",
    "th": "Thai",
    "tr": "Turkish",
    "uk": "Ukrainian",
    "vi": "Vietnamese",
    "zh": "Chinese",
}

SUPPORTED_LANGUAGES = tuple(LANGUAGE_NAMES)

SOURCE_LANGUAGE = "en"

PRODUCTS = (
    "annotation", "comparison", "conversion", "editor", "merger",
    "metadata", "parser", "viewer", "signature", "total",
)

PLATFORMS = ("java", "net")

# Scripts the model struggles with; requests/responses are always logged
VERBOSE_LANGUAGES = frozenset({"hy", "ar", "th"})

# Content tree: content/{lang}/{product}/{platform}/{article_path}
CONTENT_DIR_NAME = "content"

DEFAULT_TASKS_FILE = "translation-tasks.json"
DEFAULT_PROCESSING_REPORT = "processing-report.json"
DEFAULT_VALIDATION_REPORT = "translation-validation-report.json"

# OpenAI-compatible chat completions endpoint (LiteLLM proxy)
DEFAULT_API_ENDPOINT = "https://llm.professionalize.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-oss"

# Local key storage (fallback after env var and OS keychain)
CONFIG_DIR = Path.home() / ".doctrans"


def language_name(code: str) -> str:
    """Return the prompt name for a language code (upper-cased code if unknown)."""
    return LANGUAGE_NAMES.get(code, code.upper())
