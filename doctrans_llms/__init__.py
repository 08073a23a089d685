"""
DocTrans-LLMs: LLM translation for Hugo documentation sites

Translates English markdown articles into the site's target languages
through an OpenAI-compatible chat-completions API, and validates that the
translated files keep the source structure (code blocks, gists, links,
headings, technical front-matter fields).

Core pieces:
1. Placeholder masking of code, shortcodes and template directives
2. Heuristic markdown segmentation
3. Per-language translation with retries and a troubleshooting fallback
4. Structural validation of the results
"""

__version__ = "0.1.0"

from doctrans_llms.models import Document, Segment, SegmentKind
from doctrans_llms.pipeline import PipelineConfig, TranslationPipeline

__all__ = [
    "Document",
    "Segment",
    "SegmentKind",
    "PipelineConfig",
    "TranslationPipeline",
]
