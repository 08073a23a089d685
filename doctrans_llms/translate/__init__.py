"""
Translation backends.

This module provides:
- Translator interface and DummyTranslator (base)
- Prompt construction per content kind (prompts)
- LLMTranslator for OpenAI-compatible endpoints (llm)
- Reasoning-content decoder (reasoning)
- Troubleshooting payload format/parse (fallback)
"""

from doctrans_llms.translate.base import DummyTranslator, Translator, create_translator
from doctrans_llms.translate.prompts import PromptKind

__all__ = [
    "Translator",
    "DummyTranslator",
    "create_translator",
    "PromptKind",
]


# LLMTranslator pulls in requests; import it on first use
def __getattr__(name):
    if name in ("LLMTranslator", "LLMConfig"):
        from doctrans_llms.translate import llm
        return getattr(llm, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
