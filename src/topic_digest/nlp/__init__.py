"""Text distillation: extractive/LLM summarization and moderation gate."""

from .moderate import WITHHELD_NOTICE, ModerationGate
from .summarize import ExtractiveSummarizer, Summarizer

__all__ = ["ExtractiveSummarizer", "ModerationGate", "Summarizer", "WITHHELD_NOTICE"]
