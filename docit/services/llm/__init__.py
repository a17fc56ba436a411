"""Document summarization service module"""
from .summarizer import (
    DocumentSummary,
    GeminiSummarizer,
    Summarizer,
    SummarizerError,
    get_summarizer,
)

__all__ = [
    "DocumentSummary",
    "GeminiSummarizer",
    "Summarizer",
    "SummarizerError",
    "get_summarizer",
]
