"""AI summarizer for document text (Gemini via LangChain)"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel, Field

from docit import config
from docit.errors import UpstreamError
from .prompts import prompt_template

logger = logging.getLogger(__name__)

# Characters of document text sent to the model
MAX_INPUT_CHARS = 100_000

NO_TEXT_SUMMARY = "No extractable text in this document."


class SummarizerError(UpstreamError):
    code = "AI_UNAVAILABLE"


class DocumentSummary(BaseModel):
    """Structured summary of one document"""
    summary: str = Field(description="2-4 paragraph prose summary of the document")
    key_points: List[str] = Field(default_factory=list, description="3-8 key points")
    topics: List[str] = Field(default_factory=list, description="2-6 topic labels")
    document_type: str = Field("Unknown", description="Short label such as report, article or memo")

    @classmethod
    def empty(cls) -> "DocumentSummary":
        return cls(summary=NO_TEXT_SUMMARY, key_points=[], topics=[], document_type="Unknown")


class Summarizer(ABC):

    @abstractmethod
    async def summarize(self, title: str, text: str) -> DocumentSummary:
        ...


class GeminiSummarizer(Summarizer):
    """Gemini with structured output; the API key is read from GOOGLE_API_KEY"""

    def __init__(self, model: Optional[str] = None, temperature: float = 0.3):
        self.model = model or config.GEMINI_MODEL
        self.temperature = temperature
        self._chain = None

    def _get_chain(self):
        if self._chain is None:
            llm = ChatGoogleGenerativeAI(model=self.model, temperature=self.temperature)
            self._chain = prompt_template | llm.with_structured_output(DocumentSummary)
        return self._chain

    async def summarize(self, title: str, text: str) -> DocumentSummary:
        if not text.strip():
            return DocumentSummary.empty()

        try:
            result = await self._get_chain().ainvoke({
                "document_title": title,
                "document_text": text[:MAX_INPUT_CHARS],
            })
        except Exception as e:
            logger.error(f"Summarization failed for '{title}': {e}", exc_info=True)
            raise SummarizerError("AI summarization is temporarily unavailable")

        if not isinstance(result, DocumentSummary):
            logger.warning(f"Unexpected summarizer output for '{title}': {type(result).__name__}")
            raise SummarizerError("AI summarization returned an unreadable result")
        return result


_summarizer: Optional[Summarizer] = None


def get_summarizer() -> Summarizer:
    """FastAPI dependency returning the process-wide summarizer"""
    global _summarizer
    if _summarizer is None:
        _summarizer = GeminiSummarizer()
    return _summarizer
