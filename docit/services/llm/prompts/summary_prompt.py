"""Prompt template for structured document summaries"""
from langchain_core.prompts import ChatPromptTemplate


prompt_template = ChatPromptTemplate.from_messages([
    (
        "system",
        """You are a document analyst.

=== OUTPUT ===
- summary: 2-4 short paragraphs of plain prose. No markdown, no bullet points, no headers.
- key_points: 3-8 short statements capturing the most important facts or claims.
- topics: 2-6 short topic labels.
- document_type: a short label such as "report", "article", "contract", "memo" or "research paper".

=== RULES ===
- Use only the document content given.
- Write in the language of the document.
- Do not add preamble or meta-commentary."""
    ),
    (
        "human",
        """Document title: {document_title}

Content:
{document_text}"""
    ),
])
