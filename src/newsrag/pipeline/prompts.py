"""Prompt templates and canned responses for news question answering."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

NEWS_SYSTEM_PROMPT = """\
You are a helpful news assistant that answers questions based on recent \
news articles.

Guidelines:
- Use the provided context from news articles to answer questions accurately
- If the context doesn't contain relevant information, say so clearly
- Always cite your sources when possible
- Provide balanced, factual information
- If asked about breaking news, mention that your information is based on \
available articles
- Keep responses concise but informative
- If multiple sources have different perspectives, present them fairly
"""

NEWS_QUERY_TEMPLATE = """\
Context from recent news articles:
{context}

User Question: {question}

Please provide a helpful answer based on the context above:"""

# ---------------------------------------------------------------------------
# Canned responses
# ---------------------------------------------------------------------------

NO_MATCH_RESPONSE = (
    "I couldn't find any relevant information in the recent news articles to "
    "answer your question. Could you try rephrasing your question or asking "
    "about a different topic?"
)

SAFETY_FALLBACK = (
    "I apologize, but I cannot provide a response to that query due to safety "
    "guidelines. Please try rephrasing your question."
)

QUOTA_FALLBACK = (
    "I'm currently experiencing high demand. Please try again in a few moments."
)

ERROR_TURN = (
    "I apologize, but I encountered an error while processing your question. "
    "Please try again."
)

STREAM_ERROR = "Failed to generate response"


def build_news_prompt(question: str, context: str) -> str:
    """Combine the packed context window and the user's question."""
    return NEWS_QUERY_TEMPLATE.format(context=context, question=question)
