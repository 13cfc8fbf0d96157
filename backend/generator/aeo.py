"""AI-assisted llms.txt rewrite, optimized for discoverability in AI assistants.

The crawl result is sent to an OpenAI chat model with a fixed system prompt
and the answer is streamed back token by token. Callers get RewriteEvents:
any number of AiToken, then exactly one Done or Error.
"""
import logging
import os
from collections.abc import Iterator

from openai import OpenAI, OpenAIError

from crawler import AiToken, CrawlResult, Done, Error, GenerateResult
from crawler.models import RewriteEvent

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
MAX_OUTPUT_TOKENS = 2048

SYSTEM_PROMPT = """You are an expert in AI discoverability and SEO, specializing in helping brands appear prominently across AI interfaces like ChatGPT, Perplexity, and Claude.

Your task is to generate an optimized llms.txt file for a website. llms.txt is a standard that helps Large Language Models understand a website's structure and content, similar to how robots.txt guides search crawlers, but designed for AI systems.

The format is strictly:
# Site Title

> One-line site description

## Section Name

- [Page Title](url): Description

## Another Section

- [Page Title](url): Description

Optimization guidelines:
- Write descriptions that are keyword-rich, specific, and highlight the page's core value
- Group pages into logical sections that reflect the site's information architecture (e.g., Products, Documentation, Blog, About)
- Prioritize the most important and high-traffic pages first within each section
- Rewrite the site description to clearly capture the brand's core value proposition for AI systems
- Use titles that clearly signal page content; avoid vague titles like "Home" or "Page 1"
- Focus on what makes each page uniquely valuable and discoverable by AI systems
- Omit pages that are duplicates, low-value, or not meaningful for AI discoverability

Return only the llms.txt content. No explanation, no markdown fences, no preamble."""


def _build_client() -> OpenAI:
    """
    Lazily construct the OpenAI client so a missing key fails the request,
    not the import.
    """
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise OpenAIError("OPENAI_API_KEY is not set.")
    return OpenAI(api_key=api_key)


def build_user_message(result: CrawlResult) -> str:
    page_lines = []
    for p in result.pages:
        line = f"- {p.title} ({p.url})"
        if p.description:
            line += f": {p.description}"
        page_lines.append(line)
    return (
        "Generate an optimized llms.txt for this website:\n\n"
        f"Site: {result.site_title}\n"
        f"Description: {result.site_description}\n"
        f"Base URL: {result.base_url}\n\n"
        f"Pages ({len(result.pages)} total):\n"
        + "\n".join(page_lines)
    )


def stream_aeo_llms_txt(result: CrawlResult, client: OpenAI | None = None) -> Iterator[RewriteEvent]:
    model = os.getenv("OPENAI_MODEL", DEFAULT_MODEL)
    logger.info("AEO rewrite starting: model=%s pages=%d base_url=%s", model, len(result.pages), result.base_url)
    try:
        client = client or _build_client()
        stream = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_message(result)},
            ],
            max_tokens=MAX_OUTPUT_TOKENS,
            stream=True,
        )
        parts: list[str] = []
        for chunk in stream:
            if not chunk.choices:
                continue
            token = chunk.choices[0].delta.content or ""
            if token:
                parts.append(token)
                yield AiToken(token=token)
    except Exception as e:
        logger.exception("AEO rewrite failed for %s", result.base_url)
        yield Error(message=str(e) or "AI generation failed")
        return

    text = "".join(parts)
    logger.info("AEO rewrite finished: %d chars", len(text))
    yield Done(result=GenerateResult(**result.model_dump(), llms_txt=text))
