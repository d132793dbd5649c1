"""Prompt templates for enrichment, verification and bias analysis."""

from worldwire.data import ArticleGroup, EventRecord
from worldwire.enrichment.heuristics import CATEGORIES, REGIONS

ENRICH_SYSTEM_PROMPT = """\
You are a professional historian and investigative journalist. Write \
neutral, factual, well-sourced accounts of world events for a general \
audience. Avoid speculation, emotional language and political framing.\
"""

ENRICH_PROMPT = """\
Write an account of the event below based on the reports provided.

EVENT: {title}
DATE: {date}
REPORTS:
{reports}
{corroboration}
Return a JSON object with these fields:
- "narrative": 3-5 paragraphs separated by blank lines: what happened, \
background, key actors, consequences, wider significance
- "shortSummary": 1-2 sentences, at most 300 characters
- "region": one of: {regions}
- "category": one of: {categories}
- "keyPoints": array of 3-5 short factual statements\
"""

VERIFY_SYSTEM_PROMPT = """\
You are an expert fact-checker. Be thorough, fair, and evidence-based.\
"""

VERIFY_PROMPT = """\
Verify this event by comparing it with the corroboration from independent sources.

EVENT:
Title: {title}
Description: {description}
Date: {date}
Sources: {sources}

CORROBORATION:
{corroboration}

Scoring guidelines:
- 90-100: confirmed by 2+ highly reputable sources (wire services, agencies, journals)
- 75-89: confirmed by 1 reputable source or 2+ reliable sources
- 60-74: single reliable source, or several weaker sources that agree
- 40-59: limited or conflicting corroboration
- 0-39: no corroboration, or sources contradict the claims

Return a JSON object:
{{"credibilityScore": 0-100, "verified": true|false, \
"verificationSummary": "2-3 sentences", "corroboratedSources": ["..."], \
"concerns": ["..."]}}\
"""

BIAS_SYSTEM_PROMPT = """\
You are an expert media analyst. Provide objective, evidence-based bias \
assessments without bias of your own.\
"""

BIAS_PROMPT = """\
Analyze the following text for bias, tone, and political alignment.

TEXT:
{text}

SOURCES:
{sources}

- biasScore (-100 to 100): -100..-50 state propaganda or heavy manipulation; \
-49..-20 partisan, selective facts; -19..19 mostly neutral; 20..49 independent \
with a mild editorial stance; 50..100 investigative, fact-focused, transparent
- toneScore (0 to 100): 0-20 inflammatory; 21-40 persuasive; 41-60 measured; \
61-80 factual; 81-100 clinical
- alignment: "Left", "Right", "Neutral" or "State"
- biasSummary: 2-3 sentences explaining the assessment

Return a JSON object:
{{"biasScore": 0, "toneScore": 50, "alignment": "Neutral", "biasSummary": "..."}}\
"""


def _group_reports(group: ArticleGroup, limit: int = 8) -> str:
    lines = []
    for i, article in enumerate(group.articles[:limit], 1):
        body = article.body_text[:600]
        lines.append(f"[{i}] {article.source_name} ({article.published_date}): {article.title}")
        if body and body != article.title:
            lines.append(f"    {body}")
    return "\n".join(lines)


def _record_reports(record: EventRecord) -> str:
    text = record.long_description or record.description or "Limited information"
    sources = ", ".join(record.sources) or "None provided"
    return f"{text[:2000]}\nSources: {sources}"


def build_enrich_prompt(subject: ArticleGroup | EventRecord, corroboration: str | None) -> str:
    if isinstance(subject, ArticleGroup):
        title = subject.lead.title
        event_date = subject.earliest_published.isoformat()
        reports = _group_reports(subject)
    else:
        title = subject.title
        event_date = subject.date
        reports = _record_reports(subject)
    extra = f"\nCORROBORATION:\n{corroboration}\n" if corroboration else ""
    return ENRICH_PROMPT.format(
        title=title,
        date=event_date,
        reports=reports,
        corroboration=extra,
        regions=", ".join(REGIONS),
        categories=", ".join(CATEGORIES),
    )


def build_verify_prompt(subject: ArticleGroup | EventRecord, corroboration: str) -> str:
    if isinstance(subject, ArticleGroup):
        title = subject.lead.title
        description = subject.lead.body_text or subject.lead.title
        event_date = subject.earliest_published.isoformat()
        sources = subject.source_urls or subject.source_names
    else:
        title = subject.title
        description = subject.long_description or subject.description
        event_date = subject.date
        sources = subject.sources
    return VERIFY_PROMPT.format(
        title=title,
        description=description[:2000] or "Unknown",
        date=event_date,
        sources=", ".join(sources) or "None",
        corroboration=corroboration or "None available",
    )


def build_bias_prompt(text: str, sources: list[str]) -> str:
    return BIAS_PROMPT.format(text=text[:2000], sources=", ".join(sources) or "Unknown")
