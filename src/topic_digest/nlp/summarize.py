from __future__ import annotations

from collections import Counter
from typing import Protocol

from topic_digest.models import Post, SummaryResult
from topic_digest.text import collapse_whitespace, hashtag, normalize, truncate

STOPWORDS = frozenset(
    """
    a an the and or but if then than so to of for in on at by with about as is are
    was were be been being it its this that these those i you he she they we me my
    your our their them from into out up down over under again more most very can
    could should would will just not no yes do does did doing rt via amp t s
    """.split()
)

MAX_KEYWORDS = 8
MAX_REPRESENTATIVE = 4
MIN_TOKEN_LEN = 3
POST_MAX_LEN = 280
EXCERPT_MAX_LEN = 120
FALLBACK_EXCERPT_LEN = 80
POST_KEYWORDS = 4
MAX_HASHTAGS = 2
FILLER = "recent discussion and opinions"
CLOSING = " What do you think?"


class Summarizer(Protocol):
    async def summarize(self, topic: str, posts: list[Post]) -> SummaryResult: ...


def is_keyword(token: str) -> bool:
    return len(token) >= MIN_TOKEN_LEN and token not in STOPWORDS


def keyword_frequency(texts: list[str]) -> Counter:
    """Count surviving tokens across a batch of normalized texts.

    Insertion order is first-seen order, which doubles as the tie-break
    when two keywords share a count.
    """
    freq: Counter = Counter()
    for text in texts:
        for token in text.split():
            w = token.lower()
            if not is_keyword(w):
                continue
            freq[w] += 1
    return freq


def top_keywords(freq: Counter, n: int = MAX_KEYWORDS) -> list[str]:
    # sorted() is stable, so equal counts keep first-seen order
    ranked = sorted(freq.items(), key=lambda kv: kv[1], reverse=True)
    return [w for w, _ in ranked[:n]]


def score_post(post: Post, freq: Counter) -> int:
    return sum(freq.get(tok.lower(), 0) for tok in normalize(post.text).split())


def rank_posts(posts: list[Post], freq: Counter, n: int = MAX_REPRESENTATIVE) -> list[Post]:
    scored = [(score_post(p, freq), p) for p in posts]
    scored.sort(key=lambda sp: sp[0], reverse=True)
    return [p for _, p in scored[:n]]


def render_summary(topic: str, keywords: list[str], reps: list[Post]) -> str:
    parts = [f'Summary for "{topic}": ']
    if keywords:
        parts.append(f"Key themes include {', '.join(keywords)}. ")
    if reps:
        snippets = "; ".join(
            f'"{truncate(collapse_whitespace(p.text), EXCERPT_MAX_LEN)}"' for p in reps
        )
        parts.append(f"Representative points: {snippets}.")
    return "".join(parts)


def render_hashtags(keywords: list[str]) -> str:
    tags: list[str] = []
    for k in keywords:
        if len(tags) >= MAX_HASHTAGS:
            break
        tag = hashtag(k)
        if len(tag) >= MIN_TOKEN_LEN:
            tags.append("#" + tag)
    return " ".join(tags)


def render_post(topic: str, keywords: list[str], reps: list[Post]) -> str:
    lead = f"Quick roundup on {topic}: "
    if keywords:
        body = ", ".join(keywords[:POST_KEYWORDS])
    elif reps:
        body = truncate(reps[0].text, FALLBACK_EXCERPT_LEN)
    else:
        body = FILLER

    tags = render_hashtags(keywords)
    tail = CLOSING + (" " + tags if tags else "")
    return truncate(f"{lead}{body}.{tail}", POST_MAX_LEN)


class ExtractiveSummarizer:
    """Keyword-frequency summarizer. Deterministic for a given input order."""

    async def summarize(self, topic: str, posts: list[Post]) -> SummaryResult:
        return self.summarize_sync(topic, posts)

    def summarize_sync(self, topic: str, posts: list[Post]) -> SummaryResult:
        cleaned = [c for c in (normalize(p.text) for p in posts) if c]
        freq = keyword_frequency(cleaned)
        keywords = top_keywords(freq)
        reps = rank_posts(posts, freq)
        return SummaryResult(
            summary=render_summary(topic, keywords, reps),
            suggested_post=render_post(topic, keywords, reps),
            keywords=keywords,
            representative_posts=reps,
        )
