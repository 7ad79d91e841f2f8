"""Render hints builder for the intelligence dashboard.

Converts dashboard episodes into the four intelligence cards the frontend
renders (Market Signals, Deal Intelligence, Portfolio Pulse, Executive Brief).
Each card carries its top items already ranked, so the UI only lays them out.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

from models import DashboardResponse, EpisodeBrief, Signal

TOP_ITEMS = 3
EXECUTIVE_BRIEF_MAX = 5

URGENCY_ORDER = {"critical": 0, "high": 1, "normal": 2}
DEAL_KEYWORDS = ("rais", "fund", "series", "valuation")

_DOLLAR_RE = re.compile(r"\$[\d.]+[MBK]?")
_PERCENT_RE = re.compile(r"[+-]?\d+%")
_TITLE_PATTERNS = [
    re.compile(r"^([^.!]+)[.!]\s*(.+)$", re.DOTALL),  # first sentence
    re.compile(r"^(.+?):\s*(.+)$", re.DOTALL),  # colon
    re.compile(r"^(.+?)\s*-\s*(.+)$", re.DOTALL),  # dash
]


def urgency_level(confidence: float) -> str:
    if confidence > 0.8:
        return "critical"
    if confidence > 0.6:
        return "high"
    return "normal"


def extract_metadata(content: str) -> dict[str, str]:
    """Pull the first dollar amount and percent change out of signal text."""
    metadata: dict[str, str] = {}
    dollar = _DOLLAR_RE.search(content)
    if dollar:
        metadata["value"] = dollar.group(0)
    percent = _PERCENT_RE.search(content)
    if percent:
        metadata["change"] = percent.group(0)
    return metadata


def split_signal_content(content: str) -> tuple[str, str]:
    """Split signal text into a title and a description."""
    for pattern in _TITLE_PATTERNS:
        match = pattern.match(content)
        if match:
            return match.group(1).strip(), match.group(2).strip()
    title = content[:50]
    description = content[50:] if len(content) > 50 else content
    return title, description


def is_deal_signal(signal: Signal) -> bool:
    content = signal.content.lower()
    return signal.type == "investable" and any(k in content for k in DEAL_KEYWORDS)


def _build_item(prefix: str, index: int, episode: EpisodeBrief, signal: Signal) -> dict[str, Any]:
    title, description = split_signal_content(signal.content)
    return {
        "id": f"{prefix}-{episode.episode_id}-{index}",
        "title": title,
        "description": description,
        "urgency": urgency_level(signal.confidence),
        "metadata": {"source": episode.podcast_name, **extract_metadata(signal.content)},
        "episode_id": episode.episode_id,
        "signal_type": signal.type,
    }


def _rank(items: list[dict]) -> list[dict]:
    # sorted() is stable, so equal urgencies keep episode order
    return sorted(items, key=lambda item: URGENCY_ORDER[item["urgency"]])[:TOP_ITEMS]


def _collect(prefix: str, episodes: Iterable[EpisodeBrief], wanted) -> list[dict]:
    items: list[dict] = []
    for episode in episodes:
        for signal in episode.signals:
            if wanted(signal):
                items.append(_build_item(prefix, len(items), episode, signal))
    return _rank(items)


def extract_market_signals(episodes: list[EpisodeBrief]) -> list[dict]:
    return _collect("ms", episodes, lambda s: s.type in ("investable", "sound_bite"))


def extract_deal_intelligence(episodes: list[EpisodeBrief]) -> list[dict]:
    return _collect("di", episodes, is_deal_signal)


def extract_portfolio_pulse(episodes: list[EpisodeBrief]) -> list[dict]:
    return _collect("pp", episodes, lambda s: s.type in ("portfolio", "competitive"))


def generate_executive_brief(episodes: list[EpisodeBrief]) -> list[dict]:
    """Highest-confidence signals across every type."""
    pairs = [(signal, episode) for episode in episodes for signal in episode.signals]
    pairs.sort(key=lambda pair: pair[0].confidence, reverse=True)

    items = []
    for index, (signal, episode) in enumerate(pairs[:TOP_ITEMS]):
        item = _build_item("eb", index, episode, signal)
        item["metadata"] = {"source": f"{episode.podcast_name} - {signal.type}"}
        items.append(item)
    return items


def count_signals_by_type(episodes: list[EpisodeBrief]) -> dict[str, int]:
    market_signals = deal_intelligence = portfolio_pulse = 0
    for episode in episodes:
        for signal in episode.signals:
            if signal.type == "investable":
                market_signals += 1
                if is_deal_signal(signal):
                    deal_intelligence += 1
            elif signal.type == "sound_bite":
                market_signals += 1
            elif signal.type in ("portfolio", "competitive"):
                portfolio_pulse += 1
    return {
        "market_signals": market_signals,
        "deal_intelligence": deal_intelligence,
        "portfolio_pulse": portfolio_pulse,
        "executive_brief": min(len(episodes), EXECUTIVE_BRIEF_MAX),
    }


def _card_urgency(items: list[dict], count: int, high_threshold: int) -> str:
    if any(item["urgency"] == "critical" for item in items):
        return "critical"
    return "high" if count > high_threshold else "normal"


def build_intelligence_cards(dashboard: DashboardResponse) -> dict:
    """Build the intelligence_cards render hint from a dashboard payload."""
    episodes = dashboard.episodes
    counts = count_signals_by_type(episodes)

    market = extract_market_signals(episodes)
    deals = extract_deal_intelligence(episodes)
    portfolio = extract_portfolio_pulse(episodes)
    brief = generate_executive_brief(episodes)

    cards = [
        {
            "key": "market_signals",
            "title": "Market Signals",
            "subtitle": f"{counts['market_signals']} new signals today",
            "action": "View All Signals →",
            "top_items": market,
            "urgency": _card_urgency(market, counts["market_signals"], 20),
            "total_count": counts["market_signals"],
        },
        {
            "key": "deal_intelligence",
            "title": "Deal Intelligence",
            "subtitle": f"{counts['deal_intelligence']} funding signals",
            "action": "View All Deals →",
            "top_items": deals,
            "urgency": _card_urgency(deals, counts["deal_intelligence"], 10),
            "total_count": counts["deal_intelligence"],
        },
        {
            "key": "portfolio_pulse",
            "title": "Portfolio Pulse",
            "subtitle": f"{counts['portfolio_pulse']} portfolio mentions",
            "action": "View Portfolio →",
            "top_items": portfolio,
            "urgency": _card_urgency(portfolio, counts["portfolio_pulse"], 10),
            "total_count": counts["portfolio_pulse"],
        },
        {
            "key": "executive_brief",
            "title": "Executive Brief",
            "subtitle": f"{counts['executive_brief']} key insights",
            "action": "Read Brief →",
            "top_items": brief,
            "urgency": "normal",
            "total_count": counts["executive_brief"],
        },
    ]

    return {
        "type": "intelligence_cards",
        "title": "Actionable Intelligence",
        "last_updated": dashboard.generated_at,
        "cards": cards,
    }
