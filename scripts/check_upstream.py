#!/usr/bin/env python3
"""
Quick check of the upstream intelligence API before switching to live data.

Run with: python scripts/check_upstream.py
"""

import sys
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio

from config import settings
from proxies.dashboard import build_dashboard
from upstream.base import UpstreamError
from upstream.client import IntelligenceClient


async def check():
    """Hit each upstream endpoint once and report what came back."""
    print("=" * 70)
    print("PodInsight - Upstream Readiness Check")
    print(f"API: {settings.api_url}")
    print("=" * 70)
    print()

    issues = []
    warnings = []

    async with IntelligenceClient(settings.api_url, timeout=settings.upstream_timeout_seconds) as api:
        # Dashboard endpoint (known to come back empty)
        try:
            dashboard = await api.get_dashboard()
            count = len(dashboard.get("episodes") or [])
            print(f"✓ Dashboard endpoint: {count} episodes")
            if count == 0:
                warnings.append("Dashboard endpoint is empty (dashboard-proxy compensates)")
        except UpstreamError as e:
            issues.append(f"Dashboard endpoint failed: {e}")

        # Aggregated dashboard via discovery + briefs
        try:
            aggregated = await build_dashboard(api, limit=settings.dashboard_episode_limit)
            print(f"✓ Aggregated dashboard: {aggregated.total_episodes} episodes")
            for episode in aggregated.episodes[:3]:  # Show first 3
                print(f"    - {episode.podcast_name}: {episode.title} ({len(episode.signals)} signals)")
            if aggregated.total_episodes == 0:
                warnings.append("Discovery returned no episodes with intelligence")
        except UpstreamError as e:
            issues.append(f"Episode discovery failed: {e}")

        # Analytics
        try:
            velocity = await api.get_topic_velocity()
            print(f"✓ Topic velocity: {len(velocity.get('data') or {})} topics")
        except UpstreamError as e:
            issues.append(f"Topic velocity failed: {e}")

        try:
            sentiment = await api.get_sentiment_analysis()
            print(f"✓ Sentiment analysis: {len(sentiment.get('data') or [])} points")
        except UpstreamError as e:
            issues.append(f"Sentiment analysis failed: {e}")

        try:
            await api.get_signals()
            print("✓ Signals endpoint reachable")
        except UpstreamError as e:
            warnings.append(f"Signals endpoint failed: {e}")

    # Summary
    print()
    print("=" * 70)
    if issues:
        print("❌ ISSUES FOUND:")
        for issue in issues:
            print(f"  - {issue}")
        print()
        print("Keep USE_MOCK_DATA=true until the upstream API recovers.")
    elif warnings:
        print("⚠️  WARNINGS:")
        for warning in warnings:
            print(f"  - {warning}")
        print()
        print("Live mode should work, but some panels may be empty.")
    else:
        print("✅ UPSTREAM READY!")
    print("=" * 70)
    return 1 if issues else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(check()))
