#!/usr/bin/env python3
"""Real upstream verification script — run outside sandbox with network access.

Usage:
  1. Fill in MOENV_API_KEY in .env
  2. Run: python scripts/verify_upstreams.py

Steps:
  Step 1: Verify .env configuration
  Step 2: Fetch current-year HPA news directly
  Step 3: Fetch MOENV restaurants directly
  Step 4: Cold + warm read through the news cache (temporary cache dir)
"""

import asyncio
import os
import sys
import tempfile

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def step_header(n: int, title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  Step {n}: {title}")
    print(f"{'='*60}\n")


def ok(msg: str) -> None:
    print(f"  ✅ {msg}")


def fail(msg: str) -> None:
    print(f"  ❌ {msg}")


def info(msg: str) -> None:
    print(f"  ℹ️  {msg}")


async def step1_verify_env():
    step_header(1, "Verify .env Configuration")
    from app.config import settings

    if settings.has_moenv_key:
        ok(f"MOENV_API_KEY: set ({settings.moenv_api_key[:8]}...)")
    else:
        fail("MOENV_API_KEY: NOT SET — restaurant requests will be rejected")

    ok(f"Cache dir: {settings.cache_dir}")
    ok(f"News TTL: {settings.news_cache_ttl_seconds}s | fallback={settings.news_fallback_on_error}")
    ok(f"Restaurant TTL: {settings.restaurant_cache_ttl_seconds}s | fallback={settings.restaurant_fallback_on_error}")
    ok(f"Upstream timeout: {settings.upstream_timeout_seconds:g}s")
    return settings.has_moenv_key


async def step2_test_hpa_news():
    step_header(2, "Test HPA News API")
    from app.config import settings
    from app.integrations.hpa_news import HPANewsClient
    from app.orchestrator.router import current_year
    from app.services.errors import UpstreamUnavailable

    client = HPANewsClient(settings.hpa_base_url, settings.hpa_news_path, settings.upstream_timeout_seconds)
    year = current_year()
    info(f"Fetching news for {year}")
    try:
        raw = await client.fetch(client.build_params(year))
    except UpstreamUnavailable as e:
        fail(str(e))
        return False

    items = client.shape(year, raw)
    ok(f"Got {len(raw) if isinstance(raw, list) else 0} raw items, {len(items)} in {year}")
    for item in items[:3]:
        print(f"    - {str(item.get('標題', ''))[:50]} ({item.get('發布日期', 'N/A')})")
    return True


async def step3_test_restaurants():
    step_header(3, "Test MOENV Restaurant API")
    from app.config import settings
    from app.integrations.moenv_restaurants import ALL_CITIES, RestaurantClient
    from app.services.errors import UpstreamUnavailable

    client = RestaurantClient(
        settings.moenv_base_url,
        settings.moenv_restaurant_path,
        api_key=settings.moenv_api_key,
        limit=20,
        timeout=settings.upstream_timeout_seconds,
    )
    try:
        raw = await client.fetch(client.build_params(ALL_CITIES))
    except UpstreamUnavailable as e:
        fail(str(e))
        return False

    records = client.shape(ALL_CITIES, raw)
    if records:
        ok(f"Got {len(records)} restaurants")
        for r in records[:3]:
            print(f"    - {r.get('name', '')} | {r.get('city', '')}")
        return True
    fail("No records returned — check MOENV_API_KEY")
    return False


async def step4_cache_roundtrip():
    step_header(4, "News cache: cold then warm read")
    from app.config import Settings
    from app.orchestrator.router import build_news_query, current_year
    from app.services.errors import UpstreamUnavailable

    with tempfile.TemporaryDirectory() as tmp:
        query = build_news_query(Settings(cache_dir=tmp))
        year = current_year()
        try:
            cold = await query.read_all(year)
        except UpstreamUnavailable as e:
            fail(str(e))
            return False
        ok(f"Cold read: {len(cold)} items")

        warm = await query.read_all(year)
        status = query.status(year)
        if warm == cold and status["cached"]:
            ok(f"Warm read served from cache (written {status['cache_timestamp']})")
            return True
        fail("Warm read did not come from cache")
        return False


async def main():
    print("\n🗂️  Open-Data Cache — Real Upstream Verification")
    print("=" * 60)

    results = {}
    results[1] = await step1_verify_env()
    results[2] = await step2_test_hpa_news()
    results[3] = await step3_test_restaurants()
    results[4] = await step4_cache_roundtrip()

    # Summary
    print(f"\n{'='*60}")
    print("  SUMMARY")
    print(f"{'='*60}")
    for step_n, passed in sorted(results.items()):
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"  Step {step_n}: {status}")

    total_passed = sum(1 for v in results.values() if v)
    print(f"\n  {total_passed}/{len(results)} steps passed")
    print(f"{'='*60}\n")

    sys.exit(0 if all(results.values()) else 1)


if __name__ == "__main__":
    asyncio.run(main())
