"""End-to-end check of the trending topics endpoints against a running server.

Usage:
    python scripts/check_trends_api.py --base-url http://localhost:4000/api/trending_topics
"""

import argparse
import asyncio
import sys

import httpx

RESEARCH_BODY = {
    "brand_context": "Tech startup focusing on AI-powered productivity tools",
    "niche": "technology and productivity",
    "content_type": "social media",
    "count": 3,
}


class CheckFailed(Exception):
    """A step of the end-to-end check did not behave as expected."""


def expect(condition: bool, message: str) -> None:
    if not condition:
        raise CheckFailed(message)


async def check_trends_api(base_url: str) -> None:
    """Research, bulk create, list, hide and restore against ``base_url``."""
    async with httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=60.0) as client:
        print("🚀 Testing Trending Topics API")
        print("=" * 50)

        print("\n1️⃣ Research trends with LLM")
        response = await client.post("/research", json=RESEARCH_BODY)
        expect(response.status_code == 200, f"research returned HTTP {response.status_code}")
        research = response.json()
        trends = research["trends"]
        print(f"   Trends: {len(trends)}  Source: {research['source']}  Message: {research['message']}")
        expect(0 < len(trends) <= RESEARCH_BODY["count"], "research returned an unexpected number of trends")

        print("\n2️⃣ Bulk create researched trends")
        response = await client.post("/bulk", json={"trends": trends})
        expect(response.status_code == 201, f"bulk create returned HTTP {response.status_code}")
        bulk = response.json()
        print(f"   Created: {bulk['count']}  Message: {bulk['message']}")
        expect(bulk["count"] == len(trends), "bulk create did not store every trend")

        category = bulk["trends"][0]["category"]
        print(f"\n3️⃣ List trends with category={category!r}, limit=5")
        response = await client.get("", params={"category": category, "limit": 5})
        expect(response.status_code == 200, f"list returned HTTP {response.status_code}")
        listing = response.json()
        print(f"   Total: {listing['total']}  Returned: {len(listing['trends'])}  Limit: {listing['limit']}")
        expect(listing["total"] >= 1, "listing is missing the created trends")
        target = listing["trends"][0]

        print(f"\n4️⃣ Hide trend {target['id']}")
        response = await client.patch(f"/{target['id']}/hide", json={"is_hidden": True})
        expect(response.status_code == 200, f"hide returned HTTP {response.status_code}")
        listing = (await client.get("", params={"category": category})).json()
        expect(target["id"] not in [t["id"] for t in listing["trends"]], "hidden trend still listed")
        print("   ✅ Hidden trend excluded from default listing")

        print(f"\n5️⃣ Restore trend {target['id']}")
        response = await client.patch(f"/{target['id']}/hide", json={"is_hidden": False})
        expect(response.status_code == 200, f"restore returned HTTP {response.status_code}")
        listing = (await client.get("", params={"category": category})).json()
        expect(target["id"] in [t["id"] for t in listing["trends"]], "restored trend not listed")
        print("   ✅ Restored trend listed again")

        print("\n🎉 All trending topics checks passed")


def main() -> int:
    parser = argparse.ArgumentParser(description="Check the trending topics API end to end")
    parser.add_argument("--base-url", default="http://localhost:4000/api/trending_topics")
    args = parser.parse_args()

    try:
        asyncio.run(check_trends_api(args.base_url))
    except CheckFailed as e:
        print(f"\n❌ Check failed: {e}")
        return 1
    except httpx.HTTPError as e:
        print(f"\n❌ Could not reach {args.base_url}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
