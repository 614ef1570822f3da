#!/usr/bin/env python3
"""
Gateway Smoke Check

Run against a live gateway to confirm model listing and one chat completion
work end to end.

Usage:
    uvicorn llm_gateway.main:app --port 8000
    python scripts/smoke_gateway.py [model]

Environment (.env is loaded):
    GATEWAY_URL       base URL of the gateway (default http://localhost:8000)
    GATEWAY_PROVIDER  optional x-provider override
"""

import asyncio
import os
import sys
from pathlib import Path

# Add parent directory to path so we can import from llm_gateway
sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
from dotenv import load_dotenv

from llm_gateway.errors import parse_upstream_error

# Load environment variables
load_dotenv()


async def main():
    base_url = os.getenv("GATEWAY_URL", "http://localhost:8000").rstrip("/")
    provider = os.getenv("GATEWAY_PROVIDER", "")
    model = sys.argv[1] if len(sys.argv) > 1 else "gpt-4o-mini"
    headers = {"x-provider": provider} if provider else {}

    print("=" * 60)
    print(f"LLM Gateway smoke check: {base_url}")
    print("=" * 60)
    print()

    async with httpx.AsyncClient(base_url=base_url, timeout=60.0) as client:
        response = await client.get("/v1/models", params={"aggregate": "1"})
        response.raise_for_status()
        catalog = response.json()["data"]
        owners = sorted({m["owned_by"] for m in catalog})
        print(f"Models: {len(catalog)} across {', '.join(owners)}")
        print()

        print(f"Chat completion with {model}...")
        response = await client.post(
            "/v1/chat/completions",
            headers=headers,
            json={
                "model": model,
                "messages": [
                    {"role": "system", "content": "Answer in one word."},
                    {"role": "user", "content": "Say hello."},
                ],
                "max_tokens": 16,
            },
        )

    if response.is_error:
        print()
        print("ERROR:", response.status_code, parse_upstream_error(response.text))
        sys.exit(1)

    data = response.json()
    print()
    print("Reply:", data["choices"][0]["message"]["content"])
    print("Usage:", data.get("usage"))


if __name__ == "__main__":
    asyncio.run(main())
