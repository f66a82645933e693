"""
Tenant seeding CLI.

Usage:
    python -m tools.seed_tenant --file tools/samples/hawaii_hostel.json
    python -m tools.seed_tenant --file tenant.json --url http://localhost:3001 --api-key KEY
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

CREATE_PATH = "/api/admin/create-chatbot"


def load_tenant(file_path: str) -> Dict[str, Any]:
    """Read a tenant definition (clientName, businessName, businessInfo, knowledgeBase, customization)."""
    data = json.loads(Path(file_path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{file_path} must contain a JSON object")
    return data


def create_chatbot(
    base_url: str,
    tenant: Dict[str, Any],
    api_key: Optional[str] = None,
    timeout: float = 30.0,
) -> Dict[str, Any]:
    """POST a tenant definition to the admin API and return the decoded reply."""
    headers = {"X-API-Key": api_key} if api_key else {}
    response = httpx.post(
        base_url.rstrip("/") + CREATE_PATH,
        json=tenant,
        headers=headers,
        timeout=timeout,
    )
    result = response.json()
    if response.status_code >= 400 or not result.get("success"):
        raise RuntimeError(result.get("error") or result.get("detail") or f"HTTP {response.status_code}")
    return result


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create a tenant chatbot from a JSON definition")
    parser.add_argument("--file", required=True, help="Path to tenant JSON file")
    parser.add_argument("--url", default="http://localhost:3001", help="Chatbot server base URL")
    parser.add_argument("--api-key", default=None, help="Admin API key, if the server requires one")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        tenant = load_tenant(args.file)
        result = create_chatbot(args.url, tenant, api_key=args.api_key)
    except (OSError, ValueError, RuntimeError, httpx.HTTPError) as e:
        logger.error(f"Failed to create chatbot: {e}")
        return 1

    print(f"\nChatbot created for {tenant.get('businessName')}")
    print(f"Chatbot ID: {result['chatbotId']}")
    print("\nEmbed code (paste before </body>):\n")
    print(result["embedCode"])
    print(f"\nPreview URL: {result['previewUrl']}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
