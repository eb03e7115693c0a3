"""Print the grouped operation catalog of a Swagger/OpenAPI document."""

from __future__ import annotations

import argparse
import asyncio
import json
import os
from pathlib import Path
from typing import Any, Dict, List

from swagger_adapter.catalog import build_catalog
from swagger_adapter.models import InlineSpecSource, SpecSource, UrlSpecSource
from swagger_adapter.openapi import OpenAPILoader


def _source(location: str, insecure: bool, timeout_ms: int) -> SpecSource:
    if location.startswith(("http://", "https://")):
        return UrlSpecSource(address=location, insecure_tls=insecure, timeout_ms=timeout_ms)
    path = Path(location).expanduser().resolve()
    if not path.exists():
        raise SystemExit(f"Spec file not found: {path}")
    return InlineSpecSource(document=path.read_text(encoding="utf-8"))


async def _catalog(source: SpecSource) -> List[Dict[str, Any]]:
    spec = await OpenAPILoader().load(source)
    return [
        {"tag": entry.name} if entry.is_header else {"name": entry.name, "value": entry.value}
        for entry in build_catalog(spec)
    ]


def main() -> None:
    parser = argparse.ArgumentParser(description="Print the operation catalog of an API spec")
    parser.add_argument(
        "--spec",
        default=os.getenv("SWAGGER_SPEC", ""),
        help="Path or URL of the Swagger/OpenAPI JSON document",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate validation when fetching by URL",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print entries as JSON, including selection values",
    )
    parser.add_argument(
        "--timeout-ms",
        type=int,
        default=10000,
        help="Fetch timeout in milliseconds (default: 10000)",
    )

    args = parser.parse_args()
    if not args.spec:
        raise SystemExit("Spec location missing. Set --spec or SWAGGER_SPEC.")

    entries = asyncio.run(_catalog(_source(args.spec, args.insecure, args.timeout_ms)))
    if args.json:
        print(json.dumps(entries, indent=2))
        return
    for entry in entries:
        if "tag" in entry:
            print(f"\n[{entry['tag']}]")
        else:
            print(f"  {entry['name']}")
    print(f"\n{sum(1 for e in entries if 'tag' not in e)} operation(s)")


if __name__ == "__main__":
    main()
