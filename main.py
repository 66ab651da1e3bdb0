"""CLI entrypoint: one-shot thesis search or the HTTP API."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from config import get_settings
from intelligence.pipeline import SourcingPipeline
from utils.exceptions import ThesisSourcerError
from utils.logger import setup_logger


async def _search(thesis: str, top_k: int | None, verbose: bool) -> int:
    pipeline = SourcingPipeline.from_settings(get_settings())
    try:
        articles, summary = await pipeline.run_with_summary(thesis, top_k=top_k)
    finally:
        await pipeline.aclose()

    payload = [article.model_dump(mode="json", by_alias=True) for article in articles]
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    if verbose:
        print(json.dumps(summary, ensure_ascii=False, indent=2), file=sys.stderr)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Thesis article sourcing CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Rank sources for one thesis and print JSON")
    search.add_argument("--thesis", required=True)
    search.add_argument("--top-k", type=int, default=None)
    search.add_argument("--verbose", action="store_true", help="Print the run summary to stderr")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    args = parser.parse_args()
    settings = get_settings()
    level = "DEBUG" if getattr(args, "verbose", False) else settings.general.log_level
    setup_logger(None, level=level, log_file=settings.general.log_file)

    if args.command == "search":
        try:
            code = asyncio.run(_search(args.thesis, args.top_k, args.verbose))
        except (ThesisSourcerError, ValueError) as exc:
            print(json.dumps({"error": str(exc)}, ensure_ascii=False), file=sys.stderr)
            code = 1
        raise SystemExit(code)

    if args.command == "serve":
        import uvicorn

        uvicorn.run(
            "webapp.app:app",
            host=args.host or settings.web.host,
            port=args.port or settings.web.port,
        )
        return

    raise SystemExit(f"Unsupported command: {args.command}")


if __name__ == "__main__":
    main()
