"""CLI entrypoint for phonoflex: subcommand dispatcher."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from phonoflex.cache import DEFAULT_MAX_SIZE, ResultCache
from phonoflex.inflect import Resolver
from phonoflex.remote import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


def _add_shared_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments shared between resolve and annotate subcommands."""
    parser.add_argument("--dict", dest="dict_path", type=Path, action="append", default=[],
                        help="JSON word->/ipa/ dictionary; repeat to layer overrides first")
    parser.add_argument("--cmudict", type=Path, default=None,
                        help="CMU Pronouncing Dictionary file")
    parser.add_argument("--chunks", type=Path, default=None,
                        help="Directory with core.json, chunk-index.json and chunks/")
    parser.add_argument("--remote", action=argparse.BooleanOptionalAction, default=True,
                        help="Fall back to the online dictionary API (default: enabled)")
    parser.add_argument("--offline", action="store_true", default=False,
                        help="Fall back to g2p_en prediction instead of the online API")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT,
                        help=f"Online lookup timeout in seconds (default: {DEFAULT_TIMEOUT})")
    parser.add_argument("--cache-size", type=int, default=DEFAULT_MAX_SIZE,
                        help=f"Result cache capacity (default: {DEFAULT_MAX_SIZE})")
    parser.add_argument("--cache-file", type=Path, default=None,
                        help="Result cache snapshot (default: $PHONOFLEX_CACHE_DIR/results.json)")
    parser.add_argument("--no-cache", action="store_true", default=False,
                        help="Do not read or write the result cache snapshot")
    parser.add_argument("--json", action="store_true", default=False,
                        help="Print JSON instead of aligned text")
    parser.add_argument("-v", "--verbose", action="store_true", default=False,
                        help="Show per-word resolution steps")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments with subcommands."""
    parser = argparse.ArgumentParser(
        prog="phonoflex",
        description="IPA transcriptions for English words, including inflected forms",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve individual words",
        description="Resolve words and show where each transcription came from",
    )
    resolve_parser.add_argument("words", nargs="+", help="Words to resolve")
    _add_shared_args(resolve_parser)

    annotate_parser = subparsers.add_parser(
        "annotate",
        help="Annotate running text",
        description="Annotate every word of a text with its transcription",
    )
    annotate_parser.add_argument("text", nargs="*", default=[], help="Text to annotate")
    annotate_parser.add_argument("--file", type=Path, default=None,
                                 help="Read text from a file instead")
    _add_shared_args(annotate_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    return args


def _check_paths(args: argparse.Namespace) -> None:
    paths = list(args.dict_path)
    if args.cmudict:
        paths.append(args.cmudict)
    if args.chunks:
        paths.append(args.chunks)
    if getattr(args, "file", None):
        paths.append(args.file)
    for p in paths:
        if not p.exists():
            print(f"Error: file not found: {p}", file=sys.stderr)
            sys.exit(1)


def build_store(args: argparse.Namespace):
    """Compose the transcription store from --dict, --cmudict and --chunks."""
    from phonoflex.store import ChunkedStore, LayeredStore, MemoryStore, load_cmudict

    stores = [MemoryStore.from_json(p) for p in args.dict_path]
    if args.cmudict:
        stores.append(MemoryStore(load_cmudict(args.cmudict)))
    if args.chunks:
        stores.append(ChunkedStore(args.chunks))
    if not stores:
        print("Error: at least one of --dict, --cmudict or --chunks is required",
              file=sys.stderr)
        sys.exit(1)
    if len(stores) == 1:
        return stores[0]
    return LayeredStore(*stores)


def build_remote(args: argparse.Namespace):
    if args.offline:
        from phonoflex.g2p import G2pFallback
        return G2pFallback()
    if args.remote:
        from phonoflex.remote import FreeDictionaryClient
        return FreeDictionaryClient(timeout=args.timeout)
    return None


def _build_resolver(args: argparse.Namespace) -> Resolver:
    cache = ResultCache(max_size=args.cache_size)
    if not args.no_cache:
        cache.load(args.cache_file)
    return Resolver(build_store(args), remote=build_remote(args), cache=cache)


def _run_with_resolver(args: argparse.Namespace, work):
    """Run coroutine function *work* against a fresh Resolver, then persist the cache."""
    resolver = _build_resolver(args)

    async def runner():
        try:
            return await work(resolver)
        finally:
            if hasattr(resolver.remote, "aclose"):
                await resolver.remote.aclose()

    try:
        return asyncio.run(runner())
    finally:
        if not args.no_cache:
            resolver.cache.save(args.cache_file)
        logger.debug(f"Cache: {resolver.cache.stats()}")


def _run_resolve(args: argparse.Namespace) -> None:
    """Run the resolve subcommand."""
    async def work(resolver: Resolver):
        return [await resolver.resolve(w) for w in args.words]

    results = _run_with_resolver(args, work)

    if args.json:
        print(json.dumps([r.to_dict() for r in results], ensure_ascii=False, indent=2))
        return
    for r in results:
        detail = r.origin.value
        if r.matched_base:
            detail += f" ({r.matched_base}, {r.rule_id.value})"
        print(f"{r.word:16} {r.transcription or '-':20} {detail}")


def _run_annotate(args: argparse.Namespace) -> None:
    """Run the annotate subcommand."""
    from phonoflex.annotate import annotate_text, format_annotations

    text = args.file.read_text(encoding="utf-8") if args.file else " ".join(args.text)
    if not text.strip():
        print("Error: no text given (pass TEXT or --file)", file=sys.stderr)
        sys.exit(1)

    async def work(resolver: Resolver):
        return await annotate_text(text, resolver)

    annotations = _run_with_resolver(args, work)

    if args.json:
        print(json.dumps(
            [
                {
                    "word": a.word,
                    "start": a.start,
                    "end": a.end,
                    "transcription": a.transcription,
                    "origin": a.origin.value,
                }
                for a in annotations
            ],
            ensure_ascii=False,
            indent=2,
        ))
        return
    print(format_annotations(annotations))


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(name)s %(levelname)s: %(message)s")

    if not args.verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    _check_paths(args)

    if args.command == "resolve":
        _run_resolve(args)
    elif args.command == "annotate":
        _run_annotate(args)


if __name__ == "__main__":
    main()
