"""CLI entry point — python -m trendformer."""

import argparse
import json
import sys

from .config import get_port, load_config, masked_config, mock_fallback_enabled, save_config, use_mock_trends
from .log import set_verbose


def cmd_trends(args):
    from .ranking import partition_ranked, rank_trends
    from .trends import TrendEngine

    mock = use_mock_trends() if args.mock is None else args.mock
    result = TrendEngine().aggregate(
        args.niche,
        provider=args.provider,
        min_score=args.min_score,
        mock=mock,
        fallback=mock_fallback_enabled() and not args.no_fallback,
    )
    rankings = rank_trends(args.niche, result.trends) if args.rank and result.trends else []

    if args.json:
        print(json.dumps({
            "niche": args.niche,
            "provider": args.provider,
            "mock": result.mock,
            "trends": [t.to_dict() for t in result.trends],
            "rankings": [r.to_dict() for r in rankings],
        }, indent=2, ensure_ascii=False))
        return result

    if not result.trends:
        print("  No trends found from the selected providers.")
        return result

    label = " (mock data)" if result.mock else ""
    print(f"\n  Trends for {args.niche} ({len(result.trends)} found){label}:\n")

    picks, others = partition_ranked(result.trends, rankings)
    for trend, ranking in picks:
        print(f"  * [{trend.source}] {trend.topic} [relevance {ranking.relevance_score}]")
        if ranking.reasoning:
            print(f"      {ranking.reasoning[:100]}")
    for i, trend in others:
        score = f" [{trend.score:g}]" if trend.score is not None else ""
        print(f"  {i + 1:2d}. [{trend.source}] {trend.topic}{score}")
        if trend.body:
            print(f"      {trend.body[:100]}")
    return result


def cmd_thread(args):
    from .llm import MissingConfigError
    from .thread import ThreadGenerationError, generate_thread

    try:
        result = generate_thread(args.niche, args.topic, args.tone, args.context or None)
    except (MissingConfigError, ThreadGenerationError) as e:
        print(f"  Error: {e}")
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print("\n" + result.as_text() + "\n")
    return result


def cmd_serve(args):
    from .server import create_app

    app = create_app()
    app.run(host=args.host, port=args.port or get_port(), debug=False)


def cmd_config(args):
    if args.action == "set":
        config = load_config()
        config[args.key] = args.value
        save_config(config)
        print(f"  Saved {args.key}")
    else:
        print(json.dumps(masked_config(), indent=2))


def main(argv=None):
    from .trends.engine import PROVIDER_ALIASES, PROVIDERS, normalize_provider
    from .thread import TONES

    parser = argparse.ArgumentParser(
        description="Trendformer — trending topics into social threads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd")

    # trends
    p_trends = sub.add_parser("trends", help="Aggregate trending topics for a niche")
    p_trends.add_argument("--niche", default="AI")
    p_trends.add_argument("--provider", default="all", type=normalize_provider, choices=PROVIDERS,
                          help=f"Provider tag or role name ({', '.join(PROVIDER_ALIASES)})")
    p_trends.add_argument("--min-score", type=int, default=None, help="Minimum HN score")
    mode = p_trends.add_mutually_exclusive_group()
    mode.add_argument("--mock", dest="mock", action="store_true", default=None, help="Force mock data")
    mode.add_argument("--live", dest="mock", action="store_false", default=None, help="Query live providers")
    p_trends.add_argument("--no-fallback", action="store_true", help="Return empty instead of mock data")
    p_trends.add_argument("--rank", action="store_true", help="Rank results with Claude")
    p_trends.add_argument("--json", action="store_true", help="Print JSON")

    # thread
    p_thread = sub.add_parser("thread", help="Generate a thread for a topic")
    p_thread.add_argument("--niche", default="AI")
    p_thread.add_argument("--topic", required=True)
    p_thread.add_argument("--tone", default="expert", choices=TONES)
    p_thread.add_argument("--context", default="")
    p_thread.add_argument("--json", action="store_true", help="Print JSON")

    # serve
    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=None)

    # config
    p_config = sub.add_parser("config", help="Show or set config.json values")
    config_sub = p_config.add_subparsers(dest="action")
    p_set = config_sub.add_parser("set")
    p_set.add_argument("key")
    p_set.add_argument("value")
    config_sub.add_parser("show")

    args = parser.parse_args(argv)

    if args.verbose:
        set_verbose(True)

    if not args.cmd:
        parser.print_help()
        return

    if args.cmd == "trends":
        cmd_trends(args)
    elif args.cmd == "thread":
        cmd_thread(args)
    elif args.cmd == "serve":
        cmd_serve(args)
    elif args.cmd == "config":
        cmd_config(args)


if __name__ == "__main__":
    main()
