"""
CLI entry point — argument parsing and main execution flow.
"""

import argparse
import signal
import sys
import threading

from tqdm import tqdm

from ..cli_display import setup_logger, token_tracker, log
from ..config import Config
from ..confirmation import ConsoleConfirmationPolicy, TextualConfirmationPolicy
from ..diff_display import format_colored_diff
from ..editing.document import TextDocument, save_document
from ..editing.single_applier import AutoApprovePolicy
from ..llm.base import LLMError
from ..llm.openai_client import OpenAIClient
from ..agents.fixer import FixerAgent
from .session import ReviewSession, SessionReport, load_proposals_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="code-autofix",
        description="Request AI fixes for source files and apply them safely.")
    parser.add_argument("files", nargs="+", help="Source files to review")
    parser.add_argument("--proposals", default=None,
                        help="Read proposals from a JSON file instead of "
                             "calling the generation service")
    parser.add_argument("--mode", choices=["batch", "interactive", "dry-run"],
                        default="dry-run",
                        help="batch: apply every exact match; interactive: "
                             "confirm each fix; dry-run: only show the diff "
                             "(default)")
    parser.add_argument("--ui", choices=["console", "textual"],
                        default="console",
                        help="Confirmation UI for interactive mode")
    parser.add_argument("--allow-line-fallback", action="store_true",
                        help="Interactive mode: offer fixes whose original "
                             "code was not found at their approximate lines")
    parser.add_argument("--yes", action="store_true",
                        help="Interactive mode: approve exact matches "
                             "without prompting")
    parser.add_argument("--config", default=None,
                        help="Path to .autofix.yaml config file")
    parser.add_argument("--model", default=None,
                        help="The model name to use (default: from config)")
    parser.add_argument("--no-stream", action="store_true",
                        help="Disable streaming responses")
    parser.add_argument("--no-metrics", action="store_true",
                        help="Do not record batch metrics")
    return parser


def _make_agent(cfg: Config, args) -> FixerAgent | None:
    api_key = cfg.api_key_or_fallback()
    if not api_key:
        print("\n  [ERROR] The generation service requires an API key.\n"
              "  Set MISTRAL_API_KEY or add api_key to .autofix.yaml,\n"
              "  or pass --proposals to apply a saved proposal file.\n")
        return None
    if not cfg.API_KEY:
        log.info("Using fallback API key")
    client = OpenAIClient(
        base_url=cfg.BASE_URL,
        model=args.model or cfg.MODEL,
        api_key=api_key,
        timeout=cfg.LLM_TIMEOUT,
        max_retries=cfg.LLM_MAX_RETRIES,
        retry_delay=cfg.LLM_RETRY_DELAY,
        stream=cfg.STREAM_RESPONSES and not args.no_stream,
        temperature=cfg.TEMPERATURE,
        max_tokens=cfg.MAX_TOKENS,
    )
    return FixerAgent(client)


def _run_batch_cancellable(session: ReviewSession, proposals):
    """Run a batch; Ctrl-C stops it after the proposal in flight."""
    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda *_: cancel.set())
    try:
        return session.apply_all(proposals, cancel_event=cancel)
    finally:
        signal.signal(signal.SIGINT, previous)


def process_file(path: str, args, cfg: Config,
                 agent: FixerAgent | None) -> SessionReport:
    document = TextDocument.from_file(path)
    session = ReviewSession(
        document,
        metrics_dir=None if args.no_metrics else cfg.METRICS_DIR,
    )

    if args.proposals:
        suggestions = load_proposals_file(args.proposals)
    else:
        suggestions = session.fetch(agent)

    report = SessionReport(path=path, summary=suggestions.summary)
    proposals = suggestions.proposals
    if not proposals:
        return report

    if args.mode == "dry-run":
        report.preview, report.batch = session.preview_all(proposals)
        return report

    if args.mode == "batch":
        report.batch = _run_batch_cancellable(session, proposals)
    else:
        if args.yes:
            policy = AutoApprovePolicy(allow_approximate=False)
        elif args.ui == "textual":
            policy = TextualConfirmationPolicy()
        else:
            policy = ConsoleConfirmationPolicy()
        allow_fallback = args.allow_line_fallback or cfg.ALLOW_LINE_FALLBACK
        report.single_results = session.apply_interactively(
            proposals, policy, allow_line_fallback=allow_fallback,
        )

    if report.changed:
        save_document(document)
    return report


def _print_report(report: SessionReport, mode: str) -> None:
    print(f"\n  {report.path}")
    if report.summary:
        print(f"  {report.summary}")
    if report.batch is None and not report.single_results:
        print("  No issues found! Your code looks good.")
        return
    if mode == "dry-run":
        if report.preview:
            print(format_colored_diff(report.preview))
        print(f"  [dry-run] {report.batch.summary()}")
    elif report.batch is not None:
        print(f"  {report.batch.summary()}")
    for result in report.single_results:
        print(f"  - {result.message}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # ── 0. Load config ──
    cfg = Config.load(args.config)
    setup_logger(cfg.LOG_DIR)

    # ── 1. Generation service (unless proposals are supplied) ──
    agent = None
    if not args.proposals:
        agent = _make_agent(cfg, args)
        if agent is None:
            return 1

    # ── 2. Review each file ──
    exit_code = 0
    files = args.files
    iterator = tqdm(files, unit="file", desc="Reviewing") if len(files) > 1 else files
    for path in iterator:
        try:
            report = process_file(path, args, cfg, agent)
        except UnicodeDecodeError:
            print(f"\n  [ERROR] {path}: not valid UTF-8, left unchanged")
            exit_code = 1
            continue
        except OSError as e:
            print(f"\n  [ERROR] {path}: {e}")
            exit_code = 1
            continue
        except LLMError as e:
            print(f"\n  [ERROR] Generation service failed for {path}: {e}")
            exit_code = 1
            continue
        _print_report(report, args.mode)

    if token_tracker.call_count:
        log.info(f"Token usage: {token_tracker.total_tokens} tokens in "
                 f"{token_tracker.call_count} calls")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
