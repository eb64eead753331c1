"""Command line interface for agentcmt."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from .config import load_config
from .exceptions import ConfigError, GitError
from .git import GitRepo, find_git_repo_root
from .pipeline import GenerationFailure, GenerationRequest, ReflectionPipeline
from .prompts import dump_json
from .providers import ProviderKind, create_provider

EXIT_OK = 0
EXIT_FAILURE = 1
# Same code argparse uses for usage errors.
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agentcmt",
        description="Generate a conventional commit message for the staged changes.",
    )
    parser.add_argument(
        "--provider",
        choices=[kind.value for kind in ProviderKind],
        help="Language model backend (default: configured or auto-detected)",
    )
    parser.add_argument("--model", help="Model name for the selected provider")
    parser.add_argument(
        "--no-scope",
        dest="include_scope",
        action="store_false",
        default=None,
        help="Generate a header without a scope",
    )
    parser.add_argument(
        "--max-iterations",
        dest="max_iterations",
        type=int,
        help="Maximum reflection/refinement cycles after the first draft",
    )
    parser.add_argument("--repo", dest="repo_path", default=".", help="Repository path")
    parser.add_argument("--json", action="store_true", help="Print the full generation trace")
    parser.add_argument(
        "--commit",
        action="store_true",
        help="Commit the staged changes with the generated message",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose request tracing")
    return parser


class CLI:
    """Runs the pipeline once against a repository."""

    def __init__(self) -> None:
        self.parser = build_parser()

    def run(self, args: Optional[list[str]] = None) -> int:
        try:
            parsed = self.parser.parse_args(args)
        except SystemExit as exc:
            return int(exc.code or 0)

        logging.basicConfig(
            level=logging.DEBUG if parsed.debug else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        start = Path(parsed.repo_path).expanduser()
        repo_root = find_git_repo_root(start) or start
        overrides: dict[str, Any] = {
            "provider": parsed.provider,
            "model": parsed.model,
            "include_scope": parsed.include_scope,
            "max_reflection_iterations": parsed.max_iterations,
            "repo_path": str(repo_root),
        }
        try:
            config = load_config(
                repo_root=repo_root,
                overrides={k: v for k, v in overrides.items() if v is not None},
            )
        except ConfigError as exc:
            print(f"Configuration error: {exc}", file=sys.stderr)
            return EXIT_USAGE

        provider = create_provider(config.provider, config, debug=parsed.debug)
        repo = GitRepo(str(repo_root), config)
        pipeline = ReflectionPipeline(repo, config, debug=parsed.debug)
        request = GenerationRequest(
            provider=provider,
            include_scope=config.include_scope,
            max_reflection_iterations=config.max_reflection_iterations,
        )
        outcome = pipeline.execute(request)

        if isinstance(outcome, GenerationFailure):
            print(f"Error ({outcome.provider}): {outcome.reason}", file=sys.stderr)
            return EXIT_FAILURE

        if parsed.json:
            print(dump_json(outcome.to_dict()))
        else:
            print(outcome.message)

        if parsed.commit:
            try:
                repo.commit(outcome.message)
            except GitError as exc:
                print(f"Commit failed: {exc}", file=sys.stderr)
                return EXIT_FAILURE
        return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    return CLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
