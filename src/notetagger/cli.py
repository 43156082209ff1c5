#!/usr/bin/env python3
"""
Batch tagging CLI.

Tags every Markdown note in a vault with the configured provider, optionally
writes the tags into each note's frontmatter and saves a CSV report.

Example:
    notetagger --vault ~/notes --provider claude --report reports/tags.csv --write
"""

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence

import requests
import yaml
from dotenv import load_dotenv

from .client.executor import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT, RequestExecutor
from .config import (
    ENV_API_KEY,
    ENV_BASE_URL,
    ENV_MODEL,
    ENV_PROMPT,
    ENV_PROVIDER,
    load_config_from_env,
)
from .errors import ConfigurationError, TaggerError
from .providers.base import ProviderConfig, ProviderKind
from .tagging.service import TagGenerationService
from .utils.frontmatter import extract_frontmatter_tags, merge_tags_into_frontmatter
from .utils.tag_report import DocumentTags, load_existing_tags, write_tag_report

logger = logging.getLogger(__name__)

IGNORED_DIRS = {".obsidian", ".trash", ".git"}


def find_notes(vault: Path, limit: Optional[int] = None) -> List[Path]:
    """
    List Markdown files under ``vault``, skipping application folders.

    Args:
        vault: Root directory
        limit: Maximum number of notes to return

    Returns:
        Sorted list of note paths
    """
    notes = [
        path for path in sorted(vault.rglob("*.md"))
        if path.is_file() and not IGNORED_DIRS.intersection(path.relative_to(vault).parts)
    ]
    if limit:
        notes = notes[:limit]
    return notes


def collect_existing_tags(notes: Sequence[Path], vocabulary: Optional[Path] = None) -> List[str]:
    """
    Build the tag index: vocabulary entries first, then frontmatter tags.

    Notes that cannot be read or whose frontmatter is not valid YAML are
    skipped.
    """
    tags = load_existing_tags(vocabulary) if vocabulary else []
    seen = set(tags)

    for note in notes:
        try:
            note_tags = extract_frontmatter_tags(note.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            logger.warning("Skipping tags of %s: %s", note, e)
            continue
        for tag in note_tags:
            if tag not in seen:
                seen.add(tag)
                tags.append(tag)
    return tags


def resolve_config(args: argparse.Namespace) -> ProviderConfig:
    """Combine .env, environment variables and command-line overrides."""
    load_dotenv(dotenv_path=args.env_file)

    env = dict(os.environ)
    overrides = {
        ENV_PROVIDER: args.provider,
        ENV_API_KEY: args.api_key,
        ENV_BASE_URL: args.base_url,
        ENV_MODEL: args.model,
        ENV_PROMPT: args.prompt,
    }
    env.update({key: value for key, value in overrides.items() if value})

    return load_config_from_env(env=env)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notetagger",
        description="Recommend tags for Markdown notes using an LLM provider"
    )
    parser.add_argument(
        "--vault",
        type=Path,
        default=Path("."),
        help="Directory containing Markdown notes (default: current directory)"
    )
    parser.add_argument(
        "--provider",
        choices=[kind.value for kind in ProviderKind],
        help="Provider kind (default: inferred from the base URL)"
    )
    parser.add_argument("--api-key", help=f"API key (default: ${ENV_API_KEY})")
    parser.add_argument("--base-url", help=f"API endpoint (default: ${ENV_BASE_URL} or provider default)")
    parser.add_argument("--model", help=f"Model identifier (default: ${ENV_MODEL} or provider default)")
    parser.add_argument("--prompt", help="Custom system prompt")
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Path to a .env file (default: search upwards from the current directory)"
    )
    parser.add_argument(
        "--vocabulary",
        type=Path,
        help="CSV file of existing tags (column 'tag')"
    )
    parser.add_argument(
        "--report",
        type=Path,
        help="Write a CSV report of generated tags to this path"
    )
    parser.add_argument(
        "--write",
        action="store_true",
        help="Merge generated tags into each note's frontmatter"
    )
    parser.add_argument(
        "--limit",
        type=int,
        help="Limit number of notes to process (for testing)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT:g})"
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=DEFAULT_MAX_RETRIES,
        help=f"Retries for server errors (default: {DEFAULT_MAX_RETRIES})"
    )
    parser.add_argument(
        "--test-connection",
        action="store_true",
        help="Only check that the provider configuration works"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print detailed progress"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for batch tagging."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = resolve_config(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    with requests.Session() as session:
        executor = RequestExecutor(timeout=args.timeout, max_retries=args.retries, session=session)
        service = TagGenerationService(executor=executor)

        if args.test_connection:
            result = service.test_connectivity(config)
            if result.ok:
                print(f"✓ Connection OK ({result.provider.value}, model {config.model})")
                return 0
            print(f"✗ {result.error}", file=sys.stderr)
            return 1

        return tag_vault(args, config, service)


def tag_vault(args: argparse.Namespace, config: ProviderConfig, service: TagGenerationService) -> int:
    """Tag all notes of ``args.vault`` and return the process exit code."""
    vault = args.vault.expanduser()
    if not vault.is_dir():
        print(f"Error: Vault directory not found: {vault}", file=sys.stderr)
        return 1

    print("=" * 60)
    print("Note Tagging")
    print("=" * 60)

    all_notes = find_notes(vault)
    notes = all_notes[:args.limit] if args.limit else all_notes
    print(f"✓ Found {len(all_notes)} notes in {vault}")
    if not notes:
        return 0

    try:
        existing_tags = collect_existing_tags(all_notes, args.vocabulary)
    except (OSError, ValueError) as e:
        print(f"Error: Could not load existing tags: {e}", file=sys.stderr)
        return 1
    print(f"✓ Loaded {len(existing_tags)} existing tags")

    results: List[DocumentTags] = []
    failed = 0
    start_time = time.time()

    for i, note in enumerate(notes, 1):
        name = note.relative_to(vault).as_posix()
        print(f"\n[{i}/{len(notes)}] {name}")

        try:
            content = note.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"  ✗ Could not read note: {e}", file=sys.stderr)
            results.append(DocumentTags(document=name, tags=[], error=f"Could not read note: {e}"))
            failed += 1
            continue

        try:
            tags = service.generate(content, existing_tags, config)
        except ConfigurationError as e:
            # Every remaining note would fail the same way
            print(f"  ✗ Error: {e}", file=sys.stderr)
            results.append(DocumentTags(document=name, tags=[], error=str(e)))
            failed += len(notes) - i + 1
            break
        except TaggerError as e:
            print(f"  ✗ Error: {e}", file=sys.stderr)
            results.append(DocumentTags(document=name, tags=[], error=str(e)))
            failed += 1
            continue

        print(f"  ✓ Tags: {', '.join(tags) if tags else '(none)'}")

        if args.write and tags:
            try:
                updated = merge_tags_into_frontmatter(content, tags)
            except yaml.YAMLError as e:
                print(f"  ✗ Could not update frontmatter: {e}", file=sys.stderr)
                results.append(DocumentTags(document=name, tags=tags, error=f"Invalid frontmatter: {e}"))
                failed += 1
                continue
            if updated != content:
                note.write_text(updated, encoding="utf-8")
                logger.debug("Updated frontmatter of %s", name)
            # Written tags join the index for the remaining notes
            for tag in tags:
                if tag not in existing_tags:
                    existing_tags.append(tag)

        results.append(DocumentTags(document=name, tags=tags))

    if args.report:
        write_tag_report(results, args.report)

    total_time = time.time() - start_time

    print(f"\n{'=' * 60}")
    print("Summary")
    print("=" * 60)
    print(f"Total processed:  {len(notes)}")
    print(f"Successful:       {len(notes) - failed}")
    print(f"Failed:           {failed}")
    print(f"Total time:       {total_time:.1f}s")
    if args.report:
        print(f"\nReport saved to:  {args.report}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
