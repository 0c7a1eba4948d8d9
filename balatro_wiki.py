#!/usr/bin/env python3
"""
Balatro mod wiki browser (command-line entry point)

Browse, search and inspect Balatro mods listed on the Balatro mods wiki
(https://balatromods.miraheze.org). The catalog is scraped once and cached in
`~/.cache/balatro-wiki/mods.json`; it is refreshed automatically when it is
empty or older than 24 hours, or on demand with `update`.

Usage:
    balatro-wiki browse [category]     # all categories, or the mods in one
    balatro-wiki search <query>        # ranked search over names, descriptions, authors
    balatro-wiki info <name>           # full details for one mod
    balatro-wiki categories            # category names with mod counts
    balatro-wiki update                # force a refresh from the wiki

Options:
- `--verbose` prints refresh progress when a stale cache is refreshed
- `--cache-file` and `--config` override the default cache and config locations

Configuration note:
- An optional JSON config (`~/.config/balatro-wiki/config.json`, or the path in
    `BALATRO_WIKI_CONFIG`) overrides the wiki URL, categories, timeouts, worker
    count, cache path, staleness window and log file. See `utils/config.py`.
"""
import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from utils.config import WikiConfig, load_config
from utils.constants import SUMMARY_MAX_LEN
from utils.text import truncate
from wiki_lib.cache import CacheStore
from wiki_lib.errors import CacheCorruptError, NotFoundError
from wiki_lib.fetch import build_session
from wiki_lib.models import ModDatabase, ModInfo
from wiki_lib.query import browse, info, list_categories, search
from wiki_lib.refresh import CatalogRefresher, ensure_fresh

logger = logging.getLogger('balatro_wiki')

RULE = '─' * 50
DOUBLE_RULE = '═' * 50

_log_handlers: List[logging.Handler] = []


def configure_logging(config: WikiConfig):
    """Send log records to a rotating file and warnings to stderr."""
    root = logging.getLogger()
    # Avoid stacking handlers when main() runs more than once in a process
    for handler in _log_handlers:
        root.removeHandler(handler)
        handler.close()
    _log_handlers.clear()

    fmt = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    try:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(str(config.log_file), maxBytes=5 * 1024 * 1024, backupCount=3, encoding='utf-8')
        file_handler.setFormatter(fmt)
        _log_handlers.append(file_handler)
    except OSError as e:
        # Logging should never block the CLI
        print(f"⚠️  Could not open log file {config.log_file}: {e}", file=sys.stderr)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.WARNING)
    console.setFormatter(logging.Formatter('%(levelname)s %(message)s'))
    _log_handlers.append(console)

    for handler in _log_handlers:
        root.addHandler(handler)
    root.setLevel(getattr(logging, config.log_level, logging.INFO))


def print_mod_summary(mod: ModInfo, show_category: bool = False):
    print(f"🃏 {mod.name}")
    if show_category:
        print(f"   📁 {mod.category}")
    print(f"   {truncate(mod.description, SUMMARY_MAX_LEN)}")
    if mod.author and not show_category:
        print(f"   👤 by {mod.author}")
    if mod.github_url:
        print(f"   🔗 {mod.github_url}")
    print()


def print_categories(db: ModDatabase):
    print("📂 Available categories:")
    for category, count in list_categories(db):
        print(f"  {category} ({count} mods)")


def cmd_browse(db: ModDatabase, category: Optional[str]):
    if category is None:
        print(f"📦 All Balatro Mods ({len(db.mods)} total):")
        print(RULE)
        for name, count in browse(db):
            print(f"🗂️  {name} ({count} mods)")
        print("\nUse 'browse <category>' to see mods in a specific category")
        return

    name, mods = browse(db, category)
    print(f"🎮 {name} ({len(mods)} mods):")
    print(RULE)
    for mod in mods:
        print_mod_summary(mod)


def cmd_search(db: ModDatabase, query: str):
    matches = search(db, query)
    if not matches:
        print(f"No mods found matching '{query}'")
        return

    print(f"🔍 Search results for '{query}' ({len(matches)} matches):")
    print(RULE)
    for mod, _score in matches:
        print_mod_summary(mod, show_category=True)


def cmd_info(db: ModDatabase, name: str):
    mod = info(db, name)

    print(f"🃏 {mod.name}")
    print(DOUBLE_RULE)
    print(f"📁 Category: {mod.category}")
    print(f"📝 Description: {mod.description}")
    if mod.author:
        print(f"👤 Author: {mod.author}")
    if mod.version:
        print(f"📦 Version: {mod.version}")
    if mod.github_url:
        print(f"🔗 GitHub: {mod.github_url}")
        print("\n💾 To install this mod:")
        print(f"   balatro-install-mod {mod.github_url}")
    print(f"🌐 Wiki: {mod.wiki_url}")
    if mod.dependencies:
        print(f"🔗 Dependencies: {', '.join(mod.dependencies)}")


def run_update(store: CacheStore, config: WikiConfig) -> ModDatabase:
    """Force a verbose refresh and persist the result."""
    print("🔄 Updating mod database from wiki...")
    refresher = CatalogRefresher(build_session(config.user_agent), config, verbose=True)
    result = refresher.run()
    store.save(result.database)
    print(f"✅ Database updated with {len(result.database.mods)} mods")
    if result.failures or result.category_failures:
        print(f"⚠️  {len(result.failures)} mod(s) and {len(result.category_failures)} category(ies) could not be fetched")
    return result.database


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='balatro-wiki',
                                     description='A CLI tool for browsing and searching Balatro mods from the wiki')
    parser.add_argument('--verbose', '-v', action='store_true', help='Print progress when the cache has to be refreshed')
    parser.add_argument('--cache-file', help='Path to the mod cache (default: ~/.cache/balatro-wiki/mods.json)')
    parser.add_argument('--config', '-c', help='Path to a JSON config file (default: ~/.config/balatro-wiki/config.json)')

    sub = parser.add_subparsers(dest='command', metavar='command')
    sub.required = True

    p_browse = sub.add_parser('browse', help='Browse mods by category')
    p_browse.add_argument('category', nargs='?', help='Category to browse (e.g. "Joker Mods", or just "joker")')

    p_search = sub.add_parser('search', help='Search for mods by name or description')
    p_search.add_argument('query', nargs='+', help='Search query')

    p_info = sub.add_parser('info', help='Get detailed information about a specific mod')
    p_info.add_argument('name', nargs='+', help='Mod name')

    sub.add_parser('categories', help='List all available categories')
    sub.add_parser('update', help='Update the local mod database')
    return parser


def main(argv=None) -> int:
    """Main entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    configure_logging(config)
    store = CacheStore(args.cache_file or config.cache_file)
    logger.info(f"main: command={args.command} cache={store.path}")

    try:
        if args.command == 'update':
            run_update(store, config)
            return 0

        db = ensure_fresh(
            store,
            lambda: CatalogRefresher(build_session(config.user_agent), config, verbose=args.verbose),
            max_age_hours=config.max_age_hours,
            verbose=args.verbose,
        )

        if args.command == 'browse':
            cmd_browse(db, args.category)
        elif args.command == 'search':
            cmd_search(db, ' '.join(args.query))
        elif args.command == 'info':
            cmd_info(db, ' '.join(args.name))
        elif args.command == 'categories':
            print_categories(db)
    except NotFoundError as e:
        print(f"❌ {e}", file=sys.stderr)
        if e.kind == 'category' and e.available:
            print("Available categories:", file=sys.stderr)
            for name in e.available:
                print(f"  {name}", file=sys.stderr)
        elif e.available:
            print(f"Did you mean: {', '.join(e.available)}", file=sys.stderr)
        return 1
    except CacheCorruptError as e:
        print(f"❌ {e}", file=sys.stderr)
        print("   Inspect or remove it, or run 'update' to rebuild it from the wiki.", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\n⏸️  Interrupted by user.", file=sys.stderr)
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
