#!/usr/bin/env python3
"""
ignore-guard - inspect what Gitignore Guard would do for a path

Runs the same resolver and classifier the editor integration uses, without
an editor:
- check: is the path ignored (exit status follows `git check-ignore`)
- explain: which pattern ignores it, and where that pattern lives
- classify: which warning tier the path falls in
- status: what the workspace offers (repository, pattern file)
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .classifier import WarningClassifier
from .config import GuardConfig
from .errors import ConfigurationError
from .ignore import GitIgnoreSource, GitRunner, IgnoreResolver
from .probe import WorkspaceStatusProbe
from .session import MemorySessionStore
from .utils import configure_logging, get_logger, log_with_context
from .workspace import Workspace

logger = get_logger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_NOT_IGNORED = 1
EXIT_ERROR = 2


class GuardCLI:
    """Command line front end over one workspace"""

    def __init__(self):
        self.config: Optional[GuardConfig] = None
        self.workspace: Optional[Workspace] = None

    def parse_args(self, argv: Optional[List[str]] = None) -> argparse.Namespace:
        """Parse command line arguments"""
        parser = argparse.ArgumentParser(
            prog='ignore-guard',
            description='Gitignore Guard - check files against .gitignore rules',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self.get_usage_examples()
        )
        parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
        parser.add_argument('-w', '--workspace', action='append', metavar='DIR',
                            help='Workspace folder (repeat for multi-folder workspaces, default: .)')
        parser.add_argument('--settings', metavar='FILE',
                            help='JSON settings file with gitignoreGuard.* keys')
        parser.add_argument('--pattern-file-only', action='store_true',
                            help='Read .gitignore directly instead of asking git')
        parser.add_argument('--log-level', choices=['TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR'],
                            help='Log level (default: IGNORE_GUARD_LOG_LEVEL or INFO)')
        parser.add_argument('--log-file', metavar='FILE',
                            help='Log file (default: ~/.ignore-guard/logs/ignore-guard.log)')

        subparsers = parser.add_subparsers(dest='command', help='Commands')

        check_parser = subparsers.add_parser('check',
                                             help='Exit 0 if PATH is ignored, 1 if not')
        check_parser.add_argument('path', help='File to check')
        check_parser.add_argument('--json', action='store_true', help='Output as JSON')

        explain_parser = subparsers.add_parser('explain',
                                               help='Show the pattern that ignores PATH')
        explain_parser.add_argument('path', help='File to explain')
        explain_parser.add_argument('--json', action='store_true', help='Output as JSON')

        classify_parser = subparsers.add_parser('classify',
                                                help='Show the warning tier of PATH')
        classify_parser.add_argument('path', help='File to classify')
        classify_parser.add_argument('--json', action='store_true', help='Output as JSON')

        status_parser = subparsers.add_parser('status',
                                              help='Show repository and .gitignore status')
        status_parser.add_argument('root', nargs='?', help='Workspace folder to probe')
        status_parser.add_argument('--json', action='store_true', help='Output as JSON')

        return parser.parse_args(argv)

    def get_usage_examples(self) -> str:
        """Get usage examples for help text"""
        return """
Examples:
  ignore-guard check .env                # Exit status 0 when ignored
  ignore-guard explain build/app.log     # Which .gitignore line matches
  ignore-guard classify secrets/api.key  # critical / moderate / low
  ignore-guard status --json             # Repository and .gitignore status

Environment Variables:
  IGNORE_GUARD_LOG_LEVEL                 Log level (TRACE, DEBUG, INFO, ...)
  IGNORE_GUARD_VCS_TIMEOUT               Seconds before a git query is abandoned
  IGNORE_GUARD_SEARCH_ABOVE_WORKSPACE    Look for a repository above the workspace
"""

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point"""
        args = self.parse_args(argv)
        configure_logging(log_level=args.log_level, log_file=args.log_file)

        if not args.command:
            self.parse_args(['--help'])
            return EXIT_OK

        try:
            self.config = GuardConfig.load(args.settings) if args.settings else GuardConfig.from_mapping({})
        except ConfigurationError as e:
            print(f"❌ Error: {e}", file=sys.stderr)
            return EXIT_ERROR

        self.workspace = Workspace.from_paths(args.workspace or ['.'])

        handler = getattr(self, f'cmd_{args.command}', None)
        if handler is None:
            print(f"❌ Error: Unknown command '{args.command}'", file=sys.stderr)
            return EXIT_ERROR
        return asyncio.run(handler(args))

    def create_resolver(self, args: argparse.Namespace) -> IgnoreResolver:
        return IgnoreResolver.create(
            self.workspace,
            pattern_file_only=args.pattern_file_only,
            search_above_workspace=self.config.search_above_workspace,
            vcs_timeout=self.config.vcs_timeout,
        )

    def emit(self, args: argparse.Namespace, data: Dict[str, Any], text: str):
        if args.json:
            print(json.dumps(data, indent=2))
        else:
            print(text)

    # Command handlers
    async def cmd_check(self, args: argparse.Namespace) -> int:
        """Handle check command"""
        path = Path(args.path).resolve()
        ignored = await self.create_resolver(args).is_ignored(path)
        log_with_context(logger, logging.DEBUG, "Checked path", path=str(path), ignored=ignored)

        relative = self.workspace.relative_path(path)
        self.emit(
            args,
            {'path': relative, 'ignored': ignored},
            f"{relative}: {'IGNORED' if ignored else 'NOT ignored'}",
        )
        return EXIT_OK if ignored else EXIT_NOT_IGNORED

    async def cmd_explain(self, args: argparse.Namespace) -> int:
        """Handle explain command"""
        path = Path(args.path).resolve()
        match = await self.create_resolver(args).explain(path)
        relative = self.workspace.relative_path(path)

        if match is None:
            self.emit(args, {'path': relative, 'match': None}, f"{relative}: no matching pattern")
            return EXIT_OK

        data = {
            'path': relative,
            'match': {
                'pattern': match.pattern,
                'source': str(match.source) if match.source else None,
                'line': match.line,
            },
        }
        self.emit(args, data, f"{relative}: {match.describe()}")
        return EXIT_OK

    async def cmd_classify(self, args: argparse.Namespace) -> int:
        """Handle classify command"""
        path = Path(args.path).resolve()
        classification = WarningClassifier(self.config, self.workspace).classify(path)
        relative = self.workspace.relative_path(path)

        data = {
            'path': relative,
            'tier': classification.tier.value,
            'matched_pattern': classification.matched_pattern,
            'code_lens_message': classification.messages.code_lens_message,
            'status_bar_message': classification.messages.status_bar_message,
        }
        text = f"{relative}: {classification.tier.value}"
        if classification.matched_pattern:
            text += f" (pattern: {classification.matched_pattern})"
        self.emit(args, data, text)
        return EXIT_OK

    async def cmd_status(self, args: argparse.Namespace) -> int:
        """Handle status command"""
        root = Path(args.root).resolve() if args.root else self.workspace.root
        source = GitIgnoreSource(
            self.workspace,
            runner=GitRunner(timeout=self.config.vcs_timeout),
            search_above_workspace=self.config.search_above_workspace,
        )
        result = await WorkspaceStatusProbe(source, MemorySessionStore()).run(root)
        preview = source.fallback.preview(root) if result.has_pattern_file else []

        data = {
            'root': str(root),
            'has_repository': result.has_repository,
            'has_pattern_file': result.has_pattern_file,
            'mode': result.mode.value,
            'patterns': preview,
        }
        lines = [
            f"📁 Workspace: {root}",
            f"   Repository:   {'yes' if result.has_repository else 'no'}",
            f"   .gitignore:   {'yes' if result.has_pattern_file else 'no'}",
            f"   Mode:         {result.mode.value}",
        ]
        if result.notice:
            lines.append(f"ℹ️  {result.notice}")
        if preview:
            lines.append("   Patterns:")
            lines.extend(f"     {pattern}" for pattern in preview)
        self.emit(args, data, "\n".join(lines))
        return EXIT_OK


def main():
    """Main entry point"""
    cli = GuardCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
