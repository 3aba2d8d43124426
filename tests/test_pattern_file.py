#!/usr/bin/env python3
"""
Test reading the workspace .gitignore directly
"""

import pytest

from ignore_guard.ignore import PatternFileInterpreter, PatternFileLoader
from ignore_guard.workspace import Workspace


@pytest.fixture
def interpreter(tmp_path):
    (tmp_path / '.gitignore').write_text(
        "# build output\n"
        "\n"
        "build/\n"
        "*.log\n"
        "!keep.log\n"
        "/root-only.txt\n"
        "**/cache/**\n"
    )
    return PatternFileInterpreter(Workspace.from_paths([tmp_path]))


@pytest.mark.asyncio
async def test_gitignore_semantics(interpreter, tmp_path):
    assert await interpreter.is_ignored(tmp_path / 'build' / 'app.js')
    assert await interpreter.is_ignored(tmp_path / 'logs' / 'debug.log')
    assert await interpreter.is_ignored(tmp_path / 'root-only.txt')
    assert await interpreter.is_ignored(tmp_path / 'a' / 'cache' / 'b' / 'c.bin')

    # Negation re-includes, anchors only apply at the root
    assert not await interpreter.is_ignored(tmp_path / 'keep.log')
    assert not await interpreter.is_ignored(tmp_path / 'sub' / 'root-only.txt')
    assert not await interpreter.is_ignored(tmp_path / 'src' / 'main.py')


@pytest.mark.asyncio
async def test_paths_outside_workspace_are_not_ignored(interpreter, tmp_path):
    outside = tmp_path.parent / 'elsewhere.log'
    assert not await interpreter.is_ignored(outside)
    assert await interpreter.explain(outside) is None


@pytest.mark.asyncio
async def test_explain_reports_first_matching_line(interpreter, tmp_path):
    match = await interpreter.explain(tmp_path / 'debug.log')
    assert match.pattern == '*.log'
    assert match.line == 4
    assert match.source == tmp_path / '.gitignore'
    assert await interpreter.ignoring_pattern(tmp_path / 'build' / 'x.o') == 'build/'


@pytest.mark.asyncio
async def test_explain_does_not_see_negation(interpreter, tmp_path):
    # The line scan tests each pattern on its own
    assert not await interpreter.is_ignored(tmp_path / 'keep.log')
    assert await interpreter.ignoring_pattern(tmp_path / 'keep.log') == '*.log'


@pytest.mark.asyncio
async def test_missing_pattern_file(tmp_path):
    interpreter = PatternFileInterpreter(Workspace.from_paths([tmp_path]))
    assert not await interpreter.has_pattern_file(tmp_path)
    assert not await interpreter.is_ignored(tmp_path / 'debug.log')
    assert not await interpreter.is_repository(tmp_path)


@pytest.mark.asyncio
async def test_compiled_matcher_is_kept_until_invalidated(interpreter, tmp_path):
    assert not await interpreter.is_ignored(tmp_path / 'notes.txt')

    (tmp_path / '.gitignore').write_text("*.txt\n")
    # Not polled
    assert not await interpreter.is_ignored(tmp_path / 'notes.txt')

    interpreter.invalidate(tmp_path / '.gitignore')
    assert await interpreter.is_ignored(tmp_path / 'notes.txt')


@pytest.mark.asyncio
async def test_whitespace_follows_gitignore_rules(tmp_path):
    (tmp_path / '.gitignore').write_text("notes\\ \ntrailing.txt   \n  lead.txt\n")
    interpreter = PatternFileInterpreter(Workspace.from_paths([tmp_path]))

    # Escaped trailing space is part of the name, unescaped ones are dropped
    assert await interpreter.is_ignored(tmp_path / 'notes ')
    assert not await interpreter.is_ignored(tmp_path / 'notes')
    assert await interpreter.is_ignored(tmp_path / 'trailing.txt')
    # Leading whitespace is significant
    assert await interpreter.is_ignored(tmp_path / '  lead.txt')
    assert not await interpreter.is_ignored(tmp_path / 'lead.txt')

    match = await interpreter.explain(tmp_path / 'notes ')
    assert match.pattern == 'notes\\ '
    assert match.line == 1


def test_preview_skips_comments_and_blank_lines(interpreter, tmp_path):
    assert interpreter.preview(tmp_path, max_lines=2) == ['build/', '*.log']


def test_loader_records_stats_and_warnings(tmp_path):
    path = tmp_path / '.gitignore'
    path.write_text("# comment\n\n*\nsrc\\temp\n")

    info = PatternFileLoader().load_file(path)

    assert info.patterns == ['*', 'src\\temp']
    assert [entry.line for entry in info.lines] == [3, 4]
    assert info.stats['comment_lines'] == 1
    assert info.stats['empty_lines'] == 1
    assert len(info.warnings) == 2
    assert info.is_valid


def test_loader_handles_missing_file(tmp_path):
    info = PatternFileLoader().load_file(tmp_path / '.gitignore')
    assert info.lines == []
    assert info.is_valid
