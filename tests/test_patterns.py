#!/usr/bin/env python3
"""
Test glob matching used for warning tiers and the read-only whitelist
"""

import pytest

from ignore_guard.patterns import (
    PatternMatcher,
    candidate_paths,
    compile_pattern,
    has_wildcard,
    is_whitelisted,
)
from ignore_guard.workspace import Workspace


def test_literal_pattern_matches_by_equality():
    assert PatternMatcher.matches('.env', ('config/.env', '.env'))
    assert PatternMatcher.matches('config/.env', ('config/.env', '.env'))
    assert not PatternMatcher.matches('.env', ('.env.local', '.env.local'))
    # No substring matching for literals
    assert not PatternMatcher.matches('env', ('.env', '.env'))


@pytest.mark.parametrize("pattern,candidate", [
    ('*.key', 'server.key'),
    ('*.key', 'certs/server.key'),
    ('dist/*', 'dist/bundle.js'),
    ('dist/*', 'dist/nested/bundle.js'),
    ('file?.txt', 'file1.txt'),
    ('**/.env.*', '.env.local'),
    ('**/.env.*', 'app/config/.env.production'),
    ('**/secrets/*', 'secrets/token'),
    ('**/secrets/*', 'deploy/secrets/token'),
])
def test_wildcard_matches(pattern, candidate):
    assert PatternMatcher.matches(pattern, (candidate,))


@pytest.mark.parametrize("pattern,candidate", [
    ('*.key', 'server.keys'),
    ('file?.txt', 'file10.txt'),
    ('dist/*', 'src/dist'),
    ('*.min.js', 'app.js'),
])
def test_wildcard_is_anchored(pattern, candidate):
    assert not PatternMatcher.matches(pattern, (candidate,))


def test_regex_metacharacters_are_literal():
    assert PatternMatcher.matches('*.min.js', ('app.min.js',))
    assert not PatternMatcher.matches('*.min.js', ('app-minXjs',))
    assert PatternMatcher.matches('[draft]*', ('[draft] notes.md',))


def test_invalid_pattern_matches_nothing():
    assert not PatternMatcher.matches(None, ('anything',))


def test_first_match_keeps_declared_order():
    matcher = PatternMatcher(['*.pem', '*.key', 'server.*'])
    assert matcher.first_match(('server.key', 'server.key')) == '*.key'
    assert matcher.patterns == ('*.pem', '*.key', 'server.*')
    assert matcher.first_match(('README.md', 'README.md')) is None


def test_candidate_paths_use_workspace_relative_path(tmp_path):
    workspace = Workspace.from_paths([tmp_path])
    assert candidate_paths(tmp_path / 'src' / 'app.py', workspace) == ('src/app.py', 'app.py')


def test_whitelist_uses_relative_path_and_basename(tmp_path):
    workspace = Workspace.from_paths([tmp_path])
    path = tmp_path / 'config' / 'local.json'

    assert is_whitelisted(path, ['config/local.json'], workspace)
    assert is_whitelisted(path, ['local.json'], workspace)
    assert is_whitelisted(path, ['config/*'], workspace)
    assert not is_whitelisted(path, ['other/local.json'], workspace)
    assert not is_whitelisted(path, [], workspace)


def test_compiled_patterns_are_reused():
    assert compile_pattern('*.log') is compile_pattern('*.log')
    assert has_wildcard('a?c')
    assert not has_wildcard('plain.txt')
