#!/usr/bin/env python3
"""
Test the IgnoreGuard facade: activation, configuration changes and commands
"""

import asyncio

import pytest
import pytest_asyncio

from ignore_guard.config import GuardConfig, WarningTier
from ignore_guard.constants import (
    CHOICE_KEEP_EDITABLE,
    NOTICE_PATTERN_FILE_ONLY,
    VIEW_PATTERN_FILE_OPTION,
)
from ignore_guard.guard import IgnoreGuard
from ignore_guard.ignore import GitIgnoreSource
from ignore_guard.probe import WorkspaceMode
from ignore_guard.protection import ChangeKind, Document, ProtectionState
from ignore_guard.session import MemorySessionStore
from ignore_guard.workspace import Workspace

from conftest import FakeGitRunner

PROTECTING = GuardConfig(open_as_read_only=True, retry_delay=0)


@pytest_asyncio.fixture
async def guard(workspace, host, git_runner):
    guard = await IgnoreGuard.activate(workspace, host, config=PROTECTING, runner=git_runner)
    yield guard
    await guard.close()


@pytest.mark.asyncio
async def test_activation_protects_active_document(workspace, repo, host, git_runner):
    document = host.add(Document(repo / '.env'))
    host.active = document

    guard = await IgnoreGuard.activate(workspace, host, config=PROTECTING, runner=git_runner)

    assert guard.probe_result.mode is WorkspaceMode.FULL
    assert isinstance(guard.resolver.source, GitIgnoreSource)
    assert host.is_read_only(document)
    assert host.messages == []
    await guard.close()


@pytest.mark.asyncio
async def test_activation_without_repository_reads_pattern_file(tmp_path, host):
    (tmp_path / '.gitignore').write_text("*.log\n")
    runner = FakeGitRunner(repository=False)

    guard = await IgnoreGuard.activate(Workspace.from_paths([tmp_path]), host,
                                       session=MemorySessionStore(), runner=runner)

    assert guard.resolver.pattern_file_only
    assert host.messages == [NOTICE_PATTERN_FILE_ONLY]
    assert await guard.resolver.is_ignored(tmp_path / 'server.log')
    assert runner.count('check-ignore') == 0
    await guard.close()


@pytest.mark.asyncio
async def test_status_for(guard, repo):
    status = await guard.status_for(repo / '.env')
    assert status.tier is WarningTier.CRITICAL
    assert (await guard.status_for(repo / 'debug.log')).tier is WarningTier.MODERATE
    assert await guard.status_for(repo / 'main.py') is None

    await guard.handle_configuration_change(GuardConfig(enabled=False))
    assert await guard.status_for(repo / '.env') is None


@pytest.mark.asyncio
async def test_surface_messages_follow_visibility_settings(guard, repo):
    assert await guard.code_lens_message(repo / '.env') == '⚠️ This file is ignored by .gitignore ⚠️'
    assert await guard.status_bar_message(repo / '.env') == '⚠️ Ignored file'
    assert await guard.status_bar_message(repo / 'main.py') is None

    await guard.handle_configuration_change(
        GuardConfig(open_as_read_only=True, retry_delay=0, show_code_lens=False)
    )
    assert await guard.code_lens_message(repo / '.env') is None
    assert await guard.status_bar_message(repo / '.env') == '⚠️ Ignored file'

    await guard.handle_configuration_change(
        GuardConfig(open_as_read_only=True, retry_delay=0, show_status_bar=False)
    )
    assert await guard.code_lens_message(repo / '.env') == '⚠️ This file is ignored by .gitignore ⚠️'
    assert await guard.status_bar_message(repo / '.env') is None


@pytest.mark.asyncio
async def test_policy_change_reconciles_open_documents(guard, host, repo):
    app = host.add(Document(repo / 'build' / 'app.log'))
    main = host.add(Document(repo / 'main.py'))

    report = await guard.handle_configuration_change(PROTECTING.with_whitelist_entry('other.txt'))
    assert report.enforced == [str(app.path)]
    assert not host.is_read_only(main)

    report = await guard.handle_configuration_change(GuardConfig(retry_delay=0))
    assert report.released == [str(app.path)]


@pytest.mark.asyncio
async def test_whitelist_change_during_prompt_applies_after_it(guard, host, repo):
    clean = host.add(Document(repo / 'debug.log'))
    await guard.reconcile_open_documents(ChangeKind.READ_ONLY_POLICY)
    assert host.is_read_only(clean)

    dirty = host.add(Document(repo / 'build' / 'app.log', is_dirty=True))
    prompt_shown = asyncio.Event()
    answer = asyncio.Event()
    original_choose = host.choose

    async def wait_for_answer(message, options):
        prompt_shown.set()
        await answer.wait()
        return await original_choose(message, options)

    host.choose = wait_for_answer
    host.choices.append(CHOICE_KEEP_EDITABLE)
    pending_pass = asyncio.create_task(
        guard.reconcile_open_documents(ChangeKind.READ_ONLY_POLICY)
    )
    await asyncio.wait_for(prompt_shown.wait(), timeout=5)

    report = await guard.handle_configuration_change(PROTECTING.with_whitelist_entry('debug.log'))
    assert report.deferred
    assert host.is_read_only(clean)

    answer.set()
    await asyncio.wait_for(pending_pass, timeout=5)

    assert not host.is_read_only(clean)
    assert guard.reconciler.state_of(dirty) is ProtectionState.TEMPORARILY_EDITABLE
    assert not host.is_read_only(dirty)


@pytest.mark.asyncio
async def test_pattern_changes_only_reclassify(guard, host, repo):
    host.add(Document(repo / 'debug.log'))
    new_config = GuardConfig(open_as_read_only=True, retry_delay=0, critical_file_patterns=['*.log'])

    assert await guard.handle_configuration_change(new_config) is None
    assert host.read_only_calls == 0
    assert (await guard.status_for(repo / 'debug.log')).tier is WarningTier.CRITICAL
    # Same snapshot again is a no-op
    assert await guard.handle_configuration_change(new_config) is None


@pytest.mark.asyncio
async def test_pattern_file_change_is_debounced(tmp_path, host):
    (tmp_path / '.gitignore').write_text("*.log\n")
    guard = await IgnoreGuard.activate(
        Workspace.from_paths([tmp_path]), host, config=PROTECTING,
        runner=FakeGitRunner(repository=False),
    )
    document = host.add(Document(tmp_path / 'data.csv'))
    assert not await guard.resolver.is_ignored(document.path)

    (tmp_path / '.gitignore').write_text("*.log\n*.csv\n")
    for _ in range(3):
        guard.on_pattern_file_changed(str(tmp_path / '.gitignore'))
    assert guard.timers.is_pending('pattern-file-change')

    await asyncio.sleep(0.3)

    assert guard.resolver.get_stats()['cache']['generation'] == 1
    assert host.is_read_only(document)
    await guard.close()


@pytest.mark.asyncio
async def test_check_current_file(guard, host, repo):
    assert await guard.check_current_file() is None
    assert host.messages[-1] == 'No active editor'

    host.active = host.add(Document(repo / 'debug.log'))
    assert await guard.check_current_file()
    assert host.messages[-1] == 'File "debug.log" is IGNORED by .gitignore'

    host.active = host.add(Document(repo / 'main.py'))
    assert not await guard.check_current_file()
    assert host.messages[-1] == 'File "main.py" is NOT ignored by .gitignore'


@pytest.mark.asyncio
async def test_show_ignored_file_info_opens_pattern_file(guard, host, repo, git_runner):
    git_runner.verbose['debug.log'] = '.gitignore:1:*.log'
    host.active = host.add(Document(repo / 'debug.log'))
    host.notify_answer = VIEW_PATTERN_FILE_OPTION

    assert await guard.show_ignored_file_info() == VIEW_PATTERN_FILE_OPTION
    assert 'Matching pattern: *.log' in host.messages[-1]
    assert host.opened_paths == [repo / '.gitignore']


@pytest.mark.asyncio
async def test_toggle_commands_write_settings(guard, host, repo):
    host.active = host.add(Document(repo / '.env'))
    await guard.on_active_document_changed(host.active)
    assert host.is_read_only(host.active)

    assert not await guard.toggle_read_only()
    assert host.settings['openAsReadOnly'] is False
    assert host.messages[-1] == 'Read-only mode disabled'
    assert not host.is_read_only(host.active)

    assert not await guard.toggle_enabled()
    assert host.settings['enabled'] is False
    assert host.messages[-1] == 'Gitignore Guard disabled'


@pytest.mark.asyncio
async def test_whitelist_commands(guard, host, repo):
    assert not await guard.add_current_file_to_whitelist()
    assert host.messages[-1] == 'No active file'

    host.active = host.add(Document(repo / 'main.py'))
    assert not await guard.add_current_file_to_whitelist()
    assert host.messages[-1] == 'This file is not ignored by Git'

    document = host.add(Document(repo / 'build' / 'app.log'))
    host.active = document
    await guard.on_active_document_changed(document)
    assert host.is_read_only(document)

    assert await guard.add_current_file_to_whitelist()
    assert host.settings['readOnlyWhitelist'] == ['build/app.log']
    assert host.messages[-1] == 'Added "build/app.log" to whitelist'
    assert not host.is_read_only(document)
    assert guard.reconciler.state_of(document) is ProtectionState.UNPROTECTED

    assert not await guard.add_current_file_to_whitelist()
    assert host.messages[-1] == 'File is already in the whitelist'

    assert await guard.remove_current_file_from_whitelist()
    assert host.settings['readOnlyWhitelist'] == []
    assert host.is_read_only(document)
    assert not await guard.remove_current_file_from_whitelist()
    assert host.messages[-1] == 'File is not in the whitelist'


@pytest.mark.asyncio
async def test_failed_setting_update_changes_nothing(guard, host):
    async def refuse(key, value):
        raise RuntimeError("settings are read-only")

    host.update_setting = refuse
    assert await guard.toggle_enabled()
    assert guard.config.enabled

    assert not await guard.disable_temporarily()
    assert guard.config.enabled
    assert not guard.temporary_disable.active
    assert host.messages == []


@pytest.mark.asyncio
async def test_disable_temporarily(workspace, host, git_runner):
    config = GuardConfig(temporary_disable_seconds=2)
    guard = await IgnoreGuard.activate(workspace, host, config=config, runner=git_runner)
    guard.temporary_disable.tick_interval = 0.02

    await guard.disable_temporarily()
    assert host.settings['enabled'] is False
    assert not guard.config.enabled
    assert guard.status_text == 'Gitignore Guard disabled (0:02)'

    await asyncio.sleep(0.15)

    assert host.settings['enabled'] is True
    assert guard.config.enabled
    assert guard.status_text is None
    assert host.messages[-1] == 'Gitignore Guard re-enabled'
    await guard.close()


@pytest.mark.asyncio
async def test_close_cancels_pending_reenable(guard, host):
    await guard.disable_temporarily()
    assert host.messages[-1] == 'Gitignore Guard disabled for 5 minutes'
    assert guard.temporary_disable.active

    await guard.close()
    assert not guard.temporary_disable.active
