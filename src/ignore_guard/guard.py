"""
Gitignore Guard facade.

Wires one workspace's resolver, classifier, reconciler, timers and pattern
file monitor together and exposes the host-facing events and commands.
"""

import asyncio
from dataclasses import replace
from typing import Any, Optional, Tuple

from .classifier import Classification, WarningClassifier
from .config import SETTING_KEYS, GuardConfig
from .constants import PATTERN_FILE_DEBOUNCE_SECONDS, PATTERN_FILENAME, VIEW_PATTERN_FILE_OPTION
from .ignore import GitIgnoreSource, GitRunner, IgnoreResolver
from .probe import ProbeResult, WorkspaceStatusProbe
from .protection import ChangeKind, Document, EditorHost, ProtectionReconciler, ReconcileReport
from .session import MemorySessionStore, SessionStore
from .timers import TemporaryDisable, TimerManager
from .utils import get_logger
from .watcher import PatternFileMonitor
from .workspace import PathLike, Workspace

logger = get_logger(__name__)

# Settings whose change can alter the protection of already open documents
RECONCILE_KEYS = ('enabled', 'openAsReadOnly', 'readOnlyWhitelist')

PATTERN_FILE_TIMER = "pattern-file-change"


class IgnoreGuard:
    """
    Everything one workspace session needs.

    Build it with `activate()`, which runs the startup probe and picks the
    ignore source before the resolver is created.
    """

    def __init__(self, workspace: Workspace, host: EditorHost, config: GuardConfig,
                 resolver: IgnoreResolver, session: Optional[SessionStore] = None,
                 probe_result: Optional[ProbeResult] = None,
                 timers: Optional[TimerManager] = None):
        self.workspace = workspace
        self.host = host
        self.config = config
        self.resolver = resolver
        self.session = session or MemorySessionStore()
        self.probe_result = probe_result
        self.timers = timers or TimerManager()
        self.classifier = WarningClassifier(config, workspace)
        self.reconciler = ProtectionReconciler(host, resolver, config, workspace)
        self.temporary_disable = TemporaryDisable(
            self.timers,
            on_reenable=self._reenable,
            on_tick=self._on_countdown,
            duration=config.temporary_disable_seconds,
        )
        self.status_text: Optional[str] = None
        self._monitor: Optional[PatternFileMonitor] = None

    @classmethod
    async def activate(cls, workspace: Workspace, host: EditorHost,
                       config: Optional[GuardConfig] = None,
                       session: Optional[SessionStore] = None,
                       runner: Optional[GitRunner] = None,
                       watch: bool = False) -> "IgnoreGuard":
        """
        Probe the workspace, build the guard and protect the active document.

        Args:
            workspace: Workspace folders
            host: Editor host adapter
            config: Settings snapshot (defaults when omitted)
            session: Persisted session flags
            runner: Git runner (tests pass a stub)
            watch: Start the pattern file monitor
        """
        config = config or GuardConfig()
        session = session or MemorySessionStore()
        git_source = GitIgnoreSource(
            workspace,
            runner=runner or GitRunner(timeout=config.vcs_timeout),
            search_above_workspace=config.search_above_workspace,
        )
        probe = WorkspaceStatusProbe(git_source, session, notify=host.notify)
        probe_result = await probe.run(workspace.root)

        source = git_source.fallback if probe_result.pattern_file_only else git_source
        resolver = IgnoreResolver(source)
        guard = cls(workspace, host, config, resolver, session=session, probe_result=probe_result)
        if watch:
            guard.start_watching()

        await guard.on_active_document_changed(host.active_document())
        logger.info(f"Gitignore Guard activated for {workspace.root} ({resolver.get_stats()['source']})")
        return guard

    def start_watching(self):
        if self._monitor is None:
            self._monitor = PatternFileMonitor(self.on_pattern_file_changed)
        self._monitor.start(self.workspace.folders)

    async def close(self):
        self.temporary_disable.cancel()
        self.timers.cancel_all()
        if self._monitor is not None:
            # Joining the observer thread blocks
            await asyncio.get_running_loop().run_in_executor(None, self._monitor.stop)
            self._monitor = None
        logger.info("Gitignore Guard closed")

    # Queries

    async def status_for(self, path: PathLike) -> Optional[Classification]:
        """Warning classification of an ignored path, None when there is nothing to show"""
        if not self.config.enabled:
            return None
        if not await self.resolver.is_ignored(path):
            return None
        return self.classifier.classify(path)

    async def code_lens_message(self, path: PathLike) -> Optional[str]:
        if not self.config.show_code_lens:
            return None
        status = await self.status_for(path)
        return status.messages.code_lens_message if status else None

    async def status_bar_message(self, path: PathLike) -> Optional[str]:
        if not self.config.show_status_bar:
            return None
        status = await self.status_for(path)
        return status.messages.status_bar_message if status else None

    # Host events

    async def on_document_opened(self, document: Document) -> ReconcileReport:
        return await self.reconciler.on_document_opened(document)

    async def on_active_document_changed(self, document: Optional[Document]) -> ReconcileReport:
        return await self.reconciler.on_active_document_changed(document)

    def on_document_closed(self, document: Document):
        self.reconciler.on_document_closed(document)

    async def reconcile_open_documents(self, change_kind: ChangeKind) -> ReconcileReport:
        return await self.reconciler.reconcile(self.host.open_documents(), change_kind)

    async def handle_configuration_change(self, new_config: GuardConfig) -> Optional[ReconcileReport]:
        """
        Replace the settings snapshot.

        Returns:
            The reconciliation report when open documents were reconciled
        """
        changed = self.config.changed_keys(new_config)
        if not changed:
            return None

        logger.info(f"Configuration changed: {', '.join(changed)}")
        self.config = new_config
        self.classifier.update_configuration(new_config)
        self.reconciler.update_configuration(new_config)
        self.temporary_disable.duration = new_config.temporary_disable_seconds

        if not any(key in changed for key in RECONCILE_KEYS):
            return None
        if 'readOnlyWhitelist' in changed:
            change_kind = ChangeKind.WHITELIST
        elif 'enabled' in changed:
            change_kind = ChangeKind.ENABLED
        else:
            change_kind = ChangeKind.READ_ONLY_POLICY
        return await self.reconcile_open_documents(change_kind)

    def on_pattern_file_changed(self, path: str):
        """Debounce a watched-file event; the last event in the window wins"""
        self.timers.schedule(
            PATTERN_FILE_TIMER,
            PATTERN_FILE_DEBOUNCE_SECONDS,
            lambda: self._apply_pattern_file_change(path),
        )

    async def _apply_pattern_file_change(self, path: str) -> Optional[ReconcileReport]:
        if not self.resolver.notify_file_changed(path):
            return None
        return await self.reconcile_open_documents(ChangeKind.IGNORE_STATUS)

    # Commands

    async def check_current_file(self) -> Optional[bool]:
        document = self.host.active_document()
        if document is None:
            await self._notify('No active editor')
            return None

        ignored = await self.resolver.is_ignored(document.path)
        await self._notify(
            f'File "{document.path.name}" is {"IGNORED" if ignored else "NOT ignored"} by .gitignore'
        )
        return ignored

    async def show_ignored_file_info(self) -> Optional[str]:
        document = self.host.active_document()
        if document is None:
            return None

        message = (
            f'The file "{document.path.name}" is ignored by .gitignore '
            f"and won't be tracked by Git."
        )
        pattern = await self.resolver.ignoring_pattern(document.path)
        if pattern:
            message += f"\n\nMatching pattern: {pattern}"

        selection = await self._notify(message, (VIEW_PATTERN_FILE_OPTION, 'OK'))
        if selection == VIEW_PATTERN_FILE_OPTION:
            try:
                await self.host.open_path(self.workspace.root / PATTERN_FILENAME)
            except Exception as e:
                logger.error(f"Could not open {PATTERN_FILENAME}: {e}")
                await self._notify(f'Could not open {PATTERN_FILENAME} file')
        return selection

    async def toggle_enabled(self) -> bool:
        enabled = not self.config.enabled
        if await self._update_setting('enabled', enabled):
            await self._notify(f"Gitignore Guard {'enabled' if enabled else 'disabled'}")
        return self.config.enabled

    async def disable_temporarily(self) -> bool:
        if not await self._update_setting('enabled', False):
            return False
        self.temporary_disable.start()
        minutes = self.temporary_disable.duration // 60
        await self._notify(f'Gitignore Guard disabled for {minutes} minutes')
        return True

    async def _reenable(self):
        self.status_text = None
        await self._update_setting('enabled', True)
        await self._notify('Gitignore Guard re-enabled')

    def _on_countdown(self, minutes: int, seconds: int):
        self.status_text = f"Gitignore Guard disabled ({minutes}:{seconds:02d})"
        logger.trace(self.status_text)

    async def toggle_read_only(self) -> bool:
        read_only = not self.config.open_as_read_only
        if await self._update_setting('openAsReadOnly', read_only):
            await self._notify(f"Read-only mode {'enabled' if read_only else 'disabled'}")
        return self.config.open_as_read_only

    async def add_current_file_to_whitelist(self) -> bool:
        document = self.host.active_document()
        if document is None:
            await self._notify('No active file')
            return False

        relative_path = self.workspace.relative_path(document.path)
        if not await self.resolver.is_ignored(document.path):
            await self._notify('This file is not ignored by Git')
            return False
        if relative_path in self.config.read_only_whitelist:
            await self._notify('File is already in the whitelist')
            return False

        whitelist = self.config.with_whitelist_entry(relative_path).read_only_whitelist
        if not await self._update_setting('readOnlyWhitelist', whitelist):
            return False
        await self._notify(f'Added "{relative_path}" to whitelist')
        return True

    async def remove_current_file_from_whitelist(self) -> bool:
        document = self.host.active_document()
        if document is None:
            await self._notify('No active file')
            return False

        relative_path = self.workspace.relative_path(document.path)
        if relative_path not in self.config.read_only_whitelist:
            await self._notify('File is not in the whitelist')
            return False

        whitelist = self.config.without_whitelist_entry(relative_path).read_only_whitelist
        if not await self._update_setting('readOnlyWhitelist', whitelist):
            return False
        await self._notify(f'Removed "{relative_path}" from whitelist')
        return True

    async def _update_setting(self, key: str, value: Any) -> bool:
        """Persist one setting through the host, then apply it locally"""
        host_value = list(value) if isinstance(value, tuple) else value
        try:
            await self.host.update_setting(key, host_value)
        except Exception as e:
            logger.error(f"Failed to update setting {key}: {e}")
            return False
        # A host that echoes the change back sees no difference and does nothing
        await self.handle_configuration_change(replace(self.config, **{SETTING_KEYS[key]: value}))
        return True

    async def _notify(self, message: str, options: Tuple[str, ...] = ()) -> Optional[str]:
        try:
            return await self.host.notify(message, options)
        except Exception as e:
            logger.error(f"Failed to show message: {e}")
            return None
