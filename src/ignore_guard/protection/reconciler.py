"""
Read-only protection reconciliation.

Decides, for each affected open document, whether to apply, remove or defer
the host's read-only marker. Documents without unsaved changes are handled
silently. Documents with unsaved changes are asked about one at a time, in
the order they were given, and an "all remaining" answer is replayed for
the rest of the same pass.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..config import GuardConfig
from ..ignore import IgnoreResolver
from ..patterns import is_whitelisted
from ..utils import get_logger, log_with_context
from ..workspace import PathLike, Workspace
from .batch import BatchDecision, ReconciliationBatch
from .host import ChangeKind, Document, EditorHost
from .state import ProtectionState, ProtectionTracker

logger = get_logger(__name__)


@dataclass
class ReconcileReport:
    """What one reconciliation pass did, by absolute path"""
    enforced: List[str] = field(default_factory=list)
    released: List[str] = field(default_factory=list)
    temporarily_editable: List[str] = field(default_factory=list)
    undecided: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: bool = False
    deferred: bool = False


class ProtectionReconciler:
    """
    The only component that changes read-only state.

    While a pass is draining, open and activation triggers (the host
    reporting what the pass itself did) are ignored. Any other trigger is
    deferred: one more pass over every open document runs once the current
    pass has finished.
    """

    def __init__(self, host: EditorHost, resolver: IgnoreResolver, config: GuardConfig,
                 workspace: Optional[Workspace] = None,
                 tracker: Optional[ProtectionTracker] = None):
        self.host = host
        self.resolver = resolver
        self.config = config
        self.workspace = workspace
        self.tracker = tracker or ProtectionTracker()
        self._draining = False
        self._rerun: Optional[ChangeKind] = None

    @property
    def is_draining(self) -> bool:
        return self._draining

    def update_configuration(self, config: GuardConfig) -> None:
        self.config = config

    def is_whitelisted(self, path: PathLike) -> bool:
        return is_whitelisted(path, self.config.read_only_whitelist, self.workspace)

    def state_of(self, document: Document) -> ProtectionState:
        return self.tracker.state_of(document.path)

    async def needs_protection(self, document: Document) -> bool:
        if not (self.config.enabled and self.config.open_as_read_only):
            return False
        if not await self.resolver.is_ignored(document.path):
            return False
        return not self.is_whitelisted(document.path)

    async def reconcile(self, documents: Iterable[Document],
                        change_kind: ChangeKind) -> ReconcileReport:
        """
        Bring protection of the given documents in line with the current
        configuration and ignore status.

        Never raises; per-document failures are logged and reported.
        """
        report = ReconcileReport()
        if self._draining:
            report.skipped = True
            if change_kind.prompts_user:
                logger.debug(f"Reconciliation in progress, deferring {change_kind.value} pass")
                self._rerun = change_kind
                report.deferred = True
            else:
                logger.debug(f"Reconciliation in progress, ignoring {change_kind.value} trigger")
            return report

        self._draining = True
        try:
            await self._reconcile(list(documents), change_kind, report)
            log_with_context(
                logger, logging.DEBUG, "Reconciliation finished",
                change_kind=change_kind.value,
                enforced=len(report.enforced),
                released=len(report.released),
                temporarily_editable=len(report.temporarily_editable),
                undecided=len(report.undecided),
                failed=len(report.failed),
            )
        except Exception as e:
            logger.error(f"Reconciliation for {change_kind.value} failed: {e}", exc_info=True)
        finally:
            self._draining = False

        if self._rerun is not None:
            deferred_kind, self._rerun = self._rerun, None
            logger.info(f"Running deferred {deferred_kind.value} reconciliation")
            try:
                documents = self.host.open_documents()
            except Exception as e:
                logger.error(f"Could not list open documents for deferred pass: {e}")
            else:
                await self.reconcile(documents, deferred_kind)
        return report

    async def _reconcile(self, documents: List[Document], change_kind: ChangeKind,
                         report: ReconcileReport) -> None:
        pending: List[Document] = []

        for document in documents:
            if document.is_closed:
                continue
            key = self.tracker.key(document.path)
            state = self.tracker.observe(document.path)
            if state is ProtectionState.TEMPORARILY_EDITABLE:
                continue

            wanted = await self.needs_protection(document)
            if wanted and state is ProtectionState.UNPROTECTED:
                if not document.is_dirty:
                    if await self._apply(document):
                        report.enforced.append(key)
                    else:
                        report.failed.append(key)
                elif change_kind.prompts_user:
                    pending.append(document)
                else:
                    logger.debug(f"Leaving {key} writable until its unsaved changes are resolved")
            elif not wanted and state is ProtectionState.ENFORCED:
                if await self._remove(document):
                    report.released.append(key)
                else:
                    report.failed.append(key)

        if pending:
            logger.info(f"{len(pending)} document(s) with unsaved changes need a decision")
            await self._drain(ReconciliationBatch(pending), report)

    async def _drain(self, batch: ReconciliationBatch, report: ReconcileReport) -> None:
        for document in batch:
            key = self.tracker.key(document.path)
            decision = batch.pending_decision
            if decision is None:
                decision = await self._ask(batch, document)
                if decision is None:
                    logger.info(f"No decision for {key}; leaving it as is")
                    report.undecided.append(key)
                    continue

            if decision is BatchDecision.KEEP_EDITABLE:
                done = await self._keep_editable(document)
                target = report.temporarily_editable
            else:
                done = await self._discard_and_protect(document)
                target = report.enforced
            (target if done else report.failed).append(key)

    async def _ask(self, batch: ReconciliationBatch, document: Document) -> Optional[BatchDecision]:
        try:
            if not await self.host.activate(document):
                logger.warning(f"Could not make {document.path} active before asking")
            label = await self.host.choose(batch.prompt(document), batch.options())
        except Exception as e:
            logger.error(f"Prompt for {document.path} failed: {e}")
            return None
        return batch.record(label)

    async def _set_read_only(self, document: Document, read_only: bool) -> bool:
        """Activate document and toggle its marker; False if either step failed"""
        action = "set" if read_only else "clear"
        try:
            if not await self.host.activate(document):
                logger.warning(f"Could not make {document.path} active, skipping read-only {action}")
                return False
            await self.host.set_active_read_only(read_only)
        except Exception as e:
            logger.error(f"Failed to {action} read-only on {document.path}: {e}")
            return False
        return True

    async def _apply(self, document: Document) -> bool:
        if not await self._set_read_only(document, True):
            return False
        self.tracker.enforce(document.path)
        logger.info(f"Read-only enforced on {document.path}")
        return True

    async def _clear_with_retry(self, document: Document) -> bool:
        if await self._set_read_only(document, False):
            return True
        await asyncio.sleep(self.config.retry_delay)
        if await self._set_read_only(document, False):
            return True
        logger.warning(f"Giving up clearing read-only on {document.path}")
        return False

    async def _remove(self, document: Document) -> bool:
        if not await self._clear_with_retry(document):
            return False
        self.tracker.release(document.path)
        logger.info(f"Read-only removed from {document.path}")
        return True

    async def _keep_editable(self, document: Document) -> bool:
        if self.state_of(document) is ProtectionState.ENFORCED:
            if not await self._clear_with_retry(document):
                return False
        self.tracker.allow_editing(document.path)
        logger.info(f"{document.path} stays editable until closed")
        return True

    async def _discard_and_protect(self, document: Document) -> bool:
        try:
            if not await self.host.activate(document):
                logger.warning(f"Could not make {document.path} active, not discarding changes")
                return False
            await self.host.revert_active()
        except Exception as e:
            logger.error(f"Failed to discard changes in {document.path}: {e}")
            return False
        return await self._apply(document)

    async def on_document_opened(self, document: Document) -> ReconcileReport:
        return await self._on_document_event(document, "open")

    async def on_active_document_changed(self, document: Optional[Document]) -> ReconcileReport:
        if document is None:
            return ReconcileReport(skipped=True)
        return await self._on_document_event(document, "activation")

    async def _on_document_event(self, document: Document, event: str) -> ReconcileReport:
        if self._draining:
            logger.trace(f"Ignoring {event} of {document.path} caused by reconciliation")
            return ReconcileReport(skipped=True)
        return await self.reconcile([document], ChangeKind.DOCUMENT_OPENED)

    def on_document_closed(self, document: Document) -> None:
        self.tracker.forget(document.path)
