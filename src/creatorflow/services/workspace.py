"""Application root: one store, one view router, one signed-in session.

Page-level intents arrive here. Non-destructive ones go straight to the
store; destructive ones (bin, permanent delete, empty bin, channel delete,
app reset) open a confirmation dialog and only reach the store once confirmed.
"""
from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from creatorflow.core.errors import IdentityError
from creatorflow.core.identity import IdentityClient, IdentitySession
from creatorflow.schemas.idea import IdeaDraft
from creatorflow.services.navigation import ConfirmationRequest, View, ViewRouter
from creatorflow.services.store import DomainStore

log = logging.getLogger(__name__)

AdapterFactory = Callable[[IdentitySession], object]


class Workspace:
    def __init__(
        self,
        store: DomainStore | None = None,
        router: ViewRouter | None = None,
        *,
        identity: IdentityClient | None = None,
        adapter_factory: AdapterFactory | None = None,
    ) -> None:
        self.store = store
        self.router = router or ViewRouter()
        self.identity = identity
        self.adapter_factory = adapter_factory
        self.session: Optional[IdentitySession] = None
        if store is None:
            self.router.sign_out()

    # -- session ------------------------------------------------------
    async def start(self) -> bool:
        """Load the store and follow remote changes (offline / pre-authenticated use)."""
        if self.store is None:
            raise RuntimeError("no store attached; sign in first")
        loaded = await self.store.start()
        self.store.watch()
        self.router.signed_in()
        return loaded

    async def sign_in(self, email: str, password: str) -> bool:
        if self.identity is None or self.adapter_factory is None:
            raise RuntimeError("workspace has no identity service")
        self.session = await self.identity.sign_in(email, password)
        return await self._attach()

    async def sign_up(self, email: str, password: str, display_name: str) -> bool:
        if self.identity is None or self.adapter_factory is None:
            raise RuntimeError("workspace has no identity service")
        self.session = await self.identity.sign_up(email, password, display_name)
        return await self._attach()

    async def _attach(self) -> bool:
        if self.store is not None:
            self.store.stop_watching()
        self.store = DomainStore(self.adapter_factory(self.session))
        return await self.start()

    async def sign_out(self) -> None:
        if self.identity is not None and self.session is not None and self.session.access_token:
            try:
                await self.identity.sign_out(self.session.access_token)
            except IdentityError:
                # the local session ends regardless
                log.warning("remote sign-out failed", exc_info=True)
        self.session = None
        if self.store is not None:
            self.store.reset()
        self.router.sign_out()

    # -- navigation ---------------------------------------------------
    def navigate(self, view: View | str) -> None:
        self.router.navigate(view)

    def open_idea(self, idea_id: uuid.UUID) -> None:
        self.router.open_idea(idea_id)

    def edit_idea(self, idea_id: uuid.UUID | None = None) -> IdeaDraft:
        """Open the editor and return the draft it starts from."""
        self.router.open_editor(idea_id)
        if idea_id is None:
            return self.store.new_draft()
        idea = self.store.idea(idea_id)
        if idea is None:
            self.router.close_editor()
            raise KeyError(idea_id)
        return IdeaDraft.from_idea(idea)

    async def save_draft(self, draft: IdeaDraft) -> bool:
        """Save the open editor's draft; the editor closes only on success."""
        modal = self.router.modal
        idea_id = modal.idea_id if modal is not None else None
        saved = await self.store.save_idea(draft, idea_id)
        if saved:
            self.router.close_editor()
        return saved

    # -- confirmable actions -------------------------------------------
    def request_soft_delete(self, idea_id: uuid.UUID) -> ConfirmationRequest:
        request = ConfirmationRequest(
            title="Move to Recycle Bin?",
            message="You can restore this idea from Settings > Trash.",
            confirm_label="Move to Bin",
            on_confirm=lambda: self.store.soft_delete_idea(idea_id),
            is_destructive=True,
            close_detail=True,
        )
        self.router.request_confirmation(request)
        return request

    def request_permanent_delete(self, idea_id: uuid.UUID) -> ConfirmationRequest:
        request = ConfirmationRequest(
            title="Delete Permanently?",
            message="This idea will be removed forever. This cannot be undone.",
            confirm_label="Delete Forever",
            on_confirm=lambda: self.store.permanently_delete_idea(idea_id),
            is_destructive=True,
            close_detail=True,
        )
        self.router.request_confirmation(request)
        return request

    def request_empty_bin(self) -> ConfirmationRequest:
        count = len(self.store.binned_ideas)
        request = ConfirmationRequest(
            title="Empty Recycle Bin?",
            message=f"{count} idea(s) will be permanently deleted. This cannot be undone.",
            confirm_label="Empty Bin",
            on_confirm=self.store.empty_bin,
            is_destructive=True,
        )
        self.router.request_confirmation(request)
        return request

    def request_delete_channel(self, channel_id: uuid.UUID) -> ConfirmationRequest:
        channel = self.store.channel(channel_id)
        name = channel.name if channel else "this channel"
        request = ConfirmationRequest(
            title="Delete Channel?",
            message=f"Delete {name}?",
            confirm_label="Delete",
            on_confirm=lambda: self.store.delete_channel(channel_id),
            is_destructive=True,
        )
        self.router.request_confirmation(request)
        return request

    def request_reset_app(self) -> ConfirmationRequest:
        request = ConfirmationRequest(
            title="Reset App?",
            message="Clear all app data?",
            confirm_label="Reset",
            on_confirm=self.store.reset_app,
            is_destructive=True,
        )
        self.router.request_confirmation(request)
        return request

    async def confirm(self):
        return await self.router.confirm()

    async def cancel(self) -> None:
        await self.router.cancel()
