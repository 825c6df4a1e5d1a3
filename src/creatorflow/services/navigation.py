"""View routing state machine.

State is a top-level view, an optional idea-detail overlay and a stack of
modals (the idea editor, with a confirmation dialog possibly on top). While
a confirmation dialog is open nothing else may happen until it resolves to
exactly one of confirm / cancel.
"""
from __future__ import annotations

import enum
import inspect
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from creatorflow.core.errors import InteractionBlockedError


Callback = Callable[[], Union[Any, Awaitable[Any]]]


class View(str, enum.Enum):
    HOME = "Home"
    CHANNELS = "Channels"
    CALENDAR = "Calendar"
    SETTINGS = "Settings"
    AUTH = "Auth"


TOP_LEVEL_VIEWS = (View.HOME, View.CHANNELS, View.CALENDAR, View.SETTINGS)


class ModalKind(str, enum.Enum):
    EDIT_IDEA = "edit-idea"
    CONFIRM_ACTION = "confirm-action"


@dataclass
class ConfirmationRequest:
    title: str
    message: str
    on_confirm: Callback
    on_cancel: Optional[Callback] = None
    confirm_label: str = "Confirm"
    cancel_label: str = "Cancel"
    is_destructive: bool = False
    # also close the idea-detail overlay once confirmed
    close_detail: bool = False


@dataclass
class Modal:
    kind: ModalKind
    idea_id: Optional[uuid.UUID] = None
    confirmation: Optional[ConfirmationRequest] = None


async def _call(callback: Optional[Callback]) -> Any:
    if callback is None:
        return None
    result = callback()
    if inspect.isawaitable(result):
        result = await result
    return result


class ViewRouter:
    def __init__(self) -> None:
        self.view: View = View.HOME
        self.detail_idea_id: Optional[uuid.UUID] = None
        self._modals: list[Modal] = []

    @property
    def modal(self) -> Optional[Modal]:
        return self._modals[-1] if self._modals else None

    @property
    def confirmation(self) -> Optional[ConfirmationRequest]:
        top = self.modal
        return top.confirmation if top and top.kind is ModalKind.CONFIRM_ACTION else None

    @property
    def blocked(self) -> bool:
        return self.confirmation is not None

    def _ensure_unblocked(self) -> None:
        if self.blocked:
            raise InteractionBlockedError("a confirmation dialog is waiting for an answer")

    # -- navigation ---------------------------------------------------
    def navigate(self, view: View | str) -> None:
        self._ensure_unblocked()
        view = View(view)
        if view not in TOP_LEVEL_VIEWS:
            raise ValueError(f"{view.value} is not a navigation target")
        if self.view is View.AUTH:
            raise InteractionBlockedError("sign in first")
        self.view = view
        self.detail_idea_id = None
        self._modals.clear()

    def open_idea(self, idea_id: uuid.UUID) -> None:
        self._ensure_unblocked()
        self.detail_idea_id = idea_id

    def close_detail(self) -> None:
        self._ensure_unblocked()
        self.detail_idea_id = None

    def open_editor(self, idea_id: uuid.UUID | None = None) -> None:
        """Open the idea editor (``None`` for a new idea); the detail overlay stays underneath."""
        self._ensure_unblocked()
        self._modals = [Modal(kind=ModalKind.EDIT_IDEA, idea_id=idea_id)]

    def close_editor(self) -> None:
        self._ensure_unblocked()
        self._modals = [m for m in self._modals if m.kind is not ModalKind.EDIT_IDEA]

    # -- confirmation -------------------------------------------------
    def request_confirmation(self, request: ConfirmationRequest) -> None:
        self._ensure_unblocked()
        self._modals.append(Modal(kind=ModalKind.CONFIRM_ACTION, confirmation=request))

    async def confirm(self) -> Any:
        request = self.confirmation
        if request is None:
            raise InteractionBlockedError("no confirmation dialog is open")
        succeeded = False
        try:
            result = await _call(request.on_confirm)
            # a command reporting failure keeps the idea on screen
            succeeded = result is not False
            return result
        finally:
            self._modals.clear()
            if request.close_detail and succeeded:
                self.detail_idea_id = None

    async def cancel(self) -> None:
        request = self.confirmation
        if request is None:
            raise InteractionBlockedError("no confirmation dialog is open")
        self._modals.pop()
        await _call(request.on_cancel)

    # -- session ------------------------------------------------------
    def sign_out(self) -> None:
        self.view = View.AUTH
        self.detail_idea_id = None
        self._modals.clear()

    def signed_in(self) -> None:
        self.view = View.HOME
        self.detail_idea_id = None
        self._modals.clear()
