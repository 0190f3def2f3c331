from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Generic, Optional, Type, TypeVar

from ..common.datetime_utils import now_local
from ..common.pagination import Page, build_page, normalize_pagination, offset_for
from ..common.validators import require_approver
from ..core.enums import NotificationType, RequestKind, RequestStatus, Role
from ..core.exceptions import AlreadyProcessedError, DomainError, RequestNotFoundError
from ..database.transaction import TransactionManager
from ..notifications.sender import NotificationSender
from .model import ApprovalDecision
from .repository import ApprovableRepository

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ApprovalWorkflow(Generic[R]):
    """pending -> approved | rejected, exactly once per request.

    The status write and the ``on_approved`` side effect share one
    transaction. The requester is notified only after it commits.
    """

    def __init__(
        self,
        *,
        kind: RequestKind,
        repository: ApprovableRepository[R],
        tx: TransactionManager,
        notifier: NotificationSender,
        on_approved: Optional[Callable[[R], None]] = None,
        already_processed: Type[AlreadyProcessedError] = AlreadyProcessedError,
    ):
        self._kind = kind
        self._repo = repository
        self._tx = tx
        self._notifier = notifier
        self._on_approved = on_approved
        self._already_processed = already_processed

    def approve(
        self,
        *,
        request_id: int,
        approver_id: int,
        current_role: Role,
        decision: ApprovalDecision,
        now: datetime | None = None,
    ) -> R:
        require_approver(current_role)
        decided_at = (now or now_local()).replace(microsecond=0)

        with self._tx.atomic():
            request = self._repo.get(request_id)
            if request is None:
                raise RequestNotFoundError(f"{self._kind.value.capitalize()} request {request_id} not found")
            if request.status.is_terminal:
                logger.info("%s request %s already %s", self._kind.value, request_id, request.status.value)
                raise self._already_processed()

            won = self._repo.transition_if_pending(
                request_id=request_id,
                status=decision.status,
                approved_by=approver_id,
                decided_at=decided_at,
                rejected_reason=decision.rejected_reason,
            )
            if not won:
                logger.info("%s request %s decided concurrently by another approver", self._kind.value, request_id)
                raise self._already_processed()

            if decision.status == RequestStatus.APPROVED and self._on_approved is not None:
                try:
                    self._on_approved(request)
                except DomainError as exc:
                    logger.warning(
                        "Rolling back approval of %s request %s: %s", self._kind.value, request_id, exc.message
                    )
                    raise

            decided = self._repo.get(request_id)

        logger.info(
            "%s request %s %s by user %s", self._kind.value, request_id, decision.status.value, approver_id
        )
        self._notify(decided, decision)
        return decided

    def _notify(self, request: R, decision: ApprovalDecision) -> None:
        notification_type = NotificationType(f"{self._kind.value}_{decision.status.value}")
        title = f"{self._kind.value.capitalize()} request {decision.status.value}"
        message = f"Your {self._kind.value} request #{request.request_id} was {decision.status.value}."
        if decision.rejected_reason:
            message += f" Reason: {decision.rejected_reason}"
        try:
            self._notifier.send(
                user_id=request.user_id,
                notification_type=notification_type,
                title=title,
                message=message,
            )
        except Exception:
            # The decision is already committed.
            logger.exception("Failed to notify user %s about %s request %s", request.user_id, self._kind.value, request.request_id)

    def get_by_user(self, user_id: int, *, page: int = 1, page_size: int = 20) -> Page[R]:
        page, page_size = normalize_pagination(page, page_size)
        rows, total = self._repo.list_by_user(user_id=user_id, limit=page_size, offset=offset_for(page, page_size))
        return build_page(rows, total, page, page_size)

    def get_pending(self, *, current_role: Role, page: int = 1, page_size: int = 20) -> Page[R]:
        require_approver(current_role)
        page, page_size = normalize_pagination(page, page_size)
        rows, total = self._repo.list_pending(limit=page_size, offset=offset_for(page, page_size))
        return build_page(rows, total, page, page_size)
