"""BaseService: foundation for deriva services.

Every service receives a :class:`Workspace` at construction time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from deriva.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class DeriveService(BaseService):
            def derive(self, names: list[str] | None = None) -> ServiceResult:
                decl = self._workspace.decls.lookup_decl(name)
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    def _dispatch_event(self, hook_name: str, payload: dict[str, Any], warnings: list[str]) -> None:
        """Dispatch a lifecycle event.  No-op if plugins are not initialized.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        pm = self._workspace.plugins
        if pm is None:
            return
        pm.dispatch(hook_name, payload, warnings)
