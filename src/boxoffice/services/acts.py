"""Act management."""

from __future__ import annotations

import logging
from uuid import UUID

from boxoffice.models import Act
from boxoffice.observability import ATTR_EXTERNAL_ID, ATTR_RESULT_COUNT
from boxoffice.persistence.query import Query
from boxoffice.services._base import Service, assign, build, identified
from boxoffice.tenancy.context import require_tenant_id
from boxoffice.views import ActView

logger = logging.getLogger(__name__)


class ActService(Service):
    """Acts of the current tenant. Root-scoped, like venues."""

    component = "act"

    async def create(self, name: str, *, external_id: UUID | None = None) -> ActView:
        """
        Raises:
            TenantContextRequiredError: If the context is unscoped
            InvalidArgumentError: If the name is empty or too long
            DuplicateKeyError: If ``external_id`` is already taken
        """
        tenant_id = require_tenant_id(self.context, "act creation")
        with self._span("create"):
            act = build(Act, tenant_id=tenant_id, name=name, **identified(external_id))
            async with self._unit_of_work() as uow:
                stored = await uow.repository(Act).add(act)
                await uow.commit()

        logger.info("Created act %s for tenant %s", stored.external_id, tenant_id)
        return ActView.of(stored)

    async def get_all(self) -> list[ActView]:
        with self._span("get_all") as span:
            async with self._unit_of_work() as uow:
                acts = await uow.repository(Act).find(Query().with_order("name"))
            if span is not None:
                span.set_attribute(ATTR_RESULT_COUNT, len(acts))
        return [ActView.of(act) for act in acts]

    async def get_by_external_id(self, external_id: UUID) -> ActView:
        with self._span("get", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                act = await uow.repository(Act).require_by_external_id(external_id)
        return ActView.of(act)

    async def update(self, external_id: UUID, *, name: str) -> ActView:
        with self._span("update", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                acts = uow.repository(Act)
                act = await acts.require_by_external_id(external_id)
                stored = await acts.update(assign(act, name=name))
                await uow.commit()

        logger.info("Updated act %s", external_id)
        return ActView.of(stored)

    async def delete(self, external_id: UUID) -> bool:
        """Delete an act and its shows. Returns False if not visible."""
        with self._span("delete", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                acts = uow.repository(Act)
                act = await acts.get_by_external_id(external_id)
                if act is None:
                    return False
                deleted = await acts.delete(act)
                await uow.commit()

        logger.info("Deleted act %s", external_id)
        return deleted

    async def count(self) -> int:
        with self._span("count"):
            async with self._unit_of_work() as uow:
                return await uow.repository(Act).count()


__all__ = ["ActService"]
