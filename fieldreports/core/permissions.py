from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import Select

from fieldreports.core.errors import ForbiddenError
from fieldreports.models.user import Role

if TYPE_CHECKING:
    from fieldreports.models.service_report import ServiceReport
    from fieldreports.models.user import User

logger = logging.getLogger(__name__)


# Roles allowed to run user management and customer/spare/region mutations
ADMIN_ROLES: frozenset[str] = frozenset({Role.VXR.value})

# Roles that read every report regardless of author or region
UNRESTRICTED_REPORT_ROLES: frozenset[str] = frozenset({Role.CM.value, Role.VXR.value})


def _role_of(user: "User") -> str:
    role = user.role
    return role.value if isinstance(role, Role) else str(role)


@dataclass(frozen=True)
class ReportScope:
    """
    Which reports a caller may list.

    Both fields None means unrestricted.
    """

    engineer_id: int | None = None
    region_id: int | None = None

    @property
    def unrestricted(self) -> bool:
        return self.engineer_id is None and self.region_id is None

    def apply(self, query: Select) -> Select:
        from fieldreports.models.service_report import ServiceReport

        if self.engineer_id is not None:
            query = query.where(ServiceReport.engineer_id == self.engineer_id)
        if self.region_id is not None:
            query = query.where(ServiceReport.region_id == self.region_id)
        return query


def report_scope(user: "User") -> ReportScope:
    """
    ENG -> own reports, BM -> own region, CM/VXR -> everything.
    Anything else is refused.
    """
    role = _role_of(user)

    if role == Role.ENG.value:
        return ReportScope(engineer_id=user.id)

    if role == Role.BM.value:
        if user.region_id is None:
            logger.info("Branch manager %s has no region; refusing report listing", user.id)
            raise ForbiddenError("No region assigned to this branch manager")
        return ReportScope(region_id=user.region_id)

    if role in UNRESTRICTED_REPORT_ROLES:
        return ReportScope()

    logger.info("User %s with role %r tried to list reports", user.id, role)
    raise ForbiddenError("Not authorized to view reports")


def ensure_report_visible(user: "User", report: "ServiceReport") -> None:
    """
    Post-fetch ownership check for a single report.
    The report has already been loaded; a foreign report is a 403, not a 404.
    """
    role = _role_of(user)

    if role == Role.ENG.value:
        if report.engineer_id != user.id:
            raise ForbiddenError("You are not allowed to view this report")
        return

    if role == Role.BM.value:
        if user.region_id is None or report.region_id != user.region_id:
            raise ForbiddenError("You are not allowed to view reports outside your region")
        return

    if role in UNRESTRICTED_REPORT_ROLES:
        return

    raise ForbiddenError("Not authorized to view reports")


def ensure_role(user: "User", allowed: frozenset[str] | set[str]) -> None:
    """Fails closed for any role outside `allowed`."""
    if _role_of(user) not in allowed:
        logger.info("User %s (%s) denied; requires one of %s", user.id, _role_of(user), sorted(allowed))
        raise ForbiddenError("You do not have permission to perform this action")
