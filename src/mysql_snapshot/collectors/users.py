"""User account and role collectors."""

import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from mysql_snapshot.collectors.base import BaseCollector, ConnectionType
from mysql_snapshot.models.snapshot import RoleEntry, UserEntry
from mysql_snapshot.models.stage import StageResult

logger = logging.getLogger(__name__)

USERS_QUERY = """
    SELECT User, Host, plugin, account_locked, password_expired
    FROM mysql.user
    ORDER BY User, Host
"""

# Keeps the row shape of USERS_QUERY on servers without the 8.0 column
LEGACY_USERS_QUERY = """
    SELECT User, Host, plugin, account_locked, 'N' AS password_expired
    FROM mysql.user
    ORDER BY User, Host
"""

# Approximation: a role is a locked account whose password is not expired.
# A locked user account with a live password is reported as a role too.
ROLES_QUERY = """
    SELECT User AS role_name, Host AS role_host
    FROM mysql.user
    WHERE account_locked = 'Y' AND password_expired != 'Y'
    ORDER BY User, Host
"""

ROLE_MEMBERS_QUERY = """
    SELECT TO_USER, TO_HOST
    FROM mysql.role_edges
    WHERE FROM_USER = :role_name AND FROM_HOST = :role_host
    ORDER BY TO_USER, TO_HOST
"""


def _optional(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


class UserCollector(BaseCollector):
    """Collects login accounts and their grants."""

    name = "users"

    @property
    def query(self) -> str:
        if self.capabilities.password_expired_column:
            return USERS_QUERY
        return LEGACY_USERS_QUERY

    async def collect(self, conn: ConnectionType) -> StageResult:
        rows = await self._fetch_all(conn, self.query)

        users = []
        for row in rows:
            user, host = str(row[0]), str(row[1])
            users.append(
                UserEntry(
                    user=user,
                    host=host,
                    plugin=_optional(row[2]),
                    account_locked=_optional(row[3]),
                    password_expired=_optional(row[4]),
                    grants=await self._fetch_grants(conn, user, host),
                )
            )

        logger.info(f"Collected {len(users)} user accounts")
        return self.ok(tuple(users))


class RoleCollector(BaseCollector):
    """Collects 8.0 roles, their grants and their members."""

    name = "roles"

    async def collect(self, conn: ConnectionType) -> StageResult:
        try:
            rows = await self._fetch_all(conn, ROLES_QUERY)
        except SQLAlchemyError as e:
            return self.degraded((), f"role list unavailable: {e}")

        roles = []
        for row in rows:
            name, host = str(row[0]), str(row[1])
            roles.append(
                RoleEntry(
                    name=name,
                    host=host,
                    grants=await self._fetch_grants(conn, name, host),
                    members=await self.fetch_members(conn, name, host),
                )
            )

        logger.info(f"Collected {len(roles)} roles")
        return self.ok(tuple(roles))

    async def fetch_members(
        self, conn: ConnectionType, role_name: str, role_host: str
    ) -> tuple[str, ...]:
        """Accounts the role is granted to, as user@host."""
        try:
            rows = await self._fetch_all(
                conn,
                ROLE_MEMBERS_QUERY,
                {"role_name": role_name, "role_host": role_host},
            )
        except SQLAlchemyError as e:
            logger.debug(f"Members unavailable for role {role_name}@{role_host}: {e}")
            return ()
        return tuple(f"{row[0]}@{row[1]}" for row in rows)
