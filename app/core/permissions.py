"""Roles, permission tags and the role → permission table used to authorize requests."""

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType

from app.core.exceptions import ForbiddenError


class UserRole(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


# Role ids are fixed by convention; stored users reference these values, so they must
# never be renumbered.
ROLE_IDS: Mapping[UserRole, int] = MappingProxyType(
    {
        UserRole.ADMIN: 1,
        UserRole.TEACHER: 2,
        UserRole.STUDENT: 3,
    }
)

# Role assigned on self-registration.
DEFAULT_ROLE = UserRole.TEACHER


class Permission(str, Enum):
    """Permission tags in resource:action form."""

    USER_CREATE = "user:create"
    USER_READ = "user:read"
    USER_UPDATE = "user:update"
    USER_DELETE = "user:delete"

    PROFILE_READ = "profile:read"
    PROFILE_UPDATE = "profile:update"

    ROLE_CREATE = "role:create"
    ROLE_READ = "role:read"
    ROLE_UPDATE = "role:update"
    ROLE_DELETE = "role:delete"

    STUDENT_CREATE = "student:create"
    STUDENT_READ = "student:read"
    STUDENT_UPDATE = "student:update"
    STUDENT_DELETE = "student:delete"


# Explicit enumeration per role; no inheritance between roles.
ROLE_PERMISSIONS: Mapping[str, frozenset[Permission]] = MappingProxyType(
    {
        UserRole.ADMIN.value: frozenset(
            {
                Permission.USER_CREATE,
                Permission.USER_READ,
                Permission.USER_UPDATE,
                Permission.USER_DELETE,
                Permission.PROFILE_READ,
                Permission.PROFILE_UPDATE,
                Permission.ROLE_CREATE,
                Permission.ROLE_READ,
                Permission.ROLE_UPDATE,
                Permission.ROLE_DELETE,
                Permission.STUDENT_CREATE,
                Permission.STUDENT_READ,
                Permission.STUDENT_UPDATE,
                Permission.STUDENT_DELETE,
            }
        ),
        UserRole.TEACHER.value: frozenset(
            {
                Permission.USER_READ,
                Permission.PROFILE_READ,
                Permission.PROFILE_UPDATE,
                Permission.STUDENT_READ,
            }
        ),
        UserRole.STUDENT.value: frozenset(
            {
                Permission.PROFILE_READ,
                Permission.PROFILE_UPDATE,
            }
        ),
    }
)


def role_id_for(role: UserRole | str) -> int:
    """Return the fixed id for a role name. Raises ValueError for unknown roles."""
    return ROLE_IDS[UserRole(role)]


class PermissionGuard:
    """Checks a role against a fixed role → permission table."""

    def __init__(self, role_permissions: Mapping[str, Iterable[Permission]]) -> None:
        self._table: Mapping[str, frozenset[Permission]] = MappingProxyType(
            {role: frozenset(perms) for role, perms in role_permissions.items()}
        )

    def permissions_for(self, role: str) -> frozenset[Permission]:
        """Unknown roles have no permissions."""
        return self._table.get(role, frozenset())

    def is_allowed(self, role: str, required: Iterable[Permission]) -> bool:
        return set(required) <= self.permissions_for(role)

    def check(self, role: str, required: Iterable[Permission]) -> None:
        """Raise ForbiddenError unless role holds every required permission."""
        if not self.is_allowed(role, required):
            raise ForbiddenError("Insufficient permissions")
