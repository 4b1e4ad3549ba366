"""Role capability table consumed by the API layer."""
from typing import Dict, Tuple

ALL_ROLES: Tuple[str, ...] = ("admin", "evaluator", "reviewer")
ADMIN_AND_EVALUATOR_ROLES: Tuple[str, ...] = ("admin", "evaluator")
ADMIN_ONLY_ROLES: Tuple[str, ...] = ("admin",)

PERMISSIONS: Dict[str, Tuple[str, ...]] = {
    # Storage
    "storage:view": ALL_ROLES,
    "storage:upload": ADMIN_AND_EVALUATOR_ROLES,
    "storage:delete": ADMIN_ONLY_ROLES,

    # Chat / AI assistant
    "chat:access": ALL_ROLES,

    # Recommendations
    "recommendations:view": ALL_ROLES,
    "recommendations:modify": ADMIN_AND_EVALUATOR_ROLES,
}


def has_permission(role: str, permission: str) -> bool:
    """Unknown roles and unknown permissions are denied."""
    if not role:
        return False
    return role in PERMISSIONS.get(permission, ())


def capabilities(role: str) -> Dict[str, bool]:
    return {permission: has_permission(role, permission) for permission in PERMISSIONS}
