"""
Permission evaluation over a model's role table.

``authorize`` is pure and deterministic: the same (role, model, action)
always yields the same decision. The ``all`` sentinel is expanded here,
never in the stored definition.
"""

from dataclasses import dataclass

from ..constants import ALL_ACTIONS, PERMISSION_ALL
from ..exceptions import ForbiddenError
from .definitions import ModelDefinition

NO_ROLE_PERMISSIONS = "no permissions for this role"


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a permission check."""

    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOWED = AccessDecision(True)


def authorize(role: str, model: ModelDefinition, action: str) -> AccessDecision:
    """
    Decide whether ``role`` may perform ``action`` on ``model``.

    A role without an entry in ``model.rbac`` is denied. An entry containing
    ``all`` allows every action; otherwise the action must be listed.
    """
    permissions = model.rbac.get(role)
    if not permissions:
        return AccessDecision(False, NO_ROLE_PERMISSIONS)
    if PERMISSION_ALL in permissions:
        return ALLOWED
    if action in permissions:
        return ALLOWED
    return AccessDecision(False, f"{action} permission required")


def require(role: str, model: ModelDefinition, action: str) -> None:
    """
    Raise ForbiddenError unless ``role`` may perform ``action`` on ``model``.
    """
    decision = authorize(role, model, action)
    if not decision.allowed:
        raise ForbiddenError(
            f"Access denied: {decision.reason}",
            model_name=model.name,
            action=action,
            role=role,
        )


def permissions_for(role: str, model: ModelDefinition) -> tuple[str, ...]:
    """Effective actions for a role, with ``all`` expanded."""
    permissions = model.rbac.get(role) or ()
    if PERMISSION_ALL in permissions:
        return ALL_ACTIONS
    return tuple(action for action in ALL_ACTIONS if action in permissions)
