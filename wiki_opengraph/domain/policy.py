from collections.abc import Sequence
from typing import Any

from wiki_opengraph.domain.entities import User
from wiki_opengraph.rules.models import Rules

VIEW_ACTION = "page:view"


class PolicyEngine:
    def __init__(self, rules: Rules):
        self.rules = rules

    def check_permission(
        self,
        user: User | None,
        user_roles: Sequence[str],
        action: str,
        resource: Any = None,
    ) -> bool:
        """
        Check if the user/role is allowed to perform the action on the resource.

        Order of precedence:
        1. Public Permissions (public pages only)
        2. Role-Based Access Control (RBAC)
        3. Attribute-Based Access Control (ABAC)
        """
        # 1. Public Permissions
        if action in self.rules.rbac.public_permissions:
            if getattr(resource, "visibility", "public") == "public":
                return True

        # Private pages need an active user
        if not user or user.status != "active":
            return False

        # 2. RBAC
        for role in user_roles:
            allowed_actions = self.rules.rbac.roles.get(role, [])
            if "*" in allowed_actions:
                return True
            if action in allowed_actions:
                return True

            # Scoped wildcards ("page:*" matches "page:view")
            if ":" in action:
                scope = action.split(":")[0]
                if f"{scope}:*" in allowed_actions:
                    return True

        # 3. ABAC
        if resource is not None:
            for rule in self.rules.abac.page_view_rules:
                if action in rule.allow and self._evaluate_rule(
                    rule.if_condition, user, user_roles, resource
                ):
                    return True

        return False

    def _evaluate_rule(
        self,
        condition: dict[str, Any],
        user: User,
        user_roles: Sequence[str],
        resource: Any,
    ) -> bool:
        """
        Evaluate condition predicates from the rules file.
        Supported predicates:
        - role_in: list[str]
        - owns_page: bool
        """
        for predicate, args in condition.items():
            if predicate == "role_in":
                if not set(user_roles).intersection(set(args)):
                    return False

            elif predicate == "owns_page":
                if args:
                    owner = getattr(resource, "owner_user_id", None)
                    if owner is None or str(owner) != str(user.id):
                        return False

            else:
                # Unknown predicates never grant access
                return False

        return True

    def can_view(self, user: User | None, resource: Any) -> bool:
        roles = user.roles if user else []
        return self.check_permission(user, roles, VIEW_ACTION, resource)
