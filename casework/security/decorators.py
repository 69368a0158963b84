from __future__ import annotations

from collections.abc import Callable

from casework.security.evaluators import RESOURCE_NAMES


def require_roles(roles: list[str]) -> Callable:
    """
    Decorator-style alternative to a `required_roles` entry in security_config.yaml.

    Implementation detail:
    - This decorator does NOT perform auth itself.
    - It attaches metadata that the global security dependency reads
      *after* routing (during dependency resolution).
    """

    def decorator(fn: Callable) -> Callable:
        existing = set(getattr(fn, "__security_required_roles__", set()))
        setattr(fn, "__security_required_roles__", existing | set(roles))
        return fn

    return decorator


def guard_resource(resource: str, target_param: str | None = None) -> Callable:
    """
    Run the access evaluator for `resource` on this endpoint.

    `target_param` names the path parameter carrying the target id; leave it
    out on list endpoints.
    """

    if resource not in RESOURCE_NAMES:
        raise ValueError(f"unknown resource {resource!r}; expected one of {sorted(RESOURCE_NAMES)}")

    def decorator(fn: Callable) -> Callable:
        setattr(fn, "__security_resource__", resource)
        setattr(fn, "__security_target_param__", target_param)
        return fn

    return decorator
