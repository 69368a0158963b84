from __future__ import annotations

import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from casework.db.session import get_db
from casework.security.auth import authenticate, extract_bearer_token, load_caller
from casework.security.config import EffectiveRule, SecurityConfig
from casework.security.context import AuthzContext, Caller
from casework.security.decision import Decision, Outcome
from casework.security.errors import (
    AccessDenied,
    AuthenticationRequired,
    ClientRoleDenied,
    InsufficientRole,
    ResourceNotFound,
)
from casework.security.evaluators import evaluator_for
from casework.security.roles import BehaviorClass, classify
from casework.security.scope import resolve_scope
from casework.security.store import AccessStore
from casework.settings import get_settings

logger = logging.getLogger(__name__)

# Largest value a BIGINT primary key can hold.
MAX_ID = 2**63 - 1


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_current_caller(request: Request) -> Caller:
    caller = getattr(request.state, "caller", None)
    if caller is None:
        raise AuthenticationRequired()
    return caller


def get_authz(request: Request) -> AuthzContext:
    authz = getattr(request.state, "authz", None)
    if authz is None:
        raise AuthenticationRequired()
    return authz


def enforce_security(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    db: Session = Depends(get_db, use_cache=False),
) -> None:
    """
    Global security dependency: the single decision point for every route.

    Order: route rule -> token -> caller -> role class -> client/role checks
    -> scope -> resource evaluator. Any failure raises an AccessError before
    the route handler is entered. Runs at most once per request.
    """

    if getattr(request.state, "authz", None) is not None:
        return

    path = request.url.path
    method = request.method.upper()

    rule = _with_decorator_metadata(config.match(path, method), request)
    if not rule.auth_required:
        return

    token = extract_bearer_token(request, config)
    user_id = authenticate(token, config, get_settings())

    caller = load_caller(db, user_id)
    request.state.caller = caller
    profile = classify(caller.role)

    if rule.deny_clients and profile.behavior is BehaviorClass.CLIENT:
        logger.info("Client caller rejected user_id=%s path=%s method=%s", caller.id, path, method)
        raise ClientRoleDenied()

    if rule.required_roles and caller.role.value not in rule.required_roles:
        logger.info(
            "Insufficient role user_id=%s role=%s required=%s path=%s",
            caller.id,
            caller.role.value,
            sorted(rule.required_roles),
            path,
        )
        raise InsufficientRole()

    scope = resolve_scope(caller, profile)

    decision: Decision | None = None
    target_id: int | None = None
    if rule.resource is not None:
        target_id = _target_id(request, rule)
        evaluate = evaluator_for(rule.resource)
        decision = evaluate(caller, profile.behavior, AccessStore(db), target_id)
        _enforce(decision, caller, rule.resource, target_id)

    request.state.authz = AuthzContext(
        caller=caller,
        behavior=profile.behavior,
        office_scope=scope.office_id,
        department_scope=scope.department,
        filter_by_department=bool(decision and decision.filter_by_department),
        assigned_to_scope=decision.assigned_to_scope if decision else None,
        resource=rule.resource,
        target_id=target_id,
    )
    # use_cache=False still stores this session in the request's dependency
    # cache, so the handler's own `Depends(get_db)` receives it.
    db.info["authz"] = request.state.authz


def _with_decorator_metadata(rule: EffectiveRule, request: Request) -> EffectiveRule:
    # Optional decorator metadata (see casework.security.decorators).
    endpoint = request.scope.get("endpoint")
    if endpoint is None:
        return rule

    decorator_roles = set(getattr(endpoint, "__security_required_roles__", set()))
    decorator_resource = getattr(endpoint, "__security_resource__", None)
    decorator_target = getattr(endpoint, "__security_target_param__", None)

    if not decorator_roles and decorator_resource is None:
        return rule

    return EffectiveRule(
        auth_required=True,
        required_roles=frozenset(rule.required_roles | decorator_roles),
        deny_clients=rule.deny_clients,
        resource=rule.resource or decorator_resource,
        target_param=rule.target_param or decorator_target,
    )


def _target_id(request: Request, rule: EffectiveRule) -> int | None:
    if rule.target_param is None:
        return None

    raw = request.path_params.get(rule.target_param)
    try:
        target_id = int(raw)
    except (TypeError, ValueError):
        target_id = None

    # Not an id we could ever store, so nothing to find.
    if target_id is None or not 1 <= target_id <= MAX_ID:
        raise ResourceNotFound(f"{rule.resource.capitalize()} not found")
    return target_id


def _enforce(decision: Decision, caller: Caller, resource: str, target_id: int | None) -> None:
    if decision.outcome is Outcome.ALLOW:
        logger.debug(
            "Access allowed user_id=%s role=%s resource=%s target=%s via=%s",
            caller.id,
            caller.role.value,
            resource,
            target_id,
            decision.matched,
        )
        return

    logger.info(
        "Access %s user_id=%s role=%s resource=%s target=%s reason=%s",
        decision.outcome.value,
        caller.id,
        caller.role.value,
        resource,
        target_id,
        decision.reason,
    )
    if decision.outcome is Outcome.NOT_FOUND:
        raise ResourceNotFound(decision.reason)
    raise AccessDenied(decision.reason)
