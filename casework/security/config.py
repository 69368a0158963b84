from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from casework.security.errors import InvalidRole
from casework.security.evaluators import RESOURCE_NAMES
from casework.security.roles import parse_role


class AuthConfig(BaseModel):
    provider: Literal["dummy", "jwt"] = "dummy"
    authorization_header: str = "Authorization"
    bearer_prefix: str = "Bearer"
    jwt_algorithms: list[str] = Field(default_factory=lambda: ["HS256"])
    user_id_claim: str = "sub"


class DefaultRule(BaseModel):
    auth_required: bool = True
    required_roles: list[str] = Field(default_factory=list)
    deny_clients: bool = True


class RouteRule(BaseModel):
    path: str
    methods: list[str] = Field(default_factory=lambda: ["GET"])

    auth_required: bool | None = None
    required_roles: list[str] = Field(default_factory=list)
    deny_clients: bool | None = None

    # Access evaluator for this route ("case", "appointment", "task", "user").
    resource: str | None = None
    # Path parameter holding the target id; absent on list routes.
    target_param: str | None = None

    @field_validator("resource")
    @classmethod
    def _known_resource(cls, value: str | None) -> str | None:
        if value is not None and value not in RESOURCE_NAMES:
            raise ValueError(f"unknown resource {value!r}; expected one of {sorted(RESOURCE_NAMES)}")
        return value

    def normalized_methods(self) -> set[str]:
        return {m.upper() for m in self.methods}


class SecurityConfigModel(BaseModel):
    auth: AuthConfig = Field(default_factory=AuthConfig)
    default: DefaultRule = Field(default_factory=DefaultRule)
    routes: list[RouteRule] = Field(default_factory=list)


@dataclass(frozen=True)
class EffectiveRule:
    """
    Fully-resolved rule (defaults applied) for a particular request.
    """

    auth_required: bool
    required_roles: frozenset[str]
    deny_clients: bool
    resource: str | None = None
    target_param: str | None = None


def _path_template_to_regex(path_template: str) -> re.Pattern[str]:
    # "/cases/{id}" -> r"^/cases/[^/]+$"
    regex = re.sub(r"\{[^/]+\}", r"[^/]+", path_template)
    return re.compile(rf"^{regex}$")


class SecurityConfig:
    """
    Runtime helper around validated config + route matching.
    """

    def __init__(self, model: SecurityConfigModel):
        self.model = model

        compiled: list[tuple[str, re.Pattern[str], RouteRule]] = []
        for rule in self.model.routes:
            compiled.append((rule.path, _path_template_to_regex(rule.path), rule))

        # Prefer exact matches over templates.
        self._exact_rules: dict[str, list[RouteRule]] = {}
        for r in self.model.routes:
            self._exact_rules.setdefault(r.path, []).append(r)
        self._compiled_rules = compiled

    @property
    def auth(self) -> AuthConfig:
        return self.model.auth

    def match(self, path: str, method: str) -> EffectiveRule:
        """
        Find the best matching rule for (path, method), then apply defaults.
        """

        method = method.upper()
        default = self.model.default

        # 1) exact path match
        exact_candidates = self._exact_rules.get(path, [])
        for candidate in exact_candidates:
            if method in candidate.normalized_methods():
                return _effective(candidate, default)

        # 2) template match
        for _template, regex, candidate in self._compiled_rules:
            if method not in candidate.normalized_methods():
                continue
            if regex.match(path):
                return _effective(candidate, default)

        # 3) no match -> defaults
        return EffectiveRule(
            auth_required=default.auth_required,
            required_roles=frozenset(default.required_roles),
            deny_clients=default.deny_clients,
        )


def _effective(rule: RouteRule, default: DefaultRule) -> EffectiveRule:
    # A rule that names a resource or roles is auth-required even if the
    # global default is "public".
    inferred_auth_required = default.auth_required or bool(rule.required_roles) or rule.resource is not None

    return EffectiveRule(
        auth_required=inferred_auth_required if rule.auth_required is None else rule.auth_required,
        required_roles=frozenset(rule.required_roles or default.required_roles),
        deny_clients=default.deny_clients if rule.deny_clients is None else rule.deny_clients,
        resource=rule.resource,
        target_param=rule.target_param,
    )


def _validate_roles(model: SecurityConfigModel) -> None:
    # Unknown role names in config are a startup error, not a silent never-match.
    for role in model.default.required_roles:
        parse_role(role)
    for rule in model.routes:
        for role in rule.required_roles:
            parse_role(role)


def build_security_config(raw: dict[str, Any]) -> SecurityConfig:
    model = SecurityConfigModel.model_validate(raw)
    try:
        _validate_roles(model)
    except InvalidRole as exc:
        raise ValueError(f"Invalid security config: {exc}") from exc
    return SecurityConfig(model)


def load_security_config(path: Path) -> SecurityConfig:
    raw_text = path.read_text(encoding="utf-8")
    raw: dict[str, Any] = yaml.safe_load(raw_text) or {}

    if "security" not in raw:
        raise ValueError(f"Missing top-level 'security' key in config: {path}")

    return build_security_config(raw["security"])
