from __future__ import annotations

from flask import Flask, g

from ..common.http import json_body, login_required, ok, roles_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/policy", methods=["GET"], endpoint="policy_get")
    @login_required
    def policy_get():
        return ok(container.policy_service.get_policy().to_payload())

    @app.route("/api/policy", methods=["PUT", "PATCH"], endpoint="policy_update")
    @roles_required(Role.ADMIN)
    def policy_update():
        policy = container.policy_service.update_policy(current_user=g.current_user, changes=json_body())
        return ok(policy.to_payload())
