from __future__ import annotations

from flask import Flask, g, request

from ..common.http import ok, roles_required
from ..container import Container
from ..core.constants import DEFAULT_AUDIT_LIMIT
from ..core.enums import Role
from .service import parse_target


def register(app: Flask, container: Container) -> None:
    service = container.audit_service

    @app.route("/api/audit", methods=["GET"], endpoint="audit_list")
    @roles_required(Role.ADMIN)
    def audit_list():
        target_type = request.args.get("targetType")
        logs = service.list_logs(
            current_user=g.current_user,
            actor_id=request.args.get("actorId", type=int),
            target_type=parse_target(target_type) if target_type else None,
            limit=request.args.get("limit", default=DEFAULT_AUDIT_LIMIT, type=int),
            offset=request.args.get("offset", default=0, type=int),
        )
        return ok([entry.to_payload() for entry in logs])

    @app.route("/api/audit/<target_type>/<target_id>", methods=["GET"], endpoint="audit_for_target")
    @roles_required(Role.ADMIN)
    def audit_for_target(target_type: str, target_id: str):
        logs = service.list_for_target(
            current_user=g.current_user,
            target_type=parse_target(target_type),
            target_id=target_id,
        )
        return ok([entry.to_payload() for entry in logs])
