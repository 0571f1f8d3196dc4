from __future__ import annotations

from flask import Flask, g, request

from ..common.datetime_utils import now_local
from ..common.http import json_body, login_required, ok, roles_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    service = container.request_service

    def _note() -> str:
        data = request.get_json(silent=True)
        note = data.get("note") if isinstance(data, dict) else None
        return note if isinstance(note, str) else ""

    @app.route("/api/requests", methods=["GET"], endpoint="requests_mine")
    @login_required
    def requests_mine():
        status = request.args.get("status")
        items = service.list_my_requests(g.current_user.user_id)
        if status:
            items = [r for r in items if r.status.value == status]
        return ok([r.to_payload() for r in items])

    @app.route("/api/requests", methods=["POST"], endpoint="requests_submit")
    @login_required
    def requests_submit():
        req = service.submit(current_user=g.current_user, data=json_body())
        return ok(req.to_payload(), 201)

    @app.route("/api/requests/<int:request_id>", methods=["GET"], endpoint="requests_detail")
    @login_required
    def requests_detail(request_id: int):
        return ok(service.get_request(current_user=g.current_user, request_id=request_id).to_payload())

    @app.route("/api/requests/pending", methods=["GET"], endpoint="requests_pending")
    @roles_required(Role.MANAGER, Role.ADMIN)
    def requests_pending():
        return ok([r.to_payload() for r in service.list_pending(current_user=g.current_user)])

    @app.route("/api/requests/pending/count", methods=["GET"], endpoint="requests_pending_count")
    @roles_required(Role.MANAGER, Role.ADMIN)
    def requests_pending_count():
        return ok({"count": service.count_pending(current_user=g.current_user)})

    @app.route("/api/requests/<int:request_id>/approve", methods=["POST"], endpoint="requests_approve")
    @roles_required(Role.MANAGER, Role.ADMIN)
    def requests_approve(request_id: int):
        req = service.approve(current_user=g.current_user, request_id=request_id, note=_note(), now=now_local())
        return ok(req.to_payload())

    @app.route("/api/requests/<int:request_id>/reject", methods=["POST"], endpoint="requests_reject")
    @roles_required(Role.MANAGER, Role.ADMIN)
    def requests_reject(request_id: int):
        req = service.reject(current_user=g.current_user, request_id=request_id, note=_note(), now=now_local())
        return ok(req.to_payload())

    @app.route("/api/leave-balances/me", methods=["GET"], endpoint="balances_mine")
    @login_required
    def balances_mine():
        balance = service.get_balance(current_user=g.current_user, user_id=g.current_user.user_id)
        return ok(balance.to_payload())

    @app.route("/api/leave-balances/<int:user_id>", methods=["GET"], endpoint="balances_for_user")
    @roles_required(Role.MANAGER, Role.ADMIN)
    def balances_for_user(user_id: int):
        return ok(service.get_balance(current_user=g.current_user, user_id=user_id).to_payload())

    @app.route("/api/leave-balances/reset", methods=["POST"], endpoint="balances_reset")
    @roles_required(Role.ADMIN)
    def balances_reset():
        return ok({"updated": service.reset_balances(current_user=g.current_user)})
