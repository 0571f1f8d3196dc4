from __future__ import annotations

from flask import Flask, g, request

from ..common.http import json_body, login_required, ok, roles_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    users = container.user_service
    departments = container.department_service

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return ok(g.current_user.to_payload())

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @roles_required(Role.MANAGER, Role.ADMIN)
    def users_list():
        items = users.list_users(
            current_user=g.current_user,
            dept_id=request.args.get("deptId", type=int),
            include_inactive=request.args.get("includeInactive", "").lower() in {"1", "true", "yes"},
        )
        return ok([u.to_payload() for u in items])

    @app.route("/api/users/stats", methods=["GET"], endpoint="users_stats")
    @roles_required(Role.ADMIN)
    def users_stats():
        return ok(users.count_by_status())

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="users_detail")
    @roles_required(Role.MANAGER, Role.ADMIN)
    def users_detail(user_id: int):
        return ok(users.get_visible_user(current_user=g.current_user, user_id=user_id).to_payload())

    @app.route("/api/users/<int:user_id>", methods=["PUT", "PATCH"], endpoint="users_update")
    @roles_required(Role.ADMIN)
    def users_update(user_id: int):
        user = users.update_user(current_user=g.current_user, user_id=user_id, changes=json_body())
        return ok(user.to_payload())

    @app.route("/api/departments", methods=["GET"], endpoint="departments_list")
    @login_required
    def departments_list():
        return ok([d.to_payload() for d in departments.list_departments()])

    @app.route("/api/departments/<int:dept_id>", methods=["GET"], endpoint="departments_detail")
    @login_required
    def departments_detail(dept_id: int):
        return ok(departments.get_department(dept_id).to_payload())

    @app.route("/api/departments", methods=["POST"], endpoint="departments_create")
    @roles_required(Role.ADMIN)
    def departments_create():
        dept = departments.create_department(current_user=g.current_user, data=json_body())
        return ok(dept.to_payload(), 201)

    @app.route("/api/departments/<int:dept_id>", methods=["PUT", "PATCH"], endpoint="departments_update")
    @roles_required(Role.ADMIN)
    def departments_update(dept_id: int):
        dept = departments.update_department(current_user=g.current_user, dept_id=dept_id, data=json_body())
        return ok(dept.to_payload())

    @app.route("/api/departments/<int:dept_id>", methods=["DELETE"], endpoint="departments_delete")
    @roles_required(Role.ADMIN)
    def departments_delete(dept_id: int):
        departments.delete_department(current_user=g.current_user, dept_id=dept_id)
        return ok()
