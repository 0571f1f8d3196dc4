from __future__ import annotations

from flask import Flask, g, request

from ..common.datetime_utils import now_local, parse_override_instant
from ..common.http import effective_now, json_body, login_required, ok
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from .model import Coordinates


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _punch_body():
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    @app.route("/api/checkin", methods=["POST"], endpoint="attendance_checkin")
    @login_required
    def attendance_checkin():
        data = _punch_body()
        record = service.check_in(
            g.current_user.user_id,
            now=effective_now(data.get("devOverrideTime")),
            coords=Coordinates.from_payload(data.get("coords")),
        )
        return ok(record.to_payload())

    @app.route("/api/checkout", methods=["POST"], endpoint="attendance_checkout")
    @login_required
    def attendance_checkout():
        data = _punch_body()
        record = service.check_out(
            g.current_user.user_id,
            now=effective_now(data.get("devOverrideTime")),
            coords=Coordinates.from_payload(data.get("coords")),
        )
        return ok(record.to_payload())

    @app.route("/api/punch", methods=["POST"], endpoint="attendance_punch")
    @login_required
    def attendance_punch():
        data = json_body()
        record = service.punch(
            g.current_user.user_id,
            data.get("action"),
            now=effective_now(data.get("devOverrideTime")),
            coords=Coordinates.from_payload(data.get("coords")),
        )
        return ok(record.to_payload())

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        now = effective_now(request.args.get("asOf"))
        return ok(service.get_today_status(g.current_user.user_id, now=now).to_payload())

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        limit = request.args.get("limit", default=DEFAULT_HISTORY_LIMIT, type=int)
        records = service.get_history(g.current_user.user_id, limit=max(1, min(limit, 100)))
        return ok([r.to_payload() for r in records])

    @app.route("/api/attendance/monthly", methods=["GET"], endpoint="attendance_monthly")
    @login_required
    def attendance_monthly():
        now = effective_now(request.args.get("asOf"))
        year = request.args.get("year", default=now.year, type=int)
        month = request.args.get("month", default=now.month, type=int)
        overview = service.get_month_overview(g.current_user.user_id, year, month, as_of=now)
        return ok(overview.to_payload())

    @app.route("/api/attendance/classify", methods=["POST"], endpoint="attendance_classify")
    @login_required
    def attendance_classify():
        data = json_body()
        # Pure evaluation: a caller-supplied instant is always honoured here.
        as_of = data.get("asOf")
        now = parse_override_instant(as_of) if as_of else now_local()
        return ok(service.classify_payload(data, as_of=now).to_payload())
