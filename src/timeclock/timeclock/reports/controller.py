from __future__ import annotations

from flask import Flask, g, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import effective_now, login_required, ok
from ..container import Container
from .service import default_report_range


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="reports_attendance")
    @login_required
    def reports_attendance():
        now = effective_now(request.args.get("asOf"))
        start, end = default_report_range(now.date())
        if request.args.get("start"):
            start = parse_iso_date(request.args["start"])
        if request.args.get("end"):
            end = parse_iso_date(request.args["end"])

        data = reports.build_attendance_report(
            current_user=g.current_user,
            start=start,
            end=end,
            as_of=now,
            user_id=request.args.get("userId", type=int),
            dept_id=request.args.get("deptId", type=int),
        )
        return ok({"start": start.isoformat(), "end": end.isoformat(), "rows": data.rows, "summary": data.summary})

    @app.route("/api/reports/daily", methods=["GET"], endpoint="reports_daily")
    @login_required
    def reports_daily():
        now = effective_now(request.args.get("asOf"))
        day = parse_iso_date(request.args["date"]) if request.args.get("date") else now.date()
        overview = reports.build_daily_overview(
            current_user=g.current_user,
            day=day,
            as_of=now,
            dept_id=request.args.get("deptId", type=int),
        )
        return ok(overview)
