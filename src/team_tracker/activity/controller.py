from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.policy import current_capabilities
from ..common.csv_export import csv_response
from ..common.http import json_endpoint
from ..container import Container
from ..core.exceptions import ValidationError
from .service import HR_CSV_HEADERS, hr_daily_csv_rows, weighted_activity


def register(app: Flask, container: Container) -> None:
    def _caps():
        return current_capabilities(container.access_policy)

    # GET /api/hubstaff?date=2026-01-05[&userId=]
    # GET /api/hubstaff?startDate=2026-01-01&endDate=2026-01-31[&userId=&projectId=&team=]
    @app.route("/api/hubstaff", methods=["GET"], endpoint="api_hubstaff")
    @json_endpoint
    def activity():
        args = request.args
        service = container.activity_service
        if args.get("startDate") or args.get("endDate"):
            if not (args.get("startDate") and args.get("endDate")):
                raise ValidationError("startDate and endDate are both required")
            data = service.custom_range(
                _caps(),
                args["startDate"],
                args["endDate"],
                user_id=args.get("userId"),
                project_id=args.get("projectId"),
                team=args.get("team"),
            )
        else:
            day = args.get("date") or container.clock().isoformat()
            data = service.daily(_caps(), day, user_id=args.get("userId"))

        body = data.to_dict()
        body["weightedActivity"] = weighted_activity(data.activities)
        return jsonify(body)

    @app.route("/api/hubstaff/monthly", methods=["GET"], endpoint="api_hubstaff_monthly")
    @json_endpoint
    def monthly():
        today = container.clock()
        data = container.activity_service.monthly(
            _caps(),
            request.args.get("month") or today.month,
            request.args.get("year") or today.year,
            user_id=request.args.get("userId"),
        )
        return jsonify(data.to_dict())

    @app.route("/api/hubstaff/hr-daily", methods=["GET"], endpoint="api_hubstaff_hr_daily")
    @json_endpoint
    def hr_daily():
        day = request.args.get("date") or container.clock().isoformat()
        return jsonify(container.activity_service.hr_daily(_caps(), day).to_dict())

    @app.route("/api/hubstaff/hr-daily.csv", methods=["GET"], endpoint="api_hubstaff_hr_daily_csv")
    @json_endpoint
    def hr_daily_csv():
        day = request.args.get("date") or container.clock().isoformat()
        report = container.activity_service.hr_daily(_caps(), day)
        return csv_response(
            hr_daily_csv_rows(report),
            fieldnames=HR_CSV_HEADERS,
            filename=f"hr_daily_report_{report.day.isoformat()}.csv",
        )

    @app.route("/api/hubstaff/users", methods=["GET"], endpoint="api_hubstaff_users")
    @json_endpoint
    def users():
        return jsonify({"users": container.activity_service.users(_caps())})

    @app.route("/api/hubstaff/projects", methods=["GET"], endpoint="api_hubstaff_projects")
    @json_endpoint
    def projects():
        return jsonify({"projects": container.activity_service.projects(_caps())})

    @app.route("/api/hubstaff/teams", methods=["GET"], endpoint="api_hubstaff_teams")
    @json_endpoint
    def teams():
        return jsonify({"teams": container.activity_service.teams(_caps())})
