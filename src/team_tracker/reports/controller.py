from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.policy import current_capabilities
from ..common.csv_export import csv_response
from ..common.datetime_utils import parse_optional_date
from ..common.http import json_endpoint
from ..container import Container
from .service import (
    QA_REPORT_CSV_HEADERS,
    TRACKER_CSV_HEADERS,
    ReportFilters,
    qa_report_csv_rows,
    tracker_csv_rows,
)


def register(app: Flask, container: Container) -> None:
    def _caps():
        return current_capabilities(container.access_policy)

    def _filters() -> ReportFilters:
        args = request.args
        return ReportFilters(
            project=args.get("project"),
            assignee=args.get("assignee"),
            start=parse_optional_date(args.get("start")),
            end=parse_optional_date(args.get("end")),
        )

    def _tasks():
        return container.task_service.all_tasks(_caps(), team_id=request.args.get("team_id"))

    @app.route("/api/reports/summary", methods=["GET"], endpoint="api_reports_summary")
    @json_endpoint
    def summary():
        tasks = _tasks()
        report = container.task_report_service.summary(tasks, _filters(), container.clock())
        return jsonify(report.to_dict())

    @app.route("/api/reports/budget", methods=["GET"], endpoint="api_reports_budget")
    @json_endpoint
    def budget():
        projects = [p for p in (request.args.get("projects") or "").split(",") if p.strip()]
        rows = container.budget_service.rollup(_tasks(), projects=projects or None)
        return jsonify({"projects": [r.to_dict() for r in rows]})

    @app.route("/api/reports/tasks.csv", methods=["GET"], endpoint="api_reports_tasks_csv")
    @json_endpoint
    def qa_report_csv():
        today = container.clock()
        tasks = container.task_report_service.filter(_tasks(), _filters())
        return csv_response(
            qa_report_csv_rows(tasks, today),
            fieldnames=QA_REPORT_CSV_HEADERS,
            filename=f"qa_report_{today.isoformat()}.csv",
        )

    @app.route("/api/reports/tracker.csv", methods=["GET"], endpoint="api_reports_tracker_csv")
    @json_endpoint
    def tracker_csv():
        today = container.clock()
        return csv_response(
            tracker_csv_rows(_tasks()),
            fieldnames=TRACKER_CSV_HEADERS,
            filename=f"tracker_export_{today.isoformat()}.csv",
        )
