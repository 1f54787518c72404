from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.policy import current_capabilities
from ..common.http import json_body, json_endpoint
from ..common.validators import parse_bool_flag
from ..container import Container
from ..core.enums import Capability
from ..core.exceptions import NotFoundError


def register(app: Flask, container: Container) -> None:
    def _caps():
        return current_capabilities(container.access_policy)

    # GET /api/notifications?pc_name=Milda&is_read=false&action=created&from=2026-01-01&to=2026-02-28&search=site&page=1
    @app.route("/api/notifications", methods=["GET"], endpoint="api_notifications")
    @json_endpoint
    def list_notifications():
        args = request.args
        page = container.notification_service.list_for_pc(
            _caps(),
            pc_name=args.get("pc_name"),
            is_read=parse_bool_flag(args.get("is_read")),
            action=args.get("action"),
            date_from=args.get("from"),
            date_to=args.get("to"),
            search=args.get("search"),
            page=args.get("page"),
            page_size=args.get("page_size"),
        )
        return jsonify(page.to_dict())

    # Body: {pc_name, id?}; without id every notification of the PC is marked read.
    @app.route("/api/notifications/mark-read", methods=["POST"], endpoint="api_notifications_mark_read")
    @json_endpoint
    def mark_read():
        data = json_body()
        updated = container.notification_service.mark_read(
            _caps(),
            pc_name=data.get("pc_name"),
            notification_id=data.get("id"),
        )
        return jsonify({"success": True, "updated": updated})

    @app.route("/api/debug/notifications", methods=["GET"], endpoint="api_debug_notifications")
    @json_endpoint
    def debug_notifications():
        if not app.config.get("DEBUG"):
            raise NotFoundError("Not found")
        _caps().require(Capability.READ_ALL_NOTIFICATIONS)
        results = container.notification_service.diagnose(request.args.get("pc_name"))
        results["email_backend"] = type(container.email_sender).__name__
        results["recent_dispatches"] = [a.to_dict() for a in container.outbox.attempts()[-20:]]
        return jsonify(results)
