from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.policy import current_capabilities
from ..common.http import json_body, json_endpoint
from ..container import Container
from .effort import effective_status
from .model import Task


def register(app: Flask, container: Container) -> None:
    def _caps():
        return current_capabilities(container.access_policy)

    def _task_json(task: Task) -> dict:
        data = task.to_dict()
        data["effective_status"] = effective_status(task, container.clock())
        return data

    @app.route("/api/tasks", methods=["GET"], endpoint="api_tasks_list")
    @json_endpoint
    def list_tasks():
        args = request.args
        statuses = [s.strip() for s in (args.get("statuses") or "").split(",") if s.strip()]
        page = container.task_service.list_tasks(
            _caps(),
            team_id=args.get("team_id"),
            search=args.get("search"),
            pc=args.get("pc"),
            status=args.get("status"),
            statuses=statuses,
            view=args.get("view"),
            page=args.get("page"),
            page_size=args.get("page_size"),
        )
        body = page.to_dict()
        body["tasks"] = [_task_json(t) for t in page.items]
        return jsonify(body)

    @app.route("/api/tasks/<task_id>", methods=["GET"], endpoint="api_tasks_get")
    @json_endpoint
    def get_task(task_id: str):
        task = container.task_service.get_task(_caps(), task_id)
        return jsonify({"task": _task_json(task)})

    @app.route("/api/tasks/create", methods=["POST"], endpoint="api_tasks_create")
    @json_endpoint
    def create_task():
        data = json_body(allow_list=True)
        if isinstance(data, list):
            tasks = container.task_service.create_tasks(_caps(), data)
            return jsonify({"tasks": [_task_json(t) for t in tasks]}), 201
        task = container.task_service.create_task(_caps(), data)
        return jsonify({"task": _task_json(task)}), 201

    @app.route("/api/tasks/update", methods=["PUT"], endpoint="api_tasks_update")
    @json_endpoint
    def update_task():
        data = json_body()
        task = container.task_service.update_task(_caps(), data.get("id"), data)
        return jsonify({"success": True, "task": _task_json(task)})

    @app.route("/api/tasks/delete", methods=["DELETE"], endpoint="api_tasks_delete")
    @json_endpoint
    def delete_task():
        container.task_service.delete_task(_caps(), request.args.get("id"))
        return jsonify({"success": True})
