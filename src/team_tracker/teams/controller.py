from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.policy import current_capabilities
from ..common.http import json_body, json_endpoint
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _caps():
        return current_capabilities(container.access_policy)

    @app.route("/api/pcs", methods=["GET"], endpoint="api_pcs")
    @json_endpoint
    def list_pcs():
        pcs = container.team_service.list_pcs(_caps())
        return jsonify({"pcs": [{"id": p.pc_id, "name": p.name, "email": p.email} for p in pcs]})

    @app.route("/api/teams", methods=["GET"], endpoint="api_teams")
    @json_endpoint
    def list_teams():
        teams = container.team_service.list_teams(_caps())
        return jsonify({"teams": [{"id": t.team_id, "name": t.name} for t in teams]})

    @app.route("/api/team-members", methods=["GET"], endpoint="api_team_members")
    @json_endpoint
    def list_members():
        members = container.team_service.list_members(_caps(), team_id=request.args.get("team_id", type=int))
        return jsonify(
            {
                "members": [
                    {
                        "id": m.member_id,
                        "team_id": m.team_id,
                        "name": m.name,
                        "hubstaff_name": m.hubstaff_name,
                        "department": m.department,
                        "display_order": m.display_order,
                    }
                    for m in members
                ]
            }
        )

    @app.route("/api/team-members/reorder", methods=["PUT"], endpoint="api_team_members_reorder")
    @json_endpoint
    def reorder_members():
        data = json_body()
        updated = container.team_service.reorder_members(_caps(), data.get("members"))
        return jsonify({"success": True, "updated": updated})
