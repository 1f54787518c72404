from __future__ import annotations

import logging
from dataclasses import replace

from flask import Flask, jsonify

from ..common.http import json_body, json_endpoint
from ..common.validators import optional_int, require_int
from ..container import Container
from ..core.enums import Capability
from .context import clear_context, current_context, store_context
from .policy import current_capabilities

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _me():
        ctx = current_context()
        caps = current_capabilities(container.access_policy)
        return {
            "authenticated": not ctx.is_anonymous,
            **ctx.to_dict(),
            "capabilities": sorted(c.value for c in caps.granted),
        }

    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    @json_endpoint
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
        store_context(container.auth_service.user_context(user))
        logger.info("User %s logged in", user.user_id)
        return jsonify(_me())

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    @json_endpoint
    def logout():
        clear_context()
        return jsonify({"success": True})

    @app.route("/api/auth/manager-login", methods=["POST"], endpoint="api_manager_login")
    @json_endpoint
    def manager_login():
        data = json_body()
        ctx = container.auth_service.enter_manager_mode(
            data.get("passkey", ""),
            team_id=optional_int(data.get("team_id"), "team_id"),
        )
        store_context(ctx)
        logger.info("Manager mode entered")
        return jsonify(_me())

    @app.route("/api/auth/pc-login", methods=["POST"], endpoint="api_pc_login")
    @json_endpoint
    def pc_login():
        data = json_body()
        ctx = container.auth_service.enter_pc_mode(data.get("passkey", ""), data.get("pc_name", ""))
        store_context(ctx)
        logger.info("PC mode entered for %s", ctx.pc_name)
        return jsonify(_me())

    @app.route("/api/auth/select-team", methods=["POST"], endpoint="api_select_team")
    @json_endpoint
    def select_team():
        caps = current_capabilities(container.access_policy)
        caps.require(Capability.ANY_TEAM)
        team_id = require_int(json_body().get("team_id"), "team_id")
        store_context(replace(current_context(), selected_team_id=team_id))
        return jsonify(_me())

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_me")
    @json_endpoint
    def me():
        return jsonify(_me())
