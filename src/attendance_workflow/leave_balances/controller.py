from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_identity, json_body
from ..container import Container
from ..core.enums import APPROVER_ROLES
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    service = container.leave_balance_service

    @app.route("/api/leave-balances/<int:user_id>", methods=["GET"], endpoint="leave_balances")
    def get_balances(user_id: int):
        caller_id, role = current_identity()
        if caller_id != user_id and role not in APPROVER_ROLES:
            raise AuthorizationError("You can only view your own leave balances")
        balances = service.get_by_user(user_id, request.args.get("fiscal_year"))
        return jsonify({"data": [b.to_dict() for b in balances]})

    @app.route("/api/leave-balances/<int:user_id>/initialize", methods=["POST"], endpoint="initialize_leave_balances")
    def initialize(user_id: int):
        _, role = current_identity()
        balances = service.initialize(
            current_role=role,
            user_id=user_id,
            fiscal_year=json_body().get("fiscal_year") or request.args.get("fiscal_year"),
        )
        return jsonify({"data": [b.to_dict() for b in balances]}), 201

    @app.route("/api/leave-balances/<int:user_id>/<leave_type>", methods=["PUT"], endpoint="set_leave_balance")
    def set_balance(user_id: int, leave_type: str):
        _, role = current_identity()
        body = json_body()
        balance = service.set_balance(
            current_role=role,
            user_id=user_id,
            fiscal_year=body.get("fiscal_year") or request.args.get("fiscal_year"),
            leave_type=leave_type,
            total_days=body.get("total_days"),
            used_days=body.get("used_days"),
            carried_over=body.get("carried_over"),
        )
        return jsonify(balance.to_dict())
