from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_identity, json_body, page_args
from ..container import Container


def _register_approval_routes(app: Flask, prefix: str, name: str, service) -> None:
    """The listing and decision routes are identical for every request kind."""

    def my_requests():
        user_id, _ = current_identity()
        page, page_size = page_args()
        result = service.get_by_user(user_id, page=page, page_size=page_size)
        return jsonify(result.to_dict(lambda r: r.to_dict()))

    def pending_requests():
        _, role = current_identity()
        page, page_size = page_args()
        result = service.get_pending(current_role=role, page=page, page_size=page_size)
        return jsonify(result.to_dict(lambda r: r.to_dict()))

    def approve(request_id: int):
        approver_id, role = current_identity()
        body = json_body()
        decided = service.approve(
            current_role=role,
            approver_id=approver_id,
            request_id=request_id,
            status=body.get("status"),
            rejected_reason=body.get("rejected_reason"),
        )
        return jsonify(decided.to_dict())

    app.add_url_rule(f"{prefix}/my", endpoint=f"my_{name}", view_func=my_requests, methods=["GET"])
    app.add_url_rule(f"{prefix}/pending", endpoint=f"pending_{name}", view_func=pending_requests, methods=["GET"])
    app.add_url_rule(
        f"{prefix}/<int:request_id>/approve", endpoint=f"approve_{name}", view_func=approve, methods=["PUT"]
    )


def register(app: Flask, container: Container) -> None:
    leaves = container.leave_request_service
    overtime = container.overtime_request_service
    corrections = container.correction_service

    @app.route("/api/leaves", methods=["POST"], endpoint="create_leave")
    def create_leave():
        user_id, _ = current_identity()
        body = json_body()
        created = leaves.create(
            user_id=user_id,
            leave_type=body.get("leave_type"),
            start_date=body.get("start_date"),
            end_date=body.get("end_date"),
            reason=body.get("reason"),
        )
        return jsonify(created.to_dict()), 201

    @app.route("/api/overtime", methods=["POST"], endpoint="create_overtime")
    def create_overtime():
        user_id, _ = current_identity()
        body = json_body()
        created = overtime.create(
            user_id=user_id,
            work_date=body.get("date"),
            planned_minutes=body.get("planned_minutes"),
            actual_minutes=body.get("actual_minutes"),
            reason=body.get("reason"),
        )
        return jsonify(created.to_dict()), 201

    @app.route("/api/corrections", methods=["POST"], endpoint="create_correction")
    def create_correction():
        user_id, _ = current_identity()
        body = json_body()
        created = corrections.create(
            user_id=user_id,
            work_date=body.get("date"),
            corrected_clock_in=body.get("corrected_clock_in"),
            corrected_clock_out=body.get("corrected_clock_out"),
            reason=body.get("reason"),
        )
        return jsonify(created.to_dict()), 201

    _register_approval_routes(app, "/api/leaves", "leaves", leaves)
    _register_approval_routes(app, "/api/overtime", "overtime", overtime)
    _register_approval_routes(app, "/api/corrections", "corrections", corrections)
