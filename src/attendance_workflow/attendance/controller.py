from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import month_bounds, now_local
from ..common.http import current_identity, json_body, page_args
from ..container import Container


def _range_args():
    # Current month unless both bounds are given.
    first, last = month_bounds(now_local().date())
    return request.args.get("start_date") or first, request.args.get("end_date") or last


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    def clock_in():
        user_id, _ = current_identity()
        record = service.clock_in(user_id, note=json_body().get("note"))
        return jsonify(record.to_dict()), 201

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    def clock_out():
        user_id, _ = current_identity()
        record = service.clock_out(user_id, note=json_body().get("note"))
        return jsonify(record.to_dict())

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    def today():
        user_id, _ = current_identity()
        return jsonify(service.get_today_status(user_id).to_dict())

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    def list_attendance():
        user_id, _ = current_identity()
        start, end = _range_args()
        page, page_size = page_args()
        result = service.get_by_user_and_date_range(user_id, start, end, page=page, page_size=page_size)
        return jsonify(result.to_dict(lambda r: r.to_dict()))

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    def summary():
        user_id, _ = current_identity()
        start, end = _range_args()
        return jsonify(service.get_summary(user_id, start, end).to_dict())
