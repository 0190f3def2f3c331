from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_identity
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/overtime/alerts", methods=["GET"], endpoint="overtime_alerts")
    def overtime_alerts():
        _, role = current_identity()
        alerts = container.overtime_alert_service.get_overtime_alerts(current_role=role)
        return jsonify({"data": [a.to_dict() for a in alerts]})
