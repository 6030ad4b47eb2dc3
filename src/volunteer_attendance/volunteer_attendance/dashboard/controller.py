from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_date_bound
from ..container import Container
from ..core.constants import DEFAULT_ACTIVITY_LIMIT, MAX_ACTIVITY_LIMIT
from ..core.exceptions import ValidationError
from ..users.guards import login_required


def _parse_limit(value) -> int:
    if value is None or value == "":
        return DEFAULT_ACTIVITY_LIMIT
    try:
        limit = int(value)
    except ValueError:
        raise ValidationError("limit must be a positive integer")
    if limit < 1:
        raise ValidationError("limit must be a positive integer")
    return min(limit, MAX_ACTIVITY_LIMIT)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard/stats", methods=["GET"], endpoint="dashboard_stats")
    @login_required
    def dashboard_stats():
        stats = container.dashboard_service.compute_stats(
            parse_date_bound(request.args.get("startDate")),
            parse_date_bound(request.args.get("endDate"), end_of_day=True),
        )
        return jsonify(stats.to_dict())

    @app.route("/api/dashboard/activity", methods=["GET"], endpoint="dashboard_activity")
    @login_required
    def dashboard_activity():
        limit = _parse_limit(request.args.get("limit"))
        return jsonify([a.to_dict() for a in container.dashboard_service.list_recent_activity(limit)])
