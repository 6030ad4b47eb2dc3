from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file, session

from ..common.validators import require_enum
from ..container import Container
from ..core.enums import Role, VolunteerStatus
from ..core.exceptions import ValidationError
from ..users.guards import login_required, roles_required
from .model import VolunteerChanges

_EDITORS = (Role.ADMIN, Role.MANAGER)


def _changes_from(data: dict) -> VolunteerChanges:
    status = data.get("status")
    return VolunteerChanges(
        name=data.get("name"),
        email=data.get("email"),
        phone=data.get("phone"),
        address=data.get("address"),
        skills=data.get("skills"),
        availability=data.get("availability"),
        status=require_enum(VolunteerStatus, status, "Status") if status else None,
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/volunteers", methods=["GET"], endpoint="volunteers_list")
    @login_required
    def volunteers_list():
        return jsonify([v.to_dict() for v in container.volunteer_service.list_volunteers()])

    @app.route("/api/volunteers", methods=["POST"], endpoint="volunteers_create")
    @roles_required(*_EDITORS)
    def volunteers_create():
        data = request.get_json(silent=True) or {}
        volunteer = container.volunteer_service.create_volunteer(
            name=data.get("name", ""),
            email=data.get("email", ""),
            phone=data.get("phone"),
            address=data.get("address"),
            skills=data.get("skills"),
            availability=data.get("availability"),
            status=data.get("status"),
            acting_user_id=session.get("user_id"),
        )
        return jsonify(volunteer.to_dict()), 201

    @app.route("/api/volunteers/import", methods=["POST"], endpoint="volunteers_import")
    @roles_required(*_EDITORS)
    def volunteers_import():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ValidationError("File is required")
        result = container.volunteer_service.import_volunteers(
            io.BytesIO(upload.read()),
            upload.filename,
            acting_user_id=session.get("user_id"),
        )
        return jsonify(result.to_dict())

    @app.route("/api/volunteers/<volunteer_id>", methods=["GET"], endpoint="volunteers_get")
    @login_required
    def volunteers_get(volunteer_id: str):
        return jsonify(container.volunteer_service.get_volunteer_detail(volunteer_id))

    @app.route("/api/volunteers/<volunteer_id>", methods=["PUT"], endpoint="volunteers_update")
    @roles_required(*_EDITORS)
    def volunteers_update(volunteer_id: str):
        data = request.get_json(silent=True) or {}
        volunteer = container.volunteer_service.update_volunteer(
            volunteer_id,
            _changes_from(data),
            acting_user_id=session.get("user_id"),
        )
        return jsonify(volunteer.to_dict())

    @app.route("/api/volunteers/<volunteer_id>", methods=["DELETE"], endpoint="volunteers_delete")
    @roles_required(*_EDITORS)
    def volunteers_delete(volunteer_id: str):
        container.volunteer_service.delete_volunteer(volunteer_id)
        return jsonify({"message": "Volunteer deleted successfully"})

    @app.route("/api/volunteers/<volunteer_id>/qr", methods=["GET"], endpoint="volunteers_qr")
    @login_required
    def volunteers_qr(volunteer_id: str):
        qr = container.volunteer_service.generate_qr(volunteer_id)
        return jsonify({"message": "QR code generated successfully", **qr})

    @app.route("/api/volunteers/<volunteer_id>/qr.png", methods=["GET"], endpoint="volunteers_qr_png")
    @login_required
    def volunteers_qr_png(volunteer_id: str):
        png = container.volunteer_service.qr_png(volunteer_id)
        return send_file(
            io.BytesIO(png),
            mimetype="image/png",
            as_attachment=False,
            download_name=f"volunteer_{volunteer_id}.png",
        )
