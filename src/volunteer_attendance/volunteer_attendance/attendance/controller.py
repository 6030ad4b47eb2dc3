from __future__ import annotations

import csv
import io

import pandas as pd
from flask import Flask, jsonify, request, send_file, session

from ..common.datetime_utils import to_iso
from ..container import Container
from ..core.exceptions import ValidationError
from ..users.guards import login_required
from .payload import decode_qr_image

_EXPORT_FIELDS = [
    "id",
    "volunteer_id",
    "volunteer_name",
    "check_in_time",
    "check_out_time",
    "duration_minutes",
    "status",
]


def _export_rows(records) -> list[dict]:
    return [
        {
            "id": r.attendance_id,
            "volunteer_id": r.volunteer_id,
            "volunteer_name": r.volunteer_name or "",
            "check_in_time": to_iso(r.check_in_time),
            "check_out_time": to_iso(r.check_out_time) or "",
            "duration_minutes": "" if r.duration_minutes is None else r.duration_minutes,
            "status": r.status.value,
        }
        for r in records
    ]


def register(app: Flask, container: Container) -> None:
    def _filters() -> dict:
        return dict(
            volunteer_id=request.args.get("volunteerId"),
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
        )

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_scan")
    @login_required
    def attendance_scan():
        data = request.get_json(silent=True) or {}
        result = container.attendance_ledger.record_scan(data.get("qrData"), session.get("user_id"))
        return jsonify(result.to_dict())

    @app.route("/api/attendance/scan-image", methods=["POST"], endpoint="attendance_scan_image")
    @login_required
    def attendance_scan_image():
        upload = request.files.get("image")
        if upload is None or not upload.filename:
            raise ValidationError("Image is required")
        qr_data = decode_qr_image(io.BytesIO(upload.read()))
        result = container.attendance_ledger.record_scan(qr_data, session.get("user_id"))
        return jsonify(result.to_dict())

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @login_required
    def attendance_list():
        records = container.attendance_ledger.list_attendance(**_filters())
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/attendance/export.csv", methods=["GET"], endpoint="attendance_export_csv")
    @login_required
    def attendance_export_csv():
        records = container.attendance_ledger.list_attendance(**_filters())

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=_EXPORT_FIELDS)
        writer.writeheader()
        for row in _export_rows(records):
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=attendance.csv"},
        )

    @app.route("/api/attendance/export.xlsx", methods=["GET"], endpoint="attendance_export_xlsx")
    @login_required
    def attendance_export_xlsx():
        records = container.attendance_ledger.list_attendance(**_filters())
        df = pd.DataFrame(_export_rows(records), columns=_EXPORT_FIELDS)

        out = io.BytesIO()
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Attendance")
        out.seek(0)
        return send_file(
            out,
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            as_attachment=True,
            download_name="attendance.xlsx",
        )
