"""Example: drive the service layer directly (no Flask).

Controllers are thin; the ledger and dashboard logic lives in the services.
"""

import importlib
import json

from config import get_settings_module

from volunteer_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    try:
        volunteers = container.volunteer_service.list_volunteers()
        if not volunteers:
            print("No volunteers yet; run scripts/seed_db.py first.")
            return

        badge = container.volunteer_service.generate_qr(volunteers[0].volunteer_id)
        print("badge payload:", badge["qrData"])

        # first scan checks in, the second checks out
        for _ in range(2):
            result = container.attendance_ledger.record_scan(badge["qrData"], None)
            print(json.dumps(result.to_dict(), indent=2))

        print(json.dumps(container.dashboard_service.compute_stats().to_dict(), indent=2))
        for a in container.dashboard_service.list_recent_activity(5):
            print(a.to_dict())
    finally:
        container.close()


if __name__ == "__main__":
    main()
