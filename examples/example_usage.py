"""Using the service layer directly, without Flask.

Controllers stay thin; the behaviour lives in the services the container builds.
"""

import importlib

from config import get_settings_module

from src.leave_portal.leave_portal.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, local_store_path=settings.LOCAL_STORE_PATH or None)

    user = container.auth_service.sign_in("EMP001", "Employee@1234")
    with container.attendance_tracker(user.id) as tracker:
        print(tracker.state.value, [r.to_dict() for r in tracker.history[:5]])

    calendar = container.calendar_service(user.id)
    for cell in calendar.month_view(2025, 1, employee_id=user.id)[:7]:
        print(cell["date"], cell["status"])


if __name__ == "__main__":
    main()
