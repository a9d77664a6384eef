# apps/domains/attendance/utils/excel.py
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from apps.domains.attendance.models import Attendance
from apps.domains.sessions.models import Session
from trainhub.adapters.db.django import repositories_attendance as attendance_repo


STATUS_LABEL_MAP = {
    Attendance.Status.PRESENT: "P",
    Attendance.Status.LATE: "L",
    Attendance.Status.ABSENT: "A",
    Attendance.Status.EXCUSED: "E",
}

STATUS_FILL_MAP = {
    Attendance.Status.PRESENT: "C6EFCE",
    Attendance.Status.ABSENT: "FFC7CE",
    Attendance.Status.LATE: "FFEB9C",
    Attendance.Status.EXCUSED: "BDD7EE",
}

FIXED_COLUMNS = 3


def build_attendance_excel(group):
    """
    Session x student matrix for one group.
    Cancelled sessions are left out; the last column is the student's rate.
    """
    sessions = list(
        Session.objects.filter(group=group)
        .exclude(status=Session.Status.CANCELLED)
        .order_by("scheduled_date", "start_time", "id")
    )
    students = list(group.students.all().order_by("name", "id"))

    attendance_map = {
        (a.student_id, a.session_id): a
        for a in attendance_repo.attendance_counted().filter(session__group=group)
    }

    wb = Workbook()
    ws = wb.active
    ws.title = "Attendance"

    header = ["Student", "Username", "Phone"]
    for s in sessions:
        header.append(f"#{s.session_number} ({s.scheduled_date})")
    header.append("Rate %")
    ws.append(header)

    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)

    for col in range(1, len(header) + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = header_font
        cell.alignment = center
        ws.column_dimensions[get_column_letter(col)].width = 16

    ws.freeze_panes = "D2"

    for st in students:
        row = [st.display_name, st.username, st.phone or ""]
        attended = total = 0
        for s in sessions:
            att = attendance_map.get((st.id, s.id))
            row.append(STATUS_LABEL_MAP.get(att.status, att.status) if att else "")
            if att:
                total += 1
                attended += 1 if att.attended else 0
        row.append(round(attended / total * 100) if total else 0)
        ws.append(row)
        r = ws.max_row

        for idx, s in enumerate(sessions, start=FIXED_COLUMNS + 1):
            att = attendance_map.get((st.id, s.id))
            if att and att.status in STATUS_FILL_MAP:
                ws.cell(row=r, column=idx).fill = PatternFill(
                    start_color=STATUS_FILL_MAP[att.status],
                    end_color=STATUS_FILL_MAP[att.status],
                    fill_type="solid",
                )
            ws.cell(row=r, column=idx).alignment = center

    filename = f"attendance_{group.name}_{group.id}.xlsx".replace(" ", "_")
    return wb, filename
