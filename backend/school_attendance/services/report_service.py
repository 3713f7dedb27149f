"""Analytics for the main admin dashboard."""
from sqlalchemy import func

from school_attendance import db
from school_attendance.models import AttendanceRecord, Event, Role, School, Student, User
from school_attendance.services.scope_service import ScopeResolver


class ReportService:

    @staticmethod
    def analytics(identity) -> dict:
        """System-wide totals and attendance per school."""
        ScopeResolver.ensure_role(identity, (Role.MAIN_ADMIN,), 'Main admin access required')

        role_counts = dict(
            db.session.query(User.role, func.count(User.id)).group_by(User.role).all()
        )
        school_admins = [
            {
                'id': admin.id,
                'email': admin.email,
                'school': admin.school.name if admin.school else None
            }
            for admin in User.query.filter_by(role=Role.SCHOOL_ADMIN).order_by(User.id).all()
        ]

        per_school = (
            db.session.query(School.name, func.count(AttendanceRecord.id))
            .join(Student, Student.school_id == School.id)
            .join(AttendanceRecord, AttendanceRecord.student_id == Student.id)
            .group_by(School.id, School.name)
            .order_by(School.name)
            .all()
        )

        return {
            'total_users': sum(role_counts.values()),
            'users_by_role': {
                'main_admins': role_counts.get(Role.MAIN_ADMIN, 0),
                'school_admins': school_admins,
                'teachers': role_counts.get(Role.TEACHER, 0),
                'parents': role_counts.get(Role.PARENT, 0),
                'students': role_counts.get(Role.STUDENT, 0)
            },
            'total_schools': School.query.count(),
            'total_students': Student.query.count(),
            'total_events': Event.query.count(),
            'active_events': Event.query.filter(Event.is_active.is_(True)).count(),
            'total_attendance': AttendanceRecord.query.count(),
            'attendance_by_school': [
                {'school': name, 'attendance_count': count} for name, count in per_school
            ]
        }
