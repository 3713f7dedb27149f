"""Reports API."""
from flask import Blueprint
from school_attendance.services.report_service import ReportService
from school_attendance.utils.decorators import main_admin_required
from school_attendance.utils.helpers import success_response

reports_bp = Blueprint('reports', __name__)


@reports_bp.route('/analytics', methods=['GET'])
@main_admin_required
def analytics(identity):
    """System-wide totals for the main admin dashboard."""
    return success_response(data=ReportService.analytics(identity))
