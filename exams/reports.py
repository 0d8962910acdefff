from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from .reporting import percentage


def render_results_pdf(report, stream):
    """Draw the results sheet of one exam onto ``stream`` (a file or HttpResponse)."""
    exam = report.exam
    summary = report.summary

    p = canvas.Canvas(stream, pagesize=A4)
    width, height = A4
    y = height - 1 * inch

    p.setFont("Helvetica-Bold", 14)
    p.drawString(1 * inch, y, f"EXAM RESULTS: {exam.title}")
    p.line(1 * inch, y - 5, width - 1 * inch, y - 5)
    y -= 0.4 * inch

    p.setFont("Helvetica", 11)
    p.drawString(1 * inch, y, f"Start: {exam.start_time:%Y-%m-%d %H:%M} ({exam.duration_minutes} min)")
    y -= 0.25 * inch
    p.drawString(1 * inch, y, f"Questions: {report.total_questions}    Submissions: {summary.count}")
    y -= 0.25 * inch
    p.drawString(1 * inch, y, f"Average: {summary.average}%    Highest: {summary.maximum}%")
    y -= 0.25 * inch
    if summary.top_result:
        p.drawString(1 * inch, y, f"Top scorer: {display_name(summary.top_result.student)}")
        y -= 0.25 * inch
    y -= 0.2 * inch

    p.setFont("Helvetica-Bold", 11)
    p.drawString(1 * inch, y, "Student")
    p.drawString(3.5 * inch, y, "Class")
    p.drawString(4.7 * inch, y, "Correct")
    p.drawString(5.7 * inch, y, "Score")
    y -= 0.25 * inch

    p.setFont("Helvetica", 10)
    for result in report.results:
        if y < 1 * inch:
            p.showPage()
            p.setFont("Helvetica", 10)
            y = height - 1 * inch
        profile = getattr(result.student, "userprofile", None)
        p.drawString(1 * inch, y, display_name(result.student)[:35])
        p.drawString(3.5 * inch, y, (profile.student_class if profile else "") or "-")
        p.drawString(4.7 * inch, y, f"{result.score}/{report.total_questions}")
        p.drawString(5.7 * inch, y, f"{percentage(result.score, report.total_questions)}%")
        y -= 0.22 * inch

    p.showPage()
    p.save()
    return stream


def display_name(user):
    full_name = f"{user.first_name} {user.last_name}".strip()
    return full_name or user.username
