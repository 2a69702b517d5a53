"""Local viewer for the reconciliation reports.

Each report is shown as a table that can be sorted by clicking a column
header and filtered with a free-text box.
"""

from flask import Flask, jsonify, render_template_string, request

from adwsus_recon.handler import handler
from adwsus_recon.logger_config import logger

INDEX_TEMPLATE = """<!doctype html>
<title>AD / WSUS reconciliation</title>
<h1>AD / WSUS reconciliation</h1>
<ul>
{% for name, title, count in reports %}
  <li><a href="{{ url_for('report_page', name=name) }}">{{ title }}</a> ({{ count }})</li>
{% endfor %}
</ul>
"""

REPORT_TEMPLATE = """<!doctype html>
<title>{{ title }}</title>
<h1>{{ title }}</h1>
<p><a href="{{ url_for('index') }}">All reports</a></p>
<form method="get">
  <input type="hidden" name="sort" value="{{ sort or '' }}">
  <input type="hidden" name="desc" value="{{ '1' if desc else '' }}">
  <input type="search" name="q" value="{{ q }}" placeholder="Filter">
  <button type="submit">Filter</button>
</form>
<p>{{ rows|length }} of {{ total }} rows</p>
<table border="1" cellpadding="4">
  <tr>
  {% for column in columns %}
    <th><a href="{{ url_for('report_page', name=name, sort=column,
                   desc='1' if sort == column and not desc else '', q=q) }}">{{ column }}</a></th>
  {% endfor %}
  </tr>
  {% for row in rows %}
  <tr>{% for value in row %}<td>{{ '' if value is none else value }}</td>{% endfor %}</tr>
  {% endfor %}
</table>
"""


def apply_view(frame, sort=None, desc=False, q=None):
    """Filter rows containing ``q`` in any column, then sort by ``sort``."""
    if q and not frame.empty:
        text = frame.astype(str)
        mask = text.apply(
            lambda col: col.str.contains(q, case=False, regex=False)
        ).any(axis=1)
        frame = frame[mask]
    if sort and sort in frame.columns:
        frame = frame.sort_values(sort, ascending=not desc, kind="mergesort")
    return frame


def _view_args():
    return {
        "sort": request.args.get("sort") or None,
        "desc": request.args.get("desc") in ("1", "true"),
        "q": request.args.get("q", "").strip(),
    }


def create_app(reports):
    """``reports`` maps a URL name to ``(title, DataFrame)``."""
    app = Flask(__name__)

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Resource not found"}), 404

    @app.route("/")
    def index():
        listing = [(name, title, len(frame)) for name, (title, frame) in reports.items()]
        return render_template_string(INDEX_TEMPLATE, reports=listing)

    @app.route("/report/<name>")
    def report_page(name):
        if name not in reports:
            return not_found(None)
        title, frame = reports[name]
        args = _view_args()
        view = apply_view(frame, **args)
        view = view.astype(object).where(view.notna(), None)
        return render_template_string(
            REPORT_TEMPLATE,
            name=name,
            title=title,
            columns=list(frame.columns),
            rows=view.values.tolist(),
            total=len(frame),
            **args,
        )

    @app.route("/api/report/<name>")
    def report_api(name):
        if name not in reports:
            return not_found(None)
        title, frame = reports[name]
        return handler(apply_view(frame, **_view_args()), title, name)

    return app


def show_reports(reports, host="127.0.0.1", port=5000):
    logger.info("Starting report viewer on http://%s:%d", host, port)
    print(f"Report viewer running on http://{host}:{port} (Ctrl+C to stop)")
    create_app(reports).run(host=host, port=port, debug=False)
