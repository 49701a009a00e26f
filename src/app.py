# src/app.py
from flask import Flask, abort, jsonify

from cleaner import clean_trips, merge_trips
from db import get_cursor
from enricher import fetch_results
from loader import fetch_trips
from reports import REPORTS, build_reports

app = Flask(__name__)


def load_cleaned_trips():
    with get_cursor() as cur:
        trips = fetch_trips(cur)
        results = fetch_results(cur)

    cleaned, _ = clean_trips(merge_trips(trips, results))
    return cleaned


@app.route("/api/reports")
def api_reports():
    return jsonify(build_reports(load_cleaned_trips()))


@app.route("/api/reports/<name>")
def api_report(name):
    report = REPORTS.get(name)
    if report is None:
        abort(404)
    return jsonify(report(load_cleaned_trips()))


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5050, debug=True)
