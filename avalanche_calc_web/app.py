import logging
import os

from flask import Flask, Response, jsonify, request

from avalanche_calc.data_models import DEFAULT_MONTHS_LIMIT
from avalanche_calc.engine import simulate
from avalanche_calc.errors import ValidationError
from avalanche_calc.export import CSV_FILENAME, result_to_dict, schedule_to_csv
from avalanche_calc.inputs import build_input_from_payload
from avalanche_calc.utils import first_of_month, parse_year_month

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["DEFAULT_MONTHS_LIMIT"] = int(
    os.environ.get("AVALANCHE_DEFAULT_MONTHS_LIMIT", DEFAULT_MONTHS_LIMIT)
)
app.config["LOG_LEVEL"] = os.environ.get("AVALANCHE_LOG_LEVEL", "INFO").upper()


def _error_response(kind: str, message: str, status: int = 400):
    return jsonify({"error": {"kind": kind, "message": message}}), status


def _run_simulation():
    """Simulate the JSON body of the current request.

    The simulation starts in the current calendar month unless the payload
    carries a ``start_date`` (YYYY-MM), which lets clients reproduce a run.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValueError("Request body must be a JSON object")
    start = first_of_month()
    if isinstance(payload, dict) and payload.get("start_date"):
        start = parse_year_month(str(payload["start_date"]))
    sim_input = build_input_from_payload(
        payload, start, default_months_limit=app.config["DEFAULT_MONTHS_LIMIT"]
    )
    return simulate(sim_input, start=start)


@app.errorhandler(ValidationError)
def handle_validation_error(exc: ValidationError):
    return _error_response(exc.kind, exc.message)


@app.errorhandler(ValueError)
def handle_malformed_input(exc: ValueError):
    logger.info("Malformed simulation request: %s", exc)
    return _error_response("MalformedInput", str(exc))


@app.get("/api/health")
def health():
    return jsonify({"status": "ok"})


@app.post("/api/simulate")
def simulate_route():
    result = _run_simulation()
    return jsonify(result_to_dict(result))


@app.post("/api/schedule.csv")
def schedule_csv():
    result = _run_simulation()
    return Response(
        schedule_to_csv(result.schedule),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={CSV_FILENAME}"},
    )


if __name__ == "__main__":
    logging.basicConfig(level=app.config["LOG_LEVEL"])
    print("Starting Avalanche Calculator web app...")
    app.run(debug=False)
