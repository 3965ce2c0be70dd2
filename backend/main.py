from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request

from parkboard.config import Settings, settings as default_settings
from parkboard.errors import StorageError, ValidationError
from parkboard.services import AvailabilityIndex, ingest_report
from parkboard.store import ReportStore, build_store


def create_app(settings: Optional[Settings] = None, store: Optional[ReportStore] = None) -> Flask:
    settings = settings or default_settings
    store = store if store is not None else build_store(settings)
    index = AvailabilityIndex(
        store,
        unit=settings.distance_unit,
        default_radius=settings.default_radius,
        limit=settings.result_limit,
    )

    app = Flask(__name__)
    app.config["PARKBOARD_STORE"] = store
    app.config["PARKBOARD_INDEX"] = index

    @app.after_request
    def add_cors_headers(resp):
        resp.headers["Access-Control-Allow-Origin"] = "*"
        resp.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return resp

    @app.errorhandler(ValidationError)
    def validation_failed(e: ValidationError):
        return jsonify({"message": e.message, "field": e.field}), 400

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "backend": store.name})

    @app.route("/api/parking/report", methods=["POST", "OPTIONS"])
    def report_parking():
        if request.method == "OPTIONS":
            return ("", 204)

        payload = request.get_json(silent=True)
        try:
            report = ingest_report(store, payload)
        except StorageError:
            return jsonify({"message": "Failed to report parking spot"}), 500

        return (
            jsonify(
                {
                    "message": "Parking spot reported successfully",
                    "report": report.model_dump(mode="json"),
                }
            ),
            201,
        )

    @app.route("/api/parking/search")
    def search_parking():
        try:
            result = index.search(
                request.args.get("lat"),
                request.args.get("lng"),
                request.args.get("radius"),
            )
        except StorageError:
            return jsonify({"message": "Failed to search parking spots"}), 500
        return jsonify(result.model_dump(mode="json"))

    return app


app = create_app()


def run(settings: Optional[Settings] = None) -> None:
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s: %(name)s — %(message)s",
    )
    app.run(host=settings.host, port=settings.port, debug=settings.debug)


if __name__ == "__main__":
    run()
