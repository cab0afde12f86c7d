"""Trendformer HTTP service: /trends, /rank, /generate-thread."""

import math
from datetime import datetime, timezone

from flask import Flask, jsonify, request
from pydantic import ValidationError

from . import ranking, thread
from .config import SERVICE_NAME, SERVICE_VERSION, mock_fallback_enabled, use_mock_trends
from .llm import MissingConfigError
from .log import get_logger
from .schemas import RankRequest, ThreadRequest, TrendsQuery, error_details
from .sinks import TelemetrySink, TrendStore
from .trends import TrendEngine


def _invalid(exc: ValidationError, message: str = "Invalid body"):
    return jsonify({"error": message, "details": error_details(exc)}), 400


def _json_body():
    """Parsed JSON object body, or None when the body is not a JSON object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def create_app(
    engine: TrendEngine | None = None,
    store: TrendStore | None = None,
    telemetry: TelemetrySink | None = None,
    rank_fn=None,
    thread_fn=None,
) -> Flask:
    """Build the Flask app. Every collaborator can be injected for tests."""
    app = Flask(SERVICE_NAME)
    engine = engine or TrendEngine()
    store = store or TrendStore()
    telemetry = telemetry or TelemetrySink()
    rank_fn = rank_fn or ranking.rank_trends
    thread_fn = thread_fn or thread.generate_thread
    logger = get_logger()

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    @app.route("/trends", methods=["GET"])
    def get_trends():
        try:
            query = TrendsQuery.from_args(request.args.to_dict())
        except ValidationError as e:
            return _invalid(e, "Invalid query")

        mock = use_mock_trends() if query.mock is None else query.mock
        save = True if query.save is None else query.save
        # minScore only means something on the HN path
        min_score = query.min_score if query.provider in ("all", "hn") else None

        result = engine.aggregate(
            query.niche,
            provider=query.provider,
            min_score=min_score,
            mock=mock,
            fallback=mock_fallback_enabled(),
        )
        logger.info("trends[%s/%s]: %d (%s)", query.niche, query.provider, len(result.trends), result.state.value)

        if save and not result.mock and result.trends:
            store.save_trends(result.trends)

        return jsonify({
            "niche": query.niche,
            "provider": query.provider,
            "mock": result.mock,
            "trends": [t.to_dict() for t in result.trends],
        })

    @app.route("/rank", methods=["POST"])
    def rank():
        body = _json_body()
        if body is None:
            return jsonify({"error": "Invalid body", "details": [{"loc": [], "msg": "expected a JSON object"}]}), 400
        try:
            req = RankRequest.model_validate(body)
        except ValidationError as e:
            return _invalid(e)

        records = [t.to_record() for t in req.trends]
        rankings = rank_fn(req.niche, records)
        valid = [r for r in rankings if 0 <= r.index < len(records) and math.isfinite(r.relevance_score)]
        return jsonify({"rankings": [r.to_dict() for r in valid]})

    @app.route("/generate-thread", methods=["POST"])
    def generate_thread():
        body = _json_body()
        if body is None:
            return jsonify({"error": "Invalid body", "details": [{"loc": [], "msg": "expected a JSON object"}]}), 400
        try:
            req = ThreadRequest.model_validate(body)
        except ValidationError as e:
            return _invalid(e)

        try:
            result = thread_fn(req.niche, req.topic, req.tone, req.context)
        except (MissingConfigError, thread.ThreadGenerationError) as e:
            logger.error("Thread generation failed: %s", e)
            return jsonify({"error": str(e) or "Unknown error"}), 500

        telemetry.record("generateThread", {"tone": req.tone, "niche": req.niche})
        return jsonify({"thread": result.to_dict()})

    return app
