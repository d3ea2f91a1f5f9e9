"""HTTP surface over the article store.

Routes:
- ``GET /news``: filtered, sorted article list
- ``GET /today-threat``: threat score of the last 24 hours
- ``GET /export/csv``: streamed CSV backup
- ``GET /healthz``: liveness
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from flask import Flask, Response, jsonify, request, stream_with_context

from ..analysis import ThreatAggregator
from ..models import as_utc
from ..storage import SORT_RANK, SORT_RECENCY, ArticleQuery, ArticleStore, StoreError
from ..storage.backup import iter_csv_lines
from ..utils.logging import get_logger

logger = get_logger("tw.web")


class BadRequest(ValueError):
    """A query parameter could not be parsed."""


def _parse_limit(raw: Optional[str]) -> int:
    if raw is None or raw.strip() == "":
        return 0
    try:
        limit = int(raw)
    except ValueError:
        raise BadRequest(f"invalid limit: {raw!r}") from None
    if limit < 0:
        raise BadRequest("limit must not be negative")
    return limit


def _parse_date(raw: Optional[str], *, end_of_day: bool = False) -> Optional[datetime]:
    """Accept RFC3339 timestamps or bare ``YYYY-MM-DD`` days (UTC).

    A bare day used as an upper bound covers the whole day.
    """
    if raw is None or raw.strip() == "":
        return None
    text = raw.strip()
    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            moment = time(23, 59, 59) if end_of_day else time(0, 0, 0)
            return as_utc(datetime.combine(day, moment))
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        raise BadRequest(f"invalid date: {raw!r}") from None


def parse_news_query(args) -> ArticleQuery:
    sort_by = (args.get("sortBy") or SORT_RECENCY).strip()
    query = ArticleQuery(
        source=(args.get("source") or "").strip(),
        category=(args.get("category") or "").strip(),
        search=(args.get("search") or "").strip(),
        limit=_parse_limit(args.get("limit")),
        start=_parse_date(args.get("startDate")),
        end=_parse_date(args.get("endDate"), end_of_day=True),
        sort_by=SORT_RANK if sort_by == SORT_RANK else SORT_RECENCY,
    )
    if query.start and query.end and query.start > query.end:
        raise BadRequest("startDate must not be after endDate")
    return query


def create_app(store: ArticleStore, aggregator: ThreatAggregator | None = None) -> Flask:
    app = Flask(__name__)
    aggregator = aggregator or ThreatAggregator(store)

    @app.route("/news", methods=["GET"])
    def get_news():
        try:
            query = parse_news_query(request.args)
        except BadRequest as exc:
            return jsonify({"error": str(exc)}), 400
        try:
            articles = store.query(query)
        except StoreError as exc:
            logger.error("News query failed: %s", exc)
            return jsonify({"error": "failed to load articles"}), 500
        return jsonify([a.to_dict() for a in articles])

    @app.route("/today-threat", methods=["GET"])
    def get_today_threat():
        try:
            score = aggregator.today_threat_score()
        except StoreError as exc:
            logger.error("Threat score failed: %s", exc)
            return jsonify({"error": "failed to compute threat score"}), 500
        return jsonify(score.to_dict())

    @app.route("/export/csv", methods=["GET"])
    def export_csv():
        return Response(
            stream_with_context(iter_csv_lines(store)),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=articles.csv"},
        )

    @app.route("/healthz", methods=["GET"])
    def healthz():
        return Response("OK", status=200, mimetype="text/plain")

    return app
