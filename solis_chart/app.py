from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, render_template, request

from solis_chart.aggregator import fetch_monthly_production
from solis_chart.client import SolisClient
from solis_chart.config import AppConfig
from solis_chart.logging import get_logger
from solis_chart.page import PageCache, capitalize, format_swedish_number
from solis_chart.revalidate import RevalidateHandler, default_endpoints


def create_app(
    config: Optional[AppConfig] = None,
    client: Optional[SolisClient] = None,
    cache: Optional[PageCache] = None,
) -> Flask:
    config = config or AppConfig.from_env()
    log = get_logger("solis_chart.app")

    if client is None:
        client = SolisClient(config.solis, get_logger("solis_chart.client"))
    if cache is None:
        cache = PageCache(
            lambda: fetch_monthly_production(
                client,
                get_logger("solis_chart.aggregator"),
                timezone=config.page.timezone,
                currency=config.solis.currency,
            ),
            revalidate_seconds=config.page.revalidate_seconds,
            retry_seconds=config.page.retry_seconds,
            log=get_logger("solis_chart.page"),
        )

    app = Flask(__name__)
    app.config["PAGE_CACHE"] = cache
    pages = {"/": cache}

    @app.after_request
    def add_cors(resp):
        resp.headers["Access-Control-Allow-Origin"] = "*"
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type,Authorization"
        resp.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
        return resp

    @app.route("/")
    def index():
        data = cache.get()
        return render_template(
            "index.html",
            error=data.error,
            daily_totals=data.daily_totals,
            month_name=data.month_name,
            month_title=capitalize(data.month_name),
            monthly_total=format_swedish_number(data.monthly_total),
        )

    @app.route("/api/data")
    def api_data():
        data = cache.get()
        return jsonify(data.as_dict()), (502 if data.error else 200)

    for endpoint in default_endpoints(config.revalidate):
        handler = RevalidateHandler(endpoint, pages, get_logger("solis_chart.revalidate"))
        app.add_url_rule(
            endpoint.route,
            endpoint=endpoint.route,
            view_func=_revalidate_view(handler),
            methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        )

    log.debug("App created with revalidation every %ss", config.page.revalidate_seconds)
    return app


def _revalidate_view(handler: RevalidateHandler):
    def view():
        body = request.get_json(silent=True)
        payload, status = handler.handle(request.method, request.headers, body)
        return jsonify(payload), status

    return view
