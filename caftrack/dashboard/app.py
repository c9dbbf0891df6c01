#!/usr/bin/env python3
# CUI // SP-CTI
"""CAFTRACK scoring API server.

Serves the compliance and risk scoring engine over JSON. The CAF catalog and
configuration are loaded once in create_app() and injected into the app
config; request handlers never touch module-level state.

Usage:
    python -m caftrack.dashboard.app
    python -m caftrack.dashboard.app --port 8470 --config args/caftrack_config.yaml
"""

import argparse
import logging
import os
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify

from caftrack.compliance.caf_framework import CafFramework, load_framework
from caftrack.config import configure_logging, load_config, resolve_catalog_path
from caftrack.dashboard.api.compliance import compliance_api
from caftrack.dashboard.api.risk import risk_api
from caftrack.resilience.correlation import register_correlation_middleware

logger = logging.getLogger("caftrack.dashboard.app")


def create_app(
    config: Optional[dict] = None,
    framework: Optional[CafFramework] = None,
) -> Flask:
    """Build the API app. Pass config/framework to inject them (tests)."""
    config = config or load_config()
    framework = framework or load_framework(resolve_catalog_path(config))

    app = Flask(__name__)
    app.config["CAFTRACK"] = config
    app.config["CAF_FRAMEWORK"] = framework

    # Correlation ID middleware goes first so every handler sees the id
    register_correlation_middleware(app)

    app.register_blueprint(compliance_api)
    app.register_blueprint(risk_api)

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({
            "status": "ok",
            "framework_id": framework.framework_id,
            "outcomes": len(framework.outcome_ids),
        })

    logger.info(
        "Scoring API ready: %s (%d outcomes)",
        framework.framework_name, len(framework.outcome_ids),
    )
    return app


def main():
    parser = argparse.ArgumentParser(description="CAFTRACK scoring API")
    parser.add_argument("--config", type=Path, help="Config YAML override")
    parser.add_argument("--host", help="Bind host")
    parser.add_argument("--port", type=int, help="Bind port")
    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging(config)

    dashboard = config.get("dashboard", {})
    host = args.host or dashboard.get("host", "127.0.0.1")
    port = args.port or int(os.environ.get("PORT", dashboard.get("port", 8470)))

    app = create_app(config)
    print("CUI // SP-CTI")
    print(f"CAFTRACK scoring API starting on {host}:{port}")
    app.run(host=host, port=port, debug=bool(dashboard.get("debug", False)))


if __name__ == "__main__":
    main()
