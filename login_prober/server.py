"""HTTP probe endpoint."""

import logging
from typing import Optional

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST

from .config.models import LoginConfigs
from .metrics.snapshot import build_snapshot, render_snapshot
from .probe.engine import ProbeEngine


def create_app(configs: LoginConfigs, engine: ProbeEngine, logger: logging.Logger) -> FastAPI:
    """
    Build the exporter application.

    Args:
        configs: Loaded target configuration, shared read-only by all requests
        engine: Probe engine
        logger: Logger instance

    Returns:
        FastAPI: Application exposing ``GET /probe?target=<name>``
    """
    app = FastAPI(title="login-prober", docs_url=None, redoc_url=None, openapi_url=None)
    handler_logger = logger.getChild("probe_handler")

    @app.get("/probe")
    async def probe(request: Request, target: Optional[str] = None) -> Response:
        """
        Run the login probe for ``target`` and return its metrics.

        A failed probe is still a 200: the failure is in the login_status gauge.
        """
        handler_logger.info(
            "This connection was established",
            extra={
                "subsystem": "probe_handler",
                "part": "connection_info",
                "user_address": request.client.host if request.client else "",
                "server_host": request.headers.get("host", ""),
                "user_agent": request.headers.get("user-agent", ""),
            }
        )

        if not target:
            handler_logger.error(
                "The target is not given",
                extra={"subsystem": "probe_handler", "part": "target_check"}
            )
            return Response(status_code=400)

        target_config = configs.find_target(target)
        if target_config is None:
            handler_logger.error(
                "The given target does not have configuration",
                extra={"subsystem": "probe_handler", "part": "target_config_check", "target": target}
            )
            return Response(status_code=400)

        result = await engine.run(target_config)
        snapshot = build_snapshot(target, target_config.login_type, result)
        return Response(content=render_snapshot(snapshot), media_type=CONTENT_TYPE_LATEST)

    return app
