"""HTTP trigger blueprint — health check and on-demand reconciliation."""

import json
import logging

import azure.functions as func

from onedrive_mirror import __version__
from onedrive_mirror.config import load_config
from onedrive_mirror.orchestration.pipeline import delta_engine_from_config, reconcile_once

logger = logging.getLogger(__name__)

bp = func.Blueprint()


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint returning service status and version."""
    logger.info("[health_check] health check requested")

    try:
        body = json.dumps({"status": "ok", "version": __version__})
        return func.HttpResponse(body, status_code=200, mimetype="application/json")

    except Exception:
        logger.error("[health_check] health check failed", exc_info=True)
        error_body = json.dumps({"status": "error", "message": "Internal server error"})
        return func.HttpResponse(error_body, status_code=500, mimetype="application/json")


@bp.route(route="reconcile", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
async def reconcile(req: func.HttpRequest) -> func.HttpResponse:
    """Run one full reconciliation pass and return the resulting actions.

    Requires a function key. Each request starts from empty state, so the
    result lists the whole drive (plus shared folders) as it stands, unless
    a persisted delta cursor limits it to changes since the last pass.
    """
    logger.info("[reconcile] reconciliation requested")

    try:
        config = load_config()
        engine = delta_engine_from_config(config, follow=False)
        actions = await reconcile_once(engine)

        counts = {str(kind): count for kind, count in engine.stats.items()}
        logger.info("[reconcile] reconciliation complete; action_count:%d", len(actions))

        body = json.dumps(
            {
                "status": "ok",
                "counts": counts,
                "actions": [action.to_dict() for action in actions],
            }
        )
        return func.HttpResponse(body, status_code=200, mimetype="application/json")

    except Exception:
        logger.error("[reconcile] reconciliation failed", exc_info=True)
        error_body = json.dumps({"status": "error", "message": "Internal server error"})
        return func.HttpResponse(error_body, status_code=500, mimetype="application/json")
