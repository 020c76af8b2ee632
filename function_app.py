"""Azure Functions entry point: HTTP triggers serving the cert-manager webhook API."""

import json
import logging

import azure.functions as func

from connect_dns.config import load_config
from connect_dns.secret_store import get_secret_store
from connect_dns.solver import ConnectDnsSolver
from connect_dns.webhook import handle_challenge_payload

# Loaded once at import; missing GROUP_NAME stops the host from starting.
_CONFIG = load_config()

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)


def _json_response(body: dict, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(json.dumps(body), status_code=status_code, mimetype="application/json")


def serve_challenge(req: func.HttpRequest) -> func.HttpResponse:
    config = _CONFIG
    group = req.route_params.get("group")
    solver_name = req.route_params.get("solver")
    if group != config.group_name or solver_name != ConnectDnsSolver.name:
        return func.HttpResponse(f"No solver '{solver_name}' in group '{group}'", status_code=404)

    try:
        payload = req.get_json()
    except ValueError:
        return func.HttpResponse("Request body is not valid JSON", status_code=400)

    solver = ConnectDnsSolver(config, get_secret_store(config))
    try:
        result = handle_challenge_payload(payload, solver)
    except ValueError as exc:
        logging.warning("Rejected challenge payload: %s", exc)
        return func.HttpResponse(str(exc), status_code=400)
    return _json_response(result)


# Webhook: Present / CleanUp challenge requests from cert-manager
@app.function_name("challenge")
@app.route(route="apis/{group}/v1alpha1/{solver}", methods=["POST"])
def challenge(req: func.HttpRequest) -> func.HttpResponse:
    return serve_challenge(req)


# Liveness check
@app.function_name("healthz")
@app.route(route="healthz", methods=["GET"])
def healthz(req: func.HttpRequest) -> func.HttpResponse:
    return func.HttpResponse("ok", status_code=200)
