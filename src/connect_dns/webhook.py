"""cert-manager ChallengePayload handling: decode, dispatch to the solver, encode."""

from __future__ import annotations

import logging

from connect_dns.models import ChallengeRequest
from connect_dns.solver import ConnectDnsSolver

logger = logging.getLogger(__name__)

API_VERSION = "acme.cert-manager.io/v1alpha1"
KIND = "ChallengePayload"

ACTION_PRESENT = "Present"
ACTION_CLEANUP = "CleanUp"


def _envelope(uid: str, success: bool, message: str | None = None) -> dict:
    response: dict = {"uid": uid, "success": success}
    if message is not None:
        response["status"] = {
            "status": "Failure",
            "message": message,
            "reason": "InternalError",
            "code": 500,
        }
    return {"apiVersion": API_VERSION, "kind": KIND, "response": response}


def handle_challenge_payload(payload: dict, solver: ConnectDnsSolver) -> dict:
    """Run one challenge request and build the response payload.

    Solver failures are reported in the response (``success: false`` with a
    status message) so cert-manager records the reason and retries. A payload
    that is not a ChallengePayload raises ValueError.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("request"), dict):
        raise ValueError("ChallengePayload must contain a request object")
    try:
        request = ChallengeRequest.from_dict(payload["request"])
    except KeyError as exc:
        raise ValueError(f"ChallengeRequest is missing field {exc.args[0]}") from exc

    if request.action == ACTION_PRESENT:
        operation = solver.present
    elif request.action == ACTION_CLEANUP:
        operation = solver.cleanup
    else:
        raise ValueError(f"Unknown challenge action: '{request.action}'")

    try:
        operation(request)
    except Exception as exc:
        logger.exception("%s failed for %s (uid=%s): %s", request.action, request.resolved_fqdn, request.uid, exc)
        return _envelope(request.uid, False, str(exc))
    return _envelope(request.uid, True)
