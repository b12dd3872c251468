from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

import google.auth
from google.auth.credentials import Credentials
from google.auth.exceptions import GoogleAuthError

from tasklist.domain.errors import CredentialsError

logger = logging.getLogger(__name__)

DATASTORE_SCOPE = "https://www.googleapis.com/auth/datastore"


### COMMENTS
# ==========================================================
# Poświadczenia z VCAP_SERVICES (adapters/datastore/credentials.py).
# ==========================================================
# Platforma (Cloud Foundry) wstrzykuje JSON z opisem powiązanych usług.
# SERVICE_NAME wskazuje wpis, którego `credentials.PrivateKeyData` to
# base64 z JSON-em konta serwisowego Google.
#
# Obsługiwane kształty:
#   {"<SERVICE_NAME>": {"credentials": {...}}}
#   {"<label>": [{"name": "<SERVICE_NAME>", "credentials": {...}}, ...]}


def _find_service(services: dict[str, Any], service_name: str) -> dict[str, Any]:
    entry = services.get(service_name)
    if isinstance(entry, dict):
        return entry
    for bindings in services.values():
        if not isinstance(bindings, list):
            continue
        for binding in bindings:
            if isinstance(binding, dict) and binding.get("name") == service_name:
                return binding
    raise CredentialsError(f"{service_name} service is not bound (not found in VCAP_SERVICES)")


def parse_credentials(service_name: str | None, vcap_services: str | None) -> tuple[Credentials, str | None]:
    """
    Dekoduje poświadczenia Datastore powiązane z aplikacją.

    :param service_name: Wartość SERVICE_NAME; wskazuje powiązaną usługę.
    :param vcap_services: Surowy JSON z VCAP_SERVICES.
    :raises CredentialsError: Gdy brakuje którejś części albo jest niepoprawna.
    :return: (poświadczenia ze scope Datastore, project id z pliku klucza)
    """
    if not service_name:
        raise CredentialsError(
            "SERVICE_NAME is required. It tells us which service to use to connect to datastore"
        )

    try:
        services = json.loads(vcap_services or "")
    except json.JSONDecodeError as e:
        raise CredentialsError(f"VCAP_SERVICES is not valid JSON: {e}") from e
    if not isinstance(services, dict):
        raise CredentialsError("VCAP_SERVICES must be a JSON object")

    creds = _find_service(services, service_name).get("credentials")
    if not isinstance(creds, dict):
        raise CredentialsError(f"{service_name} service does not have credentials")

    encoded = creds.get("PrivateKeyData")
    if not isinstance(encoded, str):
        raise CredentialsError(f"{service_name} credentials do not have PrivateKeyData")

    try:
        info = json.loads(base64.b64decode(encoded, validate=True))
    except (binascii.Error, ValueError) as e:
        raise CredentialsError(f"failed to base64 decode credentials: {e}") from e
    if not isinstance(info, dict):
        raise CredentialsError("decoded PrivateKeyData is not a JSON object")

    try:
        credentials, project_id = google.auth.load_credentials_from_dict(info, scopes=[DATASTORE_SCOPE])
    except (GoogleAuthError, ValueError) as e:
        raise CredentialsError(f"failed to load credentials: {e}") from e

    logger.info("loaded datastore credentials for service %s (project %s)", service_name, project_id)
    return credentials, project_id
