from __future__ import annotations
"""OS keychain access for the bucket secret key."""
import logging

import keyring
from keyring.errors import KeyringError

SERVICE_NAME = "s3-file-manager"

LOGGER = logging.getLogger(__name__)


class KeychainStore:
    """Stores secret keys in the OS keychain, indexed by access key id."""

    def __init__(self, service_name: str = SERVICE_NAME):
        self._service_name = service_name

    def get_secret(self, access_key_id: str) -> str:
        if not access_key_id:
            return ""
        try:
            return keyring.get_password(self._service_name, access_key_id) or ""
        except KeyringError:
            LOGGER.warning("Keychain lookup failed for access key '%s'", access_key_id)
            return ""

    def set_secret(self, access_key_id: str, secret_key: str) -> None:
        if not access_key_id:
            return
        if not secret_key:
            self.delete_secret(access_key_id)
            return
        try:
            keyring.set_password(self._service_name, access_key_id, secret_key)
        except KeyringError:
            LOGGER.warning("Unable to store secret for access key '%s'", access_key_id)

    def delete_secret(self, access_key_id: str) -> None:
        if not access_key_id:
            return
        try:
            keyring.delete_password(self._service_name, access_key_id)
        except KeyringError:
            return
