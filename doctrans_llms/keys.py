"""
API key management for DocTrans-LLMs.

Provides storage and retrieval of the LLM API key using:
1. Environment variables (preferred for CI)
2. OS keychain via keyring (secure local storage)
3. Local config file (fallback)

Usage:
    from doctrans_llms.keys import KeyManager

    km = KeyManager()
    km.set_key("llm", "sk-...")
    key = km.get_key("llm")
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import keyring
from keyring.errors import KeyringError

from doctrans_llms.config import CONFIG_DIR

logger = logging.getLogger(__name__)

# Supported services and their env var names
SERVICES = {
    "llm": "LLM_API_KEY",
}


def env_var_for(service: str) -> str:
    return SERVICES.get(service, f"{service.upper()}_API_KEY")


@dataclass
class KeyInfo:
    """Information about an API key."""
    service: str
    is_set: bool
    source: str  # 'env', 'keyring', 'config', 'none'
    masked_value: str  # e.g., "sk-1...abcd"


class KeyManager:
    """Manage API keys.

    Priority order for key retrieval:
    1. Environment variable
    2. OS keychain (via keyring)
    3. Local config file (~/.doctrans/keys.json)
    """

    SERVICE_NAME = "DocTrans-LLMs"

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else CONFIG_DIR
        self.config_file = self.config_dir / "keys.json"
        self._keyring_available = self._check_keyring()

    def _check_keyring(self) -> bool:
        """Check if a usable keyring backend is configured."""
        try:
            backend = keyring.get_keyring()
        except KeyringError:
            return False
        return getattr(backend, "priority", 1) > 0

    def _read_config(self) -> dict:
        if not self.config_file.exists():
            return {}
        try:
            return json.loads(self.config_file.read_text())
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable key file %s: %s", self.config_file, e)
            return {}

    def _lookup(self, service: str) -> tuple[Optional[str], str]:
        if env_val := os.getenv(env_var_for(service)):
            return env_val, "env"

        if self._keyring_available:
            try:
                if key := keyring.get_password(self.SERVICE_NAME, service):
                    return key, "keyring"
            except KeyringError as e:
                logger.debug("Keyring lookup failed: %s", e)

        if key := self._read_config().get(service):
            return key, "config"

        return None, "none"

    def get_key(self, service: str) -> Optional[str]:
        """Get API key for a service.

        Returns:
            API key string or None if not found
        """
        key, _ = self._lookup(service.lower())
        return key

    def set_key(self, service: str, key: str, use_keyring: bool = True) -> str:
        """Store API key for a service.

        Returns:
            Storage location used ('keyring' or 'config')
        """
        service = service.lower()

        if use_keyring and self._keyring_available:
            try:
                keyring.set_password(self.SERVICE_NAME, service, key)
                return "keyring"
            except KeyringError as e:
                logger.warning("Keyring unavailable, falling back to config file: %s", e)

        self.config_dir.mkdir(parents=True, exist_ok=True)
        config = self._read_config()
        config[service] = key
        self.config_file.write_text(json.dumps(config, indent=2))
        self.config_file.chmod(0o600)
        return "config"

    def delete_key(self, service: str) -> bool:
        """Delete stored API key for a service (keyring and config file)."""
        service = service.lower()
        deleted = False

        if self._keyring_available:
            try:
                keyring.delete_password(self.SERVICE_NAME, service)
                deleted = True
            except KeyringError:
                pass

        config = self._read_config()
        if service in config:
            del config[service]
            self.config_file.write_text(json.dumps(config, indent=2))
            deleted = True

        return deleted

    def get_key_info(self, service: str) -> KeyInfo:
        """Get information about a stored key."""
        service = service.lower()
        key, source = self._lookup(service)
        return KeyInfo(
            service=service,
            is_set=key is not None,
            source=source,
            masked_value=self._mask_key(key) if key else "",
        )

    def list_keys(self) -> list[KeyInfo]:
        """List all configured services and their key status."""
        return [self.get_key_info(service) for service in SERVICES]

    def _mask_key(self, key: str) -> str:
        """Mask a key for display (show first 4 and last 4 chars)."""
        if len(key) <= 12:
            return "*" * len(key)
        return f"{key[:4]}...{key[-4:]}"
