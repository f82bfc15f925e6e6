"""Keeps the Twitch access token in the system keyring when there is one.

Without a usable keyring the token stays in settings.json, and that file
is restricted to its owner.
"""

import logging
import os
import stat

import keyring
from keyring.backends.fail import Keyring as FailKeyring
from keyring.errors import KeyringError, PasswordDeleteError

logger = logging.getLogger(__name__)

SERVICE_NAME = "twitch-monitor"
TOKEN_USERNAME = "twitch_access_token"

# None until the first check
_available: bool | None = None


def keyring_available() -> bool:
    """Whether a real keyring backend answers. Checked once per process."""
    global _available
    if _available is None:
        backend = keyring.get_keyring()
        if isinstance(backend, FailKeyring):
            logger.info("No keyring backend, access token stays in settings.json")
            _available = False
        else:
            try:
                keyring.get_password(SERVICE_NAME, TOKEN_USERNAME)
                _available = True
            except Exception as e:
                logger.info(f"Keyring {type(backend).__name__} not usable: {e}")
                _available = False
    return _available


def load_access_token() -> str:
    """Get the stored token, or "" if there is none or no keyring."""
    if not keyring_available():
        return ""
    try:
        return keyring.get_password(SERVICE_NAME, TOKEN_USERNAME) or ""
    except KeyringError as e:
        logger.warning(f"Could not read access token from keyring: {e}")
        return ""


def save_access_token(token: str) -> bool:
    """
    Put the token in the keyring, or remove it when token is empty.
    Returns False if the caller must keep the token in settings.json.
    """
    if not keyring_available():
        return False
    try:
        if token:
            keyring.set_password(SERVICE_NAME, TOKEN_USERNAME, token)
        else:
            try:
                keyring.delete_password(SERVICE_NAME, TOKEN_USERNAME)
            except PasswordDeleteError:
                pass
        return True
    except KeyringError as e:
        logger.warning(f"Could not write access token to keyring: {e}")
        return False


def restrict_to_owner(path: str) -> None:
    """chmod 600, for a settings file that still holds the token."""
    try:
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
    except OSError as e:
        logger.debug(f"Could not set permissions on {path}: {e}")
