"""
Credentials Module

Resolves the credential slots used by a deployment from the configuration
file, the environment and, as a last resort, an interactive prompt.
"""

import getpass
import logging
import os
from typing import Callable, Dict, Mapping, Optional

from .exceptions import CredentialPromptCancelled
from .models import DeploymentCredentials

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_USERNAME = 'labadmin'

ENV_ADMIN_PASSWORD = 'ADFORGE_ADMIN_PASSWORD'
ENV_DOMAIN_ADMIN_PASSWORD = 'ADFORGE_DOMAIN_ADMIN_PASSWORD'
ENV_SAFE_MODE_PASSWORD = 'ADFORGE_SAFE_MODE_PASSWORD'


def prompt_password(username: str) -> str:
    """
    Ask for the administrator password on the terminal.

    Raises:
        CredentialPromptCancelled: On Ctrl+C, end of input or an empty answer
    """
    try:
        password = getpass.getpass(f"Password for '{username}': ")
    except (KeyboardInterrupt, EOFError) as e:
        raise CredentialPromptCancelled("Credential prompt cancelled") from e

    if not password:
        raise CredentialPromptCancelled("No password entered")
    return password


def resolve_credentials(
    section: Optional[Dict[str, str]] = None,
    username: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    prompt: Callable[[str], str] = prompt_password,
) -> DeploymentCredentials:
    """
    Build the deployment credentials.

    The admin password is looked up in the ``credentials`` section, then in
    ``ADFORGE_ADMIN_PASSWORD``, then prompted for. The domain admin and
    safe-mode slots default to the admin password when not given explicitly.

    Args:
        section: ``credentials`` section of the configuration file
        username: Admin user name overriding the configuration
        environ: Environment mapping (defaults to os.environ)
        prompt: Callable asked for the admin password when none is configured

    Returns:
        DeploymentCredentials with all three slots filled

    Raises:
        CredentialPromptCancelled: If the prompt is cancelled
    """
    section = section or {}
    environ = os.environ if environ is None else environ

    username = username or section.get('admin_username') or DEFAULT_ADMIN_USERNAME
    admin_password = section.get('admin_password') or environ.get(ENV_ADMIN_PASSWORD)

    if not admin_password:
        logger.debug("No admin password configured, prompting")
        admin_password = prompt(username)

    domain_admin_password = (
        section.get('domain_admin_password')
        or environ.get(ENV_DOMAIN_ADMIN_PASSWORD)
        or admin_password
    )
    safe_mode_password = (
        section.get('safe_mode_password')
        or environ.get(ENV_SAFE_MODE_PASSWORD)
        or admin_password
    )

    return DeploymentCredentials(
        admin_username=username,
        admin_password=admin_password,
        domain_admin_password=domain_admin_password,
        safe_mode_password=safe_mode_password,
    )
