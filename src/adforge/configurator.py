"""
Remote Configurator Module

Runs the domain controller promotion scripts inside the VMs through the
compute run-command API.
"""

import logging
import time
from typing import Any, Callable, Tuple

from azure.mgmt.compute.models import RunCommandInput

from .exceptions import RemoteCommandError
from .models import (
    DeploymentConfig,
    DeploymentCredentials,
    DomainControllerSpec,
    RemoteCommandResult,
)
from .readiness import ReadinessResult, wait_until_ready
from . import scripts

logger = logging.getLogger(__name__)

RUN_POWERSHELL = 'RunPowerShellScript'


def split_output(run_result: Any) -> Tuple[str, str]:
    """
    Extract stdout and stderr from a RunCommandResult.

    Windows run commands report two instance-view statuses whose codes end
    with ``StdOut/succeeded`` and ``StdErr/succeeded``.
    """
    stdout, stderr = [], []
    for status in getattr(run_result, 'value', None) or []:
        code = status.code or ''
        message = status.message or ''
        if 'StdErr' in code:
            stderr.append(message)
        else:
            stdout.append(message)
    return "\n".join(stdout).strip(), "\n".join(stderr).strip()


class RemoteConfigurator:
    """Promote VM1 to a new forest and VM2 to a replica domain controller."""

    def __init__(
        self,
        config: DeploymentConfig,
        clients: Any,
        credentials: DeploymentCredentials,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the RemoteConfigurator.

        Args:
            config: Immutable deployment configuration
            clients: Object exposing the ``compute`` management client
            credentials: Credential slots interpolated into the scripts
            sleep: Sleep function used between readiness probes
        """
        self.config = config
        self.clients = clients
        self.credentials = credentials
        self.sleep = sleep

    def run_script(self, vm_name: str, script: str) -> Tuple[str, str]:
        """
        Run a PowerShell script on a VM and wait for it to finish.

        Returns:
            Tuple of (stdout, stderr)
        """
        logger.debug(
            "Run command on %s:\n%s", vm_name, scripts.redact(script, self.credentials)
        )
        poller = self.clients.compute.virtual_machines.begin_run_command(
            self.config.resource_group,
            vm_name,
            RunCommandInput(command_id=RUN_POWERSHELL, script=script.splitlines()),
        )
        stdout, stderr = split_output(poller.result())
        if stderr:
            logger.debug("%s stderr: %s", vm_name, stderr)
        return stdout, stderr

    def promote_forest(self, primary: DomainControllerSpec) -> RemoteCommandResult:
        """
        Install AD DS on VM1, create the forest and schedule a reboot.

        Raises:
            RemoteCommandError: If the script did not report success
        """
        logger.info("Promoting %s to a new forest %s", primary.name, self.config.domain_fqdn)
        script = scripts.render_forest_script(self.config, self.credentials)
        stdout, stderr = self.run_script(primary.name, script)

        if scripts.FOREST_PROMOTED_MARKER not in stdout:
            raise RemoteCommandError(
                primary.name, 'forest promotion did not complete', stdout=stdout, stderr=stderr
            )

        logger.info("%s promoted, reboot scheduled", primary.name)
        return RemoteCommandResult(primary.name, stdout, stderr, succeeded=True)

    def probe_forest_dns(self, primary: DomainControllerSpec, replica: DomainControllerSpec) -> bool:
        """Resolve the domain against VM1 from VM2 once."""
        script = scripts.render_dns_probe_script(self.config.domain_fqdn, primary.private_ip)
        stdout, _ = self.run_script(replica.name, script)
        return scripts.DNS_READY_MARKER in stdout

    def wait_for_forest(
        self, primary: DomainControllerSpec, replica: DomainControllerSpec
    ) -> ReadinessResult:
        """
        Wait until the new forest answers DNS from the replica's network.

        Returns:
            Ready or NotReady according to the configured readiness policy
        """
        logger.info(
            "Waiting for %s to answer for %s (up to %d attempts)",
            primary.name, self.config.domain_fqdn, self.config.readiness.max_attempts,
        )
        # The primary is rebooting right after promotion, give it the first backoff step.
        self.sleep(self.config.readiness.base_delay)
        return wait_until_ready(
            lambda: self.probe_forest_dns(primary, replica),
            self.config.readiness,
            description=f"forest {self.config.domain_fqdn}",
            sleep=self.sleep,
        )

    def join_replica(
        self, primary: DomainControllerSpec, replica: DomainControllerSpec
    ) -> RemoteCommandResult:
        """
        Join VM2 to the domain as an additional controller and schedule a reboot.

        A local abort inside the script (DNS never resolved) is reported in
        the returned result, not raised.
        """
        logger.info(
            "Promoting %s as a replica of %s", replica.name, self.config.domain_fqdn
        )
        script = scripts.render_replica_script(
            self.config, self.credentials, primary, self.config.replica_polling
        )
        stdout, stderr = self.run_script(replica.name, script)

        succeeded = scripts.REPLICA_PROMOTED_MARKER in stdout
        if succeeded:
            logger.info("%s promoted, reboot scheduled", replica.name)
        elif scripts.REPLICA_ABORTED_MARKER in stdout:
            logger.warning(
                "%s could not resolve %s via %s and aborted the join",
                replica.name, self.config.domain_fqdn, primary.private_ip,
            )
        else:
            logger.warning("%s did not report a completed join", replica.name)

        return RemoteCommandResult(replica.name, stdout, stderr, succeeded=succeeded)
