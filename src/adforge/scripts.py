"""
Remote Scripts Module

Renders the PowerShell payloads sent to the domain controllers through the
RunPowerShellScript run command. Each script prints a marker line on success
(or on a local abort) so the caller can tell the outcome from stdout.
"""

from typing import List

from .models import DeploymentConfig, DeploymentCredentials, DomainControllerSpec, RemotePollingSpec

FOREST_PROMOTED_MARKER = 'ADFORGE_FOREST_PROMOTED'
REPLICA_PROMOTED_MARKER = 'ADFORGE_REPLICA_PROMOTED'
REPLICA_ABORTED_MARKER = 'ADFORGE_REPLICA_ABORTED'
DNS_READY_MARKER = 'ADFORGE_DNS_READY'

REDACTED = '********'

# Delay given to the run-command agent to report back before the reboot.
REBOOT_DELAY_SECONDS = 15


def ps_quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + str(value).replace("'", "''") + "'"


def _reboot_lines() -> List[str]:
    return [f"shutdown.exe /r /t {REBOOT_DELAY_SECONDS} /c 'adforge: completing promotion'"]


def render_forest_script(config: DeploymentConfig, credentials: DeploymentCredentials) -> str:
    """
    Script that installs AD DS on VM1, creates the forest and reboots.

    Args:
        config: Deployment configuration (domain FQDN and NetBIOS name)
        credentials: Provides the DSRM (safe-mode) password

    Returns:
        PowerShell script text
    """
    lines = [
        "$ErrorActionPreference = 'Stop'",
        "Install-WindowsFeature -Name AD-Domain-Services -IncludeManagementTools | Out-Null",
        "$safeModePassword = ConvertTo-SecureString "
        f"{ps_quote(credentials.safe_mode_password)} -AsPlainText -Force",
        "Install-ADDSForest `",
        f"    -DomainName {ps_quote(config.domain_fqdn)} `",
        f"    -DomainNetbiosName {ps_quote(config.netbios_name)} `",
        "    -SafeModeAdministratorPassword $safeModePassword `",
        "    -InstallDns `",
        "    -NoRebootOnCompletion `",
        "    -Force | Out-Null",
        f"Write-Output '{FOREST_PROMOTED_MARKER}'",
    ]
    lines.extend(_reboot_lines())
    return "\n".join(lines)


def render_dns_probe_script(domain_fqdn: str, dns_server: str) -> str:
    """Script that resolves the domain once against the given DNS server."""
    return "\n".join([
        "try {",
        f"    Resolve-DnsName -Name {ps_quote(domain_fqdn)} -Server {ps_quote(dns_server)} "
        "-DnsOnly -ErrorAction Stop | Out-Null",
        f"    Write-Output '{DNS_READY_MARKER}'",
        "} catch {",
        "    Write-Output \"DNS not ready: $($_.Exception.Message)\"",
        "}",
    ])


def render_replica_script(
    config: DeploymentConfig,
    credentials: DeploymentCredentials,
    primary: DomainControllerSpec,
    polling: RemotePollingSpec,
) -> str:
    """
    Script that waits for VM1's DNS, joins VM2 as an additional DC and reboots.

    The script polls DNS resolution of the domain against VM1 up to
    ``polling.attempts`` times. When every attempt fails it prints the abort
    marker and exits 1 without touching the role.

    Args:
        config: Deployment configuration
        credentials: Domain admin and DSRM credential slots
        primary: The forest root controller to resolve against
        polling: Remote polling attempts and interval

    Returns:
        PowerShell script text
    """
    domain = ps_quote(config.domain_fqdn)
    dc_ip = ps_quote(primary.private_ip)
    account = ps_quote(credentials.domain_admin_account(config.domain_fqdn))

    lines = [
        "$ErrorActionPreference = 'Stop'",
        "$resolved = $false",
        f"for ($attempt = 1; $attempt -le {polling.attempts}; $attempt++) {{",
        "    try {",
        f"        Resolve-DnsName -Name {domain} -Server {dc_ip} -DnsOnly -ErrorAction Stop | Out-Null",
        "        $resolved = $true",
        "        break",
        "    } catch {",
        f"        Write-Output \"Waiting for {config.domain_fqdn} on {primary.private_ip} "
        f"(attempt $attempt of {polling.attempts})\"",
        f"        Start-Sleep -Seconds {polling.interval_seconds}",
        "    }",
        "}",
        "if (-not $resolved) {",
        f"    Write-Output '{REPLICA_ABORTED_MARKER}'",
        "    exit 1",
        "}",
        "$adapter = Get-NetAdapter | Where-Object { $_.Status -eq 'Up' } | Select-Object -First 1",
        f"Set-DnsClientServerAddress -InterfaceIndex $adapter.ifIndex -ServerAddresses {dc_ip}",
        "Install-WindowsFeature -Name AD-Domain-Services -IncludeManagementTools | Out-Null",
        "$domainPassword = ConvertTo-SecureString "
        f"{ps_quote(credentials.domain_admin_password)} -AsPlainText -Force",
        f"$domainCredential = New-Object System.Management.Automation.PSCredential({account}, $domainPassword)",
        "$safeModePassword = ConvertTo-SecureString "
        f"{ps_quote(credentials.safe_mode_password)} -AsPlainText -Force",
        "Install-ADDSDomainController `",
        f"    -DomainName {domain} `",
        "    -Credential $domainCredential `",
        "    -SafeModeAdministratorPassword $safeModePassword `",
        "    -InstallDns `",
        "    -NoRebootOnCompletion `",
        "    -Force | Out-Null",
        f"Write-Output '{REPLICA_PROMOTED_MARKER}'",
    ]
    lines.extend(_reboot_lines())
    return "\n".join(lines)


def redact(script: str, credentials: DeploymentCredentials) -> str:
    """Replace every password occurrence in a rendered script."""
    secrets = {
        credentials.admin_password,
        credentials.domain_admin_password,
        credentials.safe_mode_password,
    }
    for secret in sorted(secrets, key=len, reverse=True):
        if secret:
            script = script.replace(ps_quote(secret), ps_quote(REDACTED))
    return script
