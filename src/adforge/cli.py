"""
Command Line Interface Module

Provides CLI commands for deploying and managing the Active Directory lab.
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import json

import yaml

from .clients import AzureClients
from .config_loader import ConfigLoader
from .credentials import resolve_credentials
from .models import DeploymentConfig
from .orchestrator import Orchestrator
from .validator import ConfigValidator

LOG_FORMAT = '%(asctime)s %(levelname)-8s %(name)s: %(message)s'


def ask_confirmation(message: str) -> bool:
    """Ask a yes/no question on the terminal."""
    try:
        response = input(f"{message} (yes/no): ")
    except (KeyboardInterrupt, EOFError):
        print()
        return False
    return response.strip().lower() in ('y', 'yes')


class AdforgeCLI:
    """Command-line interface for adforge."""

    def __init__(self):
        """Initialize the CLI."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog='adforge',
            description='adforge - Two-node Active Directory lab builder for Azure',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Deploy with defaults, confirming each step
  adforge deploy --subscription-id <id>

  # Deploy from a configuration file without prompts
  adforge deploy --config config/examples/two-dc-lab.yaml --yes

  # Validate configuration
  adforge validate --config config/examples/two-dc-lab.yaml

  # Write the planned call sequence without deploying
  adforge generate --config config/examples/two-dc-lab.yaml --output plan.json

  # Destroy a lab environment
  adforge destroy --resource-group rg-adforge
            """
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Deploy command
        deploy_parser = subparsers.add_parser(
            'deploy',
            help='Deploy the two domain controllers'
        )
        self._add_config_arguments(deploy_parser)
        deploy_parser.add_argument(
            '--domain',
            help='Fully-qualified domain name of the new forest'
        )
        deploy_parser.add_argument(
            '--vm-size',
            help='Azure VM size for both controllers'
        )
        deploy_parser.add_argument(
            '--admin-username',
            help='Local admin (and forest admin) user name'
        )
        deploy_parser.add_argument(
            '--subscription-id',
            help='Azure subscription ID'
        )
        deploy_parser.add_argument(
            '--yes', '-y',
            action='store_true',
            help='Skip the confirmation prompt before each step'
        )
        deploy_parser.add_argument(
            '--strict-replica-join',
            action='store_true',
            default=None,
            help='Fail the run when the replica cannot join the domain'
        )
        deploy_parser.add_argument(
            '--output', '-o',
            help='Also write the result record as JSON to this file'
        )
        deploy_parser.add_argument(
            '--verbose', '-v',
            action='store_true',
            help='Enable verbose output'
        )

        # Validate command
        validate_parser = subparsers.add_parser(
            'validate',
            help='Validate configuration file'
        )
        validate_parser.add_argument(
            '--config', '-c',
            required=True,
            help='Path to YAML configuration file'
        )

        # Generate command
        generate_parser = subparsers.add_parser(
            'generate',
            help='Write the planned call sequence without deploying'
        )
        self._add_config_arguments(generate_parser)
        generate_parser.add_argument(
            '--output', '-o',
            required=True,
            help='Output path for the generated plan'
        )
        generate_parser.add_argument(
            '--format',
            choices=['json', 'yaml'],
            default='json',
            help='Output format (default: json)'
        )

        # Destroy command
        destroy_parser = subparsers.add_parser(
            'destroy',
            help='Delete the lab resource group'
        )
        destroy_parser.add_argument(
            '--config', '-c',
            help='Path to YAML configuration file'
        )
        destroy_parser.add_argument(
            '--resource-group', '-g',
            help='Resource group name'
        )
        destroy_parser.add_argument(
            '--subscription-id',
            help='Azure subscription ID'
        )
        destroy_parser.add_argument(
            '--force',
            action='store_true',
            help='Skip confirmation prompt'
        )

        # Version command
        subparsers.add_parser('version', help='Show version information')

        return parser

    @staticmethod
    def _add_config_arguments(parser: argparse.ArgumentParser):
        parser.add_argument(
            '--config', '-c',
            help='Path to YAML configuration file'
        )
        parser.add_argument(
            '--resource-group', '-g',
            help='Resource group name'
        )
        parser.add_argument(
            '--location', '-l',
            help='Azure region'
        )

    def run(self, args: Optional[list] = None):
        """
        Run the CLI with the given arguments.

        Args:
            args: Command-line arguments (defaults to sys.argv[1:])
        """
        parsed_args = self.parser.parse_args(args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        verbose = getattr(parsed_args, 'verbose', False)
        logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)
        if not verbose:
            logging.getLogger('azure').setLevel(logging.WARNING)

        try:
            if parsed_args.command == 'deploy':
                return self._deploy(parsed_args)
            elif parsed_args.command == 'validate':
                return self._validate(parsed_args)
            elif parsed_args.command == 'generate':
                return self._generate(parsed_args)
            elif parsed_args.command == 'destroy':
                return self._destroy(parsed_args)
            elif parsed_args.command == 'version':
                return self._version()
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            if verbose:
                import traceback
                traceback.print_exc()
            return 1

        return 0

    def _load(self, args, overrides: Dict[str, Any]) -> Tuple[ConfigLoader, Optional[DeploymentConfig]]:
        """Load, override and validate the configuration."""
        loader = ConfigLoader(args.config)
        if args.config:
            print(f"Loading configuration from {args.config}...")
        loader.load()
        loader.apply_overrides(overrides)

        validator = ConfigValidator()
        is_valid, errors, warnings = validator.validate(loader.to_dict())

        if warnings:
            print("\nWarnings:")
            for warning in warnings:
                print(f"  ⚠️  {warning}")

        if not is_valid:
            print("\nValidation failed:")
            for error in errors:
                print(f"  ❌ {error}")
            return loader, None

        return loader, loader.build()

    def _deploy(self, args) -> int:
        """Handle deploy command."""
        overrides = {
            'resource_group': args.resource_group,
            'location': args.location,
            'domain.fqdn': args.domain,
            'vm_size': args.vm_size,
            'credentials.admin_username': args.admin_username,
            'strict_replica_join': args.strict_replica_join,
            'confirm_each_step': False if args.yes else None,
        }
        loader, config = self._load(args, overrides)
        if config is None:
            return 1

        print("✅ Configuration is valid")
        print(f"\nDeploying '{config.domain_fqdn}' to resource group '{config.resource_group}'...")

        orchestrator = Orchestrator(
            config,
            credential_source=lambda: resolve_credentials(loader.get_credentials()),
            clients=AzureClients(args.subscription_id),
            confirm=ask_confirmation,
        )
        result = orchestrator.deploy()

        if result is None:
            print("\n❌ Deployment failed", file=sys.stderr)
            return 1

        print("\n✅ Deployment completed successfully")
        orchestrator.print_connection_info(result)
        print(json.dumps(result.to_dict(), indent=2))

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(result.to_dict(), f, indent=2)
        return 0

    def _validate(self, args) -> int:
        """Handle validate command."""
        print(f"Loading configuration from {args.config}...")

        loader = ConfigLoader(args.config)
        config = loader.load()

        print("Validating configuration...")

        validator = ConfigValidator()
        is_valid, errors, warnings = validator.validate(config)

        if warnings:
            print("\nWarnings:")
            for warning in warnings:
                print(f"  ⚠️  {warning}")

        if errors:
            print("\nErrors:")
            for error in errors:
                print(f"  ❌ {error}")

        if is_valid:
            print("\n✅ Configuration is valid")
            return 0
        else:
            print("\n❌ Configuration is invalid")
            return 1

    def _generate(self, args) -> int:
        """Handle generate command."""
        overrides = {
            'resource_group': args.resource_group,
            'location': args.location,
        }
        loader, config = self._load(args, overrides)
        if config is None:
            return 1

        print("Generating deployment plan...")
        username = loader.get_credentials().get('admin_username', 'labadmin')
        plan = Orchestrator(config).plan(username)

        output_path = Path(args.output)

        if args.format == 'json':
            with open(output_path, 'w', encoding='utf-8') as f:
                json.dump(plan, f, indent=2)
        else:  # yaml
            with open(output_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(plan, f, default_flow_style=False, sort_keys=False)

        print(f"\n✅ Plan generated: {output_path} ({len(plan)} calls)")
        return 0

    def _destroy(self, args) -> int:
        """Handle destroy command."""
        loader = ConfigLoader(args.config)
        loader.load()
        loader.apply_overrides({'resource_group': args.resource_group})
        config = loader.build()

        resource_group = config.resource_group

        if not args.force:
            confirmed = ask_confirmation(
                f"\n⚠️  This will delete resource group '{resource_group}' "
                f"and all resources within it.\n"
                f"Are you sure?"
            )
            if not confirmed:
                print("Aborted.")
                return 0

        print(f"\nDestroying resource group '{resource_group}'...")
        orchestrator = Orchestrator(config, clients=AzureClients(args.subscription_id))

        success = orchestrator.destroy()

        if success:
            print("\n✅ Resources destroyed successfully")
            return 0
        else:
            print("\n❌ Destroy operation failed")
            return 1

    def _version(self) -> int:
        """Handle version command."""
        from . import __version__, __author__
        print(f"adforge version {__version__}")
        print(f"Author: {__author__}")
        return 0


def main():
    """Main entry point for the CLI."""
    cli = AdforgeCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
