#!/usr/bin/env python3
"""
Stack deploy, update and preview update commands.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click

from .. import deploy as run_deploy
from .. import preview_update as run_preview_update
from .. import update as run_update
from ..config import load_config_file
from ..deployment import OperationResult


def load_template(template: str) -> str:
    """Read a template file, passing S3 URLs through untouched."""
    if template.startswith(("https://", "http://")):
        return template
    return Path(template).read_text()


def echo_event(event: Dict[str, Any]) -> None:
    """Print a stack event as it arrives."""
    line = (
        f"{event.get('Timestamp')} {event.get('LogicalResourceId')} "
        f"{event.get('ResourceType')} {event.get('ResourceStatus')}"
    )
    if event.get("ResourceStatusReason"):
        line += f" {event['ResourceStatusReason']}"
    click.echo(line)


def build_config(
    config_path: str, region: Optional[str], profile: Optional[str]
) -> Dict[str, Any]:
    config = load_config_file(config_path)
    if region or profile:
        client_options = dict(config.get("client_options") or {})
        if region:
            client_options["region_name"] = region
        if profile:
            client_options["profile_name"] = profile
        config["client_options"] = client_options
    return config


def report(result: OperationResult, output_json: bool) -> None:
    """Print the result and exit non-zero if the workflow failed."""
    if output_json:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))

    if result.errors:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        sys.exit(1)

    if not output_json:
        click.echo("✅ Complete")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """CloudFormation stack deploy, update and preview commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


_config_option = click.option(
    "--config", "-c", "config_path", required=True, help="YAML or JSON configuration file"
)
_template_option = click.option(
    "--template", "-t", required=True, help="Template file path or S3 URL"
)
_region_option = click.option("--region", help="AWS region")
_profile_option = click.option("--profile", help="AWS profile to use")
_json_option = click.option("--json", "output_json", is_flag=True, help="Output as JSON")


@main.command()
@_config_option
@_template_option
@_region_option
@_profile_option
@_json_option
def deploy(config_path, template, region, profile, output_json) -> None:
    """Deploy a new stack and delete its prior instances."""
    try:
        config = build_config(config_path, region, profile)
        config["on_event_fn"] = echo_event
        result = run_deploy(config, load_template(template))
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    report(result, output_json)


@main.command()
@_config_option
@_template_option
@_region_option
@_profile_option
@_json_option
def update(config_path, template, region, profile, output_json) -> None:
    """Update an existing stack."""
    try:
        config = build_config(config_path, region, profile)
        config["on_event_fn"] = echo_event
        result = run_update(config, load_template(template))
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    report(result, output_json)


@main.command("preview-update")
@_config_option
@_template_option
@_region_option
@_profile_option
@_json_option
def preview_update(config_path, template, region, profile, output_json) -> None:
    """Preview an update to an existing stack via a change set."""
    try:
        config = build_config(config_path, region, profile)
        result = run_preview_update(config, load_template(template))
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not output_json and result.change_set:
        for change in result.change_set.get("Changes", []):
            resource = change.get("ResourceChange", {})
            click.echo(
                f"{resource.get('Action')} {resource.get('LogicalResourceId')} "
                f"({resource.get('ResourceType')})"
            )

    report(result, output_json)


if __name__ == "__main__":
    main()
