"""Main CLI entrypoint for k8gen."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

import click

from ..artifacts import extract_files, files_to_yaml, write_files
from ..config import DEFAULT_CONFIG_FILE, GenerationConfig
from ..descriptor import load_descriptor_file, normalize
from ..envman import redact_descriptor
from ..errors import K8GenError
from ..events import get_status_from_events, read_events
from ..generate import build_request
from ..generate.prompts import get_available_versions
from ..generate.providers import provider_names
from ..pipeline import run_generation
from ..state import run_exists


@click.group()
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def main(ctx, output_json, verbose):
    """k8gen - Generate container and Kubernetes files from a deployment descriptor."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = output_json
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _json_output(data: Dict[str, Any]) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=None))


def _human_output(message: str) -> None:
    """Output human-readable message."""
    if not click.get_current_context().obj.get('json', False):
        click.echo(message)


def _fail(message: str, code: int = 1) -> None:
    if click.get_current_context().obj.get('json', False):
        _json_output({'error': message})
    else:
        click.echo(f"❌ {message}", err=True)
    sys.exit(code)


def _load(config_path: str) -> Dict[str, Any]:
    path = Path(config_path)
    if not path.exists():
        _fail(f"Descriptor file not found: {config_path}", 2)
    return load_descriptor_file(path)


@main.command()
@click.option('--config', 'config_path', default=DEFAULT_CONFIG_FILE, show_default=True, help='Deployment descriptor (JSON or YAML)')
@click.option('--output-dir', '-o', help='Directory for the generated files')
@click.option('--provider', type=click.Choice(provider_names()), help='Generation provider')
@click.option('--model', help='Provider model name')
@click.option('--api-key', help='Provider API key (defaults to the provider env var)')
@click.option('--prompt-version', type=click.Choice([str(v) for v in get_available_versions()]), help='Prompt template version')
@click.option('--project-dir', default='.', show_default=True, help='Project to scan for versions and env vars')
@click.option('--no-discover', is_flag=True, help='Do not scan the project directory')
@click.option('--allow-empty', is_flag=True, help='Succeed even if the response has no file blocks')
@click.option('--timeout', type=float, help='Generation timeout in seconds')
@click.pass_context
def generate(ctx, config_path, output_dir, provider, model, api_key, prompt_version, project_dir,
             no_discover, allow_empty, timeout):
    """Generate the artifacts for a deployment descriptor."""
    try:
        config = GenerationConfig.from_env(
            provider=provider,
            model=model,
            api_key=api_key,
            output_dir=output_dir,
            prompt_version=int(prompt_version) if prompt_version else None,
            timeout_s=timeout,
            project_dir=project_dir,
            discover=not no_discover,
            allow_empty=allow_empty,
        )
        raw = _load(config_path)
        result = run_generation(raw, config)
    except K8GenError as e:
        _fail(str(e))
        return

    if ctx.obj['json']:
        _json_output(result.to_dict())
        return

    _human_output(f"🚀 Run {result.run_id}: wrote {len(result.files)} file(s) to {result.output_dir}")
    for path in result.files:
        _human_output(f"  {path}")
    for warning in result.warnings:
        _human_output(f"⚠️  {warning}")


@main.command()
@click.option('--config', 'config_path', default=DEFAULT_CONFIG_FILE, show_default=True, help='Deployment descriptor (JSON or YAML)')
@click.pass_context
def validate(ctx, config_path):
    """Normalize a descriptor and show the result with secrets redacted."""
    try:
        descriptor, warnings = normalize(_load(config_path))
    except K8GenError as e:
        _fail(str(e))
        return

    document = redact_descriptor(descriptor.to_dict())
    if ctx.obj['json']:
        _json_output({'descriptor': document, 'warnings': warnings})
        return

    _human_output("✅ Descriptor is valid")
    for warning in warnings:
        _human_output(f"⚠️  {warning}")
    _human_output(json.dumps(document, indent=2))


@main.command()
@click.option('--config', 'config_path', default=DEFAULT_CONFIG_FILE, show_default=True, help='Deployment descriptor (JSON or YAML)')
@click.option('--prompt-version', type=click.Choice([str(v) for v in get_available_versions()]), default='1', show_default=True)
@click.pass_context
def prompt(ctx, config_path, prompt_version):
    """Print the prompt that would be sent, with secrets redacted."""
    try:
        descriptor, _ = normalize(_load(config_path))
        request = build_request(descriptor, int(prompt_version))
    except K8GenError as e:
        _fail(str(e))
        return

    if ctx.obj['json']:
        _json_output({'prompt_version': request.prompt_version, 'prompt': request.preview()})
    else:
        click.echo(request.preview())


@main.command()
@click.argument('blob_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--output-dir', '-o', default='k8s', show_default=True, help='Directory for the extracted files')
@click.option('--yaml', 'as_yaml', is_flag=True, help='Print the files as YAML instead of writing them')
@click.pass_context
def extract(ctx, blob_file, output_dir, as_yaml):
    """Split a saved generation response into files."""
    # newline="" keeps \r\n intact so contents are written back byte for byte
    try:
        with open(blob_file, "r", encoding="utf-8", newline="") as f:
            blob = f.read()
    except UnicodeDecodeError as e:
        _fail(f"{blob_file} is not valid UTF-8: {e}")
        return
    files = extract_files(blob)

    if as_yaml:
        click.echo(files_to_yaml(files), nl=False)
        return

    try:
        written = write_files(files, output_dir)
    except K8GenError as e:
        _fail(str(e))
        return

    if ctx.obj['json']:
        _json_output({'output_dir': output_dir, 'files': [str(p) for p in written]})
    else:
        _human_output(f"📄 Extracted {len(written)} file(s) to {output_dir}")
        for path in written:
            _human_output(f"  {path}")


@main.command()
@click.argument('run_id')
@click.pass_context
def logs(ctx, run_id):
    """Show the events of a generation run."""
    if not run_exists(run_id):
        _fail(f"Run {run_id} not found", 2)
        return

    events = read_events(run_id)
    status = get_status_from_events(run_id)

    if ctx.obj['json']:
        _json_output({'run_id': run_id, 'status': status, 'events': events})
        return

    _human_output(f"Run {run_id}: {status}")
    for event in events:
        _human_output(f"{event.get('ts', '')} {event.get('type', '')} {json.dumps(event.get('data', {}))}")


if __name__ == '__main__':
    main()
