"""Command-line interface for Wakedeck."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from wakedeck import __version__
from wakedeck.config.loader import DEFAULT_CONFIG, Settings
from wakedeck.storage.devices import DeviceStore


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_settings(config: str) -> Settings:
    from wakedeck.config.loader import load_config, settings_from_config, validate_config

    path = Path(config)
    if not path.exists():
        return Settings()
    raw = load_config(path)
    if not raw:
        return Settings()
    errors = validate_config(raw)
    if errors:
        click.echo("Config validation errors:", err=True)
        for e in errors:
            click.echo(f"  • {e}", err=True)
        sys.exit(1)
    return settings_from_config(raw)


def _settings(ctx: click.Context) -> Settings:
    if "settings" not in ctx.obj:
        ctx.obj["settings"] = _load_settings(ctx.obj["config"])
    settings: Settings = ctx.obj["settings"]
    return settings


def _store(ctx: click.Context) -> DeviceStore:
    return DeviceStore(_settings(ctx).data_file)


# ── Root group ────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=__version__, prog_name="wakedeck")
@click.option(
    "--config",
    "-c",
    default=str(DEFAULT_CONFIG),
    envvar="WAKEDECK_CONFIG",
    show_default=True,
    help="Path to wakedeck config.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config: str, verbose: bool) -> None:
    """Wakedeck — register devices and wake them with Wake-on-LAN."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ── init command ──────────────────────────────────────────────────────────────


@main.command()
@click.option("--data-file", type=click.Path(dir_okay=False), help="Device data file path")
@click.option("--broadcast-ip", default="255.255.255.255", show_default=True)
@click.option("--wol-port", default=9, show_default=True, type=click.IntRange(1, 65535))
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def init(
    ctx: click.Context,
    data_file: Optional[str],
    broadcast_ip: str,
    wol_port: int,
    force: bool,
) -> None:
    """Write a starter config.yaml."""
    from wakedeck.config.loader import validate_config
    from wakedeck.config.writer import settings_to_raw, write_config

    path = Path(ctx.obj["config"])
    if path.exists() and not force:
        click.echo(f"Config already exists: {path} (use --force to overwrite)", err=True)
        sys.exit(1)

    settings = Settings(broadcast_ip=broadcast_ip, wol_port=wol_port)
    if data_file:
        settings.data_file = Path(data_file).expanduser()
    raw = {"settings": settings_to_raw(settings)}
    errors = validate_config(raw)
    if errors:
        for e in errors:
            click.echo(f"  • {e}", err=True)
        sys.exit(1)
    write_config(path, raw)
    click.echo(f"Wrote {path}")


# ── devices group ─────────────────────────────────────────────────────────────


@main.group()
def devices() -> None:
    """Manage registered devices."""


@devices.command("list")
@click.pass_context
def devices_list(ctx: click.Context) -> None:
    """List all registered devices."""
    found = _store(ctx).read_devices()
    if not found:
        click.echo("No devices registered.")
        return
    click.echo(f"{'NAME':<24} {'MAC':<19} {'IP':<17} {'STATUS':<9} {'ID'}")
    click.echo("─" * 106)
    for d in found:
        click.echo(f"{d.name:<24} {d.mac:<19} {d.ip:<17} {d.status:<9} {d.id}")


@devices.command("add")
@click.argument("name")
@click.argument("mac")
@click.argument("ip")
@click.pass_context
def devices_add(ctx: click.Context, name: str, mac: str, ip: str) -> None:
    """Register a device by NAME, MAC address and IP address."""
    import ipaddress

    from wakedeck.storage.devices import StorageError

    try:
        ipaddress.IPv4Address(ip.strip())
    except ValueError:
        click.echo(f"Invalid IPv4 address: {ip}", err=True)
        sys.exit(1)
    try:
        device = _store(ctx).add(name, mac, ip)
    except (ValueError, StorageError) as exc:
        click.echo(f"✗  {exc}", err=True)
        sys.exit(1)
    click.echo(f"✓  Added {device.name} ({device.mac}) with id {device.id}")


@devices.command("remove")
@click.argument("device_id")
@click.pass_context
def devices_remove(ctx: click.Context, device_id: str) -> None:
    """Remove a registered device by id."""
    if not _store(ctx).delete(device_id):
        click.echo(f"Device '{device_id}' not found.", err=True)
        sys.exit(1)
    click.echo(f"Removed device {device_id}")


# ── wake command ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("target")
@click.option("--ip", "ip_address", help="Destination IPv4 address (host or broadcast)")
@click.option("--port", type=click.IntRange(1, 65535), help="Destination UDP port")
@click.pass_context
def wake(ctx: click.Context, target: str, ip_address: Optional[str], port: Optional[int]) -> None:
    """
    Send a Wake-on-LAN packet.

    TARGET is a registered device name or id, or a raw MAC address.
    """
    from wakedeck.core.errors import InvalidAddressError, InvalidTargetError, WakeError
    from wakedeck.core.wol import send_magic_packet

    settings = _settings(ctx)
    store = _store(ctx)
    device = store.find(target)
    mac = device.mac if device else target
    ip = ip_address or (device.ip if device else settings.broadcast_ip)
    udp_port = port or settings.wol_port

    try:
        send_magic_packet(mac, ip_address=ip, port=udp_port)
    except (InvalidAddressError, InvalidTargetError) as exc:
        click.echo(f"✗  {exc}", err=True)
        sys.exit(1)
    except WakeError as exc:
        click.echo(f"✗  Failed to send magic packet: {exc}", err=True)
        sys.exit(2)

    if device:
        store.mark_woken(device.id)
        click.echo(f"WOL packet sent to {device.name} ({device.mac}) via {ip}:{udp_port}")
    else:
        click.echo(f"WOL packet sent to {mac} via {ip}:{udp_port}")


# ── serve command ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind host")
@click.option("--port", default=8000, show_default=True, help="Bind port")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Start the Wakedeck API server."""
    import uvicorn

    from wakedeck.api.routes import create_app

    app = create_app(config_path=ctx.obj["config"])
    click.echo(f"Starting Wakedeck API at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
