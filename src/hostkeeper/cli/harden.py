"""CLI command for host hardening."""

from typing import Optional

import typer

from hostkeeper.cli.utils import (
    build_collaborators,
    build_reconciler,
    confirm_override,
    console,
    exit_on_failures,
    get_config,
    handle_error,
    require_apt,
    require_root,
)
from hostkeeper.utils.errors import HostkeeperError

CHECK_COMMANDS = [
    ("ufw status", "Firewall status"),
    ("fail2ban-client status", "fail2ban status"),
    ("fail2ban-client status sshd", "SSH jail status"),
    ("fail2ban-client set sshd unbanip <IP>", "Unban an IP"),
    ("ufw allow <port>/tcp", "Open a new port"),
]


def harden_cmd(
    ctx: typer.Context,
    ssh_port: int = typer.Option(22, "--ssh-port", help="SSH port kept open by the firewall"),
    http: bool = typer.Option(True, "--http/--no-http", help="Open port 80"),
    https: bool = typer.Option(True, "--https/--no-https", help="Open port 443"),
    extra_ports: str = typer.Option(
        "",
        "--extra-ports",
        help="Additional TCP ports to open, comma-separated",
    ),
    docker: Optional[bool] = typer.Option(
        None,
        "--docker/--no-docker",
        help="Install the Docker engine (asks when not given)",
    ),
    skip_upgrade: bool = typer.Option(
        False,
        "--skip-upgrade",
        help="Do not update and upgrade system packages first",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Assume yes to every question",
    ),
) -> None:
    """
    Apply baseline security hardening.

    Configures a deny-by-default firewall, fail2ban for SSH, automatic
    security updates, kernel network hardening and SSH brute-force
    slowdown. Existing sessions stay connected.

    Example:
        sudo hostkeeper harden --ssh-port 2222 --extra-ports 8080,9000
    """
    from hostkeeper.core.reconciler import always_override
    from hostkeeper.knowledge.controls import hardening_baseline
    from hostkeeper.renderers.base import RenderContext
    from hostkeeper.renderers.terminal import TerminalRenderer
    from hostkeeper.utils.errors import parse_port_list, validate_port

    config = get_config(ctx)
    verbose = bool(ctx.meta.get("verbose")) if ctx is not None else False

    try:
        require_root()
        validate_port(ssh_port)
        ports = parse_port_list(extra_ports)

        collaborators = build_collaborators()
        require_apt(collaborators.packages)

        if not yes and not typer.confirm("Apply security hardening to this host?", default=True):
            console.print("Aborted.")
            raise typer.Exit(0)

        if docker is None:
            if collaborators.runner.which("docker"):
                docker = True
            else:
                docker = yes or typer.confirm("Do you want to install Docker?", default=True)

        if not skip_upgrade:
            with console.status("Updating system..."):
                updated = collaborators.packages.update_index() and collaborators.packages.upgrade()
            if updated:
                console.print("[green]System updated[/green]")
            else:
                console.print("[yellow]System update failed, continuing[/yellow]")

        controls = hardening_baseline(
            ssh_port=ssh_port,
            open_http=http,
            open_https=https,
            extra_ports=ports,
            include_container_runtime=docker,
            sshd_config=config.paths.sshd_config,
            sysctl_file=config.paths.sysctl_file,
        )
        reconciler = build_reconciler(
            collaborators,
            config,
            override_policy=always_override if yes else confirm_override,
        )
        with console.status("Applying security controls..."):
            results = reconciler.reconcile_all(controls)
    except HostkeeperError as e:
        handle_error(e)

    TerminalRenderer(console).render(results, RenderContext(verbose=verbose))

    console.print()
    console.print("[yellow]Useful commands:[/yellow]")
    for command, description in CHECK_COMMANDS:
        console.print(f"  {command:<40} - {description}")
    console.print()
    console.print("[yellow]Your current SSH session will remain active.[/yellow]")

    exit_on_failures(results)
