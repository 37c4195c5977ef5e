"""CLI command for site provisioning."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.panel import Panel

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


def site_cmd(
    ctx: typer.Context,
    domains: List[str] = typer.Argument(..., help="Domains to provision; the first is the primary"),
    email: Optional[str] = typer.Option(
        None,
        "--email",
        "-e",
        help="Contact email for certificate expiry notices",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Replace existing configuration without asking",
    ),
    no_ssl: bool = typer.Option(
        False,
        "--no-ssl",
        help="Configure HTTP only; skip certificates and renewal",
    ),
) -> None:
    """
    Provision nginx sites with Let's Encrypt certificates.

    Each domain gets a server block, a web directory with a default page,
    and a certificate. Certificate renewal is registered with cron.

    Example:
        hostkeeper site example.com www.example.com --email admin@example.com
    """
    from hostkeeper.core.certificates import CertificateIssuer, CertificateResult
    from hostkeeper.core.reconciler import always_override
    from hostkeeper.core.schedule import certificate_renewal_task, ensure_registration
    from hostkeeper.knowledge.controls import certificate_client_control, web_server_control
    from hostkeeper.models.resource import ManagedResource, SiteSpec
    from hostkeeper.renderers.base import RenderContext
    from hostkeeper.renderers.terminal import TerminalRenderer
    from hostkeeper.utils.errors import validate_domain, validate_email

    config = get_config(ctx)
    verbose = bool(ctx.meta.get("verbose")) if ctx is not None else False

    try:
        require_root()
        for domain in domains:
            validate_domain(domain)

        collaborators = build_collaborators()
        require_apt(collaborators.packages)
        reconciler = build_reconciler(
            collaborators,
            config,
            override_policy=always_override if yes else confirm_override,
        )

        dependencies = [web_server_control()]
        if not no_ssl:
            dependencies.append(certificate_client_control())
        with console.status("Checking nginx and certbot..."):
            dep_results = reconciler.reconcile_all(dependencies)
        exit_on_failures(dep_results)

        if not no_ssl:
            if not email:
                email = typer.prompt("Email for SSL certificate notifications")
            validate_email(email or "")

        issuer = CertificateIssuer(collaborators.certificates, config.paths.letsencrypt_live)
        results = list(dep_results)
        certificates: dict[str, CertificateResult] = {}

        for domain in domains:
            console.print(f"\n[bold blue]Processing: {domain}[/bold blue]")
            spec = SiteSpec(
                domain=domain,
                web_root=Path(config.paths.web_root),
                php_socket=config.site.php_socket,
                security_headers=config.site.security_headers,
                owner=config.site.owner,
            )
            with console.status("Configuring nginx..."):
                site_result = reconciler.reconcile(ManagedResource.site(spec))
            results.append(site_result)

            if not no_ssl and email:
                with console.status(f"Obtaining SSL certificate for {domain}..."):
                    cert = issuer.issue_if_needed(domain, email, site_result)
                certificates[domain] = cert
                if cert.failed:
                    console.print(f"[red]Failed to obtain SSL certificate for {domain}[/red]")
                    console.print("[yellow]Make sure:[/yellow]")
                    for hint in cert.hints:
                        console.print(f"  - {hint}")

        renewal = None
        if not no_ssl:
            renewal = ensure_registration(
                reconciler, certificate_renewal_task(config.schedule.renewal_cron)
            )
    except HostkeeperError as e:
        handle_error(e)

    TerminalRenderer(console).render(results, RenderContext(verbose=verbose))

    primary = domains[0]
    web_dir = Path(config.paths.web_root) / primary
    lines = [
        f"[bold]Nginx conf[/bold]  : {Path(config.paths.sites_available) / f'{primary}.conf'}",
        f"[bold]Web root[/bold]    : {web_dir}",
    ]
    cert = certificates.get(primary)
    if cert is not None and cert.cert_path:
        lines += [
            f"[bold]SSL Cert[/bold]    : {cert.cert_path}",
            f"[bold]SSL Key[/bold]     : {cert.key_path}",
            f"[bold]Expires[/bold]     : {cert.expires or 'unknown'}",
        ]
    if renewal is not None:
        lines.append(
            f"[bold]Renewal[/bold]     : Cron ({config.schedule.renewal_cron}) - "
            f"{renewal.value.replace('_', ' ')}"
        )
    scheme = "http" if no_ssl else "https"
    lines += ["", f"[yellow]Test your site:[/yellow] {scheme}://{primary}"]
    console.print(Panel("\n".join(lines), title=f"Domain setup: {primary}"))

    exit_on_failures(results)
