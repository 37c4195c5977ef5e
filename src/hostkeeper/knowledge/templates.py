"""Content templates for files hostkeeper writes.

Every managed file carries ``MANAGED_MARKER`` in a comment so a later probe
can tell hostkeeper's files from ones written by an administrator.
"""

from __future__ import annotations

from hostkeeper.models.resource import SiteSpec
from hostkeeper.utils.hashing import hash_text

MANAGED_MARKER = "Managed by hostkeeper"


def render_server_block(spec: SiteSpec) -> str:
    """nginx server block for a site, HTTP only (certbot adds TLS)."""
    lines = [
        "server {",
        "    listen 80;",
        "    listen [::]:80;",
        "",
        f"    server_name {spec.domain};",
        f"    root {spec.web_dir};",
        "",
        f"    index {' '.join(spec.index_files)};",
        "",
        "    location / {",
        "        try_files $uri $uri/ =404;",
        "    }",
    ]
    if spec.php_socket:
        lines += [
            "",
            "    location ~ \\.php$ {",
            "        include snippets/fastcgi-php.conf;",
            f"        fastcgi_pass unix:{spec.php_socket};",
            "    }",
        ]
    lines += [
        "",
        "    location ~ /\\.ht {",
        "        deny all;",
        "    }",
    ]
    if spec.security_headers:
        lines += [
            "",
            '    add_header X-Frame-Options "SAMEORIGIN" always;',
            '    add_header X-Content-Type-Options "nosniff" always;',
            '    add_header X-XSS-Protection "1; mode=block" always;',
        ]
    lines.append("}")
    return "\n".join(lines) + "\n"


def site_header(spec: SiteSpec) -> str:
    """First line of a managed site config, fingerprinting the desired block."""
    return f"# {MANAGED_MARKER} sha256={hash_text(render_server_block(spec))}"


def render_site_config(spec: SiteSpec) -> str:
    """Complete site configuration file content."""
    return f"{site_header(spec)}\n{render_server_block(spec)}"


def render_default_page(domain: str) -> str:
    """Minimal working page for a new site."""
    return f"""<!DOCTYPE html>
<html>
<head>
    <title>Welcome to {domain}</title>
</head>
<body>
    <h1>{domain} is working!</h1>
    <p>SSL will be configured shortly.</p>
</body>
</html>
"""


FAIL2BAN_JAIL = f"""# {MANAGED_MARKER}
[DEFAULT]
bantime = 1h
findtime = 10m
maxretry = 5
banaction = ufw

[sshd]
enabled = true
port = ssh
filter = sshd
logpath = /var/log/auth.log
maxretry = 5
bantime = 1h
"""

AUTO_UPGRADES = f"""// {MANAGED_MARKER}
APT::Periodic::Update-Package-Lists "1";
APT::Periodic::Unattended-Upgrade "1";
APT::Periodic::AutocleanInterval "7";
"""

UNATTENDED_UPGRADES = f"""// {MANAGED_MARKER}
Unattended-Upgrade::Allowed-Origins {{
    "${{distro_id}}:${{distro_codename}}";
    "${{distro_id}}:${{distro_codename}}-security";
    "${{distro_id}}ESMApps:${{distro_codename}}-apps-security";
    "${{distro_id}}ESM:${{distro_codename}}-infra-security";
}};
Unattended-Upgrade::Remove-Unused-Kernel-Packages "true";
Unattended-Upgrade::Remove-Unused-Dependencies "true";
Unattended-Upgrade::Automatic-Reboot "false";
"""

SYSCTL_SECURITY = f"""# {MANAGED_MARKER}
# IP Spoofing protection
net.ipv4.conf.all.rp_filter = 1
net.ipv4.conf.default.rp_filter = 1

# Disable ICMP redirects
net.ipv4.conf.all.accept_redirects = 0
net.ipv4.conf.default.accept_redirects = 0
net.ipv6.conf.all.accept_redirects = 0
net.ipv6.conf.default.accept_redirects = 0

# Disable send redirects
net.ipv4.conf.all.send_redirects = 0
net.ipv4.conf.default.send_redirects = 0

# Disable source routing
net.ipv4.conf.all.accept_source_route = 0
net.ipv4.conf.default.accept_source_route = 0
net.ipv6.conf.all.accept_source_route = 0
net.ipv6.conf.default.accept_source_route = 0

# SYN flood protection
net.ipv4.tcp_syncookies = 1
net.ipv4.tcp_max_syn_backlog = 2048
net.ipv4.tcp_synack_retries = 2

# Log martians
net.ipv4.conf.all.log_martians = 1
net.ipv4.conf.default.log_martians = 1

# Ignore ICMP broadcast
net.ipv4.icmp_echo_ignore_broadcasts = 1

# Ignore bogus ICMP errors
net.ipv4.icmp_ignore_bogus_error_responses = 1
"""

# Minimal SSH hardening: slows brute force, leaves root login unchanged
SSHD_DIRECTIVES = {
    "MaxAuthTries": "3",
    "LoginGraceTime": "20",
}
