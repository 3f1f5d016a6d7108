"""caddyctl - manage Caddy reverse-proxy label files and reloads."""

__version__ = "0.3.0"
