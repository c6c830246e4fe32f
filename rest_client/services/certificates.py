"""
Client certificate resolution.

Certificates are configured per ``host[:port]``. Each configured path is
resolved to an absolute file:

1. absolute paths are used as they are
2. relative paths resolve against the workspace root when one is configured
3. otherwise they resolve against the directory of the file defining the request

A path that does not exist is reported as a warning and that artifact is
left out; the request still goes ahead.

PKCS#12 (pfx) bundles are unpacked into PEM so the TLS context can load them
like a cert/key pair.
"""

import logging
from pathlib import Path
from urllib.parse import urlsplit

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from ..config import CertificateConfig
from ..schemas.http import HostCertificate


logger = logging.getLogger(__name__)


def request_host(url: str) -> str | None:
    """Return ``hostname[:port]`` for a URL, or None for a bare path."""
    parts = urlsplit(url)
    if not parts.hostname:
        return None
    try:
        port = parts.port
    except ValueError:
        port = None
    return f"{parts.hostname}:{port}" if port is not None else parts.hostname


def _warn_missing(path: str, cert_name: str, warnings: list[str] | None) -> None:
    message = f"Certificate path {path} of {cert_name} doesn't exist, please make sure it exists."
    logger.warning(message)
    if warnings is not None:
        warnings.append(message)


def resolve_certificate_path(
    path: str,
    cert_name: str,
    workspace_root: Path | None = None,
    source_file: Path | None = None,
    warnings: list[str] | None = None
) -> Path | None:
    """
    Resolve a configured certificate path to an existing absolute path.

    Args:
        path: Absolute or relative path from the settings
        cert_name: Which artifact this is (cert, key or pfx), used in warnings
        workspace_root: Root relative paths are resolved against, if known
        source_file: File that defined the current request
        warnings: List collecting caller-visible warnings

    Returns:
        The resolved path, or None when it cannot be found
    """
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        if not candidate.exists():
            _warn_missing(path, cert_name, warnings)
            return None
        return candidate

    if workspace_root is not None:
        candidate = Path(workspace_root) / path
        if not candidate.exists():
            _warn_missing(path, cert_name, warnings)
            return None
        return candidate

    if source_file is None:
        return None

    candidate = Path(source_file).parent / path
    if not candidate.exists():
        _warn_missing(path, cert_name, warnings)
        return None
    return candidate


def get_request_certificate(
    url: str,
    certificates: dict[str, CertificateConfig],
    workspace_root: Path | None = None,
    source_file: Path | None = None,
    warnings: list[str] | None = None
) -> HostCertificate | None:
    """Load the client certificate configured for the request's host."""
    host = request_host(url)
    if host is None or host not in certificates:
        return None

    config = certificates[host]
    material: dict[str, object] = {"passphrase": config.passphrase}
    for cert_name in ("cert", "key", "pfx"):
        configured = getattr(config, cert_name)
        if not configured:
            continue
        resolved = resolve_certificate_path(
            configured, cert_name, workspace_root, source_file, warnings
        )
        if resolved is not None:
            material[cert_name] = resolved.read_bytes()
            material[f"{cert_name}_path"] = resolved

    return HostCertificate(**material)


def load_pfx(pfx: bytes, passphrase: str | None = None) -> tuple[bytes, bytes]:
    """
    Unpack a PKCS#12 bundle into a PEM certificate chain and a PEM private key.

    The key is written unencrypted; callers keep it in memory or in a
    short-lived file only.

    Raises:
        ValueError: If the bundle cannot be read with the given passphrase,
            or holds no certificate or no private key
    """
    password = passphrase.encode("utf-8") if passphrase else None
    key, certificate, additional = pkcs12.load_key_and_certificates(pfx, password)
    if key is None or certificate is None:
        raise ValueError("PKCS#12 bundle must contain a certificate and a private key")

    chain = b"".join(
        cert.public_bytes(serialization.Encoding.PEM)
        for cert in [certificate, *additional]
    )
    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return chain, key_pem
