"""Create self-signed certificates and the SSL contexts built on them."""

import ssl
import subprocess
import sys
from pathlib import Path


def _remove_partial_files(*paths: Path) -> None:
    for path in paths:
        if path.exists():
            path.unlink()


def generate_certificate_and_key(
    gen_path: Path,
    cert_name: str = "cert.pem",
    key_name: str = "key.pem",
    common_name: str = "localhost",
) -> None:
    """Generate a self-signed SSL certificate and key using OpenSSL.

    Nothing is done if both files already exist. On failure any partially
    written file is removed.

    Args:
        gen_path (Path): The directory where the certificate and key
            files will be created.
        cert_name (str, optional): The name of the certificate file.
            Defaults to "cert.pem".
        key_name (str, optional): The name of the key file.
            Defaults to "key.pem".
        common_name (str, optional): The CN of the certificate subject.
            Defaults to "localhost".

    """
    cert_path = gen_path / cert_name
    key_path = gen_path / key_name

    if cert_path.exists() and key_path.exists():
        print(
            f"[SSL_UTILS] SSL cert and key already exist: "
            f"{cert_path}, {key_path}",
        )
        return

    print(
        f"[SSL_UTILS] Generating self-signed SSL certificate and key in "
        f"{gen_path}...",
    )
    try:
        subprocess.run(
            ["openssl", "genrsa", "-out", str(key_path), "2048"],
            check=True,
            capture_output=True,
            text=True,
        )
        subprocess.run(
            [
                "openssl",
                "req",
                "-new",
                "-x509",
                "-key",
                str(key_path),
                "-out",
                str(cert_path),
                "-days",
                "365",
                "-nodes",
                "-subj",
                f"/O=Name Prefix Tree/CN={common_name}",
            ],
            check=True,
            capture_output=True,
            text=True,
        )
        print(f"[SSL_UTILS] Successfully generated {cert_path} and {key_path}")

    except FileNotFoundError:
        print(
            "[SSL_UTILS ERROR] OpenSSL not found. Please install OpenSSL.",
            file=sys.stderr,
        )
        _remove_partial_files(cert_path, key_path)

    except subprocess.CalledProcessError as e:
        print(
            f"[SSL_UTILS ERROR] OpenSSL command failed: {e}",
            file=sys.stderr,
        )
        print(f"Stdout: {e.stdout}", file=sys.stderr)
        print(f"Stderr: {e.stderr}", file=sys.stderr)
        _remove_partial_files(cert_path, key_path)

    except Exception as e:
        print(
            "[SSL_UTILS ERROR] An unexpected error "
            f"occurred during SSL generation: {e}",
            file=sys.stderr,
        )
        _remove_partial_files(cert_path, key_path)


def create_server_ssl_context(cert_path: Path, key_path: Path) -> ssl.SSLContext:
    """Build the TLS context the server listens with.

    Args:
        cert_path (Path): The certificate file.
        key_path (Path): The private key file.

    Returns:
        ssl.SSLContext: A server-side context holding the key pair.

    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path))
    return context


def create_client_ssl_context(cafile_path: Path) -> ssl.SSLContext:
    """Build a client context that trusts the self-signed server certificate.

    Hostnames aren't checked since the certificate is issued to localhost.

    Args:
        cafile_path (Path): The server certificate, used as CA.

    Raises:
        FileNotFoundError: If `cafile_path` doesn't exist.

    Returns:
        ssl.SSLContext: A client-side context requiring a valid certificate.

    """
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_REQUIRED
    context.load_verify_locations(cafile=str(cafile_path))
    return context
