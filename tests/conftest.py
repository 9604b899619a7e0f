import pytest

from src.server.ssl_utils import generate_certificate_and_key
from tests.ssl_constants import CERTS_DIR, SERVER_CRT, SERVER_KEY


@pytest.fixture(scope="session", autouse=True)
def generate_test_certs() -> None:
    """Generate the self-signed certificate the TLS tests trust, once per
    test session.
    """
    if SERVER_CRT.exists() and SERVER_KEY.exists():
        return

    CERTS_DIR.mkdir(parents=True, exist_ok=True)
    generate_certificate_and_key(
        CERTS_DIR,
        cert_name=SERVER_CRT.name,
        key_name=SERVER_KEY.name,
    )
