from pathlib import Path

# Self-signed pair generated once per test session by conftest.py
CERTS_DIR = Path(__file__).resolve().parent / "certs"
SERVER_CRT = CERTS_DIR / "npt_cert.pem"
SERVER_KEY = CERTS_DIR / "npt_key.pem"
