"""Shared fixtures: throwaway RSA keys and a ready-made booking config."""

import base64
import json

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from calendar_booking.config import BookingConfig, ServiceAccountCredential

CLIENT_EMAIL = "booking-bot@demo-project.iam.gserviceaccount.com"
CALENDAR_ID = "team@group.calendar.google.com"


def decode_segment(segment: str) -> bytes:
    """Inverse of base64url for test assertions."""
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def decode_json_segment(segment: str) -> dict:
    return json.loads(decode_segment(segment))


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key) -> str:
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def booking_config(private_key_pem) -> BookingConfig:
    return BookingConfig(
        credential=ServiceAccountCredential(
            client_email=CLIENT_EMAIL, private_key=private_key_pem
        ),
        calendar_id=CALENDAR_ID,
    )
