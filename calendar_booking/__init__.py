"""Service-account calendar booking: JWT-bearer auth, free/busy check, conditional insert."""
