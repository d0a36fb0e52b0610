"""Application configuration."""

import os

# MIFARE Classic factory default, same value as MifareClassic.KEY_DEFAULT on Android
AUTH_KEY = bytes.fromhex(os.getenv("TONUINO_AUTH_KEY", "FFFFFFFFFFFF"))

# Sector holding the Tonuino record
TONUINO_SECTOR = int(os.getenv("TONUINO_SECTOR", "1"))

# Preferred PC/SC reader (substring match on the reader name)
READER_NAME = os.getenv("TONUINO_READER", "ACR122")

# API server
API_HOST = os.getenv("TONUINO_HOST", "0.0.0.0")
API_PORT = int(os.getenv("TONUINO_PORT", "8000"))

# Set TONUINO_READER=simulated to run against an in-memory card
SIMULATED_READER = "simulated"
