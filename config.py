"""
Process configuration for the SummerChamp API.

Values come from the environment; a local .env file is loaded first when present.
Read them as ``config.NAME`` at call time rather than importing the names directly.
"""
import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "summerChamp")
DATABASE_TIMEOUT_MS = int(os.getenv("DATABASE_TIMEOUT_MS", "5000"))

JWT_SECRET = os.getenv("JWT_SECRET_ACCESS_TOKEN", "")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY") or os.getenv("PAYMENT_SECRET_KEY")

PORT = int(os.getenv("PORT", "5000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
