import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()

# Repository dump to read instead of the live registry; empty means live
REPOSITORY = os.getenv("SVCDOT_REPOSITORY", "")

SVCCFG_COMMAND = os.getenv("SVCDOT_SVCCFG", "svccfg")
SVCPROP_COMMAND = os.getenv("SVCDOT_SVCPROP", "svcprop")

LOG_LEVEL = os.getenv("SVCDOT_LOG_LEVEL", "WARNING").upper()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("SVCDOT_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
