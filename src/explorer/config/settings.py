import os
from dotenv import load_dotenv
load_dotenv()
# ---- Data service ----
DATA_SERVICE_BASE_URL = os.environ.get("PYTHON_API_URL", "http://localhost:8000")

DATA_SERVICE_REQUESTS_PER_SEC = float(os.environ.get("DATA_SERVICE_REQUESTS_PER_SEC", "4.0"))
DATA_SERVICE_TIMEOUT_SEC = int(os.environ.get("DATA_SERVICE_TIMEOUT_SEC", "30"))
DATA_SERVICE_MAX_RETRIES = int(os.environ.get("DATA_SERVICE_MAX_RETRIES", "3"))

# ---- Expansion ----
ACCOUNT_FLOWS_PAGE_SIZE = int(os.environ.get("ACCOUNT_FLOWS_PAGE_SIZE", "100"))

# Shown to the user whenever an expansion fails, whatever the cause.
FETCH_FAILED_MESSAGE = "Failed to fetch network data"

# ---- Logging ----
LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")
