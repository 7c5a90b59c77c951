# tokengate_cli/core/config.py
from pathlib import Path
import os

# TokenGate backend URL
BASE_URL = os.environ.get("TOKENGATE_URL", "http://localhost:8000")

# Local state (session token) lives here
APP_DIR = Path(os.environ.get("TOKENGATE_HOME", Path.home() / ".tokengate"))

SESSION_FILE = APP_DIR / "session.json"
