import os

# Settings are read at import time; give them a test configuration first
os.environ.setdefault("TOKEN_SECRET", "test-secret-key-for-testing-only-do-not-use-in-production")
os.environ.setdefault("TOKEN_ISSUER", "tokengate-tests")
os.environ.setdefault("ADMIN_USERNAME", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "admin-password-1")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("TOKENGATE_HOME", os.path.join(os.path.dirname(__file__), ".tokengate-test"))
