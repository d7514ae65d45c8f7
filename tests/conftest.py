"""
Root conftest.py - Global configuration for all test layers.

Test Layers:
    - component/  : Service APIs through FastAPI TestClient (mocked repositories)
    - unit/       : Business logic and pure functions, no I/O
"""
import os
import sys

# Set testing environment BEFORE any service imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"
os.environ["EVENT_BUS_ENABLED"] = "false"
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)
