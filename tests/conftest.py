import os
import sys
import tempfile
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep tests away from the real ledger file and logs directory.
os.environ.setdefault("HABIT_LEDGER_DATA_DIR", tempfile.mkdtemp(prefix="habit_ledger_test_"))
os.environ.setdefault("HABIT_LEDGER_LOG_DIR", tempfile.mkdtemp(prefix="habit_ledger_logs_"))
