import os
import sys
from pathlib import Path

import uvicorn

from core.config_manager import config
from core.logger import setup_logging

# Add project root to path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))


def main():
    """Main entry point for the Habit Ledger server."""
    setup_logging(config.LOG_LEVEL, config.CONSOLE_LOG_LEVEL)

    reload_enabled = os.getenv("HABIT_LEDGER_RELOAD", "0").lower() in {"1", "true", "yes"}
    host = os.getenv("HABIT_LEDGER_HOST", "0.0.0.0")
    port = int(os.getenv("HABIT_LEDGER_PORT", "3001"))

    uvicorn.run(
        "web.backend.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload_enabled,
        reload_dirs=["web", "core", "scheduler"] if reload_enabled else None,
    )


if __name__ == "__main__":
    main()
