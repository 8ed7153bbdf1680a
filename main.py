"""
Schedule Reminders — Entry Point.

Single entry point: `python main.py` starts the reminder service.
Logging is configured in src.app.main from LOG_LEVEL.
"""

from src.app import main

if __name__ == "__main__":
    main()
