import os
from pathlib import Path
from datetime import datetime, timezone
import json
from .file_manager import FileManager

APP_NAME = "HTCC"
LOG_DIR_ENV = "HTCC_INSTALLER_LOG_DIR"

class Logger:
    @staticmethod
    def log_dir() -> Path:
        override = os.getenv(LOG_DIR_ENV)
        if override:
            return Path(override)
        # Deferred custom actions run as SYSTEM, so LOCALAPPDATA is not useful here
        return Path(os.getenv("PROGRAMDATA", ".")) / APP_NAME / "installer-logs"

    @staticmethod
    def log_event(data: dict):
        try:
            log_file = Logger.log_dir() / "last_invocation.json"

            json_data = json.dumps(data, indent=2, ensure_ascii=False)

            FileManager.write_to_file(log_file, json_data)
        except Exception as e:
            print(f"Failed to log event: {e}")

    @staticmethod
    def log_error(message: str):
        try:
            error_log_file = Logger.log_dir() / "errors.log"
            time_stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
            log_entry = f"[{time_stamp}] ERROR: {message}\n"

            FileManager.append_to_file(error_log_file, log_entry)
        except Exception as e:
            print(f"Failed to log error: {e}")
