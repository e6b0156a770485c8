import logging
import sys
import json
from datetime import datetime
from pathlib import Path

from tuition_app.config import get_settings

LOGS_DIR = Path(get_settings().logs_dir)
LOGS_DIR.mkdir(parents=True, exist_ok=True)

def setup_logger(name: str = "server"):
    """Console logger plus one log file per day under LOGS_DIR."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    # Handlers are attached once per process
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    daily_log = LOGS_DIR / f"server_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(daily_log)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

    for handler in (console_handler, file_handler):
        handler.setLevel(logging.INFO)
        logger.addHandler(handler)

    return logger

class SecurityAuditLogger:
    """Writes one JSON line per moderation action taken by an admin."""

    def __init__(self):
        self.logger = logging.getLogger('security_audit')
        self.logger.setLevel(logging.INFO)
        if not self.logger.handlers:
            handler = logging.FileHandler(LOGS_DIR / 'security_audit.log')
            handler.setFormatter(logging.Formatter('%(asctime)s - %(message)s'))
            self.logger.addHandler(handler)

    def log_security_event(self, event_type: str, actor: str, details: dict):
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "event_type": event_type,
            "actor": actor,
            "details": details
        }
        self.logger.info(json.dumps(log_entry, default=str))

# Single logger instances shared across all modules
logger = setup_logger()
audit_logger = SecurityAuditLogger()
