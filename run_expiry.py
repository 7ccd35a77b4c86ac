"""
Membership Expiry Runner
Expires every membership whose end date has passed.
Schedule it once a day (cron, systemd timer): python run_expiry.py
"""

import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from gymhub import models  # noqa: F401
from gymhub.database import SessionLocal
from gymhub.domain.memberships.service import MembershipService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info("🚀 Starting membership expiry sweep...")
    db = SessionLocal()
    try:
        expired = MembershipService(db).expire_lapsed()
        logger.info(f"✅ Expiry sweep finished: {expired} membership(s) expired")
    except Exception as e:
        logger.error(f"❌ Expiry sweep failed: {e}")
        sys.exit(1)
    finally:
        db.close()
