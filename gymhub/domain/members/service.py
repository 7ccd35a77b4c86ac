"""Member service - Business logic for member records"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Member
from ...shared.errors import ConflictError, NotFoundError
from ...shared.validators import require_text
from .repository import MemberRepository
from .schemas import MemberCreate

logger = logging.getLogger(__name__)


class MemberService:
    """Service layer for members"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = MemberRepository()

    def get_member(self, member_id: int) -> Member:
        member = self.repo.get_member_by_id(self.db, member_id)
        if not member:
            raise NotFoundError(f"Member with ID {member_id} not found")
        return member

    def get_member_by_qr_token(self, token: str) -> Member:
        member = self.repo.get_member_by_qr_token(self.db, token.strip()) if token else None
        if not member:
            raise NotFoundError("Invalid QR code")
        return member

    def create_member(self, data: MemberCreate) -> Member:
        first_name = require_text(data.first_name, "First name")
        last_name = require_text(data.last_name, "Last name")

        if self.repo.get_member_by_email(self.db, data.email):
            raise ConflictError("A member with this email already exists")

        try:
            member = self.repo.create_member(
                self.db,
                first_name=first_name,
                last_name=last_name,
                email=data.email,
                phone=data.phone,
            )
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("A member with this email already exists")

        logger.info(f"✅ Registered member {member.id}")
        return member
