"""Member repository - Database operations for gym members"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Member


class MemberRepository:
    """Repository for member database operations"""

    @staticmethod
    def get_member_by_id(db: Session, member_id: int) -> Optional[Member]:
        return db.query(Member).filter(Member.id == member_id).first()

    @staticmethod
    def get_member_by_email(db: Session, email: str) -> Optional[Member]:
        return db.query(Member).filter(Member.email == email).first()

    @staticmethod
    def get_member_by_qr_token(db: Session, token: str) -> Optional[Member]:
        return db.query(Member).filter(Member.qr_code_token == token).first()

    @staticmethod
    def create_member(db: Session, **member_data) -> Member:
        member = Member(**member_data)
        db.add(member)
        db.commit()
        db.refresh(member)
        return member
