# app/shared/storage/database_storage.py
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
import logging

from sqlalchemy import and_, desc, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config.database import build_engine, build_session_factory
from app.config.settings import Settings
from app.core.exceptions import Conflict, DomainError, NotFound, StorageError
from app.shared.database.models import Base, Delivery, Review, User
from app.shared.schemas.common import (
    DeliveryRecord, ReviewRecord, UserCredentials, UserRecord
)
from .base import Storage, aggregate_rating, clean_filters

logger = logging.getLogger(__name__)


class DatabaseStorage(Storage):
    """SQLAlchemy-backed storage (SQLite or PostgreSQL)"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = None
        self.SessionLocal = None

    def open(self) -> None:
        self.engine = build_engine(self.settings)
        self.SessionLocal = build_session_factory(self.engine)
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"🗄️  Database ready: {self.engine.url.render_as_string(hide_password=True)}")

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self.SessionLocal = None

    @contextmanager
    def session_scope(self):
        """One transaction per gateway call"""
        if self.SessionLocal is None:
            raise StorageError("Storage is not open")

        db: Session = self.SessionLocal()
        try:
            yield db
            db.commit()
        except DomainError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"❌ Storage failure: {str(e)}")
            raise StorageError() from e
        finally:
            db.close()

    # ==================== USERS ====================

    def create_user(self, username: str, password_hash: str, full_name: str, role: str) -> UserRecord:
        with self.session_scope() as db:
            user = User(
                username=username,
                password_hash=password_hash,
                full_name=full_name,
                role=role,
                total_reviews=0,
                created_at=datetime.now(timezone.utc)
            )
            db.add(user)
            try:
                db.flush()
            except IntegrityError:
                raise Conflict(f"Username '{username}' already exists")
            return UserRecord.model_validate(user)

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self.session_scope() as db:
            user = db.get(User, user_id)
            return UserRecord.model_validate(user) if user else None

    def get_users(self, user_ids: Iterable[int]) -> Dict[int, UserRecord]:
        ids = set(user_ids)
        if not ids:
            return {}
        with self.session_scope() as db:
            users = db.query(User).filter(User.id.in_(ids)).all()
            return {user.id: UserRecord.model_validate(user) for user in users}

    def get_credentials(self, username: str) -> Optional[UserCredentials]:
        with self.session_scope() as db:
            user = db.query(User).filter(User.username == username).first()
            return UserCredentials.model_validate(user) if user else None

    # ==================== DELIVERIES ====================

    def create_delivery(self, sender_id: int, fields: Dict[str, Any], created_at: datetime) -> DeliveryRecord:
        with self.session_scope() as db:
            delivery = Delivery(
                **fields,
                sender_id=sender_id,
                carrier_id=None,
                status='requested',
                created_at=created_at
            )
            db.add(delivery)
            db.flush()
            return DeliveryRecord.model_validate(delivery)

    def get_delivery(self, delivery_id: int) -> Optional[DeliveryRecord]:
        with self.session_scope() as db:
            delivery = db.get(Delivery, delivery_id)
            return DeliveryRecord.model_validate(delivery) if delivery else None

    def _list(self, *conditions) -> List[DeliveryRecord]:
        with self.session_scope() as db:
            query = db.query(Delivery)
            if conditions:
                query = query.filter(and_(*conditions))
            deliveries = query.order_by(desc(Delivery.created_at), desc(Delivery.id)).all()
            return [DeliveryRecord.model_validate(d) for d in deliveries]

    def list_deliveries(self, filters: Optional[Dict[str, Any]] = None) -> List[DeliveryRecord]:
        conditions = [
            getattr(Delivery, key) == value
            for key, value in clean_filters(filters).items()
        ]
        return self._list(*conditions)

    def list_deliveries_for_sender(self, sender_id: int) -> List[DeliveryRecord]:
        return self._list(Delivery.sender_id == sender_id)

    def list_deliveries_for_carrier(self, carrier_id: int) -> List[DeliveryRecord]:
        return self._list(Delivery.carrier_id == carrier_id)

    def claim_delivery(self, delivery_id: int, carrier_id: int) -> Optional[DeliveryRecord]:
        with self.session_scope() as db:
            result = db.execute(
                update(Delivery)
                .where(
                    Delivery.id == delivery_id,
                    Delivery.status == 'requested',
                    Delivery.carrier_id.is_(None)
                )
                .values(status='accepted', carrier_id=carrier_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                return None

            delivery = db.get(Delivery, delivery_id, populate_existing=True)
            return DeliveryRecord.model_validate(delivery)

    def advance_delivery(
        self, delivery_id: int, carrier_id: int, from_status: str, to_status: str
    ) -> Optional[DeliveryRecord]:
        with self.session_scope() as db:
            result = db.execute(
                update(Delivery)
                .where(
                    Delivery.id == delivery_id,
                    Delivery.status == from_status,
                    Delivery.carrier_id == carrier_id
                )
                .values(status=to_status)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                return None

            delivery = db.get(Delivery, delivery_id, populate_existing=True)
            return DeliveryRecord.model_validate(delivery)

    # ==================== REVIEWS ====================

    def get_review(self, delivery_id: int, reviewer_id: int) -> Optional[ReviewRecord]:
        with self.session_scope() as db:
            review = db.query(Review).filter(
                and_(
                    Review.delivery_id == delivery_id,
                    Review.reviewer_id == reviewer_id
                )
            ).first()
            return ReviewRecord.model_validate(review) if review else None

    def add_review(
        self,
        delivery_id: int,
        reviewer_id: int,
        reviewee_id: int,
        rating: int,
        comment: Optional[str],
        created_at: datetime
    ) -> Optional[ReviewRecord]:
        with self.session_scope() as db:
            # Row lock on the reviewee serializes concurrent reviews for the same user
            reviewee = db.execute(
                select(User).where(User.id == reviewee_id).with_for_update()
            ).scalar_one_or_none()
            if reviewee is None:
                raise NotFound(f"User {reviewee_id} not found")

            existing = db.query(Review.id).filter(
                and_(
                    Review.delivery_id == delivery_id,
                    Review.reviewer_id == reviewer_id
                )
            ).first()
            if existing:
                return None

            review = Review(
                delivery_id=delivery_id,
                reviewer_id=reviewer_id,
                reviewee_id=reviewee_id,
                rating=rating,
                comment=comment,
                created_at=created_at
            )
            db.add(review)
            try:
                db.flush()
            except IntegrityError:
                # uq_reviews_delivery_reviewer: a concurrent duplicate committed first
                db.rollback()
                logger.warning(f"⚠️ Duplicate review for delivery {delivery_id} by user {reviewer_id} rejected")
                return None

            ratings_sum, count = db.query(
                func.coalesce(func.sum(Review.rating), 0),
                func.count(Review.id)
            ).filter(Review.reviewee_id == reviewee_id).one()

            reviewee.rating = aggregate_rating(ratings_sum, count)
            reviewee.total_reviews = count

            return ReviewRecord.model_validate(review)

    def list_reviews_for(self, reviewee_id: int) -> List[ReviewRecord]:
        with self.session_scope() as db:
            reviews = db.query(Review).filter(
                Review.reviewee_id == reviewee_id
            ).order_by(desc(Review.created_at), desc(Review.id)).all()
            return [ReviewRecord.model_validate(r) for r in reviews]
