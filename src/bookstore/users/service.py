"""User profile service: users and their credit cards."""

import logging
from typing import Any, Dict

from ..common.checks import conflict_on_duplicate
from ..common.exceptions import ConflictException, NotFoundException, ValidationException
from ..core.database import ConnectionLease, DatabasePool
from .passwords import hash_password
from .schemas import CreditCard, CreditCardCreate, User, UserCreate, UserUpdate

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, username, name, email, home_address"


def _card_from_row(row: Dict[str, Any]) -> CreditCard:
    return CreditCard(
        id=row["id"],
        user_id=row["user_id"],
        card_last_four=row["card_number"][-4:],
        expiration_date=row["expiration_date"],
        cardholder_name=row["cardholder_name"]
    )


class UserService:
    """Service for managing user profiles."""

    def __init__(self, pool: DatabasePool):
        self.pool = pool

    async def create_user(self, user: UserCreate) -> User:
        password_hash = hash_password(user.password)
        async with self.pool.transaction() as conn:
            existing = await conn.fetch_one(
                "SELECT id FROM users WHERE username = ?", (user.username,)
            )
            taken = f"Username '{user.username}' is already taken"
            if existing:
                raise ConflictException(taken)

            with conflict_on_duplicate(conn, taken):
                row = await conn.fetch_one(
                    f"""
                    INSERT INTO users (username, password_hash, name, email, home_address)
                    VALUES (?, ?, ?, ?, ?)
                    RETURNING {USER_COLUMNS}
                    """,
                    (
                        user.username,
                        password_hash,
                        user.name,
                        user.email,
                        user.home_address
                    )
                )

        logger.info(f"Created user {row['id']} ({user.username})")
        return User(**row)

    async def get_user(self, username: str) -> User:
        row = await self.pool.fetch_one(
            f"SELECT {USER_COLUMNS} FROM users WHERE username = ?", (username,)
        )
        if not row:
            raise NotFoundException(f"User '{username}' not found")
        return User(**row)

    async def update_user(self, username: str, update_data: UserUpdate) -> User:
        """Update any profile field except the email address."""
        if update_data.email is not None:
            raise ValidationException("Email address cannot be changed")

        # Build update query dynamically
        updates = []
        params = []

        if update_data.password is not None:
            updates.append("password_hash = ?")
            params.append(hash_password(update_data.password))

        if update_data.name is not None:
            updates.append("name = ?")
            params.append(update_data.name)

        if update_data.home_address is not None:
            updates.append("home_address = ?")
            params.append(update_data.home_address)

        if not updates:
            return await self.get_user(username)

        params.append(username)
        row = await self.pool.fetch_one(
            f"UPDATE users SET {', '.join(updates)} WHERE username = ? RETURNING {USER_COLUMNS}",
            params
        )
        if not row:
            raise NotFoundException(f"User '{username}' not found")

        logger.info(f"Updated user {username}")
        return User(**row)

    async def add_credit_card(self, username: str, card: CreditCardCreate) -> CreditCard:
        async with self.pool.transaction() as conn:
            user_id = await self._require_user_id(conn, username)
            row = await conn.fetch_one(
                """
                INSERT INTO credit_cards (user_id, card_number, expiration_date, cardholder_name)
                VALUES (?, ?, ?, ?)
                RETURNING id, user_id, card_number, expiration_date, cardholder_name
                """,
                (user_id, card.card_number, card.expiration_date, card.cardholder_name)
            )

        logger.info(f"Added credit card {row['id']} for user {username}")
        return _card_from_row(row)

    @staticmethod
    async def _require_user_id(conn: ConnectionLease, username: str) -> int:
        row = await conn.fetch_one("SELECT id FROM users WHERE username = ?", (username,))
        if not row:
            raise NotFoundException(f"User '{username}' not found")
        return row["id"]
