import logging
from typing import Dict, List, Optional

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from securevault.core.crypto_utils import FieldCipher
from securevault.core.errors import (
    DecryptionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from securevault.db.models.vault_item import VaultItem
from securevault.schemas.vault import VaultItemDeleted, VaultItemView

logger = logging.getLogger(__name__)

MAX_TITLE = 255
MAX_USERNAME = 255
MAX_URL = 255
# keeps the ciphertext of a 4-byte-per-char secret within MEDIUMTEXT
MAX_SECRET = 65535

SECRET_FIELDS = ("username", "password", "notes")

_url_adapter = TypeAdapter(HttpUrl)


def _blank_to_none(value: Optional[str], strip: bool = False) -> Optional[str]:
    if value is None:
        return None
    if strip:
        value = value.strip()
    return value if value != "" else None


def clean_fields(
    title: Optional[str],
    username: Optional[str] = None,
    password: Optional[str] = None,
    url: Optional[str] = None,
    notes: Optional[str] = None,
) -> Dict[str, Optional[str]]:
    """
    Normalize and validate a vault submission.

    Empty strings count as absent. Title, username and url are trimmed;
    password and notes are kept exactly as given.
    """
    fields = {
        "title": _blank_to_none(title, strip=True),
        "username": _blank_to_none(username, strip=True),
        "password": _blank_to_none(password),
        "url": _blank_to_none(url, strip=True),
        "notes": _blank_to_none(notes),
    }

    errors: Dict[str, List[str]] = {}

    for name, value in fields.items():
        if value is None:
            continue
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            errors.setdefault(name, []).append(f"The {name} field must be valid UTF-8 text.")

    if fields["title"] is None:
        errors.setdefault("title", []).append("The title field is required.")
    elif len(fields["title"]) > MAX_TITLE:
        errors.setdefault("title", []).append(
            f"The title field must not be greater than {MAX_TITLE} characters."
        )

    if fields["username"] is not None and len(fields["username"]) > MAX_USERNAME:
        errors.setdefault("username", []).append(
            f"The username field must not be greater than {MAX_USERNAME} characters."
        )

    for name in ("password", "notes"):
        if fields[name] is not None and len(fields[name]) > MAX_SECRET:
            errors.setdefault(name, []).append(
                f"The {name} field must not be greater than {MAX_SECRET} characters."
            )

    if fields["url"] is not None and "url" not in errors:
        if len(fields["url"]) > MAX_URL:
            errors.setdefault("url", []).append(
                f"The url field must not be greater than {MAX_URL} characters."
            )
        # http(s) only; the value ends up in an href
        try:
            _url_adapter.validate_python(fields["url"])
        except PydanticValidationError:
            errors.setdefault("url", []).append("The url field must be a valid http or https URL.")

    if errors:
        raise ValidationError(errors)
    return fields


class VaultStore:
    """
    Owner-scoped access to encrypted vault items.

    Every method takes the owner's user id explicitly; no method reads
    the current user from anywhere else. Secret fields are encrypted one
    by one on write and decrypted on read.
    """

    def __init__(self, db: Session, cipher: FieldCipher):
        self.db = db
        self.cipher = cipher

    # ---------- encryption boundary ----------

    def _seal(self, value: Optional[str]) -> Optional[str]:
        return self.cipher.encrypt(value) if value is not None else None

    def _open(self, item: VaultItem, field: str) -> Optional[str]:
        value = getattr(item, field)
        if not value:
            return None
        try:
            return self.cipher.decrypt(value)
        except DecryptionError:
            logger.error("Failed to decrypt %s of vault item %s", field, item.id)
            raise

    def _view(self, item: VaultItem, plain: Optional[Dict[str, Optional[str]]] = None) -> VaultItemView:
        if plain is None:
            plain = {field: self._open(item, field) for field in SECRET_FIELDS}
        return VaultItemView(
            id=item.id,
            title=item.title,
            username=plain["username"],
            password=plain["password"],
            url=item.url,
            notes=plain["notes"],
            created_at=item.created_at,
            updated_at=item.updated_at,
        )

    # ---------- storage ----------

    def _owned(self, owner: int, item_id: int) -> VaultItem:
        try:
            item = (
                self.db.query(VaultItem)
                .filter(VaultItem.id == item_id, VaultItem.user_id == owner)
                .first()
            )
        except SQLAlchemyError as exc:
            logger.error("Vault lookup failed: %s", exc)
            raise PersistenceError("Vault storage unavailable") from exc
        if not item:
            raise NotFoundError("Vault item not found")
        return item

    def _commit(self, what: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Vault %s error: %s", what, exc)
            raise PersistenceError(f"Failed to {what} vault item") from exc

    # ---------- operations ----------

    def list(self, owner: int) -> List[VaultItemView]:
        try:
            items = (
                self.db.query(VaultItem)
                .filter(VaultItem.user_id == owner)
                .order_by(VaultItem.created_at.desc(), VaultItem.id.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            logger.error("Vault index error: %s", exc)
            raise PersistenceError("Vault storage unavailable") from exc

        # one bad ciphertext fails the whole listing
        return [self._view(item) for item in items]

    def get(self, owner: int, item_id: int) -> VaultItemView:
        return self._view(self._owned(owner, item_id))

    def create(
        self,
        owner: int,
        title: Optional[str],
        username: Optional[str] = None,
        password: Optional[str] = None,
        url: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> VaultItemView:
        fields = clean_fields(title, username, password, url, notes)

        item = VaultItem(
            user_id=owner,
            title=fields["title"],
            username=self._seal(fields["username"]),
            password=self._seal(fields["password"]),
            url=fields["url"],
            notes=self._seal(fields["notes"]),
        )
        self.db.add(item)
        self._commit("create")
        self.db.refresh(item)

        return self._view(item, plain=fields)

    def update(
        self,
        owner: int,
        item_id: int,
        title: Optional[str],
        username: Optional[str] = None,
        password: Optional[str] = None,
        url: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> VaultItemView:
        item = self._owned(owner, item_id)
        fields = clean_fields(title, username, password, url, notes)

        # full replace: anything not supplied is cleared
        item.title = fields["title"]
        item.username = self._seal(fields["username"])
        item.password = self._seal(fields["password"])
        item.url = fields["url"]
        item.notes = self._seal(fields["notes"])
        self._commit("update")
        self.db.refresh(item)

        return self._view(item, plain=fields)

    def delete(self, owner: int, item_id: int) -> VaultItemDeleted:
        item = self._owned(owner, item_id)
        deleted = VaultItemDeleted(id=item.id, title=item.title)

        self.db.delete(item)
        self._commit("delete")
        return deleted
