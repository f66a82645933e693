"""
Tenant configuration store.

Owns every registered chatbot configuration for the life of the process and
mirrors the full set to a snapshot backend on each creation.
"""

import logging
import secrets
import string
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .snapshot import PersistenceError, SnapshotBackend

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_COLOR = "#0066FF"
ID_ALPHABET = string.digits + string.ascii_lowercase
ID_SUFFIX_LENGTH = 9


def default_welcome_message(business_name: Optional[str]) -> str:
    return f"Hi! I'm {business_name}'s AI assistant. How can I help you today?"


def _parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp into naive UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        return datetime.utcnow()
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


@dataclass(frozen=True)
class Customization:
    """Visual customization of a tenant's widget."""
    primary_color: str = DEFAULT_PRIMARY_COLOR
    welcome_message: str = ""
    accent_color: Optional[str] = None

    @classmethod
    def from_dict(
        cls, data: Optional[Mapping[str, Any]], business_name: Optional[str]
    ) -> "Customization":
        """Build a customization, filling omitted fields with defaults."""
        if not isinstance(data, Mapping):
            data = {}
        return cls(
            primary_color=data.get("primaryColor") or DEFAULT_PRIMARY_COLOR,
            welcome_message=data.get("welcomeMessage") or default_welcome_message(business_name),
            accent_color=data.get("accentColor"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "primaryColor": self.primary_color,
            "welcomeMessage": self.welcome_message,
        }
        if self.accent_color:
            data["accentColor"] = self.accent_color
        return data


@dataclass(frozen=True)
class TenantConfig:
    """Configuration for a single tenant (business)."""
    id: str
    client_name: Optional[str]
    business_name: Optional[str]
    business_info: Optional[str]
    knowledge_base: Optional[str]
    customization: Customization = field(default_factory=Customization)
    created_at: datetime = field(default_factory=datetime.utcnow)
    active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used by the snapshot and API."""
        return {
            "id": self.id,
            "clientName": self.client_name,
            "businessName": self.business_name,
            "businessInfo": self.business_info,
            "knowledgeBase": self.knowledge_base,
            "customization": self.customization.to_dict(),
            "createdAt": self.created_at.isoformat(),
            "active": self.active,
        }

    def summary(self) -> Dict[str, Any]:
        """Listing-safe subset; never includes business info or knowledge base."""
        return {
            "id": self.id,
            "clientName": self.client_name,
            "businessName": self.business_name,
            "createdAt": self.created_at.isoformat(),
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TenantConfig":
        business_name = data.get("businessName")
        return cls(
            id=data["id"],
            client_name=data.get("clientName"),
            business_name=business_name,
            business_info=data.get("businessInfo"),
            knowledge_base=data.get("knowledgeBase"),
            customization=Customization.from_dict(data.get("customization"), business_name),
            created_at=_parse_timestamp(data.get("createdAt")),
            active=bool(data.get("active", True)),
        )


class ConfigStore:
    """
    In-memory tenant registry with snapshot persistence.

    Reads are served from memory; every create rewrites the whole snapshot.
    Persistence failures are logged and never surfaced to callers.
    """

    def __init__(self, snapshot: Optional[SnapshotBackend] = None):
        self._snapshot = snapshot
        self._tenants: Dict[str, TenantConfig] = {}
        self._lock = threading.RLock()

    def load(self) -> int:
        """Restore state from the snapshot. Returns the number of tenants loaded."""
        with self._lock:
            self._tenants.clear()
            if self._snapshot is None:
                return 0

            try:
                entries = self._snapshot.load()
            except PersistenceError as e:
                logger.warning(f"Could not load saved configs, starting fresh: {e}")
                return 0

            if entries is None:
                logger.info("No saved configs - starting fresh")
                return 0

            for entry in entries:
                try:
                    config = TenantConfig.from_dict(entry)
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Skipping malformed tenant entry: {e}")
                    continue
                self._tenants[config.id] = config

            logger.info(f"Loaded {len(self._tenants)} chatbot(s)")
            return len(self._tenants)

    def create(self, data: Mapping[str, Any]) -> TenantConfig:
        """Register a new tenant and persist the full snapshot."""
        business_name = data.get("businessName")
        with self._lock:
            config = TenantConfig(
                id=self._generate_id(),
                client_name=data.get("clientName"),
                business_name=business_name,
                business_info=data.get("businessInfo"),
                knowledge_base=data.get("knowledgeBase"),
                customization=Customization.from_dict(data.get("customization"), business_name),
                created_at=datetime.utcnow(),
                active=True,
            )
            self._tenants[config.id] = config
            self._persist()

        logger.info(f"Chatbot created: {config.business_name} ({config.id})")
        return config

    def get(self, tenant_id: str) -> Optional[TenantConfig]:
        with self._lock:
            return self._tenants.get(tenant_id)

    def list(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [config.summary() for config in self._tenants.values()]

    def count(self) -> int:
        with self._lock:
            return len(self._tenants)

    def __len__(self) -> int:
        return self.count()

    def _generate_id(self) -> str:
        while True:
            suffix = "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
            tenant_id = f"bot_{int(time.time() * 1000)}_{suffix}"
            if tenant_id not in self._tenants:
                return tenant_id

    def _persist(self):
        if self._snapshot is None:
            return
        try:
            self._snapshot.save([config.to_dict() for config in self._tenants.values()])
        except PersistenceError as e:
            logger.error(f"Failed to save chatbot configurations: {e}")
