"""Configuration management for sitedesk."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


DEFAULT_PARTITIONS = (
    "site_content",
    "site_settings",
    "social_links",
    "pages",
    "projects",
    "services",
)


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class StorageConfig:
    """Storage backend configuration."""
    partition_backend: str = "json"  # json, redis
    blob_backend: str = "local"  # local, s3
    working_dir: str = "./sitedesk_data"
    backup_dir: str = "./backups"
    request_timeout: float = 30.0  # per remote call, seconds

    # Redis specific settings
    redis_url: str = "redis://localhost:6379"
    redis_password: Optional[str] = None
    redis_max_connections: int = 50
    redis_connection_timeout: float = 5.0
    redis_socket_timeout: float = 5.0
    redis_health_check_interval: int = 30

    # S3 specific settings
    s3_bucket: Optional[str] = None
    s3_prefix: str = ""
    s3_endpoint_url: Optional[str] = None
    s3_region: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        """Create config from environment variables."""
        return cls(
            partition_backend=os.getenv("STORAGE_PARTITION_BACKEND", "json"),
            blob_backend=os.getenv("STORAGE_BLOB_BACKEND", "local"),
            working_dir=os.getenv("STORAGE_WORKING_DIR", "./sitedesk_data"),
            backup_dir=os.getenv("STORAGE_BACKUP_DIR", "./backups"),
            request_timeout=float(os.getenv("STORAGE_REQUEST_TIMEOUT", "30.0")),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
            redis_password=os.getenv("REDIS_PASSWORD", None),
            redis_max_connections=int(os.getenv("REDIS_MAX_CONNECTIONS", "50")),
            redis_connection_timeout=float(os.getenv("REDIS_CONNECTION_TIMEOUT", "5.0")),
            redis_socket_timeout=float(os.getenv("REDIS_SOCKET_TIMEOUT", "5.0")),
            redis_health_check_interval=int(os.getenv("REDIS_HEALTH_CHECK_INTERVAL", "30")),
            s3_bucket=os.getenv("S3_BUCKET", None),
            s3_prefix=os.getenv("S3_PREFIX", ""),
            s3_endpoint_url=os.getenv("S3_ENDPOINT_URL", None),
            s3_region=os.getenv("S3_REGION", os.getenv("AWS_REGION", None)),
        )

    def __post_init__(self):
        """Validate configuration."""
        valid_partition_backends = {"json", "redis"}
        valid_blob_backends = {"local", "s3"}

        if self.partition_backend not in valid_partition_backends:
            raise ValueError(f"Unknown partition backend: {self.partition_backend}. Available: {valid_partition_backends}")
        if self.blob_backend not in valid_blob_backends:
            raise ValueError(f"Unknown blob backend: {self.blob_backend}. Available: {valid_blob_backends}")
        if self.request_timeout < 0:
            raise ValueError(f"request_timeout must be non-negative, got {self.request_timeout}")
        if self.blob_backend == "s3" and not self.s3_bucket:
            raise ValueError("s3_bucket is required when blob_backend is 's3'")


@dataclass(frozen=True)
class BackupConfig:
    """Backup/restore configuration."""
    partitions: Tuple[str, ...] = DEFAULT_PARTITIONS
    bucket: str = "backups"
    name_prefix: str = "backup-"
    confirmation_ttl: float = 300.0  # seconds a restore confirmation stays valid

    @classmethod
    def from_env(cls) -> 'BackupConfig':
        """Create config from environment variables."""
        partitions = _split_csv(os.getenv("BACKUP_PARTITIONS", ""))
        return cls(
            partitions=partitions or DEFAULT_PARTITIONS,
            bucket=os.getenv("BACKUP_BUCKET", "backups"),
            name_prefix=os.getenv("BACKUP_NAME_PREFIX", "backup-"),
            confirmation_ttl=float(os.getenv("BACKUP_CONFIRMATION_TTL", "300")),
        )

    def __post_init__(self):
        """Validate configuration."""
        if not self.partitions:
            raise ValueError("partitions must not be empty")
        if len(set(self.partitions)) != len(self.partitions):
            raise ValueError(f"partitions must be unique, got {list(self.partitions)}")
        if any(name.startswith("__") for name in self.partitions):
            raise ValueError("partition names starting with '__' are reserved")
        if not self.bucket:
            raise ValueError("bucket must not be empty")
        if not self.name_prefix or "/" in self.name_prefix:
            raise ValueError(f"invalid name_prefix: {self.name_prefix!r}")
        if self.confirmation_ttl <= 0:
            raise ValueError(f"confirmation_ttl must be positive, got {self.confirmation_ttl}")


@dataclass(frozen=True)
class EditorConfig:
    """One editable record kind, e.g. the site text for a language."""
    name: str
    partition: str
    conflict_key: str
    document_field: Optional[str] = None  # None edits the whole record
    read_only_fields: Tuple[str, ...] = ()
    defaults: Dict[str, Any] = field(default_factory=dict)
    touch_field: Optional[str] = None  # set to the save time on every write

    def __post_init__(self):
        """Validate configuration."""
        if not self.name or not self.partition or not self.conflict_key:
            raise ValueError("name, partition and conflict_key are required")
        if self.document_field == self.conflict_key:
            raise ValueError("document_field must differ from conflict_key")


DEFAULT_EDITORS = (
    EditorConfig(
        name="site_content",
        partition="site_content",
        conflict_key="language",
        document_field="content",
    ),
    EditorConfig(
        name="site_settings",
        partition="site_settings",
        conflict_key="id",
        read_only_fields=("id", "updated_at"),
        touch_field="updated_at",
        defaults={
            "site_title": "Default Site Title",
            "site_role": "Default Role",
            "logo_url": "",
            "hero_title": "Default Hero Title",
            "hero_title2": "",
            "hero_subtitle": "Default hero subtitle.",
            "hero_cta_button_text": "Get Started",
            "about_description": "Default about description.",
            "footer_copyright": "Default Copyright",
            "contact_phone": "",
            "contact_address": "",
            "contact_mail": "",
        },
    ),
)


@dataclass(frozen=True)
class CollectionConfig:
    """A list partition whose records are managed one by one, by id."""
    name: str
    partition: str
    id_field: str = "id"
    order_field: Optional[str] = None  # None keeps store order
    descending: bool = False
    created_field: Optional[str] = "created_at"
    defaults: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate configuration."""
        if not self.name or not self.partition or not self.id_field:
            raise ValueError("name, partition and id_field are required")

    @property
    def read_only_fields(self) -> Tuple[str, ...]:
        return tuple(f for f in (self.id_field, self.created_field) if f)


DEFAULT_COLLECTIONS = (
    CollectionConfig(
        name="pages",
        partition="pages",
        order_field="created_at",
        descending=True,
        defaults={"title": "", "slug": "", "content": "", "is_published": False},
    ),
    CollectionConfig(name="projects", partition="projects", order_field="sort_order"),
    CollectionConfig(name="services", partition="services", order_field="sort_order"),
    CollectionConfig(name="social_links", partition="social_links", order_field="sort_order"),
)


@dataclass(frozen=True)
class SiteDeskConfig:
    """Complete sitedesk configuration."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)
    editors: Tuple[EditorConfig, ...] = DEFAULT_EDITORS
    collections: Tuple[CollectionConfig, ...] = DEFAULT_COLLECTIONS

    @classmethod
    def from_env(cls) -> 'SiteDeskConfig':
        """Create complete config from environment variables."""
        return cls(
            storage=StorageConfig.from_env(),
            backup=BackupConfig.from_env(),
        )

    def __post_init__(self):
        """Validate configuration."""
        names = [editor.name for editor in self.editors]
        if len(set(names)) != len(names):
            raise ValueError(f"editor names must be unique, got {names}")
        names = [collection.name for collection in self.collections]
        if len(set(names)) != len(names):
            raise ValueError(f"collection names must be unique, got {names}")

    def editor(self, name: str) -> EditorConfig:
        for editor in self.editors:
            if editor.name == name:
                return editor
        raise KeyError(f"Unknown editor: {name}. Available: {[e.name for e in self.editors]}")

    def collection(self, name: str) -> CollectionConfig:
        for collection in self.collections:
            if collection.name == name:
                return collection
        raise KeyError(f"Unknown collection: {name}. Available: {[c.name for c in self.collections]}")

    def partition_names(self) -> Tuple[str, ...]:
        """Backed-up partitions followed by any extra editor or collection partitions."""
        names = list(self.backup.partitions)
        for extra in self.editors + self.collections:
            if extra.partition not in names:
                names.append(extra.partition)
        return tuple(names)

    def to_dict(self) -> dict:
        """Flatten into the ``global_config`` dict handed to storage backends."""
        config_dict = {
            'working_dir': self.storage.working_dir,
            'backup_dir': self.storage.backup_dir,
            'request_timeout': self.storage.request_timeout,
        }

        if self.storage.partition_backend == "redis":
            config_dict['redis_url'] = self.storage.redis_url
            config_dict['redis_password'] = self.storage.redis_password
            config_dict['redis_max_connections'] = self.storage.redis_max_connections
            config_dict['redis_connection_timeout'] = self.storage.redis_connection_timeout
            config_dict['redis_socket_timeout'] = self.storage.redis_socket_timeout
            config_dict['redis_health_check_interval'] = self.storage.redis_health_check_interval

        if self.storage.blob_backend == "s3":
            config_dict['s3_bucket'] = self.storage.s3_bucket
            config_dict['s3_prefix'] = self.storage.s3_prefix
            config_dict['s3_endpoint_url'] = self.storage.s3_endpoint_url
            config_dict['s3_region'] = self.storage.s3_region

        return config_dict


def validate_config(config: SiteDeskConfig) -> list[str]:
    """Validate configuration and return list of warnings.

    Args:
        config: sitedesk configuration to validate

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    if config.storage.request_timeout == 0:
        warnings.append("request_timeout is 0: remote calls are not bounded")
    elif config.storage.request_timeout > 300:
        warnings.append(f"Very high request_timeout ({config.storage.request_timeout}s)")

    edited_partitions = {extra.partition for extra in config.editors + config.collections}
    missing = sorted(edited_partitions - set(config.backup.partitions))
    if missing:
        warnings.append(f"Edited partitions not included in backups: {missing}")

    if config.storage.partition_backend == "json" and config.storage.blob_backend == "local":
        working = os.path.abspath(config.storage.working_dir)
        backups = os.path.abspath(config.storage.backup_dir)
        if working == backups:
            warnings.append("working_dir and backup_dir are the same directory")

    return warnings
