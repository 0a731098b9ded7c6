"""Tests for configuration management."""

import os
import pytest
from unittest.mock import patch

from sitedesk.config import (
    DEFAULT_PARTITIONS,
    BackupConfig,
    CollectionConfig,
    EditorConfig,
    SiteDeskConfig,
    StorageConfig,
    validate_config,
)


class TestStorageConfig:
    """Test storage configuration."""

    def test_defaults(self):
        config = StorageConfig()
        assert config.partition_backend == "json"
        assert config.blob_backend == "local"
        assert config.request_timeout == 30.0

    def test_from_env(self):
        """Test creating from environment variables."""
        with patch.dict(os.environ, {
            "STORAGE_PARTITION_BACKEND": "redis",
            "STORAGE_BLOB_BACKEND": "s3",
            "STORAGE_REQUEST_TIMEOUT": "12.5",
            "REDIS_URL": "redis://cache:6379",
            "S3_BUCKET": "site-assets",
            "S3_PREFIX": "admin/",
        }):
            config = StorageConfig.from_env()
            assert config.partition_backend == "redis"
            assert config.blob_backend == "s3"
            assert config.request_timeout == 12.5
            assert config.redis_url == "redis://cache:6379"
            assert config.s3_bucket == "site-assets"
            assert config.s3_prefix == "admin/"

    def test_validation(self):
        """Test validation errors."""
        with pytest.raises(ValueError, match="Unknown partition backend"):
            StorageConfig(partition_backend="firebase")

        with pytest.raises(ValueError, match="Unknown blob backend"):
            StorageConfig(blob_backend="supabase")

        with pytest.raises(ValueError, match="request_timeout must be non-negative"):
            StorageConfig(request_timeout=-1)

        with pytest.raises(ValueError, match="s3_bucket is required"):
            StorageConfig(blob_backend="s3")


class TestBackupConfig:
    """Test backup configuration."""

    def test_defaults(self):
        config = BackupConfig()
        assert config.partitions == DEFAULT_PARTITIONS
        assert config.name_prefix == "backup-"
        assert config.bucket == "backups"

    def test_from_env(self):
        with patch.dict(os.environ, {
            "BACKUP_PARTITIONS": "pages, social_links ,",
            "BACKUP_BUCKET": "archives",
            "BACKUP_CONFIRMATION_TTL": "60",
        }):
            config = BackupConfig.from_env()
            assert config.partitions == ("pages", "social_links")
            assert config.bucket == "archives"
            assert config.confirmation_ttl == 60.0

    def test_empty_env_uses_defaults(self):
        with patch.dict(os.environ, {"BACKUP_PARTITIONS": ""}):
            assert BackupConfig.from_env().partitions == DEFAULT_PARTITIONS

    def test_validation(self):
        with pytest.raises(ValueError, match="must not be empty"):
            BackupConfig(partitions=())

        with pytest.raises(ValueError, match="must be unique"):
            BackupConfig(partitions=("pages", "pages"))

        with pytest.raises(ValueError, match="reserved"):
            BackupConfig(partitions=("__archive__",))

        with pytest.raises(ValueError, match="invalid name_prefix"):
            BackupConfig(name_prefix="a/b")

        with pytest.raises(ValueError, match="confirmation_ttl must be positive"):
            BackupConfig(confirmation_ttl=0)


class TestEditorConfig:

    def test_validation(self):
        with pytest.raises(ValueError, match="required"):
            EditorConfig(name="x", partition="", conflict_key="id")

        with pytest.raises(ValueError, match="document_field must differ"):
            EditorConfig(name="x", partition="x", conflict_key="id", document_field="id")


class TestSiteDeskConfig:
    """Test complete configuration."""

    def test_editor_lookup(self):
        config = SiteDeskConfig()
        assert config.editor("site_content").conflict_key == "language"

        with pytest.raises(KeyError, match="Unknown editor"):
            config.editor("blog")

    def test_partition_names_include_editor_partitions(self):
        config = SiteDeskConfig(
            backup=BackupConfig(partitions=("pages",)),
            collections=(),
        )
        assert config.partition_names() == ("pages", "site_content", "site_settings")

    def test_partition_names_include_collection_partitions(self):
        config = SiteDeskConfig(
            backup=BackupConfig(partitions=("pages",)),
        )
        assert config.partition_names() == (
            "pages", "site_content", "site_settings", "projects", "services", "social_links",
        )

    def test_collection_lookup(self):
        config = SiteDeskConfig()
        assert config.collection("social_links").order_field == "sort_order"
        assert config.collection("pages").descending is True
        assert config.collection("pages").read_only_fields == ("id", "created_at")

        with pytest.raises(KeyError, match="Unknown collection"):
            config.collection("blog")

    def test_duplicate_collection_names(self):
        collection = CollectionConfig(name="x", partition="x")
        with pytest.raises(ValueError, match="collection names must be unique"):
            SiteDeskConfig(collections=(collection, collection))

    def test_duplicate_editor_names(self):
        editor = EditorConfig(name="x", partition="x", conflict_key="id")
        with pytest.raises(ValueError, match="editor names must be unique"):
            SiteDeskConfig(editors=(editor, editor))

    def test_to_dict_json_local(self):
        config = SiteDeskConfig()
        config_dict = config.to_dict()

        assert config_dict["working_dir"] == "./sitedesk_data"
        assert config_dict["backup_dir"] == "./backups"
        assert "redis_url" not in config_dict
        assert "s3_bucket" not in config_dict

    def test_to_dict_redis_s3(self):
        config = SiteDeskConfig(
            storage=StorageConfig(partition_backend="redis", blob_backend="s3", s3_bucket="b"),
        )
        config_dict = config.to_dict()

        assert config_dict["redis_url"] == "redis://localhost:6379"
        assert config_dict["s3_bucket"] == "b"

    def test_from_env(self):
        with patch.dict(os.environ, {
            "STORAGE_WORKING_DIR": "/data",
            "BACKUP_PARTITIONS": "pages",
        }):
            config = SiteDeskConfig.from_env()
            assert config.storage.working_dir == "/data"
            assert config.backup.partitions == ("pages",)


class TestValidateConfig:

    def test_default_config_is_clean(self):
        assert validate_config(SiteDeskConfig()) == []

    def test_warnings(self):
        config = SiteDeskConfig(
            storage=StorageConfig(request_timeout=0, working_dir="./same", backup_dir="./same"),
            backup=BackupConfig(partitions=("pages",)),
        )
        warnings = validate_config(config)

        assert any("not bounded" in w for w in warnings)
        assert any("not included in backups" in w for w in warnings)
        assert any("same directory" in w for w in warnings)
