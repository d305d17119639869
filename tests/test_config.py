"""Tests for pricefeed config loading."""

import os
import tempfile

from pricefeed.config import PriceFeedConfig, load_config
from pricefeed.db import DEFAULT_DB_PATH


def test_load_config_defaults(monkeypatch):
    """Loading with no path returns all defaults."""
    monkeypatch.delenv("PRICEFEED_DB_PATH", raising=False)
    config = load_config()
    assert isinstance(config, PriceFeedConfig)
    assert config.database.path == DEFAULT_DB_PATH
    assert config.matching.list_threshold == 0.6
    assert config.matching.receipt_threshold == 0.5
    assert config.matching.suggestion_limit == 5
    assert config.ocr.backend == "claude"
    assert config.ocr.tesseract.language == "eng"
    assert config.ocr.tesseract.page_segmentation_mode == 6
    assert config.receipts.ttl_days == 90
    assert config.receipts.cleanup_schedule == "0 3 * * *"
    assert config.logging.level == "INFO"


def test_load_config_nonexistent_file():
    """Loading a nonexistent file returns defaults."""
    config = load_config("/nonexistent/path.toml")
    assert config.ocr.backend == "claude"


def test_load_config_from_toml(monkeypatch):
    """Loading a valid TOML file populates config."""
    monkeypatch.delenv("PRICEFEED_DB_PATH", raising=False)
    toml_content = b"""\
[database]
path = "/var/lib/pricefeed/prices.db"

[matching]
list_threshold = 0.7
receipt_threshold = 0.4
suggestion_limit = 3

[ocr]
backend = "tesseract"

[ocr.tesseract]
language = "eng+spa"
page_segmentation_mode = 4

[receipts]
ttl_days = 30
cleanup_schedule = "15 2 * * 0"

[logging]
level = "DEBUG"
"""
    with tempfile.NamedTemporaryFile(suffix=".toml", delete=False) as f:
        f.write(toml_content)
        f.flush()
        config = load_config(f.name)

    os.unlink(f.name)

    assert config.database.path == "/var/lib/pricefeed/prices.db"
    assert config.matching.list_threshold == 0.7
    assert config.matching.receipt_threshold == 0.4
    assert config.matching.suggestion_limit == 3
    assert config.ocr.backend == "tesseract"
    assert config.ocr.tesseract.language == "eng+spa"
    assert config.ocr.tesseract.page_segmentation_mode == 4
    assert config.receipts.ttl_days == 30
    assert config.receipts.cleanup_schedule == "15 2 * * 0"
    assert config.logging.level == "DEBUG"


def test_load_config_env_override(monkeypatch):
    """Environment variables fill an empty API key and override the DB path."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-anthropic-key")
    monkeypatch.setenv("PRICEFEED_DB_PATH", "/tmp/env.db")

    config = load_config()
    assert config.ocr.claude.api_key == "env-anthropic-key"
    assert config.database.path == "/tmp/env.db"


def test_load_config_file_key_takes_precedence(monkeypatch):
    """Config file API key takes precedence over env var."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")

    toml_content = b"""\
[ocr.claude]
api_key = "file-key"
model = "claude-test"
"""
    with tempfile.NamedTemporaryFile(suffix=".toml", delete=False) as f:
        f.write(toml_content)
        f.flush()
        config = load_config(f.name)

    os.unlink(f.name)
    assert config.ocr.claude.api_key == "file-key"
    assert config.ocr.claude.model == "claude-test"


def test_load_config_partial_toml():
    """Partial TOML uses defaults for missing sections."""
    toml_content = b"""\
[receipts]
ttl_days = 7
"""
    with tempfile.NamedTemporaryFile(suffix=".toml", delete=False) as f:
        f.write(toml_content)
        f.flush()
        config = load_config(f.name)

    os.unlink(f.name)
    assert config.receipts.ttl_days == 7
    # Other fields and sections use defaults
    assert config.receipts.cleanup_schedule == "0 3 * * *"
    assert config.ocr.backend == "claude"
    assert config.matching.list_threshold == 0.6
