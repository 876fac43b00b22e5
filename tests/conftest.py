"""Configuration file for pytest."""

import sys
from pathlib import Path

import pytest

# Add src and tests directories to the path so tests can import modules correctly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from support import sample_openapi_document, write_spec  # noqa: E402


@pytest.fixture
def sample_openapi_spec():
    """Return a sample OpenAPI specification for testing."""
    return sample_openapi_document()


@pytest.fixture
def spec_dir(tmp_path):
    """Create a spec directory holding the sample specification."""
    write_spec(tmp_path, "twilio_api_v2010.yaml", sample_openapi_document())
    return tmp_path
