"""Tests for the reviewrag package structure."""


def test_package_imports():
    """Test that main package can be imported."""
    import reviewrag
    assert reviewrag.__version__ == "0.1.0"


def test_context_subpackage():
    """Test that the context engine exports its building blocks."""
    import reviewrag.context
    assert reviewrag.context.CodebaseContextService is not None
    assert reviewrag.context.chunk_file is not None


def test_service_subpackage():
    """Test that service subpackage exists."""
    import reviewrag.service
    assert reviewrag.service is not None


def test_client_subpackage():
    """Test that client subpackage exists."""
    import reviewrag.client
    assert reviewrag.client is not None
