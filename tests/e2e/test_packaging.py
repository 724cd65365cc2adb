from pathlib import Path

from ml_seller_feed import FetchResult, Product, ProductFetcher, ResponseCache


def test_public_api_exports() -> None:
    assert ProductFetcher is not None
    assert ResponseCache is not None
    assert Product is not None
    assert FetchResult is not None


def test_py_typed_marker_exists() -> None:
    # PEP 561 marker
    marker = Path(__file__).parents[2] / "src" / "ml_seller_feed" / "py.typed"
    assert marker.exists()
