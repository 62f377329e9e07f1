# tests/test_gateway.py
import pytest

from comics_api.config import FLASH_IMAGE_MODEL, PRO_IMAGE_MODEL
from comics_api.errors import CreditExhausted, EmptyResult, InternalError, UpstreamError
from comics_api.features.pages.gateway import ImageGateway
from tests.conftest import status_error


def test_generate_sends_fixed_size_and_references(gateway, image_client):
    url = gateway.generate("draw it", ["prev.png", "hero.png"])

    assert url == image_client.images.url
    call = image_client.last_call
    assert call["model"] == FLASH_IMAGE_MODEL.name
    assert call["prompt"] == "draw it"
    assert call["extra_body"]["width"] == 864
    assert call["extra_body"]["height"] == 1184
    assert call["extra_body"]["reference_images"] == ["prev.png", "hero.png"]


def test_model_config_selects_dimensions(image_client):
    gw = ImageGateway(PRO_IMAGE_MODEL, client_factory=image_client.factory)
    gw.generate("x", [])
    extra = image_client.last_call["extra_body"]
    assert (extra["width"], extra["height"]) == (896, 1200)
    assert "reference_images" not in extra


def test_caller_key_is_passed_to_client(gateway, image_client):
    gateway.generate("x", [], api_key="byok-123")
    assert image_client.keys[-1] == "byok-123"


def test_payment_required_is_credit_exhausted(gateway, image_client):
    image_client.images.error = status_error(402, "no credits")
    with pytest.raises(CreditExhausted) as ei:
        gateway.generate("x", [])
    assert ei.value.payload()["errorType"] == "credit_limit"
    assert ei.value.status_code == 402


def test_other_status_is_passed_through(gateway, image_client):
    image_client.images.error = status_error(422, "bad reference image")
    with pytest.raises(UpstreamError) as ei:
        gateway.generate("x", [])
    assert ei.value.status_code == 422
    assert ei.value.message == "bad reference image"


def test_missing_url_is_empty_result(gateway, image_client):
    image_client.images.url = None
    with pytest.raises(EmptyResult):
        gateway.generate("x", [])


def test_network_failure_is_internal(gateway, image_client):
    image_client.images.error = ConnectionError("reset by peer")
    with pytest.raises(InternalError):
        gateway.generate("x", [])


def test_single_attempt_only(gateway, image_client):
    image_client.images.error = status_error(503, "busy")
    with pytest.raises(UpstreamError):
        gateway.generate("x", [])
    assert len(image_client.images.calls) == 1
