import pytest

from admin_console.media.codec import ImageCodec, decode, encode, to_public_url

BASE = "http://localhost:5000"
FALLBACK = "http://localhost:5000/fallback-image.png"


@pytest.mark.parametrize("raw", [None, "", "   ", b"", 42, {"a": 1}])
def test_decode_unusable_input_is_empty(raw):
    assert decode(raw) == []


def test_decode_json_array():
    assert decode('["x","y"]') == ["x", "y"]


def test_decode_comma_separated_legacy_value():
    assert decode("a,b,c") == ["a", "b", "c"]
    assert decode(" /a.png , ,/b.png,") == ["/a.png", "/b.png"]


def test_decode_single_bare_path():
    assert decode("/productImages/one.png") == ["/productImages/one.png"]


def test_decode_json_that_is_not_a_list():
    assert decode('{"x": 1}') == []
    assert decode("7") == []


def test_decode_keeps_only_strings_from_json():
    assert decode('["/a.png", 3, null, "/b.png"]') == ["/a.png", "/b.png"]


def test_decode_structured_list_is_returned_as_is():
    images = ["/a.png", "/b.png"]
    assert decode(images) == images
    assert decode(("/a.png",)) == ["/a.png"]


def test_decode_bytes_from_driver():
    assert decode(b'["/a.png"]') == ["/a.png"]


def test_encode():
    assert encode(["/a.png", "/b.png"]) == '["/a.png", "/b.png"]'
    assert encode([]) == "[]"
    assert encode(None) == "[]"
    assert encode("/a.png") == "[]"


@pytest.mark.parametrize("images", [[], ["/productImages/a.png"], ["/x,y.png", "/z.png", "/ü.gif"]])
def test_encoded_lists_decode_back(images):
    assert decode(encode(images)) == images


def test_to_public_url():
    assert to_public_url(None, BASE, FALLBACK) == FALLBACK
    assert to_public_url("", BASE, FALLBACK) == FALLBACK
    assert to_public_url("/x.png", BASE, FALLBACK) == BASE + "/x.png"
    assert to_public_url("http://other/x.png", BASE, FALLBACK) == "http://other/x.png"


def test_codec_uses_configured_base(media_config):
    codec = ImageCodec(media_config)
    assert codec.to_public_url("/productImages/a.png") == "http://images.test/productImages/a.png"
    assert codec.to_public_url(None) == "http://images.test/fallback-image.png"
    assert codec.to_public_url("/a.png", base="http://cdn.test") == "http://cdn.test/a.png"
    assert codec.public_gallery("/a.png,/b.png") == ["http://images.test/a.png", "http://images.test/b.png"]


def test_to_storage_path_strips_own_base_only(media_config):
    codec = ImageCodec(media_config)
    assert codec.to_storage_path("http://images.test/productImages/a.png") == "/productImages/a.png"
    assert codec.to_storage_path("/productImages/a.png") == "/productImages/a.png"
    assert codec.to_storage_path("http://other/productImages/a.png") == "http://other/productImages/a.png"


def test_decode_survives_deeply_nested_json():
    raw = "[" * 100000
    assert decode(raw) == [raw]
