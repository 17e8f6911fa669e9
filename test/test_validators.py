import pytest

from core.validators import escape_like, normalize_cedula, sanitize_filename, validate_file_size
from storage.paths import PHOTO, detainee_attachment_key


@pytest.mark.parametrize("raw, expected", [
    ("12345678", "V-12345678"),
    ("V-12345678", "V-12345678"),
    ("v-12345678", "V-12345678"),
    (" E-8765432 ", "E-8765432"),
    ("e-8765432", "E-8765432"),
    ("V12345678", "V-12345678"),
    ("E 1234", "E-1234"),
    ("v.12345678", "V-12345678"),
    ("1" * 18, "V-" + "1" * 18),
])
def test_normalize_cedula(raw, expected):
    assert normalize_cedula(raw) == expected


def test_normalize_cedula_is_idempotent():
    once = normalize_cedula("12345678")
    assert normalize_cedula(once) == once


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_normalize_cedula_rejects_blank(raw):
    with pytest.raises(ValueError):
        normalize_cedula(raw)


@pytest.mark.parametrize("raw", ["V-V12345678", "X-1234", "12a45", "V--123", "1" * 19])
def test_normalize_cedula_rejects_malformed(raw):
    with pytest.raises(ValueError):
        normalize_cedula(raw)


def test_escape_like():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
    assert escape_like("plain") == "plain"


def test_validate_file_size():
    limit = 10 * 1024 * 1024
    assert validate_file_size(limit, limit) == (True, None)
    ok, message = validate_file_size(limit + 1, limit)
    assert not ok and "too large" in message
    assert validate_file_size(0, limit) == (False, "File is empty")


def test_sanitize_filename_strips_paths():
    assert sanitize_filename("../../etc/passwd") == "passwd"
    assert sanitize_filename("foto de perfil.jpg") == "foto_de_perfil.jpg"


def test_attachment_key_layout():
    key = detainee_attachment_key("V-12345678", PHOTO, "Foto.JPG", "image/jpeg")

    assert key.startswith("detainees/cedula=V-12345678/photo/")
    assert key.endswith(".jpg")


def test_attachment_key_extension_from_content_type():
    key = detainee_attachment_key("V-1", PHOTO, None, "image/png")

    assert key.endswith(".png")
