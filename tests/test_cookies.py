import json

import pytest

from modules.cookies import CookieFileError, convert_cookie, load_cookies


def _write(tmp_path, payload) -> str:
    path = tmp_path / "cookie.json"
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return path


def test_convert_cookie_maps_all_fields() -> None:
    cookie = {
        "name": "A1",
        "value": "abc",
        "domain": ".yahoo.com",
        "path": "/",
        "expirationDate": 1767225600.5,
        "httpOnly": True,
        "secure": True,
        "sameSite": "lax",
    }
    assert convert_cookie(cookie) == {
        "name": "A1",
        "value": "abc",
        "domain": ".yahoo.com",
        "path": "/",
        "expires": 1767225600.5,
        "httpOnly": True,
        "secure": True,
        "sameSite": "Lax",
    }


@pytest.mark.parametrize(
    "same_site, expected",
    [
        ("no_restriction", "None"),
        ("lax", "Lax"),
        ("strict", "Strict"),
        ("unspecified", "None"),
        (None, "None"),
    ],
)
def test_same_site_mapping(same_site, expected) -> None:
    assert convert_cookie({"name": "n", "sameSite": same_site})["sameSite"] == expected


def test_missing_optional_fields_get_defaults() -> None:
    converted = convert_cookie({"name": "session", "value": "x", "domain": "a.com", "path": "/"})
    assert converted["expires"] == -1
    assert converted["httpOnly"] is False
    assert converted["secure"] is False
    assert converted["sameSite"] == "None"


def test_load_cookies_reads_array(tmp_path) -> None:
    path = _write(tmp_path, [
        {"name": "A", "value": "1", "domain": ".yahoo.com", "path": "/"},
        {"name": "B", "value": "2", "domain": ".yahoo.com", "path": "/", "sameSite": "strict"},
    ])
    cookies = load_cookies(path)
    assert [c["name"] for c in cookies] == ["A", "B"]
    assert cookies[1]["sameSite"] == "Strict"


def test_missing_file_is_fatal(tmp_path) -> None:
    with pytest.raises(CookieFileError):
        load_cookies(tmp_path / "nope.json")


def test_malformed_json_is_fatal(tmp_path) -> None:
    with pytest.raises(CookieFileError):
        load_cookies(_write(tmp_path, "[{not json"))


def test_non_array_is_fatal(tmp_path) -> None:
    with pytest.raises(CookieFileError):
        load_cookies(_write(tmp_path, {"name": "A"}))

    with pytest.raises(CookieFileError):
        load_cookies(_write(tmp_path, ["just a string"]))
