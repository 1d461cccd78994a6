from __future__ import annotations

from fastapi.testclient import TestClient

from helpers import assert_within_seconds


def test_health_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["timezone_regions"] > 0


def test_zmanim_auto_timezone(api_client: TestClient) -> None:
    response = api_client.get(
        "/zmanim",
        params={"lat": 31.7683, "lon": 35.2137, "date": "2026-02-08", "elevation": 650},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["timezone"]["name"] == "Asia/Jerusalem"
    assert payload["timezone"]["offset_hours"] == 2
    assert payload["timezone"]["dst"] is False
    times = payload["times"]
    assert_within_seconds(times["sunrise"], "6:27:36", 30, "sunrise")
    assert_within_seconds(times["chatzot"], "11:53:28", 30, "chatzot")
    assert_within_seconds(times["sunset"], "17:19:21", 30, "sunset")
    shabbat = payload["shabbat"]
    assert shabbat["friday"] == "2026-02-13"
    assert shabbat["saturday"] == "2026-02-14"
    assert isinstance(shabbat["shabbat_start_unix"], int)
    assert shabbat["shabbat_ends_unix"] > shabbat["shabbat_start_unix"]


def test_zmanim_explicit_offset(api_client: TestClient) -> None:
    response = api_client.get(
        "/zmanim",
        params={"lat": 0, "lon": 0, "date": "2026-02-13", "offset_hours": 0},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["timezone"]["name"] is None
    assert payload["timezone"]["offset_hours"] == 0
    assert payload["times"]["sunrise"] is not None


def test_zmanim_unresolvable_timezone(api_client: TestClient) -> None:
    response = api_client.get("/zmanim", params={"lat": 0, "lon": 0, "date": "2026-02-13"})
    assert response.status_code == 400
    payload = response.json()
    assert payload["ok"] is False
    assert payload["code"] == "unresolvable_timezone"


def test_zmanim_explicit_zone_name(api_client: TestClient) -> None:
    response = api_client.get(
        "/zmanim",
        params={"lat": 0, "lon": 0, "date": "2026-02-13", "timezone_name": "Etc/UTC"},
    )
    assert response.status_code == 200
    assert response.json()["timezone"]["name"] == "Etc/UTC"


def test_validation_error(api_client: TestClient) -> None:
    response = api_client.get(
        "/zmanim",
        params={
            "lat": 95,  # invalid latitude
            "lon": 0,
            "date": "2026-02-13",
        },
    )
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["ok"] is False


def test_chabad_endpoint(api_client: TestClient) -> None:
    response = api_client.get(
        "/zmanim/chabad",
        params={"lat": 40.6782, "lon": -73.9442, "date": "2026-02-13", "offset_hours": -5},
    )
    assert response.status_code == 200
    times = response.json()["times"]
    assert_within_seconds(times["alos72"], "5:40:07", 5, "alos72")
    assert_within_seconds(times["sof_zman_shema_ar"], "8:55:10", 5, "shemaAR")
    assert_within_seconds(times["chatzot_layla"], "0:09:36", 5, "chatzotLayla")


def test_zone_directory_name_is_unresolvable(api_client: TestClient) -> None:
    response = api_client.get(
        "/zmanim",
        params={"lat": 0, "lon": 0, "date": "2026-02-13", "timezone_name": "America"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "unresolvable_timezone"


def test_unguarded_mincha_gedola_is_reported(api_client: TestClient) -> None:
    response = api_client.get(
        "/zmanim",
        params={"lat": 31.7683, "lon": 35.2137, "date": "2026-02-08", "elevation": 650},
    )
    assert response.status_code == 200
    times = response.json()["times"]
    assert times["mincha_gedola_gra"] is not None
    assert times["mincha_gedola"] is not None
