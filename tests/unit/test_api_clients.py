"""
Unit tests for the source gateways, using httpx.MockTransport.
"""

import httpx
import pytest

from touchline.api import FootballDataAPI, FPLAPI, UnderstatAPI
from touchline.api.understat import parse_matches_data
from touchline.exceptions import UpstreamError


PLAYER_PAGE = r"""
<html><body>
<script>
    var groupsData = JSON.parse('{}');
</script>
<script>
    var matchesData = JSON.parse('[{\x22goals\x22:\x221\x22,\x22xG\x22:\x220.73\x22,\x22date\x22:\x222020\x2D09\x2D12\x22,\x22h_team\x22:\x22Everton\x22}]');
</script>
</body></html>
"""


def mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestBaseClient:

    def test_retries_server_errors(self):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"elements": [], "events": []})

        api = FPLAPI(client=mock_client(handler), max_retries=3, backoff=0)

        assert api.elements() == []
        assert len(calls) == 3

    def test_gives_up_after_max_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        api = FPLAPI(client=mock_client(handler), max_retries=2, backoff=0)

        with pytest.raises(UpstreamError):
            api.bootstrap()
        assert len(calls) == 2

    def test_client_errors_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404)

        api = FPLAPI(client=mock_client(handler), max_retries=3, backoff=0)

        with pytest.raises(UpstreamError):
            api.player_history(1)
        assert len(calls) == 1

    def test_invalid_json(self):
        api = FPLAPI(client=mock_client(lambda request: httpx.Response(200, text="<html>")))

        with pytest.raises(UpstreamError):
            api.bootstrap()


class TestFootballData:

    def test_sends_auth_token(self):
        def handler(request):
            assert request.headers["X-Auth-Token"] == "secret"
            assert request.url.path == "/v2/matches/303700"
            return httpx.Response(200, json={"match": {"id": 303700}})

        api = FootballDataAPI(
            api_key="secret", client=mock_client(handler), min_request_interval=0
        )

        assert api.match(303700) == {"id": 303700}

    def test_missing_match(self):
        api = FootballDataAPI(
            client=mock_client(lambda request: httpx.Response(200, json={"error": 404})),
            min_request_interval=0,
        )

        with pytest.raises(UpstreamError):
            api.match(1)


class TestFPL:

    def test_bootstrap_fetched_once(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"elements": [{"id": 1}], "events": [{"id": 1}]})

        api = FPLAPI(client=mock_client(handler))

        assert api.elements() == [{"id": 1}]
        assert api.gameweeks() == [{"id": 1}]
        assert len(calls) == 1

    def test_player_history(self):
        def handler(request):
            assert request.url.path == "/api/element-summary/254/"
            return httpx.Response(200, json={"history": [{"round": 1}], "fixtures": []})

        assert FPLAPI(client=mock_client(handler)).player_history(254) == [{"round": 1}]


class TestUnderstat:

    def test_search(self):
        payload = {
            "success": True,
            "response": {
                "success": True,
                "players": [{"id": "647", "player_name": "Harry Kane", "team": "Tottenham"}],
            },
        }
        api = UnderstatAPI(
            client=mock_client(lambda request: httpx.Response(200, json=payload)),
            min_request_interval=0,
        )

        assert api.search("Harry Kane") == [{"id": 647, "name": "Harry Kane", "team": "Tottenham"}]

    def test_search_without_results(self):
        payload = {"response": {"success": False, "players": []}}
        api = UnderstatAPI(
            client=mock_client(lambda request: httpx.Response(200, json=payload)),
            min_request_interval=0,
        )

        assert api.search("Nobody") == []

    def test_search_missing_team(self):
        payload = {"response": {"success": True, "players": [{"id": "1", "player_name": "Fred"}]}}
        api = UnderstatAPI(
            client=mock_client(lambda request: httpx.Response(200, json=payload)),
            min_request_interval=0,
        )

        assert api.search("Fred") == [{"id": 1, "name": "Fred", "team": None}]

    def test_search_failure(self):
        api = UnderstatAPI(
            client=mock_client(lambda request: httpx.Response(200, json={"response": {}})),
            min_request_interval=0,
        )

        with pytest.raises(UpstreamError, match="Unknown error from understat"):
            api.search("Harry Kane")

    def test_player_matches(self):
        def handler(request):
            assert request.url.path == "/player/647"
            return httpx.Response(200, text=PLAYER_PAGE)

        api = UnderstatAPI(client=mock_client(handler), min_request_interval=0)

        assert api.player_matches(647) == [
            {"goals": "1", "xG": "0.73", "date": "2020-09-12", "h_team": "Everton"}
        ]

    def test_page_without_match_data(self):
        with pytest.raises(UpstreamError, match="No match data found"):
            parse_matches_data("<html><script>var x = 1;</script></html>")
